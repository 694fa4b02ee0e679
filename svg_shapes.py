"""
SVG -> path elements for the icon generator.

Every shape is reduced to absolute MoveTo / LineTo / QuadTo / CurveTo /
ClosePath elements. An element is a tuple (kind, points) where points is a
tuple of (x, y) pairs.
"""

import math
import re
import xml.etree.ElementTree as ET
from typing import List, Optional, Tuple

Point = Tuple[float, float]
PathEl = Tuple[str, Tuple[Point, ...]]


COMMANDS = "MmLlHhVvCcSsQqTtAaZz"

_NUMBER = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
_SEPARATORS = " \t\r\n,"


class SvgError(ValueError):
    pass


# =========================
# PATH DATA
# =========================
class _Scanner:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def skip(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos] in _SEPARATORS:
            self.pos += 1

    def done(self) -> bool:
        self.skip()
        return self.pos >= len(self.text)

    def peek(self) -> str:
        self.skip()
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def at_number(self) -> bool:
        c = self.peek()
        return bool(c) and (c.isdigit() or c in "+-.")

    def command(self) -> str:
        c = self.peek()
        self.pos += 1
        return c

    def number(self) -> float:
        self.skip()
        m = _NUMBER.match(self.text, self.pos)
        if not m:
            raise SvgError(f"expected number at offset {self.pos} in path data")
        self.pos = m.end()
        return float(m.group(0))

    def flag(self) -> bool:
        # arc flags may be packed without separators: "a1 1 0 011 1"
        c = self.peek()
        if c not in ("0", "1"):
            raise SvgError(f"expected arc flag at offset {self.pos} in path data")
        self.pos += 1
        return c == "1"


def parse_path(d: str) -> List[PathEl]:
    """Parse SVG path data into absolute path elements."""
    scanner = _Scanner(d or "")
    els: List[PathEl] = []

    cur: Point = (0.0, 0.0)
    start: Point = (0.0, 0.0)
    last_cubic: Optional[Point] = None
    last_quad: Optional[Point] = None
    cmd = ""

    while not scanner.done():
        if scanner.peek() in COMMANDS:
            cmd = scanner.command()
        elif not cmd:
            raise SvgError("path data must start with a command")
        elif cmd in "Zz":
            raise SvgError("unexpected number after closepath")

        upper = cmd.upper()
        rel = cmd.islower()

        if upper == "Z":
            els.append(("ClosePath", ()))
            cur = start
            last_cubic = last_quad = None
            continue

        first = True
        while first or scanner.at_number():
            first = False
            ox, oy = cur if rel else (0.0, 0.0)

            if upper == "M":
                x, y = scanner.number() + ox, scanner.number() + oy
                cur = start = (x, y)
                els.append(("MoveTo", (cur,)))
                last_cubic = last_quad = None
                # further pairs after a moveto are implicit linetos
                cmd = "l" if rel else "L"
                upper = "L"
                continue

            if upper == "L":
                cur = (scanner.number() + ox, scanner.number() + oy)
                els.append(("LineTo", (cur,)))
                last_cubic = last_quad = None
            elif upper == "H":
                cur = (scanner.number() + ox, cur[1])
                els.append(("LineTo", (cur,)))
                last_cubic = last_quad = None
            elif upper == "V":
                cur = (cur[0], scanner.number() + oy)
                els.append(("LineTo", (cur,)))
                last_cubic = last_quad = None
            elif upper == "C":
                p1 = (scanner.number() + ox, scanner.number() + oy)
                p2 = (scanner.number() + ox, scanner.number() + oy)
                p3 = (scanner.number() + ox, scanner.number() + oy)
                els.append(("CurveTo", (p1, p2, p3)))
                cur, last_cubic, last_quad = p3, p2, None
            elif upper == "S":
                p1 = _reflect(last_cubic, cur)
                p2 = (scanner.number() + ox, scanner.number() + oy)
                p3 = (scanner.number() + ox, scanner.number() + oy)
                els.append(("CurveTo", (p1, p2, p3)))
                cur, last_cubic, last_quad = p3, p2, None
            elif upper == "Q":
                p1 = (scanner.number() + ox, scanner.number() + oy)
                p2 = (scanner.number() + ox, scanner.number() + oy)
                els.append(("QuadTo", (p1, p2)))
                cur, last_quad, last_cubic = p2, p1, None
            elif upper == "T":
                p1 = _reflect(last_quad, cur)
                p2 = (scanner.number() + ox, scanner.number() + oy)
                els.append(("QuadTo", (p1, p2)))
                cur, last_quad, last_cubic = p2, p1, None
            elif upper == "A":
                rx, ry, rotation = scanner.number(), scanner.number(), scanner.number()
                large_arc, sweep = scanner.flag(), scanner.flag()
                end = (scanner.number() + ox, scanner.number() + oy)
                els.extend(arc_to_cubics(cur, rx, ry, rotation, large_arc, sweep, end))
                cur = end
                last_cubic = last_quad = None

    return els


def _reflect(ctrl: Optional[Point], about: Point) -> Point:
    if ctrl is None:
        return about
    return (2 * about[0] - ctrl[0], 2 * about[1] - ctrl[1])


def _angle(ux: float, uy: float, vx: float, vy: float) -> float:
    return math.atan2(ux * vy - uy * vx, ux * vx + uy * vy)


def arc_to_cubics(
    p0: Point,
    rx: float,
    ry: float,
    rotation: float,
    large_arc: bool,
    sweep: bool,
    p1: Point,
) -> List[PathEl]:
    """Endpoint-parameterized elliptical arc -> cubic segments of at most 90 degrees."""
    if p0 == p1:
        return []
    rx, ry = abs(rx), abs(ry)
    if rx == 0 or ry == 0:
        return [("LineTo", (p1,))]

    phi = math.radians(rotation % 360)
    cos_phi, sin_phi = math.cos(phi), math.sin(phi)

    dx2 = (p0[0] - p1[0]) / 2
    dy2 = (p0[1] - p1[1]) / 2
    x1p = cos_phi * dx2 + sin_phi * dy2
    y1p = -sin_phi * dx2 + cos_phi * dy2

    lam = (x1p * x1p) / (rx * rx) + (y1p * y1p) / (ry * ry)
    if lam > 1:
        scale = math.sqrt(lam)
        rx, ry = rx * scale, ry * scale

    num = rx * rx * ry * ry - rx * rx * y1p * y1p - ry * ry * x1p * x1p
    den = rx * rx * y1p * y1p + ry * ry * x1p * x1p
    coef = math.sqrt(max(num, 0.0) / den) if den else 0.0
    if large_arc == sweep:
        coef = -coef
    cxp = coef * rx * y1p / ry
    cyp = -coef * ry * x1p / rx

    cx = cos_phi * cxp - sin_phi * cyp + (p0[0] + p1[0]) / 2
    cy = sin_phi * cxp + cos_phi * cyp + (p0[1] + p1[1]) / 2

    theta1 = _angle(1.0, 0.0, (x1p - cxp) / rx, (y1p - cyp) / ry)
    dtheta = _angle((x1p - cxp) / rx, (y1p - cyp) / ry, (-x1p - cxp) / rx, (-y1p - cyp) / ry)
    if not sweep and dtheta > 0:
        dtheta -= 2 * math.pi
    elif sweep and dtheta < 0:
        dtheta += 2 * math.pi

    segments = max(1, int(math.ceil(abs(dtheta) / (math.pi / 2) - 1e-9)))
    delta = dtheta / segments
    t = 4.0 / 3.0 * math.tan(delta / 4)

    def on_ellipse(ux: float, uy: float) -> Point:
        return (
            cx + rx * ux * cos_phi - ry * uy * sin_phi,
            cy + rx * ux * sin_phi + ry * uy * cos_phi,
        )

    out: List[PathEl] = []
    for i in range(segments):
        a1 = theta1 + i * delta
        a2 = a1 + delta
        e1x, e1y = math.cos(a1), math.sin(a1)
        e2x, e2y = math.cos(a2), math.sin(a2)
        c1 = on_ellipse(e1x - t * e1y, e1y + t * e1x)
        c2 = on_ellipse(e2x + t * e2y, e2y - t * e2x)
        end = p1 if i == segments - 1 else on_ellipse(e2x, e2y)
        out.append(("CurveTo", (c1, c2, end)))
    return out


def circle_path(cx: float, cy: float, r: float) -> List[PathEl]:
    if r <= 0:
        raise SvgError(f"circle radius must be positive, got {r}")
    right = (cx + r, cy)
    left = (cx - r, cy)
    els: List[PathEl] = [("MoveTo", (right,))]
    els.extend(arc_to_cubics(right, r, r, 0, False, True, left))
    els.extend(arc_to_cubics(left, r, r, 0, False, True, right))
    els.append(("ClosePath", ()))
    return els


# =========================
# SVG DOCUMENTS
# =========================
def _local(tag: str) -> str:
    return tag.split("}", 1)[1] if "}" in tag else tag


def _float_attr(node: ET.Element, name: str) -> float:
    raw = node.get(name)
    if raw is None:
        raise SvgError(f"<{_local(node.tag)}> is missing attribute {name!r}")
    try:
        return float(raw)
    except ValueError:
        raise SvgError(f"<{_local(node.tag)}> has non-numeric {name}={raw!r}")


def _opacity(node: ET.Element) -> float:
    value = 1.0
    for name in ("opacity", "fill-opacity"):
        if node.get(name) is not None:
            value *= _float_attr(node, name)
    return value


def _collect(node: ET.Element, shapes: List[Tuple[List[PathEl], float]]) -> None:
    for child in node:
        tag = _local(child.tag)
        if tag in ("title", "desc", "defs", "metadata"):
            continue
        if tag == "g":
            _collect(child, shapes)
            continue
        # Material draws its bounding box with fill="none"
        if (child.get("fill") or "").strip().lower() == "none":
            continue
        if tag == "path":
            els = parse_path(child.get("d") or "")
            if els:
                shapes.append((els, _opacity(child)))
        elif tag == "circle":
            els = circle_path(_float_attr(child, "cx"), _float_attr(child, "cy"), _float_attr(child, "r"))
            shapes.append((els, _opacity(child)))
        else:
            raise SvgError(f"unrecognised node: {tag}")


def read_svg_shapes(raw: str, size: int) -> List[Tuple[List[PathEl], float]]:
    """Return (elements, opacity) for every filled shape of a square SVG icon."""
    try:
        svg = ET.fromstring(raw)
    except ET.ParseError as e:
        raise SvgError(f"invalid SVG: {e}")

    if _local(svg.tag) != "svg":
        raise SvgError(f"root element is <{_local(svg.tag)}>, expected <svg>")

    for dim in ("width", "height"):
        value = (svg.get(dim) or "").strip()
        if value.endswith("px"):
            value = value[:-2]
        if value != str(size):
            raise SvgError(f"svg {dim}={svg.get(dim)!r} does not match size {size}")

    shapes: List[Tuple[List[PathEl], float]] = []
    _collect(svg, shapes)
    return shapes
