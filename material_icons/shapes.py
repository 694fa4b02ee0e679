from dataclasses import dataclass
from typing import Iterator, NamedTuple, Tuple, Union


class Point(NamedTuple):
    x: float
    y: float


class Size(NamedTuple):
    width: float
    height: float


class Rect(NamedTuple):
    x0: float
    y0: float
    x1: float
    y1: float


@dataclass(frozen=True)
class MoveTo:
    p: Point


@dataclass(frozen=True)
class LineTo:
    p: Point


@dataclass(frozen=True)
class QuadTo:
    p1: Point
    p2: Point


@dataclass(frozen=True)
class CurveTo:
    p1: Point
    p2: Point
    p3: Point


@dataclass(frozen=True)
class ClosePath:
    pass


PathEl = Union[MoveTo, LineTo, QuadTo, CurveTo, ClosePath]


def _points(el: PathEl) -> Tuple[Point, ...]:
    if isinstance(el, (MoveTo, LineTo)):
        return (el.p,)
    if isinstance(el, QuadTo):
        return (el.p1, el.p2)
    if isinstance(el, CurveTo):
        return (el.p1, el.p2, el.p3)
    return ()


def _fmt(v: float) -> str:
    return f"{v:g}"


@dataclass(frozen=True)
class IconPath:
    """One filled shape of an icon."""

    els: Tuple[PathEl, ...]
    opacity: float = 1.0

    def __iter__(self) -> Iterator[PathEl]:
        return iter(self.els)

    def bounding_box(self) -> Rect:
        """Box around every on-curve and control point."""
        pts = [p for el in self.els for p in _points(el)]
        if not pts:
            return Rect(0.0, 0.0, 0.0, 0.0)
        xs = [p.x for p in pts]
        ys = [p.y for p in pts]
        return Rect(min(xs), min(ys), max(xs), max(ys))

    def to_svg_path(self) -> str:
        out = []
        for el in self.els:
            if isinstance(el, ClosePath):
                out.append("Z")
                continue
            letter = {MoveTo: "M", LineTo: "L", QuadTo: "Q", CurveTo: "C"}[type(el)]
            coords = " ".join(f"{_fmt(p.x)} {_fmt(p.y)}" for p in _points(el))
            out.append(f"{letter}{coords}")
        return "".join(out)


@dataclass(frozen=True)
class IconPaths:
    """All shapes of an icon, drawn on a size x size canvas."""

    paths: Tuple[IconPath, ...]
    size: Size

    def scale_factors(self, width: float, height: float) -> Tuple[float, float]:
        return (width / self.size.width, height / self.size.height)
