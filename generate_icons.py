"""
Icon table generator.

Reads an icon catalog and writes one Python module (icons.py by default) into
the current directory. The module holds one constant per icon plus an ICONS
table keyed by catalog name. Runs standalone; build_pipeline.py invokes it
inside an isolated workspace.

Catalog sources:
- *.json          {"icons": [{"name": ..., "codepoint": ..., "category": ...}]}
- other files     Material "codepoints" format: "<name> <hex>" per line
- directories     Material SVG tree: <category>/svg/production/ic_<name>_<size>px.svg
- http(s) URLs    JSON when the URL ends in .json, codepoints otherwise
"""

import os
import re
import sys
import json
import argparse
import tempfile
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import requests
from jsonschema import ValidationError, validate

from settings import GENERATED_NAME, ICON_CATALOG, ICON_FETCH_TIMEOUT, ICON_SHAPES_IMPORT, is_url
from svg_shapes import PathEl, SvgError, read_svg_shapes


ICON_FILE_RE = re.compile(r"^ic_(.*)_(\d+)px\.svg$")

ICON_CATEGORIES = [
    "action",
    "alert",
    "av",
    "communication",
    "content",
    "device",
    "editor",
    "file",
    "hardware",
    "image",
    "maps",
    "navigation",
    "notification",
    "places",
    "social",
    "toggle",
]

DIGIT_WORDS = {
    "0": "ZERO",
    "1": "ONE",
    "2": "TWO",
    "3": "THREE",
    "4": "FOUR",
    "5": "FIVE",
    "6": "SIX",
    "7": "SEVEN",
    "8": "EIGHT",
    "9": "NINE",
}

TABLE_NAME = "ICONS"

HEADER = "# Generated by generate_icons.py from the icon catalog. Do not edit.\n"


# =========================
# SCHEMAS
# =========================
CATALOG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["icons"],
    "properties": {
        "icons": {
            "type": "array",
            "items": {
                "type": "object",
                "additionalProperties": False,
                "required": ["name", "codepoint"],
                "properties": {
                    "name": {"type": "string", "pattern": r"^[A-Za-z0-9][A-Za-z0-9_\-]*$"},
                    "codepoint": {
                        "oneOf": [
                            {"type": "string", "pattern": r"^(0[xX])?[0-9A-Fa-f]+$"},
                            {"type": "integer", "minimum": 0},
                        ]
                    },
                    "category": {"type": "string"},
                },
            },
        }
    },
}


# =========================
# BASICS
# =========================
class CatalogError(ValueError):
    pass


def die(msg: str) -> None:
    raise SystemExit(msg)


def read_txt(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def load_json(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


@dataclass
class Icon:
    name: str
    category: str = ""
    codepoint: Optional[int] = None
    size: int = 0
    shapes: List[Tuple[List[PathEl], float]] = field(default_factory=list)

    @property
    def constant(self) -> str:
        return constant_name(self.name)


def constant_name(name: str) -> str:
    """Catalog name -> Python constant: "3d_rotation" -> "THREE_D_ROTATION"."""
    s = re.sub(r"[^A-Za-z0-9]+", "_", (name or "").strip()).strip("_").upper()
    if not s:
        raise CatalogError(f"Icon name {name!r} has no usable characters")
    if s[0].isdigit():
        s = DIGIT_WORDS[s[0]] + "_" + s[1:].lstrip("_") if len(s) > 1 else DIGIT_WORDS[s[0]]
    return s


# =========================
# CATALOG SOURCES
# =========================
def parse_codepoint(value: Any) -> int:
    if isinstance(value, int):
        return value
    return int(str(value).strip(), 16)


def icons_from_json(data: Any) -> List[Icon]:
    try:
        validate(instance=data, schema=CATALOG_SCHEMA)
    except ValidationError as e:
        path = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise CatalogError(f"Malformed catalog entry at {path}: {e.message}")

    return [
        Icon(
            name=entry["name"],
            category=entry.get("category", ""),
            codepoint=parse_codepoint(entry["codepoint"]),
        )
        for entry in data["icons"]
    ]


def icons_from_codepoints(text: str) -> List[Icon]:
    icons: List[Icon] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.split()
        if len(parts) != 2:
            raise CatalogError(f"Malformed codepoints line {lineno}: {line!r}")
        name, hex_value = parts
        try:
            codepoint = int(hex_value, 16)
        except ValueError:
            raise CatalogError(f"Malformed codepoint on line {lineno}: {hex_value!r}")
        icons.append(Icon(name=name, codepoint=codepoint))
    return icons


def fetch_catalog(url: str, timeout: float = ICON_FETCH_TIMEOUT) -> List[Icon]:
    print(f"Fetching {url} ...")
    try:
        r = requests.get(url, timeout=timeout)
    except requests.RequestException as e:
        raise CatalogError(f"Catalog fetch failed: {e}")

    if r.status_code >= 400:
        raise CatalogError(f"Catalog fetch failed: HTTP {r.status_code} {r.text[:400]}")

    if url.split("?", 1)[0].lower().endswith(".json"):
        try:
            data = r.json()
        except ValueError as e:
            raise CatalogError(f"Catalog at {url} is not valid JSON: {e}")
        return icons_from_json(data)
    return icons_from_codepoints(r.text)


def largest_sizes(filenames: List[str]) -> Dict[str, int]:
    """Largest pixel size per icon name among ic_<name>_<size>px.svg files."""
    sizes: Dict[str, int] = {}
    for fname in sorted(filenames):
        m = ICON_FILE_RE.match(fname)
        if not m:
            # non-square variants (ic_<name>_<w>x<h>px.svg) have no single size; not tabled
            print(f"Skipping {fname!r}", file=sys.stderr)
            continue
        name, size = m.group(1), int(m.group(2))
        if sizes.get(name, 0) < size:
            sizes[name] = size
    return sizes


def find_svg_icons(root: str) -> List[Icon]:
    icons: List[Icon] = []
    for category in ICON_CATEGORIES:
        production = os.path.join(root, category, "svg", "production")
        if not os.path.isdir(production):
            continue
        for name, size in sorted(largest_sizes(os.listdir(production)).items()):
            path = os.path.join(production, f"ic_{name}_{size}px.svg")
            try:
                shapes = read_svg_shapes(read_txt(path), size)
            except SvgError as e:
                raise CatalogError(f"{path}: {e}")
            icons.append(Icon(name=name, category=category, size=size, shapes=shapes))

    if not icons:
        raise CatalogError(f"No icons found under {root} (expected <category>/svg/production/*.svg)")
    return icons


def load_catalog(source: str) -> List[Icon]:
    if is_url(source):
        return fetch_catalog(source)
    if not os.path.exists(source):
        raise CatalogError(f"Catalog not found: {source}")
    if os.path.isdir(source):
        return find_svg_icons(source)
    if source.lower().endswith(".json"):
        try:
            data = load_json(source)
        except json.JSONDecodeError as e:
            raise CatalogError(f"Catalog {source} is not valid JSON: {e}")
        return icons_from_json(data)
    return icons_from_codepoints(read_txt(source))


# =========================
# VALIDATION
# =========================
def check_unique(icons: List[Icon]) -> None:
    """Duplicate names, or names that collapse to the same constant, are fatal."""
    by_name: Dict[str, Icon] = {}
    by_constant: Dict[str, str] = {}
    problems: List[str] = []

    for icon in icons:
        prior = by_name.get(icon.name)
        if prior is not None:
            where = f" (categories {prior.category!r} and {icon.category!r})" if prior.category or icon.category else ""
            problems.append(f"duplicate icon name {icon.name!r}{where}")
            continue
        by_name[icon.name] = icon

        const = icon.constant
        if const == TABLE_NAME:
            problems.append(f"icon {icon.name!r} would shadow the {TABLE_NAME} table")
        elif const in by_constant:
            problems.append(f"icon names {by_constant[const]!r} and {icon.name!r} both map to {const}")
        else:
            by_constant[const] = icon.name

    if problems:
        raise CatalogError("Icon catalog has identifier collisions:\n" + "\n".join(f" - {p}" for p in problems))


# =========================
# RENDER
# =========================
def _num(v: float) -> str:
    r = round(v, 2)
    if r == 0:
        r = 0.0
    return repr(float(r))


def _point(p: Tuple[float, float]) -> str:
    return f"Point({_num(p[0])}, {_num(p[1])})"


def _element(el: PathEl) -> str:
    kind, points = el
    return f"{kind}({', '.join(_point(p) for p in points)})"


def _shape_constant(icon: Icon) -> List[str]:
    lines = [f"{icon.constant} = IconPaths(", "    paths=("]
    for els, opacity in icon.shapes:
        lines.append("        IconPath(")
        lines.append("            els=(")
        for el in els:
            lines.append(f"                {_element(el)},")
        lines.append("            ),")
        lines.append(f"            opacity={_num(opacity)},")
        lines.append("        ),")
    lines.append("    ),")
    lines.append(f"    size=Size({_num(icon.size)}, {_num(icon.size)}),")
    lines.append(")")
    return lines


def render_module(icons: List[Icon], shapes_import: str = ICON_SHAPES_IMPORT) -> str:
    """Deterministic module text for a validated catalog (sorted by icon name)."""
    if not icons:
        raise CatalogError("Icon catalog is empty")
    ordered = sorted(icons, key=lambda i: i.name)
    with_shapes = any(i.codepoint is None for i in ordered)

    out: List[str] = [HEADER]
    if with_shapes:
        out.append(
            f"from {shapes_import} import ClosePath, CurveTo, IconPath, IconPaths, LineTo, MoveTo, Point, QuadTo, Size"
        )
        out.append("")

    out.append("__all__ = [")
    for icon in ordered:
        out.append(f'    "{icon.constant}",')
    out.append(f'    "{TABLE_NAME}",')
    out.append("]")
    out.append("")

    for icon in ordered:
        if icon.codepoint is not None:
            out.append(f"{icon.constant} = 0x{icon.codepoint:04X}")
        else:
            out.extend(_shape_constant(icon))
    out.append("")

    out.append(f"{TABLE_NAME} = {{")
    for icon in ordered:
        out.append(f"    {json.dumps(icon.name)}: {icon.constant},")
    out.append("}")
    return "\n".join(out) + "\n"


def write_output(path: str, text: str) -> None:
    """Write through a sibling temp file so a failed run leaves no partial output."""
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp = tempfile.mkstemp(prefix=".icons-", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise


def generate(source: str, out_path: str, shapes_import: str = ICON_SHAPES_IMPORT) -> int:
    icons = load_catalog(source)
    check_unique(icons)
    write_output(out_path, render_module(icons, shapes_import))
    return len(icons)


# =========================
# MAIN / CLI
# =========================
def main() -> None:
    parser = argparse.ArgumentParser(description="Generate the icon constant table")
    parser.add_argument("--catalog", default=ICON_CATALOG, help="Catalog file, SVG directory or URL")
    parser.add_argument("--out", default=GENERATED_NAME, help=f"Output module (default: {GENERATED_NAME})")
    parser.add_argument(
        "--shapes-import",
        default=ICON_SHAPES_IMPORT,
        help="Module the generated table imports shape types from (SVG catalogs only)",
    )
    args = parser.parse_args()

    try:
        count = generate(args.catalog, args.out, args.shapes_import)
    except CatalogError as e:
        die(f"Generation failed: {e}")

    print(f"Wrote {count} icons to {args.out}")


if __name__ == "__main__":
    main()
