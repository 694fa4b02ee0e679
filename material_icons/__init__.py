"""Material icon constants.

The table in icons.py is generated by build_pipeline.py; edit the catalog and
rerun the pipeline instead of editing it by hand.
"""

from typing import Union

from .icons import *  # noqa: F401,F403
from .shapes import (  # noqa: F401
    ClosePath,
    CurveTo,
    IconPath,
    IconPaths,
    LineTo,
    MoveTo,
    Point,
    QuadTo,
    Rect,
    Size,
)

IconValue = Union[int, IconPaths]


def lookup(name: str) -> IconValue:
    try:
        return ICONS[name]
    except KeyError:
        raise KeyError(f"unknown icon: {name!r}") from None


def glyph(name: str) -> str:
    """Character for a font-backed icon."""
    value = lookup(name)
    if not isinstance(value, int):
        raise TypeError(f"icon {name!r} is a shape table, not a font glyph")
    return chr(value)
