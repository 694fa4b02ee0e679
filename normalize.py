import ast
from pathlib import Path

import black

from errors import NormalizationError, RelocationError
from relocate import atomic_write
from settings import ICON_LINE_LENGTH


def _ast_dump(source: str, label: str) -> str:
    try:
        return ast.dump(ast.parse(source))
    except SyntaxError as e:
        raise NormalizationError(f"{label} does not parse: line {e.lineno}: {e.msg}")


def normalize_source(source: str, line_length: int = ICON_LINE_LENGTH) -> str:
    """Format with black; the result must be a fixed point and keep the same AST."""
    mode = black.Mode(line_length=line_length)
    try:
        formatted = black.format_str(source, mode=mode)
    except black.InvalidInput as e:
        raise NormalizationError(f"Cannot format malformed source: {e}")

    if black.format_str(formatted, mode=mode) != formatted:
        raise NormalizationError("Formatter output is not stable (second pass changed it)")

    if _ast_dump(source, "input") != _ast_dump(formatted, "formatted output"):
        raise NormalizationError("Formatting changed the table's meaning (AST differs)")

    return formatted


def normalize_file(path: Path, line_length: int = ICON_LINE_LENGTH) -> bool:
    """Rewrite path in canonical style. Returns True when the file changed."""
    path = Path(path)
    try:
        source = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise NormalizationError(f"Nothing to normalize at {path}")

    formatted = normalize_source(source, line_length)
    if formatted == source:
        return False

    try:
        atomic_write(path, formatted.encode("utf-8"))
    except RelocationError as e:
        raise NormalizationError(e.message)
    return True
