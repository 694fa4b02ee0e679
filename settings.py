import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


# =========================
# CONFIG
# =========================
load_dotenv()

ICON_CATALOG = os.getenv("ICON_CATALOG", "catalog/icons.json").strip()
ICON_PROJECT_ROOT = os.getenv("ICON_PROJECT_ROOT", ".").strip()

# Canonical Source Location, relative to the project root
ICON_TARGET = os.getenv("ICON_TARGET", "material_icons/icons.py").strip()

ICON_SHAPES_IMPORT = os.getenv("ICON_SHAPES_IMPORT", ".shapes").strip()
ICON_LINE_LENGTH = int(os.getenv("ICON_LINE_LENGTH", "88"))
ICON_CHECK_CMD = os.getenv("ICON_CHECK_CMD", "").strip()
ICON_FETCH_TIMEOUT = float(os.getenv("ICON_FETCH_TIMEOUT", "60"))

# Name of the single file the generator writes into its workspace
GENERATED_NAME = "icons.py"

GENERATOR_SCRIPT = Path(__file__).resolve().parent / "generate_icons.py"


@dataclass(frozen=True)
class PipelineConfig:
    catalog: str
    project_root: Path
    target: str
    workspace: Path
    shapes_import: str = ICON_SHAPES_IMPORT
    line_length: int = ICON_LINE_LENGTH
    check_cmd: str = ICON_CHECK_CMD

    @property
    def destination(self) -> Path:
        return self.project_root / self.target

    @property
    def generated_path(self) -> Path:
        return self.workspace / GENERATED_NAME


def is_url(value: str) -> bool:
    return value.startswith(("http://", "https://"))


def resolve_catalog(value: str) -> str:
    """Absolute path for local catalogs; URLs pass through untouched.

    The generator runs with its workspace as cwd, so a relative path must be
    pinned against the caller's cwd first.
    """
    if is_url(value):
        return value
    return str(Path(value).expanduser().resolve())
