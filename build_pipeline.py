"""
LOCKED PIPELINE ORDER (do not reorder; each step needs the previous one's output):
1) generate   generate_icons.py in an isolated workspace -> <workspace>/icons.py
2) relocate   atomic replace onto the canonical location  -> <project>/<target>
3) normalize  black, in place (fixed point)
4) validate   compile + import the project, name-collision check (+ optional check command)

A failed step stops the run. Nothing is rolled back: a table that fails
validation stays on disk for inspection.
"""

import sys
import argparse
import tempfile
import subprocess
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from errors import GenerationError, PipelineError, StepResult
from normalize import normalize_file
from relocate import relocate_artifact
from settings import (
    GENERATOR_SCRIPT,
    ICON_CATALOG,
    ICON_CHECK_CMD,
    ICON_LINE_LENGTH,
    ICON_PROJECT_ROOT,
    ICON_SHAPES_IMPORT,
    ICON_TARGET,
    PipelineConfig,
    resolve_catalog,
)
from verify import validate_project


# =========================
# STEPS
# =========================
def generate(cfg: PipelineConfig) -> StepResult:
    out = cfg.generated_path
    # stale output from an earlier run must never be picked up
    if out.exists():
        out.unlink()

    cmd = [
        sys.executable,
        str(GENERATOR_SCRIPT),
        "--catalog",
        cfg.catalog,
        "--out",
        out.name,
        "--shapes-import",
        cfg.shapes_import,
    ]
    result = subprocess.run(cmd, cwd=str(cfg.workspace), capture_output=True, text=True)
    output = [s.rstrip() for s in (result.stdout, result.stderr) if s.strip()]

    if result.returncode != 0:
        return StepResult.failure(
            GenerationError(f"Generator exited with status {result.returncode}", output)
        )
    if not out.is_file():
        return StepResult.failure(GenerationError(f"Generator produced no output at {out}", output))
    return StepResult.success(out, output)


def relocate(cfg: PipelineConfig) -> StepResult:
    return StepResult.success(relocate_artifact(cfg.generated_path, cfg.destination))


def normalize(cfg: PipelineConfig) -> StepResult:
    changed = normalize_file(cfg.destination, cfg.line_length)
    return StepResult.success(changed, ["reformatted" if changed else "already canonical"])


def validate(cfg: PipelineConfig) -> StepResult:
    count = validate_project(cfg.project_root, cfg.destination, cfg.check_cmd or None)
    return StepResult.success(count, [f"{count} modules compiled, package imported"])


PIPELINE: List[Tuple[str, Callable[[PipelineConfig], StepResult]]] = [
    ("Generate: generate_icons.py (icons.py)", generate),
    ("Relocate: workspace -> canonical location", relocate),
    ("Normalize: black", normalize),
    ("Validate: compile + import consuming project", validate),
]


def run_step(label: str, step: Callable[[PipelineConfig], StepResult], cfg: PipelineConfig) -> StepResult:
    print(f"\n=== {label} ===")
    try:
        result = step(cfg)
    except PipelineError as e:
        result = StepResult.failure(e)

    for line in result.output:
        print(line)

    if not result.ok:
        print(str(result.error), file=sys.stderr)
        print(f"\nERROR: Pipeline stopped: {label}", file=sys.stderr)
        return result

    print(f"OK: {label}")
    return result


def run_pipeline(cfg: PipelineConfig) -> StepResult:
    """Run every step in order; return the first failure or the last success."""
    result = StepResult.success()
    for label, step in PIPELINE:
        result = run_step(label, step, cfg)
        if not result.ok:
            return result
    return result


# =========================
# MAIN / CLI
# =========================
def build_config(args: argparse.Namespace, workspace: Path) -> PipelineConfig:
    return PipelineConfig(
        catalog=resolve_catalog(args.catalog),
        project_root=Path(args.project_root).resolve(),
        target=args.target,
        workspace=workspace.resolve(),
        shapes_import=args.shapes_import,
        line_length=args.line_length,
        check_cmd=args.check_cmd,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Generate, install and verify the icon table")
    parser.add_argument("--catalog", default=ICON_CATALOG, help=f"Catalog file, SVG directory or URL (default: {ICON_CATALOG})")
    parser.add_argument("--project-root", default=ICON_PROJECT_ROOT, help="Root of the consuming project")
    parser.add_argument("--target", default=ICON_TARGET, help=f"Canonical location, relative to the project root (default: {ICON_TARGET})")
    parser.add_argument("--workspace", default=None, help="Generator working directory (default: a fresh temp dir)")
    parser.add_argument("--shapes-import", default=ICON_SHAPES_IMPORT, help="Import path of the shape types")
    parser.add_argument("--line-length", type=int, default=ICON_LINE_LENGTH)
    parser.add_argument("--check-cmd", default=ICON_CHECK_CMD, help="Extra checker run in the project root, e.g. 'mypy .'")
    args = parser.parse_args(argv)

    if args.workspace:
        workspace = Path(args.workspace)
        workspace.mkdir(parents=True, exist_ok=True)
        result = run_pipeline(build_config(args, workspace))
    else:
        with tempfile.TemporaryDirectory(prefix="iconbake-") as tmp:
            result = run_pipeline(build_config(args, Path(tmp)))

    if not result.ok:
        return result.error.exit_code

    print("\nPIPELINE COMPLETE (all steps passed).")
    return 0


if __name__ == "__main__":
    sys.exit(main())
