import os
import ast
import sys
import shlex
import argparse
import subprocess
from pathlib import Path
from typing import List, Optional, Set

from errors import ValidationError
from settings import ICON_CHECK_CMD, ICON_PROJECT_ROOT, ICON_TARGET


EXCLUDE_DIRS = {
    ".git",
    "__pycache__",
    ".venv",
    "venv",
    "env",
    ".tox",
    ".nox",
    ".mypy_cache",
    ".pytest_cache",
    "build",
    "dist",
    "node_modules",
}


def iter_sources(project_root: Path) -> List[Path]:
    found: List[Path] = []
    for dirpath, dirnames, filenames in os.walk(project_root):
        dirnames[:] = sorted(d for d in dirnames if d not in EXCLUDE_DIRS and not d.endswith(".egg-info"))
        for fname in sorted(filenames):
            if fname.endswith(".py"):
                found.append(Path(dirpath) / fname)
    return found


def _rel(path: Path, root: Path) -> str:
    try:
        return str(path.relative_to(root))
    except ValueError:
        return str(path)


def compile_sources(paths: List[Path], project_root: Path) -> List[str]:
    """Compile in memory (no bytecode written); every SyntaxError is a diagnostic."""
    problems: List[str] = []
    for path in paths:
        try:
            source = path.read_bytes()
            compile(source, str(path), "exec", dont_inherit=True)
        except SyntaxError as e:
            problems.append(f"{_rel(path, project_root)}:{e.lineno}:{e.offset}: {e.msg}")
        except (OSError, ValueError) as e:
            problems.append(f"{_rel(path, project_root)}: {e}")
    return problems


def exported_names(tree: ast.Module) -> Set[str]:
    """__all__ when the module declares one, else every public top-level binding."""
    for node in tree.body:
        if isinstance(node, ast.Assign) and any(isinstance(t, ast.Name) and t.id == "__all__" for t in node.targets):
            if isinstance(node.value, (ast.List, ast.Tuple)):
                return {
                    elt.value
                    for elt in node.value.elts
                    if isinstance(elt, ast.Constant) and isinstance(elt.value, str)
                }
    return {n for n in top_level_names(tree, include_imports=True) if not n.startswith("_")}


def top_level_names(tree: ast.Module, include_imports: bool = True) -> Set[str]:
    names: Set[str] = set()

    def targets(node: ast.AST) -> None:
        if isinstance(node, ast.Name):
            names.add(node.id)
        elif isinstance(node, (ast.Tuple, ast.List)):
            for elt in node.elts:
                targets(elt)
        elif isinstance(node, ast.Starred):
            targets(node.value)

    for node in tree.body:
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
            names.add(node.name)
        elif isinstance(node, ast.Assign):
            for t in node.targets:
                targets(t)
        elif isinstance(node, (ast.AnnAssign, ast.AugAssign)):
            targets(node.target)
        elif include_imports and isinstance(node, (ast.Import, ast.ImportFrom)):
            for alias in node.names:
                if alias.name == "*":
                    continue
                names.add(alias.asname or alias.name.split(".")[0])
    return names


def module_name(path: Path, project_root: Path) -> str:
    try:
        rel = path.relative_to(project_root).with_suffix("")
    except ValueError:
        return ""
    parts = list(rel.parts)
    if parts and parts[-1] == "__init__":
        parts.pop()
    return ".".join(parts)


def imports_from_artifact(node: ast.ImportFrom, host: Path, artifact: Path, project_root: Path) -> bool:
    if node.level == 0:
        return bool(node.module) and node.module == module_name(artifact, project_root)
    # relative: walk up from the host's package
    base = host.parent
    for _ in range(node.level - 1):
        base = base.parent
    target = base / Path(*node.module.split(".")) if node.module else base
    return target.with_suffix(".py") == artifact or target / "__init__.py" == artifact


def star_imports_artifact(tree: ast.Module, host: Path, artifact: Path, project_root: Path) -> bool:
    return any(
        isinstance(node, ast.ImportFrom)
        and any(a.name == "*" for a in node.names)
        and imports_from_artifact(node, host, artifact, project_root)
        for node in tree.body
    )


def hand_written_names(tree: ast.Module, host: Path, artifact: Path, project_root: Path) -> Set[str]:
    """Top-level bindings, minus names re-imported from the artifact itself."""
    body = [
        node
        for node in tree.body
        if not (isinstance(node, ast.ImportFrom) and imports_from_artifact(node, host, artifact, project_root))
    ]
    return top_level_names(ast.Module(body=body, type_ignores=[]))


def find_collisions(paths: List[Path], artifact: Path, project_root: Path) -> List[str]:
    """Hand-written top-level names in modules that star-import the artifact must not shadow it."""
    try:
        generated = exported_names(ast.parse(artifact.read_text(encoding="utf-8")))
    except SyntaxError:
        # already reported by compile_sources
        return []

    problems: List[str] = []
    for path in paths:
        if path == artifact:
            continue
        try:
            tree = ast.parse(path.read_bytes())
        except (SyntaxError, ValueError):
            continue
        if not star_imports_artifact(tree, path, artifact, project_root):
            continue
        for name in sorted(hand_written_names(tree, path, artifact, project_root) & generated):
            problems.append(
                f"{_rel(path, project_root)}: name {name!r} collides with a generated name in "
                f"{_rel(artifact, project_root)}"
            )
    return problems


def run_check_command(check_cmd: str, project_root: Path) -> List[str]:
    """External checker (mypy, pyright, ...). Output is passed through verbatim."""
    argv = shlex.split(check_cmd)
    try:
        result = subprocess.run(argv, cwd=str(project_root), capture_output=True, text=True)
    except OSError as e:
        return [f"check command {check_cmd!r} could not start: {e}"]

    if result.stdout:
        print(result.stdout, end="")
    if result.returncode != 0:
        out = [f"check command {check_cmd!r} exited with {result.returncode}"]
        if result.stderr:
            out.append(result.stderr.rstrip())
        return out
    return []


def import_artifact(artifact: Path, project_root: Path) -> List[str]:
    """Import the table and its package in a fresh interpreter; unresolved names fail here."""
    name = module_name(artifact, project_root)
    if not name:
        return []
    cmd = [sys.executable, "-B", "-c", f"import {name}"]
    result = subprocess.run(cmd, cwd=str(project_root), capture_output=True, text=True)
    if result.returncode != 0:
        out = [f"import {name} failed"]
        if result.stderr:
            out.append(result.stderr.rstrip())
        return out
    return []


def validate_project(project_root: Path, artifact: Path, check_cmd: Optional[str] = None) -> int:
    """Compile and import the consuming project with the artifact in place. Returns files checked."""
    project_root = Path(project_root).resolve()
    artifact = Path(artifact).resolve()

    if not artifact.is_file():
        raise ValidationError(f"Generated artifact missing at {artifact}")

    paths = iter_sources(project_root)
    if artifact not in paths:
        paths.append(artifact)

    problems = compile_sources(paths, project_root)
    problems.extend(find_collisions(paths, artifact, project_root))
    if not problems:
        problems.extend(import_artifact(artifact, project_root))
    if not problems and check_cmd:
        problems.extend(run_check_command(check_cmd, project_root))

    if problems:
        raise ValidationError(f"Build check failed ({len(problems)} problem(s))", problems)
    return len(paths)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Compile and import the consuming project with the generated icon table")
    parser.add_argument("--project-root", default=ICON_PROJECT_ROOT)
    parser.add_argument("--target", default=ICON_TARGET)
    parser.add_argument("--check-cmd", default=ICON_CHECK_CMD)
    args = parser.parse_args(argv)

    print("Running verification…")
    root = Path(args.project_root)
    try:
        count = validate_project(root, root / args.target, args.check_cmd or None)
    except ValidationError as e:
        raise SystemExit(str(e))

    print(f"VERIFIED: {count} modules compile and import with the generated table.")


if __name__ == "__main__":
    main()
