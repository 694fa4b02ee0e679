import json
import shutil
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parent.parent

ADD_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="{size}" height="{size}" viewBox="0 0 24 24">'
    '<path d="M19 13h-6v6h-2v-6H5v-2h6V5h2v6h6v2z"/>'
    '<path d="M0 0h24v24H0z" fill="none"/>'
    "</svg>"
)

DOT_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="24" height="24">'
    '<circle cx="12" cy="12" r="4" fill-opacity=".3"/>'
    "</svg>"
)

SAMPLE_ICONS = [
    {"name": "add", "codepoint": "e145", "category": "content"},
    {"name": "delete", "codepoint": "e872", "category": "action"},
    {"name": "3d_rotation", "codepoint": "e84d", "category": "action"},
]


# Consuming project: a copy of material_icons with the committed table in place
@pytest.fixture
def project(tmp_path):
    root = tmp_path / "project"
    root.mkdir()
    shutil.copytree(REPO_ROOT / "material_icons", root / "material_icons")
    for cache in root.rglob("__pycache__"):
        shutil.rmtree(cache)
    return root


@pytest.fixture
def write_catalog(tmp_path):
    def _write(icons, name="catalog.json"):
        path = tmp_path / name
        path.write_text(json.dumps({"icons": icons}), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def catalog(write_catalog):
    return write_catalog(SAMPLE_ICONS)


@pytest.fixture
def svg_tree(tmp_path):
    root = tmp_path / "material-design-icons"
    content = root / "content" / "svg" / "production"
    content.mkdir(parents=True)
    for size in (18, 24, 48):
        (content / f"ic_add_{size}px.svg").write_text(ADD_SVG.format(size=size), encoding="utf-8")
    (content / "ic_add_24x48px.svg").write_text("<svg/>", encoding="utf-8")

    image = root / "image" / "svg" / "production"
    image.mkdir(parents=True)
    (image / "ic_dot_24px.svg").write_text(DOT_SVG, encoding="utf-8")
    return root
