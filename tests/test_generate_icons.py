import json

import pytest

import generate_icons
from generate_icons import (
    CatalogError,
    Icon,
    check_unique,
    constant_name,
    find_svg_icons,
    generate,
    icons_from_codepoints,
    icons_from_json,
    largest_sizes,
    load_catalog,
    render_module,
)

from conftest import REPO_ROOT, SAMPLE_ICONS


@pytest.mark.parametrize(
    "name, expected",
    [
        ("add", "ADD"),
        ("add_circle_outline", "ADD_CIRCLE_OUTLINE"),
        ("3d_rotation", "THREE_D_ROTATION"),
        ("1k", "ONE_K"),
        ("9", "NINE"),
        ("arrow-back", "ARROW_BACK"),
    ],
)
def test_constant_name(name, expected):
    assert constant_name(name) == expected


def test_constant_name_rejects_empty():
    with pytest.raises(CatalogError):
        constant_name("--")


def test_codepoints_file():
    icons = icons_from_codepoints("# header\n\nadd e145\n3d_rotation e84d\n")
    assert [(i.name, i.codepoint) for i in icons] == [("add", 0xE145), ("3d_rotation", 0xE84D)]


@pytest.mark.parametrize("text", ["add\n", "add e145 extra\n", "add zz\n"])
def test_codepoints_file_malformed(text):
    with pytest.raises(CatalogError, match="line 1"):
        icons_from_codepoints(text)


def test_json_catalog_accepts_hex_and_int():
    icons = icons_from_json({"icons": [{"name": "add", "codepoint": "0xE145"}, {"name": "home", "codepoint": 59530}]})
    assert [i.codepoint for i in icons] == [0xE145, 0xE88A]


def test_json_catalog_schema_error_names_entry():
    with pytest.raises(CatalogError, match="icons/1"):
        icons_from_json({"icons": [{"name": "add", "codepoint": "e145"}, {"name": "home"}]})


def test_duplicate_names_are_fatal():
    icons = icons_from_json({"icons": SAMPLE_ICONS + [{"name": "add", "codepoint": "e146"}]})
    with pytest.raises(CatalogError, match="duplicate icon name 'add'"):
        check_unique(icons)


def test_names_mapping_to_same_constant_are_fatal():
    icons = [Icon(name="3d_rotation", codepoint=1), Icon(name="three_d_rotation", codepoint=2)]
    with pytest.raises(CatalogError, match="THREE_D_ROTATION"):
        check_unique(icons)


def test_icon_may_not_shadow_table():
    with pytest.raises(CatalogError, match="ICONS"):
        check_unique([Icon(name="icons", codepoint=1)])


def test_render_is_sorted_and_order_independent():
    icons = icons_from_json({"icons": SAMPLE_ICONS})
    text = render_module(icons)
    assert text == render_module(list(reversed(icons)))
    assert text.index("THREE_D_ROTATION = 0xE84D") < text.index("ADD = 0xE145") < text.index("DELETE = 0xE872")


def test_rendered_module_runs():
    ns = {}
    exec(compile(render_module(icons_from_json({"icons": SAMPLE_ICONS})), "icons.py", "exec"), ns)
    assert ns["ICONS"] == {"3d_rotation": 0xE84D, "add": 0xE145, "delete": 0xE872}
    assert ns["__all__"][-1] == "ICONS"


def test_render_empty_catalog():
    with pytest.raises(CatalogError, match="empty"):
        render_module([])


def test_largest_sizes(capsys):
    sizes = largest_sizes(["ic_add_18px.svg", "ic_add_48px.svg", "ic_add_24px.svg", "ic_x_24x48px.svg"])
    assert sizes == {"add": 48}
    assert "ic_x_24x48px.svg" in capsys.readouterr().err


def test_svg_tree(svg_tree):
    icons = {i.name: i for i in find_svg_icons(str(svg_tree))}
    assert set(icons) == {"add", "dot"}
    assert icons["add"].size == 48
    assert icons["add"].category == "content"
    assert len(icons["dot"].shapes) == 1


def test_svg_tree_duplicate_across_categories(svg_tree):
    other = svg_tree / "action" / "svg" / "production"
    other.mkdir(parents=True)
    (other / "ic_dot_24px.svg").write_text(
        (svg_tree / "image" / "svg" / "production" / "ic_dot_24px.svg").read_text()
    )
    with pytest.raises(CatalogError, match="categories 'action' and 'image'"):
        check_unique(find_svg_icons(str(svg_tree)))


def test_svg_tree_without_icons(tmp_path):
    with pytest.raises(CatalogError, match="No icons found"):
        find_svg_icons(str(tmp_path))


def test_shape_table_uses_shape_types(svg_tree):
    text = render_module(find_svg_icons(str(svg_tree)), shapes_import="material_icons.shapes")
    ns = {}
    exec(compile(text, "icons.py", "exec"), ns)
    add = ns["ADD"]
    assert add.size == (48.0, 48.0)
    assert add.paths[0].to_svg_path().startswith("M19 13L13 13")
    assert ns["DOT"].paths[0].opacity == pytest.approx(0.3)
    assert ns["ICONS"]["dot"] is ns["DOT"]


class FakeResponse:
    def __init__(self, status_code=200, text="", payload=None):
        self.status_code = status_code
        self.text = text
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


def test_remote_codepoints(monkeypatch):
    calls = []

    def fake_get(url, timeout):
        calls.append((url, timeout))
        return FakeResponse(text="add e145\nhome e88a\n")

    monkeypatch.setattr(generate_icons.requests, "get", fake_get)
    icons = load_catalog("https://example.com/MaterialIcons-Regular.codepoints")
    assert [i.name for i in icons] == ["add", "home"]
    assert calls[0][0].endswith(".codepoints")


def test_remote_json(monkeypatch):
    monkeypatch.setattr(
        generate_icons.requests, "get", lambda url, timeout: FakeResponse(payload={"icons": SAMPLE_ICONS})
    )
    assert len(load_catalog("https://example.com/icons.json")) == 3


def test_remote_http_error(monkeypatch):
    monkeypatch.setattr(generate_icons.requests, "get", lambda url, timeout: FakeResponse(404, "Not Found"))
    with pytest.raises(CatalogError, match="HTTP 404"):
        load_catalog("https://example.com/icons.json")


def test_missing_catalog(tmp_path):
    with pytest.raises(CatalogError, match="not found"):
        load_catalog(str(tmp_path / "nope.json"))


def test_invalid_json_catalog(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    with pytest.raises(CatalogError, match="not valid JSON"):
        load_catalog(str(path))


def test_generate_writes_one_file(tmp_path, catalog):
    out = tmp_path / "out" / "icons.py"
    out.parent.mkdir()
    assert generate(str(catalog), str(out)) == 3
    assert sorted(p.name for p in out.parent.iterdir()) == ["icons.py"]


def test_generate_failure_leaves_nothing(tmp_path, write_catalog):
    catalog = write_catalog(SAMPLE_ICONS + [SAMPLE_ICONS[0]])
    out = tmp_path / "out" / "icons.py"
    out.parent.mkdir()
    with pytest.raises(CatalogError):
        generate(str(catalog), str(out))
    assert list(out.parent.iterdir()) == []


def test_committed_sample_catalog_matches_table():
    from material_icons import ICONS

    with open(REPO_ROOT / "catalog" / "icons.json", encoding="utf-8") as f:
        names = {entry["name"] for entry in json.load(f)["icons"]}
    assert set(ICONS) == names


def test_non_square_variants_are_not_tabled(svg_tree, capsys):
    only_wide = svg_tree / "action" / "svg" / "production"
    only_wide.mkdir(parents=True)
    (only_wide / "ic_banner_24x48px.svg").write_text("<svg/>", encoding="utf-8")

    names = {i.name for i in find_svg_icons(str(svg_tree))}
    assert names == {"add", "dot"}
    assert "Skipping 'ic_banner_24x48px.svg'" in capsys.readouterr().err
