import os
import stat

import pytest

from errors import NormalizationError
from generate_icons import icons_from_json, render_module
from normalize import normalize_file, normalize_source

from conftest import SAMPLE_ICONS

MESSY = "X=0xe145\nICONS={'x':X,\n'y' :   1}\n"


def run(source):
    ns = {}
    exec(compile(source, "icons.py", "exec"), ns)
    return ns["ICONS"]


def test_formats_into_canonical_style():
    out = normalize_source(MESSY)
    assert "X = 0xE145" in out
    assert "'x'" not in out
    assert run(out) == run(MESSY)


def test_fixed_point():
    once = normalize_source(MESSY)
    assert normalize_source(once) == once


def test_generated_table_survives_unchanged_in_meaning():
    text = render_module(icons_from_json({"icons": SAMPLE_ICONS}))
    assert run(normalize_source(text)) == run(text)


def test_malformed_input():
    with pytest.raises(NormalizationError, match="malformed"):
        normalize_source("ICONS = {\n")


def test_normalize_file_reports_change(tmp_path):
    path = tmp_path / "icons.py"
    path.write_text(MESSY)
    assert normalize_file(path) is True
    first = path.read_text()
    assert normalize_file(path) is False
    assert path.read_text() == first


def test_normalize_file_missing(tmp_path):
    with pytest.raises(NormalizationError, match="Nothing to normalize"):
        normalize_file(tmp_path / "icons.py")


def test_line_length_is_honoured():
    source = "ICONS = {'alpha': 1, 'beta': 2, 'gamma': 3}\n"
    assert normalize_source(source, line_length=20).count("\n") > 1
    assert normalize_source(source, line_length=88).count("\n") == 1


def test_normalize_file_keeps_mode(tmp_path):
    path = tmp_path / "icons.py"
    path.write_text(MESSY)
    os.chmod(path, 0o640)
    assert normalize_file(path) is True
    assert stat.S_IMODE(os.stat(path).st_mode) == 0o640
