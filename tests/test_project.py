from pathlib import Path

import pytest

from pyunifdef.errors import ConfigurationError
from pyunifdef.options import Settings
from pyunifdef.project import (
    ProjectResolver,
    discover_options,
    strip_comments,
    symbols_from_decisions,
)
from pyunifdef.symbols import Symbol


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


def _make_project(root: Path) -> None:
    _write(root / "progs.src", "progs.dat\nmain.qc\nopt.qc\n")
    _write(
        root / "main.qc",
        '#include "inc.h"\nvoid() main = {};\n#ifdef FEATURE\nvoid() feature = {};\n#endif\n',
    )
    _write(root / "inc.h", "float x;\n")
    _write(root / "opt.qc", "#ifdef FEATURE\nvoid() opt = {};\n#endif\n")
    _write(root / "unused.qc", "float y;\n")
    _write(root / "sub" / "unused2.h", "float z;\n")
    _write(root / "notes.txt", "keep me\n")


def test_discover_options():
    text = "/* @FEATURE@ Adds a\nfeature */\nfloat a;\n/* @OTHER@ Second */\n"
    options = discover_options(text)
    assert [(o.name, o.description) for o in options] == [
        ("FEATURE", "Adds a feature"),
        ("OTHER", "Second"),
    ]


def test_symbols_from_decisions():
    symbols = symbols_from_decisions({"A": True, "B": False, "C": None})
    assert [(s.name, s.value) for s in symbols] == [("A", "1"), ("B", None)]


def test_strip_comments_keeps_urls():
    assert strip_comments("a /* b */ c // d\nhttp://x\n") == "a  c \nhttp://x\n"


class TestProjectResolver:
    """Resolving a tree of sources reached from a manifest"""

    def test_discarded_feature(self, tmp_path: Path):
        _make_project(tmp_path)
        project = ProjectResolver([Symbol("FEATURE", None)])
        result = project.process_manifest(str(tmp_path / "progs.src"))

        assert result.success, result.errors
        assert (tmp_path / "main.qc").read_text() == '#include "inc.h"\nvoid() main = {};\n'
        assert (tmp_path / "inc.h").read_text() == "float x;\n"
        assert not (tmp_path / "opt.qc").exists()
        assert not (tmp_path / "unused.qc").exists()
        assert not (tmp_path / "sub").exists()
        assert (tmp_path / "notes.txt").exists()
        assert (tmp_path / "progs.src").read_text().splitlines() == ["progs.dat", "main.qc"]
        assert str(tmp_path / "opt.qc") in result.removed

    def test_kept_feature(self, tmp_path: Path):
        _make_project(tmp_path)
        project = ProjectResolver([Symbol("FEATURE", "1")])
        result = project.process_manifest(str(tmp_path / "progs.src"))

        assert result.success, result.errors
        assert (tmp_path / "opt.qc").read_text() == "void() opt = {};\n"
        assert "void() feature = {};" in (tmp_path / "main.qc").read_text()
        assert (tmp_path / "progs.src").read_text().splitlines() == ["progs.dat", "main.qc", "opt.qc"]

    def test_undecided_feature_is_left_alone(self, tmp_path: Path):
        _make_project(tmp_path)
        before = (tmp_path / "main.qc").read_text()
        result = ProjectResolver([]).process_manifest(str(tmp_path / "progs.src"))

        assert result.success
        assert (tmp_path / "main.qc").read_text() == before
        assert (tmp_path / "opt.qc").exists()

    def test_missing_include_is_reported(self, tmp_path: Path):
        _write(tmp_path / "progs.src", "progs.dat\nmain.qc\n")
        _write(tmp_path / "main.qc", '#include "gone.h"\nfloat a;\n')
        result = ProjectResolver([]).process_manifest(str(tmp_path / "progs.src"))

        assert not result.success
        assert any("gone.h" in e for e in result.errors)

    def test_resolver_error_leaves_file_untouched(self, tmp_path: Path):
        _write(tmp_path / "progs.src", "progs.dat\nbad.qc\n")
        _write(tmp_path / "bad.qc", "#ifdef FEATURE\nfloat a;\n")
        result = ProjectResolver([Symbol("FEATURE", None)]).process_manifest(str(tmp_path / "progs.src"))

        assert not result.success
        assert "Premature EOF" in result.errors[0]
        assert (tmp_path / "bad.qc").read_text() == "#ifdef FEATURE\nfloat a;\n"

    def test_failed_file_keeps_its_includes(self, tmp_path: Path):
        _write(tmp_path / "progs.src", "progs.dat\nmain.qc\n")
        _write(tmp_path / "main.qc", '#include "util.qc"\n#ifdef FEATURE\nfloat a;\n')
        _write(tmp_path / "util.qc", "float u;\n")
        _write(tmp_path / "stray.qc", "float s;\n")
        result = ProjectResolver([Symbol("FEATURE", None)]).process_manifest(str(tmp_path / "progs.src"))

        assert not result.success
        assert (tmp_path / "util.qc").read_text() == "float u;\n"
        assert (tmp_path / "stray.qc").exists()
        assert result.removed == []

    def test_exclusive_settings_fail_before_touching_disk(self, tmp_path: Path):
        _make_project(tmp_path)
        with pytest.raises(ConfigurationError):
            ProjectResolver([], Settings(compress_blanks=True, blank_placeholders=True))
        assert (tmp_path / "unused.qc").exists()
        assert (tmp_path / "opt.qc").read_text() == "#ifdef FEATURE\nvoid() opt = {};\n#endif\n"
