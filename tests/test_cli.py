import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]


def _run(*args: str, input_text: str = None) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, "pyunifdef.py", *args],
        cwd=ROOT,
        input=input_text,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    )


SOURCE = "#ifdef FOO\na\n#else\nb\n#endif\n#if VER > 2\nnew\n#endif\n"


def test_define_and_undefine(tmp_path: Path):
    src = tmp_path / "t.c"
    src.write_text(SOURCE)
    res = _run("-DFOO", "-DVER=3", str(src))
    assert res.returncode == 0, res.stderr
    assert res.stdout == "a\nnew\n"

    res = _run("-UFOO", str(src))
    assert res.returncode == 0, res.stderr
    assert res.stdout == "b\n#if VER > 2\nnew\n#endif\n"


def test_output_file(tmp_path: Path):
    src = tmp_path / "t.c"
    out = tmp_path / "out.c"
    src.write_text(SOURCE)
    res = _run("-D", "FOO", "-D", "VER=1", str(src), "-o", str(out))
    assert res.returncode == 0, res.stderr
    assert res.stdout == ""
    assert out.read_text() == "a\n"


def test_stdin():
    res = _run("-DFOO", "-", input_text="#ifndef FOO\nx\n#endif\ny\n")
    assert res.returncode == 0, res.stderr
    assert res.stdout == "y\n"


def test_define_file(tmp_path: Path):
    defs = tmp_path / "defs.h"
    defs.write_text("#define FOO\n#define VER 5\n")
    src = tmp_path / "t.c"
    src.write_text(SOURCE)
    res = _run("-f", str(defs), str(src))
    assert res.returncode == 0, res.stderr
    assert res.stdout == "a\nnew\n"


def test_symbol_listing(tmp_path: Path):
    src = tmp_path / "t.c"
    src.write_text(SOURCE)
    res = _run("-s", str(src))
    assert res.returncode == 0, res.stderr
    assert res.stdout.split() == ["FOO", "VER"]


def test_line_markers_use_file_name(tmp_path: Path):
    src = tmp_path / "t.c"
    src.write_text("#ifdef FOO\na\n#endif\nb\n")
    res = _run("-UFOO", "-n", "--line-file", "t.c", str(src))
    assert res.returncode == 0, res.stderr
    assert res.stdout == '#line 4 "t.c"\nb\n'


def test_structural_error(tmp_path: Path):
    src = tmp_path / "t.c"
    src.write_text("a\n#endif\n")
    res = _run(str(src))
    assert res.returncode == 1
    assert "Error: Inappropriate #endif at line 2" in res.stderr


def test_exclusive_options(tmp_path: Path):
    src = tmp_path / "t.c"
    src.write_text("a\n")
    res = _run("-B", "-b", str(src))
    assert res.returncode == 1
    assert "Error:" in res.stderr


def test_bad_symbol_name():
    res = _run("-DA-B", input_text="a\n")
    assert res.returncode == 1
    assert "invalid symbol name" in res.stderr


def test_missing_input(tmp_path: Path):
    res = _run(str(tmp_path / "nope.c"))
    assert res.returncode == 1
    assert "Error:" in res.stderr


def test_project_mode(tmp_path: Path):
    (tmp_path / "progs.src").write_text("progs.dat\nmain.qc\n")
    (tmp_path / "main.qc").write_text("#ifdef EXTRA\nfloat e;\n#endif\nfloat a;\n")
    (tmp_path / "old.qc").write_text("float o;\n")
    res = _run("--project", str(tmp_path / "progs.src"), "--discard", "EXTRA")
    assert res.returncode == 0, res.stderr
    assert "EXTRA: resolve as false" in res.stdout
    assert (tmp_path / "main.qc").read_text() == "float a;\n"
    assert not (tmp_path / "old.qc").exists()


def test_project_ask(tmp_path: Path):
    (tmp_path / "progs.src").write_text("progs.dat\nmain.qc\n")
    (tmp_path / "config.qc").write_text("/* @EXTRA@ Extra weapons */\nfloat c;\n")
    (tmp_path / "main.qc").write_text("#ifdef EXTRA\nfloat e;\n#endif\nfloat a;\n")
    res = _run("--project", str(tmp_path / "progs.src"), "--ask", input_text="y\n")
    assert res.returncode == 0, res.stderr
    assert "EXTRA; Extra weapons" in res.stdout
    assert (tmp_path / "main.qc").read_text() == "float e;\nfloat a;\n"


def test_project_mode_rejects_exclusive_options(tmp_path: Path):
    (tmp_path / "progs.src").write_text("progs.dat\nmain.qc\n")
    (tmp_path / "main.qc").write_text("float a;\n")
    (tmp_path / "old.qc").write_text("float o;\n")
    res = _run("--project", str(tmp_path / "progs.src"), "-B", "-b")
    assert res.returncode == 1
    assert "Error:" in res.stderr
    assert (tmp_path / "old.qc").exists()
