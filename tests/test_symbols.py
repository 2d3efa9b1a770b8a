import pytest

from pyunifdef.symbols import Symbol, SymbolTable, parse_symbol_argument


class TestSymbolTable:
    """First-match lookup, in-place overwrite and indirect resolution"""

    def test_lookup_is_first_match(self):
        table = SymbolTable([Symbol("FOO", "1"), Symbol("FOO", "2")])
        assert table.lookup("FOO").value == "1"
        assert table.index("FOO") == 0
        assert table.lookup("BAR") is None
        assert table.index("BAR") == -1

    def test_define_overwrites_in_place(self):
        table = SymbolTable([Symbol("A", "1"), Symbol("B", "2")])
        table.define("A", "7")
        table.define("C", "3")
        assert [(s.name, s.value) for s in table] == [("A", "7"), ("B", "2"), ("C", "3")]

    def test_undefine_keeps_entry(self):
        table = SymbolTable([Symbol("A", "1")])
        table.undefine("A")
        sym = table.lookup("A")
        assert sym is not None
        assert not sym.defined
        assert len(table) == 1

    def test_table_copies_its_input(self):
        given = Symbol("FOO", "BAR")
        table = SymbolTable([given, Symbol("BAR", "2")])
        table.resolve_indirect()
        assert table.lookup("FOO").value == "2"
        assert given.value == "BAR"

    def test_indirect_chain_reaches_fixed_point(self):
        table = SymbolTable([Symbol("A", "B"), Symbol("B", "C"), Symbol("C", "42")])
        assert table.resolve_indirect() > 0
        assert [s.value for s in table] == ["42", "42", "42"]
        assert table.resolve_indirect() == 0

    def test_indirect_skips_undefined_and_unknown_targets(self):
        table = SymbolTable([Symbol("A", "B"), Symbol("B", None), Symbol("C", "NOPE")])
        assert table.resolve_indirect() == 0
        assert table.lookup("A").value == "B"
        assert table.lookup("C").value == "NOPE"

    def test_indirect_ignores_non_identifier_values(self):
        table = SymbolTable([Symbol("A", "B + 1"), Symbol("B", "2")])
        table.resolve_indirect()
        assert table.lookup("A").value == "B + 1"


def test_symbol_str():
    assert str(Symbol("FOO", "1")) == "FOO=1"
    assert str(Symbol("FOO", None)) == "FOO undef"


@pytest.mark.parametrize(
    "text, name, value",
    [
        ("FOO", "FOO", "1"),
        ("FOO=2", "FOO", "2"),
        ("FOO=", "FOO", ""),
        ("_x9=a=b", "_x9", "a=b"),
    ],
)
def test_parse_symbol_argument(text, name, value):
    sym = parse_symbol_argument(text)
    assert (sym.name, sym.value) == (name, value)
    assert sym.defined


@pytest.mark.parametrize("text", ["", "=1", "FO-O", "A B"])
def test_parse_symbol_argument_rejects_bad_names(text):
    with pytest.raises(ValueError):
        parse_symbol_argument(text)
