"""
Symbol Table

Ordered set of symbol definitions consulted by #ifdef/#ifndef and by
#if expressions. Lookups are first-match, so a later duplicate of a
name is never reached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterable, Iterator, List, Optional

from pyunifdef.scanner import skip_symbol

logger = logging.getLogger(__name__)


@dataclass
class Symbol:
    """A symbol definition. ``value is None`` means explicitly undefined."""
    name: str
    value: Optional[str] = None
    ignored: bool = False

    @property
    def defined(self) -> bool:
        return self.value is not None

    def __str__(self) -> str:
        if self.value is None:
            return f"{self.name} undef"
        if self.value:
            return f"{self.name}={self.value}"
        return f"{self.name} "


class SymbolTable:
    """First-match ordered symbol table"""

    def __init__(self, symbols: Optional[Iterable[Symbol]] = None):
        # Copies, so indirect resolution never touches the caller's records.
        self._symbols: List[Symbol] = [replace(s) for s in (symbols or [])]

    def __len__(self) -> int:
        return len(self._symbols)

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self._symbols)

    def index(self, name: str) -> int:
        """Index of the first symbol called ``name``, or -1."""
        for i, sym in enumerate(self._symbols):
            if sym.name == name:
                return i
        return -1

    def lookup(self, name: str) -> Optional[Symbol]:
        i = self.index(name)
        return self._symbols[i] if i >= 0 else None

    def define(self, name: str, value: Optional[str], ignored: bool = False) -> Symbol:
        """Overwrite the first entry called ``name`` in place, else append."""
        sym = Symbol(name, value, ignored)
        i = self.index(name)
        if i < 0:
            self._symbols.append(sym)
        else:
            self._symbols[i] = sym
        logger.debug("addsym %s", sym)
        return sym

    def undefine(self, name: str, ignored: bool = False) -> Symbol:
        return self.define(name, None, ignored)

    def resolve_indirect(self) -> int:
        """Follow symbol-to-symbol value chains to a fixed point.

        A symbol whose value is exactly one identifier naming another entry
        takes over that entry's value. Chains ending in an unknown or
        explicitly undefined symbol are left as literal text. Returns the
        number of substitutions made.
        """
        total = 0
        changed = True
        while changed:
            changed = False
            for sym in self._symbols:
                value = sym.value
                if not value or skip_symbol(value, 0) != len(value):
                    continue
                target = self.lookup(value)
                if target is None or target is sym or target.value is None:
                    continue
                if target.value == value:
                    continue
                logger.debug("indirect %s -> %s", sym, target.value)
                sym.value = target.value
                changed = True
                total += 1
        return total


def parse_symbol_argument(text: str, default: str = "1") -> Symbol:
    """Parse ``NAME`` or ``NAME=VALUE`` as given to -D on a command line."""
    name, sep, value = text.partition("=")
    name = name.strip()
    if not name or skip_symbol(name, 0) != len(name):
        raise ValueError(f"invalid symbol name: {text!r}")
    return Symbol(name, value if sep else default)
