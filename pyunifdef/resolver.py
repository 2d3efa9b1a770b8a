"""
Conditional-compilation resolver

Drives the classifier and the #if state machine over one input text:

    resolve(source, symbols=[Symbol("FOO", "1")]) -> ResolveResult(text, altered)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from pyunifdef.classifier import LineClassifier
from pyunifdef.context import RunContext
from pyunifdef.defines import read_define_script
from pyunifdef.linetype import LineType
from pyunifdef.options import Settings
from pyunifdef.output import OutputWriter
from pyunifdef.scanner import Scanner
from pyunifdef.states import IfStateMachine
from pyunifdef.symbols import Symbol, SymbolTable

logger = logging.getLogger(__name__)


@dataclass
class ResolveResult:
    text: str
    altered: bool = False


class Resolver:
    """Resolves the conditional directives of one source text per call.

    The symbol table is built once per call from ``symbols`` plus the
    define script and is not changed while lines are processed, so one
    Resolver can be used for any number of inputs.
    """

    def __init__(self, settings: Optional[Settings] = None, symbols: Optional[Iterable[Symbol]] = None):
        self.settings = settings or Settings()
        self.symbols = list(symbols or [])

    def build_symbols(self, define_script: Optional[str] = None,
                      symbols: Optional[Iterable[Symbol]] = None) -> SymbolTable:
        table = SymbolTable(self.symbols + list(symbols or []))
        if define_script:
            read_define_script(define_script, table, self.settings)
        table.resolve_indirect()
        return table

    def resolve(self, source: str, define_script: Optional[str] = None,
                symbols: Optional[Iterable[Symbol]] = None) -> ResolveResult:
        """Resolve ``source``; raises a ResolverError subclass on failure."""
        self.settings.validate()
        table = self.build_symbols(define_script, symbols)

        ctx = RunContext(source=source)
        scanner = Scanner(ctx, self.settings)
        writer = OutputWriter(ctx, self.settings)
        classifier = LineClassifier(ctx, scanner, table, self.settings, writer)
        machine = IfStateMachine(ctx, self.settings, writer)

        linetype = LineType.PLAIN
        while linetype is not LineType.EOF:
            linetype = classifier.classify()
            machine.step(linetype)

        logger.debug("resolved %d lines, altered=%s", ctx.linenum - 1, ctx.altered)
        return ResolveResult(text=ctx.output(), altered=ctx.altered)


def resolve(
    source: str,
    *,
    settings: Optional[Settings] = None,
    symbols: Optional[Iterable[Symbol]] = None,
    define_script: Optional[str] = None,
) -> ResolveResult:
    return Resolver(settings, symbols).resolve(source, define_script)
