"""
Define script reader

Folds a text of ``#define NAME [VALUE]`` and ``#undef NAME`` lines into
a symbol table. There is no expression evaluation and no nesting; other
lines that are not directives are skipped.
"""

from __future__ import annotations

import logging

from pyunifdef.context import CommentState, RunContext
from pyunifdef.errors import DirectiveError, StructuralError
from pyunifdef.options import Settings
from pyunifdef.scanner import Scanner, is_space_or_newline, match_symbol
from pyunifdef.symbols import SymbolTable

logger = logging.getLogger(__name__)


def read_define_script(text: str, symbols: SymbolTable, settings: Settings) -> None:
    ctx = RunContext(source=text)
    scanner = Scanner(ctx, settings)
    while _read_directive(ctx, scanner, symbols):
        pass
    if ctx.comment not in (CommentState.NO_COMMENT, CommentState.CXX_COMMENT):
        raise StructuralError("EOF in comment", ctx.linenum)


def _read_directive(ctx: RunContext, scanner: Scanner, symbols: SymbolTable) -> bool:
    """Read and process one #define or #undef directive."""
    cp = scanner.skip_hash(ctx.source)
    if cp is None:
        return False
    line = ctx.line
    if cp == len(line):
        return True

    # strip trailing whitespace, and do a fairly rough check to avoid
    # unsupported multi-line directives
    end = len(line)
    while end > 0 and is_space_or_newline(line[end - 1]):
        end -= 1
    if end > 0 and line[end - 1] == "\\":
        raise DirectiveError("Obfuscated preprocessor control line", ctx.linenum)

    kw = cp
    cp = match_symbol("define", line, kw)
    if cp >= 0:
        name, cp = scanner.get_symbol(cp)
        if not name:
            raise DirectiveError("Missing macro name in #define", ctx.linenum)
        if scanner.char(cp) == "(":
            # function-like macro: only "is it defined" is kept
            value = "1"
        else:
            cp = scanner.skip_comment(cp)
            value = line[cp:end] if cp < end else ""
        logger.debug("#define %s", name)
        symbols.define(name, value)
    else:
        cp = match_symbol("undef", line, kw)
        if cp < 0:
            raise DirectiveError("Unrecognized preprocessor directive", ctx.linenum)
        name, cp = scanner.get_symbol(cp)
        if not name:
            raise DirectiveError("Missing macro name in #undef", ctx.linenum)
        cp = scanner.skip_comment(cp)
        logger.debug("#undef %s", name)
        symbols.undefine(name)

    scanner.skip_line(cp)
    return True
