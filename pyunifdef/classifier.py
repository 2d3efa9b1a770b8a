"""
Line Classifier

Turns each physical line into a LineType, evaluating #ifdef, #ifndef,
#if and #elif against the symbol table. A directive is "dodgy" when it
does not fit on one line, e.g. a comment hanging off its right side
continues onto the next line.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from pyunifdef.context import NEWLINE_CRLF, NEWLINE_UNIX, CommentState, LineState, RunContext
from pyunifdef.errors import DirectiveError, ExpressionError
from pyunifdef.expr import ExpressionEvaluator, Truth
from pyunifdef.linetype import LineType
from pyunifdef.options import Settings
from pyunifdef.output import OutputWriter
from pyunifdef.scanner import Scanner, match_symbol, skip_symbol
from pyunifdef.symbols import Symbol, SymbolTable

logger = logging.getLogger(__name__)

_TRUTH_TO_IF = {
    Truth.TRUE: LineType.TRUE,
    Truth.FALSE: LineType.FALSE,
    Truth.UNKNOWN: LineType.IF,
}


class LineClassifier:
    def __init__(
        self,
        ctx: RunContext,
        scanner: Scanner,
        symbols: SymbolTable,
        settings: Settings,
        writer: OutputWriter,
    ):
        self.ctx = ctx
        self.scanner = scanner
        self.symbols = symbols
        self.settings = settings
        self.writer = writer
        self.evaluator = ExpressionEvaluator(ctx, scanner, settings, self.find_symbol)

    def find_symbol(self, text: str, pos: int) -> Tuple[Optional[Symbol], int]:
        """Look up the identifier at ``pos``.

        In symbol-list mode the identifier is listed instead and the lookup
        is always unknown.
        """
        end = skip_symbol(text, pos)
        if end == pos:
            return None, end
        name = text[pos:end]
        if self.settings.listing:
            self.writer.list_symbol(name)
            return None, end
        sym = self.symbols.lookup(name)
        if sym is not None:
            logger.debug("findsym %s", sym)
        return sym, end

    def _if_eval(self, cp: int) -> Tuple[LineType, int]:
        try:
            truth, _, end = self.evaluator.evaluate(cp)
        except ExpressionError as e:
            # An unevaluable expression leaves the directive unresolved.
            self.writer.debug(f"eval error: {e.message}")
            return LineType.IF, cp
        return _TRUTH_TO_IF[truth], end

    def _detect_newline(self) -> None:
        line = self.ctx.line
        if line.endswith("\r\n"):
            self.ctx.newline = NEWLINE_CRLF
        else:
            self.ctx.newline = NEWLINE_UNIX

    def classify(self) -> LineType:
        """Read the next line and determine its type."""
        ctx = self.ctx
        scanner = self.scanner
        was_comment = ctx.comment is not CommentState.NO_COMMENT

        cp = scanner.skip_hash(ctx.source)
        if cp is None:
            return LineType.EOF
        if ctx.newline is None:
            self._detect_newline()
        line = ctx.line
        if cp == len(line):
            return LineType.PLAIN

        ctx.keyword_pos = cp
        ctx.firstsym = True
        end = match_symbol("ifdef", line, cp)
        if end < 0:
            end = match_symbol("ifndef", line, cp)
        if end >= 0:
            cp = scanner.skip_comment(end)
            sym, cp = self.find_symbol(line, cp)
            if sym is None:
                retval = LineType.IF
            else:
                negate = line[ctx.keyword_pos + 2] == "n"
                truth = sym.defined != negate
                if sym.ignored:
                    retval = LineType.TRUEI if truth else LineType.FALSEI
                else:
                    retval = LineType.TRUE if truth else LineType.FALSE
        elif match_symbol("if", line, cp) >= 0:
            retval, cp = self._if_eval(cp + 2)
        elif match_symbol("elif", line, cp) >= 0:
            retval, cp = self._if_eval(cp + 4)
            retval = retval.as_elif()
        elif match_symbol("else", line, cp) >= 0:
            retval, cp = LineType.ELSE, cp + 4
        elif match_symbol("endif", line, cp) >= 0:
            retval, cp = LineType.ENDIF, cp + 5
        else:
            cp = skip_symbol(line, ctx.keyword_pos)
            # no way can we deal with a continuation inside a keyword
            if line.startswith("\\\r\n", cp) or line.startswith("\\\n", cp):
                raise DirectiveError("Obfuscated preprocessor control line", ctx.linenum)
            scanner.skip_line(cp)
            return LineType.PLAIN

        cp = scanner.skip_comment(cp)
        if cp != len(ctx.line):
            # trailing junk: still a directive, but its value is not trusted
            scanner.skip_line(cp)
            if retval in (LineType.TRUE, LineType.FALSE, LineType.TRUEI, LineType.FALSEI):
                retval = LineType.IF
            elif retval in (LineType.ELTRUE, LineType.ELFALSE):
                retval = LineType.ELIF
        # only happens when the last line of the input lacks a newline
        if ctx.linestate is LineState.HASH and not ctx.line.endswith("\n"):
            self.writer.debug("parser insert newline at EOF")
            ctx.line += ctx.newline
            ctx.altered = True
            ctx.linestate = LineState.START
        if was_comment or ctx.linestate is not LineState.START:
            retval = retval.as_dodgy()
            ctx.linestate = LineState.DIRTY
        logger.debug(
            "parser line %d state %s comment %s line",
            ctx.linenum, ctx.comment.name, ctx.linestate.name,
        )
        return retval
