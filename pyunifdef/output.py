"""
Output Writer

Applies keep/drop decisions to the current line, compresses blank runs,
inserts #line markers and produces the symbol listing.
"""

from __future__ import annotations

import logging

from pyunifdef.context import NEWLINE_UNIX, RunContext
from pyunifdef.options import Settings
from pyunifdef.scanner import is_blank

logger = logging.getLogger(__name__)


class OutputWriter:
    def __init__(self, ctx: RunContext, settings: Settings):
        self.ctx = ctx
        self.settings = settings

    @property
    def newline(self) -> str:
        return self.ctx.newline or NEWLINE_UNIX

    def flush_line(self, keep: bool) -> None:
        """Write the current line or not, according to the settings."""
        ctx = self.ctx
        settings = self.settings
        if settings.listing:
            return
        if keep != settings.complement:
            blank = is_blank(ctx.line)
            if blank and settings.compress_blanks and ctx.blankcount != ctx.blankmax:
                ctx.delcount += 1
                ctx.blankcount += 1
            else:
                if settings.line_markers and ctx.delcount > 0:
                    self.hash_line()
                ctx.emit(ctx.line)
                ctx.delcount = 0
                ctx.blankcount = ctx.blankcount + 1 if blank else 0
                ctx.blankmax = ctx.blankcount
        else:
            if settings.blank_placeholders:
                ctx.emit(self.newline)
            ctx.altered = True
            ctx.delcount += 1
            ctx.blankcount = 0

    def hash_line(self) -> None:
        """#line marker for the current line, with the file name when known."""
        ctx = self.ctx
        if self.settings.line_file:
            ctx.emit(f'#line {ctx.linenum} "{self.settings.line_file}"{self.newline}')
        else:
            ctx.emit(f"#line {ctx.linenum}{self.newline}")

    def list_symbol(self, name: str) -> None:
        ctx = self.ctx
        if self.settings.symbol_depth and ctx.firstsym:
            ctx.emit(("" if ctx.zerosyms else self.newline) + str(ctx.depth))
        ctx.firstsym = ctx.zerosyms = False
        if self.settings.symbol_depth:
            ctx.emit(" " + name)
        else:
            ctx.emit(name + self.newline)

    def debug(self, message: str) -> None:
        logger.debug(message)
        if self.settings.debug:
            self.ctx.emit(f"/*{message}*/")

    def close(self) -> None:
        """Tidy up after the symbol listing."""
        if self.settings.symbol_depth and not self.ctx.zerosyms:
            self.ctx.emit(self.newline)
