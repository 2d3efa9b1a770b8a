"""
If-State Machine

A transition function alters the #if processing state in a particular
way. The table is indexed by the current state and the type of the
current line.

Nesting is handled by keeping a stack of frames; some transition
functions increase or decrease the depth. They also maintain the ignore
flag on the stack. In some cases they have to alter the directive:

When a group starts off with a known-false #if/#elif sequence (which is
deleted) followed by an #elif we don't understand and must keep, the
latter is edited into an #if to keep the nesting correct.

When we find a true #elif in a group, the following block will always be
kept and the rest of the sequence after the next #elif or #else will be
discarded. The #elif is edited into an #else and the following directive
into an #endif.

Dodgy directives can be handled correctly only if they cause no change
from printing to dropping (or vice versa). If the directive is the first
of a group we can either fail, or pass it through unchanged instead of
evaluating it; the latter needs permit_obfuscated.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List

from pyunifdef.context import CommentState, IfState, RunContext, StateFrame
from pyunifdef.errors import DirectiveError, LexicalError, ResolverError, StructuralError
from pyunifdef.linetype import LineType
from pyunifdef.options import Settings
from pyunifdef.output import OutputWriter

logger = logging.getLogger(__name__)

# Columns follow LineType order:
#   TRUEI FALSEI IF TRUE FALSE ELIF ELTRUE ELFALSE ELSE ENDIF
#   the same ten again for dodgy lines
#   PLAIN EOF ERROR
TRANSITIONS: Dict[IfState, tuple] = {
    IfState.OUTSIDE: (
        "Itrue", "Ifalse", "Fpass", "Ftrue", "Ffalse", "Eelif", "Eelif", "Eelif", "Eelse", "Eendif",
        "Oiffy", "Oiffy", "Fpass", "Oif", "Oif", "Eelif", "Eelif", "Eelif", "Eelse", "Eendif",
        "keep", "done", "abort",
    ),
    IfState.FALSE_PREFIX: (
        "Idrop", "Idrop", "Fdrop", "Fdrop", "Fdrop", "Mpass", "Strue", "Sfalse", "Selse", "Dendif",
        "Idrop", "Idrop", "Fdrop", "Fdrop", "Fdrop", "Mpass", "Eioccc", "Eioccc", "Eioccc", "Eioccc",
        "drop", "Eeof", "abort",
    ),
    IfState.TRUE_PREFIX: (
        "Itrue", "Ifalse", "Fpass", "Ftrue", "Ffalse", "Dfalse", "Dfalse", "Dfalse", "Delse", "Dendif",
        "Oiffy", "Oiffy", "Fpass", "Oif", "Oif", "Eioccc", "Eioccc", "Eioccc", "Eioccc", "Eioccc",
        "keep", "Eeof", "abort",
    ),
    IfState.PASS_MIDDLE: (
        "Itrue", "Ifalse", "Fpass", "Ftrue", "Ffalse", "Pelif", "Mtrue", "Delif", "Pelse", "Pendif",
        "Oiffy", "Oiffy", "Fpass", "Oif", "Oif", "Pelif", "Oelif", "Oelif", "Pelse", "Pendif",
        "keep", "Eeof", "abort",
    ),
    IfState.FALSE_MIDDLE: (
        "Idrop", "Idrop", "Fdrop", "Fdrop", "Fdrop", "Pelif", "Mtrue", "Delif", "Pelse", "Pendif",
        "Idrop", "Idrop", "Fdrop", "Fdrop", "Fdrop", "Eioccc", "Eioccc", "Eioccc", "Eioccc", "Eioccc",
        "drop", "Eeof", "abort",
    ),
    IfState.TRUE_MIDDLE: (
        "Itrue", "Ifalse", "Fpass", "Ftrue", "Ffalse", "Melif", "Melif", "Melif", "Melse", "Pendif",
        "Oiffy", "Oiffy", "Fpass", "Oif", "Oif", "Eioccc", "Eioccc", "Eioccc", "Eioccc", "Pendif",
        "keep", "Eeof", "abort",
    ),
    IfState.PASS_ELSE: (
        "Itrue", "Ifalse", "Fpass", "Ftrue", "Ffalse", "Eelif", "Eelif", "Eelif", "Eelse", "Pendif",
        "Oiffy", "Oiffy", "Fpass", "Oif", "Oif", "Eelif", "Eelif", "Eelif", "Eelse", "Pendif",
        "keep", "Eeof", "abort",
    ),
    IfState.FALSE_ELSE: (
        "Idrop", "Idrop", "Fdrop", "Fdrop", "Fdrop", "Eelif", "Eelif", "Eelif", "Eelse", "Dendif",
        "Idrop", "Idrop", "Fdrop", "Fdrop", "Fdrop", "Eelif", "Eelif", "Eelif", "Eelse", "Eioccc",
        "drop", "Eeof", "abort",
    ),
    IfState.TRUE_ELSE: (
        "Itrue", "Ifalse", "Fpass", "Ftrue", "Ffalse", "Eelif", "Eelif", "Eelif", "Eelse", "Dendif",
        "Oiffy", "Oiffy", "Fpass", "Oif", "Oif", "Eelif", "Eelif", "Eelif", "Eelse", "Eioccc",
        "keep", "Eeof", "abort",
    ),
    IfState.FALSE_TRAILER: (
        "Idrop", "Idrop", "Fdrop", "Fdrop", "Fdrop", "Dfalse", "Dfalse", "Dfalse", "Delse", "Dendif",
        "Idrop", "Idrop", "Fdrop", "Fdrop", "Fdrop", "Dfalse", "Dfalse", "Dfalse", "Delse", "Eioccc",
        "drop", "Eeof", "abort",
    ),
}


class IfStateMachine:
    def __init__(self, ctx: RunContext, settings: Settings, writer: OutputWriter):
        self.ctx = ctx
        self.settings = settings
        self.writer = writer
        self._table: Dict[IfState, List[Callable[[], None]]] = {
            state: [getattr(self, name) for name in row] for state, row in TRANSITIONS.items()
        }

    def step(self, linetype: LineType) -> None:
        """Run the transition for the current state and ``linetype``."""
        ctx = self.ctx
        self._table[ctx.top.state][linetype]()
        self.writer.debug(
            f"process line {ctx.linenum} {linetype.label} -> {ctx.top.state.name} depth {ctx.depth}"
        )

    def _error(self, message: str, cls=StructuralError) -> ResolverError:
        ctx = self.ctx
        if ctx.depth:
            message = f"{message} (#if line {ctx.top.start_line} depth {ctx.depth})"
        return cls(message, ctx.linenum)

    # report an error
    def Eelif(self) -> None:
        raise self._error("Inappropriate #elif")

    def Eelse(self) -> None:
        raise self._error("Inappropriate #else")

    def Eendif(self) -> None:
        raise self._error("Inappropriate #endif")

    def Eeof(self) -> None:
        raise self._error("Premature EOF")

    def Eioccc(self) -> None:
        raise self._error("Obfuscated preprocessor control line", DirectiveError)

    # plain line handling
    def keep(self) -> None:
        self.writer.flush_line(True)

    def drop(self) -> None:
        self.writer.flush_line(False)

    # output lacks group's start line
    def Strue(self) -> None:
        self.drop()
        self.ignore_off()
        self.set_state(IfState.TRUE_PREFIX)

    def Sfalse(self) -> None:
        self.drop()
        self.ignore_off()
        self.set_state(IfState.FALSE_PREFIX)

    def Selse(self) -> None:
        self.drop()
        self.set_state(IfState.TRUE_ELSE)

    # print/pass this block
    def Pelif(self) -> None:
        self.keep()
        self.ignore_off()
        self.set_state(IfState.PASS_MIDDLE)

    def Pelse(self) -> None:
        self.keep()
        self.set_state(IfState.PASS_ELSE)

    def Pendif(self) -> None:
        self.keep()
        self.unnest()

    # discard this block
    def Dfalse(self) -> None:
        self.drop()
        self.ignore_off()
        self.set_state(IfState.FALSE_TRAILER)

    def Delif(self) -> None:
        self.drop()
        self.ignore_off()
        self.set_state(IfState.FALSE_MIDDLE)

    def Delse(self) -> None:
        self.drop()
        self.set_state(IfState.FALSE_ELSE)

    def Dendif(self) -> None:
        self.drop()
        self.unnest()

    # first line of group
    def Fdrop(self) -> None:
        self.nest()
        self.Dfalse()

    def Fpass(self) -> None:
        self.nest()
        self.Pelif()

    def Ftrue(self) -> None:
        self.nest()
        self.Strue()

    def Ffalse(self) -> None:
        self.nest()
        self.Sfalse()

    # variable pedantry for obfuscated lines
    def Oiffy(self) -> None:
        if not self.settings.permit_obfuscated:
            self.Eioccc()
        self.Fpass()
        self.ignore_on()

    def Oif(self) -> None:
        if not self.settings.permit_obfuscated:
            self.Eioccc()
        self.Fpass()

    def Oelif(self) -> None:
        if not self.settings.permit_obfuscated:
            self.Eioccc()
        self.Pelif()

    # ignore comments in this block
    def Idrop(self) -> None:
        self.Fdrop()
        self.ignore_on()

    def Itrue(self) -> None:
        self.Ftrue()
        self.ignore_on()

    def Ifalse(self) -> None:
        self.Ffalse()
        self.ignore_on()

    # modify this line
    def Mpass(self) -> None:
        ctx = self.ctx
        kp = ctx.keyword_pos
        ctx.line = ctx.line[:kp] + "if  " + ctx.line[kp + 4:]
        ctx.altered = True
        self.Pelif()

    def Mtrue(self) -> None:
        self.keyword_edit("else")
        self.set_state(IfState.TRUE_MIDDLE)

    def Melif(self) -> None:
        self.keyword_edit("endif")
        self.set_state(IfState.FALSE_TRAILER)

    def Melse(self) -> None:
        self.keyword_edit("endif")
        self.set_state(IfState.FALSE_ELSE)

    def done(self) -> None:
        """The last transition, run for the EOF line type."""
        ctx = self.ctx
        if ctx.comment in (CommentState.CHAR_LITERAL, CommentState.STRING_LITERAL):
            kind = "char" if ctx.comment is CommentState.CHAR_LITERAL else "string"
            raise LexicalError(f"Unterminated {kind} literal", ctx.linenum)
        if ctx.comment not in (CommentState.NO_COMMENT, CommentState.CXX_COMMENT):
            raise StructuralError("EOF in comment", ctx.linenum)
        self.writer.close()

    def abort(self) -> None:
        raise ResolverError("unevaluable #if reached the state machine", self.ctx.linenum)

    # state machine utility functions
    def ignore_off(self) -> None:
        self.ctx.stack[-1].ignored = self.ctx.stack[-2].ignored

    def ignore_on(self) -> None:
        self.ctx.stack[-1].ignored = True

    def keyword_edit(self, replacement: str) -> None:
        ctx = self.ctx
        ctx.line = ctx.line[:ctx.keyword_pos] + replacement + ctx.newline
        ctx.altered = True
        self.keep()

    def nest(self) -> None:
        self.ctx.stack.append(StateFrame(IfState.OUTSIDE, False, self.ctx.linenum))

    def unnest(self) -> None:
        if len(self.ctx.stack) < 2:
            raise ResolverError("attempt to leave the outermost state", self.ctx.linenum)
        self.ctx.stack.pop()

    def set_state(self, state: IfState) -> None:
        self.ctx.stack[-1].state = state
