"""
Lexical Scanner

Walks one physical line at a time, skipping whitespace, comments and
literals while tracking whether the line can still be a preprocessor
directive. Comment and literal state carries over between lines.
"""

from __future__ import annotations

from typing import Optional, Tuple

from pyunifdef.context import CommentState, LineState, RunContext
from pyunifdef.errors import LexicalError
from pyunifdef.options import Settings


def is_symbol_char(ch: str) -> bool:
    return ch == "_" or ("a" <= ch <= "z") or ("A" <= ch <= "Z") or ("0" <= ch <= "9")


def is_digit(ch: str) -> bool:
    return "0" <= ch <= "9" and len(ch) == 1


def is_space_not_newline(ch: str) -> bool:
    return ch in (" ", "\r", "\t")


def is_space_or_newline(ch: str) -> bool:
    return ch in (" ", "\r", "\t", "\n")


def ends_symbol(text: str, pos: int) -> bool:
    return pos >= len(text) or not is_symbol_char(text[pos])


def skip_symbol(text: str, pos: int) -> int:
    """Skip over an identifier."""
    n = len(text)
    while pos < n and is_symbol_char(text[pos]):
        pos += 1
    return pos


def match_symbol(word: str, text: str, pos: int) -> int:
    """Position after ``word`` if it starts ``text`` at ``pos`` as a whole symbol, else -1."""
    if not text.startswith(word, pos):
        return -1
    end = pos + len(word)
    return end if ends_symbol(text, end) else -1


def is_blank(text: str) -> bool:
    return all(is_space_or_newline(ch) for ch in text)


class Scanner:
    """Comment, literal and line-state aware cursor over ``ctx.line``"""

    def __init__(self, ctx: RunContext, settings: Settings):
        self.ctx = ctx
        self.settings = settings

    def char(self, cp: int) -> str:
        return self.ctx.line[cp:cp + 1]

    def read_line(self, text: str) -> bool:
        """Load the next physical line of ``text`` into the context."""
        ctx = self.ctx
        ctx.linenum += 1
        if ctx.pos >= len(text):
            ctx.line = ""
            return False
        end = text.find("\n", ctx.pos)
        end = len(text) if end < 0 else end + 1
        ctx.line = text[ctx.pos:end]
        ctx.pos = end
        return True

    def skip_hash(self, text: str) -> Optional[int]:
        """Read a line and find where its directive keyword would start.

        Returns None at end of input, the position after the hash when the
        line is a directive, or the length of the line otherwise.
        """
        if not self.read_line(text):
            return None
        ctx = self.ctx
        cp = self.skip_comment(0)
        if ctx.linestate is LineState.START and self.char(cp) == "#":
            ctx.linestate = LineState.HASH
            return self.skip_comment(cp + 1)
        if cp == len(ctx.line):
            return cp
        return self.skip_line(cp)

    def skip_line(self, cp: int) -> int:
        """Mark a line dirty and consume the rest of it."""
        line = self.ctx.line
        if cp != len(line):
            self.ctx.linestate = LineState.DIRTY
        while cp != len(line):
            pcp = cp
            cp = self.skip_comment(pcp)
            if pcp == cp:
                cp += 1
        return cp

    def skip_comment(self, cp: int) -> int:
        """Skip comments, literals and whitespace; stop at the next code character.

        In text mode, and inside ignored blocks, only whitespace is skipped.
        """
        ctx = self.ctx
        line = ctx.line
        n = len(line)

        if self.settings.passthrough_text or ctx.ignoring:
            while cp < n and is_space_or_newline(line[cp]):
                if line[cp] == "\n":
                    ctx.linestate = LineState.START
                cp += 1
            return cp

        while cp < n:
            # a continuation never takes us back to the start of a line
            if line.startswith("\\\r\n", cp):
                cp += 3
                continue
            if line.startswith("\\\n", cp):
                cp += 2
                continue
            state = ctx.comment
            ch = line[cp]
            if state is CommentState.NO_COMMENT:
                if line.startswith("/\\\r\n", cp):
                    ctx.comment = CommentState.STARTING_COMMENT
                    cp += 4
                elif line.startswith("/\\\n", cp):
                    ctx.comment = CommentState.STARTING_COMMENT
                    cp += 3
                elif line.startswith("/*", cp):
                    ctx.comment = CommentState.C_COMMENT
                    cp += 2
                elif line.startswith("//", cp):
                    ctx.comment = CommentState.CXX_COMMENT
                    cp += 2
                elif ch == "'":
                    ctx.comment = CommentState.CHAR_LITERAL
                    ctx.linestate = LineState.DIRTY
                    cp += 1
                elif ch == '"':
                    ctx.comment = CommentState.STRING_LITERAL
                    ctx.linestate = LineState.DIRTY
                    cp += 1
                elif line.startswith('R"(', cp):
                    ctx.comment = CommentState.RAW_STRING_LITERAL
                    ctx.linestate = LineState.DIRTY
                    cp += 3
                elif ch == "\n":
                    ctx.linestate = LineState.START
                    cp += 1
                elif is_space_not_newline(ch):
                    cp += 1
                else:
                    return cp
            elif state is CommentState.CXX_COMMENT:
                if ch == "\n":
                    ctx.comment = CommentState.NO_COMMENT
                    ctx.linestate = LineState.START
                cp += 1
            elif state in (CommentState.CHAR_LITERAL, CommentState.STRING_LITERAL):
                quote = "'" if state is CommentState.CHAR_LITERAL else '"'
                if ch == quote:
                    ctx.comment = CommentState.NO_COMMENT
                    cp += 1
                elif ch == "\\":
                    cp += 1 if cp + 1 == n else 2
                elif ch == "\n":
                    raise self.unterminated_literal()
                else:
                    cp += 1
            elif state is CommentState.RAW_STRING_LITERAL:
                if line.startswith(')"', cp):
                    ctx.comment = CommentState.NO_COMMENT
                    cp += 2
                else:
                    cp += 1
            elif state is CommentState.C_COMMENT:
                if line.startswith("*\\\r\n", cp):
                    ctx.comment = CommentState.FINISHING_COMMENT
                    cp += 4
                elif line.startswith("*\\\n", cp):
                    ctx.comment = CommentState.FINISHING_COMMENT
                    cp += 3
                elif line.startswith("*/", cp):
                    ctx.comment = CommentState.NO_COMMENT
                    cp += 2
                else:
                    cp += 1
            elif state is CommentState.STARTING_COMMENT:
                if ch == "*":
                    ctx.comment = CommentState.C_COMMENT
                    cp += 1
                elif ch == "/":
                    ctx.comment = CommentState.CXX_COMMENT
                    cp += 1
                else:
                    ctx.comment = CommentState.NO_COMMENT
                    ctx.linestate = LineState.DIRTY
            elif state is CommentState.FINISHING_COMMENT:
                if ch == "/":
                    ctx.comment = CommentState.NO_COMMENT
                    cp += 1
                else:
                    ctx.comment = CommentState.C_COMMENT
        return cp

    def unterminated_literal(self) -> LexicalError:
        if self.ctx.comment is CommentState.CHAR_LITERAL:
            return LexicalError("Unterminated char literal", self.ctx.linenum)
        return LexicalError("Unterminated string literal", self.ctx.linenum)

    def skip_args(self, cp: int) -> int:
        """Skip a parenthesised macro argument list after a symbol."""
        ocp = cp
        cp = self.skip_comment(cp)
        if self.char(cp) != "(":
            return cp
        n = len(self.ctx.line)
        level = 0
        while True:
            ch = self.char(cp)
            if ch == "(":
                level += 1
            elif ch == ")":
                level -= 1
            cp = self.skip_comment(cp + 1)
            if level == 0 or cp == n:
                break
        # Rewind and let the caller detect the syntax error.
        return cp if level == 0 else ocp

    def get_symbol(self, cp: int) -> Tuple[str, int]:
        """Skip whitespace and take a copy of any following identifier."""
        start = self.skip_comment(cp)
        end = skip_symbol(self.ctx.line, start)
        if end == start:
            return "", cp
        return self.ctx.line[start:end], end
