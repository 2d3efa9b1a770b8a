"""
Run Context

All mutable state of one resolution run. A fresh context is built for
every input text and is never shared.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

NEWLINE_UNIX = "\n"
NEWLINE_CRLF = "\r\n"


class CommentState(Enum):
    """State of the comment and literal scanner"""
    NO_COMMENT = 0
    C_COMMENT = 1               # /* ... */
    CXX_COMMENT = 2             # // to end of line
    STARTING_COMMENT = 3        # just after slash-backslash-newline
    FINISHING_COMMENT = 4       # star-backslash-newline in a C comment
    CHAR_LITERAL = 5            # inside ''
    STRING_LITERAL = 6          # inside ""
    RAW_STRING_LITERAL = 7      # inside R"( )"


class LineState(Enum):
    """Whether the current physical line can still be a directive"""
    START = 0       # only space and comments so far
    HASH = 1        # only space, comments and a hash
    DIRTY = 2       # can't be a preprocessor line


class IfState(Enum):
    """State of one #if group"""
    OUTSIDE = 0
    FALSE_PREFIX = 1        # false #if followed by false #elifs
    TRUE_PREFIX = 2         # first non-false #(el)if is true
    PASS_MIDDLE = 3         # first non-false #(el)if is unknown
    FALSE_MIDDLE = 4        # a false #elif after a pass state
    TRUE_MIDDLE = 5         # a true #elif after a pass state
    PASS_ELSE = 6           # an else after a pass state
    FALSE_ELSE = 7          # an else after a true state
    TRUE_ELSE = 8           # an else after only false states
    FALSE_TRAILER = 9       # #elifs after a true are false


@dataclass
class StateFrame:
    state: IfState = IfState.OUTSIDE
    ignored: bool = False
    start_line: int = 0


@dataclass
class RunContext:
    source: str
    line: str = ""
    pos: int = 0
    linenum: int = 0
    keyword_pos: int = 0
    newline: Optional[str] = None
    comment: CommentState = CommentState.NO_COMMENT
    linestate: LineState = LineState.START
    stack: List[StateFrame] = field(default_factory=lambda: [StateFrame()])
    chunks: List[str] = field(default_factory=list)
    altered: bool = False
    # When compressing blank lines, act as if the input is preceded by
    # a large number of blank lines.
    delcount: int = 0
    blankcount: int = sys.maxsize
    blankmax: int = sys.maxsize
    constexpr: bool = False
    zerosyms: bool = True
    firstsym: bool = False

    @property
    def top(self) -> StateFrame:
        return self.stack[-1]

    @property
    def depth(self) -> int:
        return len(self.stack) - 1

    @property
    def ignoring(self) -> bool:
        return self.stack[-1].ignored

    def emit(self, text: str) -> None:
        self.chunks.append(text)

    def output(self) -> str:
        return "".join(self.chunks)
