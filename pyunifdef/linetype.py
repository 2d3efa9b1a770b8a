from __future__ import annotations

from enum import IntEnum


class LineType(IntEnum):
    """Types of input lines, as seen by the #if state machine"""
    TRUEI = 0               # a true #if with ignore flag
    FALSEI = 1              # a false #if with ignore flag
    IF = 2                  # an unknown #if
    TRUE = 3                # a true #if
    FALSE = 4               # a false #if
    ELIF = 5                # an unknown #elif
    ELTRUE = 6              # a true #elif
    ELFALSE = 7             # a false #elif
    ELSE = 8                # #else
    ENDIF = 9               # #endif
    # directive is not on one line
    DODGY_TRUEI = 10
    DODGY_FALSEI = 11
    DODGY_IF = 12
    DODGY_TRUE = 13
    DODGY_FALSE = 14
    DODGY_ELIF = 15
    DODGY_ELTRUE = 16
    DODGY_ELFALSE = 17
    DODGY_ELSE = 18
    DODGY_ENDIF = 19
    PLAIN = 20              # ordinary line
    EOF = 21                # end of input
    ERROR = 22              # unevaluable #if

    @property
    def is_dodgy(self) -> bool:
        return LineType.DODGY_TRUEI <= self <= LineType.DODGY_ENDIF

    def as_dodgy(self) -> "LineType":
        if self > LineType.ENDIF:
            return self
        return LineType(self + LineType.DODGY_TRUEI)

    def as_elif(self) -> "LineType":
        """Map an #if outcome (IF, TRUE, FALSE) onto the #elif family."""
        return LineType(self - LineType.IF + LineType.ELIF)

    @property
    def label(self) -> str:
        return self.name.replace("_", " ")
