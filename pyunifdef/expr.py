"""
Expression Evaluator

Precedence-climbing evaluation of #if/#elif expressions over three truth
values. A sub-expression that refers to a symbol missing from the table
is UNKNOWN, and UNKNOWN spreads through every operator except where
non-strict logic lets || and && short-circuit on a known operand.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional, Tuple

from pyunifdef.context import RunContext
from pyunifdef.errors import ExpressionError
from pyunifdef.options import Settings
from pyunifdef.scanner import Scanner, ends_symbol, is_digit, match_symbol
from pyunifdef.symbols import Symbol

logger = logging.getLogger(__name__)

SymbolFinder = Callable[[str, int], Tuple[Optional[Symbol], int]]

_INT_BITS = 64
_INT_MASK = (1 << _INT_BITS) - 1
_INT_SIGN = 1 << (_INT_BITS - 1)


class Truth(Enum):
    FALSE = 0
    TRUE = 1
    UNKNOWN = 2


Operand = Tuple[Truth, int]


def _wrap(value: int) -> int:
    value &= _INT_MASK
    return value - (1 << _INT_BITS) if value & _INT_SIGN else value


def _known(value: int) -> Operand:
    value = _wrap(value)
    return (Truth.TRUE if value else Truth.FALSE), value


def parse_int(text: str) -> Optional[int]:
    """Value of a symbol definition if it is an optionally signed decimal integer."""
    body = text[1:] if text[:1] in ("-", "+") else text
    if not body or not all(is_digit(ch) for ch in body):
        return None
    value = int(body)
    return -value if text[0] == "-" else value


def _c_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def _c_mod(a: int, b: int) -> int:
    return a - b * _c_div(a, b)


def _shift_count(b: int) -> int:
    if not 0 <= b < _INT_BITS:
        raise ExpressionError(f"shift count {b} out of range")
    return b


class ExpressionEvaluator:
    """Evaluates the expression on a #if or #elif line.

    Each precedence level is a tuple of ``(operator, method, stop)``
    entries, lowest precedence first. An operator is not recognised when
    the next character is one of its stop characters, since that would
    make it a different operator.
    """

    LEVELS = (
        (("||", "_op_or", ""),),
        (("&&", "_op_and", ""),),
        (("|", "_op_bor", "|"),),
        (("^", "_op_bxor", ""),),
        (("&", "_op_band", "&"),),
        (("==", "_op_eq", ""), ("!=", "_op_ne", "")),
        (("<=", "_op_le", ""), (">=", "_op_ge", ""), ("<", "_op_lt", "<="), (">", "_op_gt", ">=")),
        (("<<", "_op_lsh", ""), (">>", "_op_rsh", "")),
        (("+", "_op_add", ""), ("-", "_op_sub", "")),
        (("*", "_op_mul", ""), ("/", "_op_div", ""), ("%", "_op_mod", "")),
    )

    def __init__(self, ctx: RunContext, scanner: Scanner, settings: Settings, find_symbol: SymbolFinder):
        self.ctx = ctx
        self.scanner = scanner
        self.settings = settings
        self.find_symbol = find_symbol

    def evaluate(self, cp: int) -> Tuple[Truth, int, int]:
        """Evaluate the expression starting at ``cp`` on the current line.

        Returns the truth value, the integer value and the position after the
        expression. A purely constant expression counts as UNKNOWN when the
        settings ask for constant expressions to be left alone. Raises
        ExpressionError when the expression cannot be parsed.
        """
        self.ctx.constexpr = self.settings.force_constant_unresolved
        truth, value, cp = self._eval_level(0, cp)
        logger.debug("eval = %d (%s)", value, truth.name)
        if self.ctx.constexpr:
            truth = Truth.UNKNOWN
        return truth, value, cp

    def _inner(self, level: int, cp: int) -> Tuple[Truth, int, int]:
        if level + 1 < len(self.LEVELS):
            return self._eval_level(level + 1, cp)
        return self._eval_unary(level + 1, cp)

    def _match_operator(self, level: int, cp: int) -> Optional[Tuple[str, str]]:
        line = self.ctx.line
        for op, method, stop in self.LEVELS[level]:
            if not line.startswith(op, cp):
                continue
            nxt = line[cp + len(op):cp + len(op) + 1]
            if stop and nxt and nxt in stop:
                continue
            return op, method
        return None

    def _eval_level(self, level: int, cp: int) -> Tuple[Truth, int, int]:
        lt, a, cp = self._inner(level, cp)
        while True:
            cp = self.scanner.skip_comment(cp)
            found = self._match_operator(level, cp)
            if found is None:
                break
            op, method = found
            logger.debug("eval%d %s", level, op)
            cp += len(op)
            rt, b, cp = self._inner(level, cp)
            lt, a = getattr(self, method)(lt, a, rt, b)
        return lt, a, cp

    def _eval_unary(self, level: int, cp: int) -> Tuple[Truth, int, int]:
        """Innermost parts of expressions: !e ~e -e (e) number defined(sym) sym.

        The last two clear the constant-expression flag.
        """
        scanner = self.scanner
        line = self.ctx.line
        cp = scanner.skip_comment(cp)
        ch = scanner.char(cp)

        if ch in ("!", "~", "-"):
            logger.debug("eval%d %s", level, ch)
            lt, value, cp = self._eval_unary(level, cp + 1)
            if lt is Truth.UNKNOWN:
                return lt, value, cp
            if ch == "!":
                return _known(0 if value else 1) + (cp,)
            if ch == "~":
                return _known(~value) + (cp,)
            return _known(-value) + (cp,)

        if ch == "(":
            logger.debug("eval%d (", level)
            lt, value, cp = self._eval_level(0, cp + 1)
            cp = scanner.skip_comment(cp)
            if scanner.char(cp) != ")":
                raise ExpressionError("missing ')' in expression", self.ctx.linenum)
            return lt, value, cp + 1

        if is_digit(ch):
            logger.debug("eval%d number", level)
            end = cp
            while is_digit(scanner.char(end)):
                end += 1
            return _known(int(line[cp:end])) + (end,)

        end = match_symbol("defined", line, cp)
        if end >= 0:
            cp = scanner.skip_comment(end)
            paren = scanner.char(cp) == "("
            if paren:
                cp = scanner.skip_comment(cp + 1)
            sym, cp = self.find_symbol(line, cp)
            cp = scanner.skip_comment(cp)
            if paren:
                if scanner.char(cp) != ")":
                    raise ExpressionError("defined missing ')'", self.ctx.linenum)
                cp += 1
            self.ctx.constexpr = False
            if sym is None:
                logger.debug("eval%d defined unknown", level)
                return Truth.UNKNOWN, 0, cp
            logger.debug("eval%d defined %s", level, sym.name)
            return _known(1 if sym.defined else 0) + (cp,)

        if not ends_symbol(line, cp):
            logger.debug("eval%d symbol", level)
            sym, cp = self.find_symbol(line, cp)
            self.ctx.constexpr = False
            if sym is None:
                return Truth.UNKNOWN, 0, scanner.skip_args(cp)
            if sym.value is None:
                return Truth.FALSE, 0, scanner.skip_args(cp)
            value = parse_int(sym.value)
            if value is None:
                raise ExpressionError(
                    f"symbol {sym.name} has non-numeric value {sym.value!r}", self.ctx.linenum
                )
            return _known(value) + (scanner.skip_args(cp),)

        logger.debug("eval%d bad expr", level)
        raise ExpressionError("bad expression", self.ctx.linenum)

    # Binary operators. ``a`` is carried through unchanged when the result
    # is unknown.

    @staticmethod
    def _strict(a: int, value: int, at: Truth, bt: Truth) -> Operand:
        if at is Truth.UNKNOWN or bt is Truth.UNKNOWN:
            return Truth.UNKNOWN, a
        return _known(value)

    def _op_or(self, at: Truth, a: int, bt: Truth, b: int) -> Operand:
        if not self.settings.strict_logic and (at is Truth.TRUE or bt is Truth.TRUE):
            return Truth.TRUE, 1
        return self._strict(a, 1 if (a or b) else 0, at, bt)

    def _op_and(self, at: Truth, a: int, bt: Truth, b: int) -> Operand:
        if not self.settings.strict_logic and (at is Truth.FALSE or bt is Truth.FALSE):
            return Truth.FALSE, 0
        return self._strict(a, 1 if (a and b) else 0, at, bt)

    def _op_bor(self, at: Truth, a: int, bt: Truth, b: int) -> Operand:
        return self._strict(a, a | b, at, bt)

    def _op_bxor(self, at: Truth, a: int, bt: Truth, b: int) -> Operand:
        return self._strict(a, a ^ b, at, bt)

    def _op_band(self, at: Truth, a: int, bt: Truth, b: int) -> Operand:
        return self._strict(a, a & b, at, bt)

    def _op_eq(self, at: Truth, a: int, bt: Truth, b: int) -> Operand:
        return self._strict(a, int(a == b), at, bt)

    def _op_ne(self, at: Truth, a: int, bt: Truth, b: int) -> Operand:
        return self._strict(a, int(a != b), at, bt)

    def _op_le(self, at: Truth, a: int, bt: Truth, b: int) -> Operand:
        return self._strict(a, int(a <= b), at, bt)

    def _op_ge(self, at: Truth, a: int, bt: Truth, b: int) -> Operand:
        return self._strict(a, int(a >= b), at, bt)

    def _op_lt(self, at: Truth, a: int, bt: Truth, b: int) -> Operand:
        return self._strict(a, int(a < b), at, bt)

    def _op_gt(self, at: Truth, a: int, bt: Truth, b: int) -> Operand:
        return self._strict(a, int(a > b), at, bt)

    def _op_lsh(self, at: Truth, a: int, bt: Truth, b: int) -> Operand:
        if at is Truth.UNKNOWN or bt is Truth.UNKNOWN:
            return Truth.UNKNOWN, a
        return _known(a << _shift_count(b))

    def _op_rsh(self, at: Truth, a: int, bt: Truth, b: int) -> Operand:
        if at is Truth.UNKNOWN or bt is Truth.UNKNOWN:
            return Truth.UNKNOWN, a
        return _known(a >> _shift_count(b))

    def _op_add(self, at: Truth, a: int, bt: Truth, b: int) -> Operand:
        return self._strict(a, a + b, at, bt)

    def _op_sub(self, at: Truth, a: int, bt: Truth, b: int) -> Operand:
        return self._strict(a, a - b, at, bt)

    def _op_mul(self, at: Truth, a: int, bt: Truth, b: int) -> Operand:
        return self._strict(a, a * b, at, bt)

    def _op_div(self, at: Truth, a: int, bt: Truth, b: int) -> Operand:
        if bt is not Truth.TRUE:
            logger.debug("eval division by zero")
            raise ExpressionError("division by zero or unknown value", self.ctx.linenum)
        return self._strict(a, _c_div(a, b) if at is not Truth.UNKNOWN else 0, at, bt)

    def _op_mod(self, at: Truth, a: int, bt: Truth, b: int) -> Operand:
        if bt is not Truth.TRUE:
            logger.debug("eval modulo by zero")
            raise ExpressionError("modulo by zero or unknown value", self.ctx.linenum)
        return self._strict(a, _c_mod(a, b) if at is not Truth.UNKNOWN else 0, at, bt)
