"""
Resolver errors

Every failure aborts the current resolution run. The subclasses only
exist so callers can tell the categories apart.
"""

from __future__ import annotations

from typing import Optional


class ResolverError(Exception):
    """Resolver error with the physical line it was detected on"""
    def __init__(self, message: str, line: Optional[int] = None):
        self.message = message
        self.line = line
        if line is None:
            super().__init__(message)
        else:
            super().__init__(f"{message} at line {line}")


class ConfigurationError(ResolverError):
    """Mutually exclusive settings were selected together"""


class StructuralError(ResolverError):
    """Unbalanced #if groups or input ending inside a comment"""


class LexicalError(ResolverError):
    """Unterminated char or string literal"""


class DirectiveError(ResolverError):
    """Malformed or obfuscated directive"""


class ExpressionError(ResolverError):
    """#if expression that cannot be evaluated"""
