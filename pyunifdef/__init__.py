"""
pyunifdef - selective C preprocessor

Removes #if/#ifdef/#ifndef/#elif/#else/#endif groups whose outcome is
decided by a given set of defined and undefined symbols, and leaves
everything it cannot decide alone.
"""

__version__ = "0.1.0"
__author__ = "pyunifdef Contributors"
__license__ = "MIT"

from .errors import (
    ConfigurationError,
    DirectiveError,
    ExpressionError,
    LexicalError,
    ResolverError,
    StructuralError,
)
from .options import Settings
from .symbols import Symbol, SymbolTable
from .resolver import ResolveResult, Resolver, resolve
from .project import ProjectResolver, ProjectResult

__all__ = [
    'ConfigurationError',
    'DirectiveError',
    'ExpressionError',
    'LexicalError',
    'ResolverError',
    'StructuralError',
    'Settings',
    'Symbol',
    'SymbolTable',
    'ResolveResult',
    'Resolver',
    'resolve',
    'ProjectResolver',
    'ProjectResult',
]
