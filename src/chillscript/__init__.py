"""
chill-script - a small embedded scripting language.

Parses expressions into a positioned AST and evaluates them with exact
decimal arithmetic against a host-supplied runtime.
"""

from __future__ import annotations

from ._version import __version__
from .core.errors import (
    ChillScriptError,
    ErrorType,
    EvaluationError,
    ParseError,
    UnresolvedIdentifierError,
    UnsupportedOperationError,
)
from .script import ChillScriptRuntime, evaluate, evaluate_source, parse

__all__ = [
    "ChillScriptError",
    "ChillScriptRuntime",
    "ErrorType",
    "EvaluationError",
    "ParseError",
    "UnresolvedIdentifierError",
    "UnsupportedOperationError",
    "__version__",
    "evaluate",
    "evaluate_source",
    "parse",
]
