"""
Error types for chill-script tokenizing, parsing and evaluation.

Parse-time failures are tagged with an ``ErrorType`` and always carry a
source position. Evaluation-time failures carry the expression node that
raised them so callers can point at its span.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from chillscript.script.expressions.base import Expression
    from chillscript.script.tokenizer import Token


class ErrorType(Enum):
    """Parser failure kinds. The value is the display message."""

    UNEXPECTED_TOKEN = "Unexpected Token"
    UNTERMINATED_LIST = "Expected close bracket for list"
    UNTERMINATED_PARENTHESIS = "Expected close paren"
    UNTERMINATED_INDEX = "Expected close bracket for index"
    EXPECTED_PROPERTY_NAME = "Expected property name"
    UNTERMINATED_STRING = "Unterminated string literal"
    UNEXPECTED_CHARACTER = "Unexpected character"
    NESTING_TOO_DEEP = "Expression nested too deeply"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SourcePosition:
    """A point in the source text. Line and column are 1-indexed."""

    offset: int
    line: int
    column: int

    @classmethod
    def of(cls, source: str, offset: int) -> SourcePosition:
        """Compute line/column for an offset into ``source``."""
        line = source.count("\n", 0, offset) + 1
        line_start = source.rfind("\n", 0, offset) + 1
        return cls(offset=offset, line=line, column=offset - line_start + 1)


@dataclass
class ErrorContext:
    """
    Context information for an error, including source location.

    Attributes:
        source_name: Name of the script (file name or ``<script>``)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        snippet: Optional source line(s) around the error
        width: Number of characters to underline
    """

    source_name: str
    line: int
    column: int
    snippet: str | None = None
    width: int = 1

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "<script>:1:5" followed by the snippet
        """
        location = f"{self.source_name}:{self.line}:{self.column}"
        if self.snippet:
            return f"{location}\n{self._format_snippet()}"
        return location

    def _format_snippet(self) -> str:
        """Format the snippet with line numbers and a caret marker."""
        if not self.snippet:
            return ""

        formatted = []
        start_line = max(1, self.line - self.snippet.count("\n"))
        for i, text in enumerate(self.snippet.split("\n")):
            line_num = start_line + i
            prefix = f"{line_num:4d} | "
            formatted.append(prefix + text)
            if line_num == self.line:
                marker_pos = len(prefix) + self.column - 1
                formatted.append(" " * marker_pos + "^" * max(1, self.width))

        return "\n".join(formatted)

    @classmethod
    def from_source(
        cls,
        source: str,
        position: SourcePosition,
        source_name: str = "<script>",
        width: int = 1,
    ) -> ErrorContext:
        """Build a context whose snippet is the line holding ``position``."""
        lines = source.split("\n")
        snippet = lines[position.line - 1] if 0 < position.line <= len(lines) else None
        return cls(
            source_name=source_name,
            line=position.line,
            column=position.column,
            snippet=snippet,
            width=width,
        )


class ChillScriptError(Exception):
    """Base exception for all chill-script errors."""

    def __init__(self, message: str, context: ErrorContext | None = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message

    def with_context(self, context: ErrorContext) -> ChillScriptError:
        """Attach source context after the fact and refresh the message."""
        self.context = context
        self.args = (self._format_message(),)
        return self


class ConfigError(ChillScriptError):
    """Raised when script settings cannot be loaded or validated."""


class GrammarError(ChillScriptError):
    """
    Raised when the grammar itself is misconfigured.

    Examples:
    - Dispatching to a rule name that was never registered
    - Registering a rule under an empty name
    """


class ParseError(ChillScriptError):
    """
    Raised when source text cannot satisfy the grammar.

    ``kind`` is the machine-comparable failure; ``position`` is where it
    happened; ``token`` is the offending token when one exists (tokenizer
    failures have none).
    """

    def __init__(
        self,
        kind: ErrorType,
        position: SourcePosition,
        token: Token | None = None,
        detail: str | None = None,
    ):
        self.kind = kind
        self.position = position
        self.token = token
        self.detail = detail
        super().__init__(self._describe())

    def _describe(self) -> str:
        message = str(self.kind)
        if self.detail:
            message += f": {self.detail}"
        elif self.token is not None:
            found = self.token.value if self.token.value else self.token.type.name
            message += f": found {found!r}"
        return f"{message} at line {self.position.line}, column {self.position.column}"


class EvaluationError(ChillScriptError):
    """
    Raised when a parsed expression cannot be evaluated.

    Examples:
    - Division by zero
    - Property or index missing on a value
    """

    def __init__(self, message: str, expression: Expression | None = None):
        self.expression = expression
        super().__init__(message)


class UnsupportedOperationError(EvaluationError):
    """Raised when an operator is applied to a value type it does not handle."""

    def __init__(self, operator: str, value: Any = None, expression: Expression | None = None):
        self.operator = operator
        self.value = value
        super().__init__(
            f"{operator} not implemented for type {value_type_name(value)}", expression
        )


class UnresolvedIdentifierError(EvaluationError):
    """Raised when an identifier is neither bound nor imported."""

    def __init__(self, name: str, expression: Expression | None = None):
        self.name = name
        super().__init__(f"Unresolved identifier: {name}", expression)


def value_type_name(value: Any) -> str:
    """Script-facing name of a runtime value's type."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, Decimal):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "list"
    if isinstance(value, dict):
        return "map"
    return type(value).__name__


def make_parse_error(
    kind: ErrorType,
    token: Token,
    source: str | None = None,
    source_name: str = "<script>",
    detail: str | None = None,
) -> ParseError:
    """
    Helper to create a ParseError positioned at ``token``.

    Args:
        kind: Failure kind
        token: Offending (or expected-position) token
        source: Optional full source text, used to build a snippet
        source_name: Script name for the location prefix
        detail: Optional text replacing the "found ..." suffix

    Returns:
        ParseError with context attached when source is given
    """
    position = SourcePosition(offset=token.offset, line=token.line, column=token.column)
    error = ParseError(kind, position, token=token, detail=detail)
    if source is not None:
        error.with_context(
            ErrorContext.from_source(source, position, source_name, width=max(1, token.length))
        )
    return error
