"""AST node types for chill-script."""

from .base import Expression, SourceSpan
from .binary import BinaryExpression
from .literals import (
    BooleanLiteral,
    ListLiteral,
    LiteralExpression,
    NullLiteral,
    NumberLiteral,
    StringLiteral,
)
from .parenthesized import ParenthesizedExpression
from .references import IdentifierExpression, IndexExpression, PropertyAccessExpression
from .unary import UnaryExpression

__all__ = [
    "BinaryExpression",
    "BooleanLiteral",
    "Expression",
    "IdentifierExpression",
    "IndexExpression",
    "ListLiteral",
    "LiteralExpression",
    "NullLiteral",
    "NumberLiteral",
    "ParenthesizedExpression",
    "PropertyAccessExpression",
    "SourceSpan",
    "StringLiteral",
    "UnaryExpression",
]
