"""Grouping and the primary-expression rule."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from chillscript.core.errors import ErrorType
from chillscript.script.tokenizer import Token, TokenType

from .base import Expression
from .literals import literal_for
from .references import IdentifierExpression

if TYPE_CHECKING:
    from chillscript.script.parser import ChillScriptParser
    from chillscript.script.runtime import ChillScriptRuntime


class ParenthesizedExpression(Expression):
    """``( inner )``; kept in the tree so the span covers the parentheses."""

    def __init__(self, open_paren: Token, inner: Expression, close_paren: Token):
        super().__init__()
        self.inner = self.add_child(inner)
        self.set_start(open_paren)
        self.set_end(close_paren)

    def __str__(self) -> str:
        return f"({self.inner})"

    def evaluate(self, runtime: ChillScriptRuntime) -> Any:
        return self.inner.evaluate(runtime)


def parse_primary(parser: ChillScriptParser) -> Expression:
    """primary_expression -> literal | IDENT | "(" expression ")" | list_literal"""
    token = parser.current

    literal = literal_for(token)
    if literal is not None:
        parser.consume_token()
        return literal

    if token.type == TokenType.IDENTIFIER:
        return IdentifierExpression(parser.consume_token())

    if token.type == TokenType.LPAREN:
        open_paren = parser.consume_token()
        inner = parser.parse("expression")
        close_paren = parser.require(TokenType.RPAREN, ErrorType.UNTERMINATED_PARENTHESIS)
        return ParenthesizedExpression(open_paren, inner, close_paren)

    if token.type == TokenType.LBRACKET:
        return parser.parse("list_literal")

    raise parser.error(ErrorType.UNEXPECTED_TOKEN)
