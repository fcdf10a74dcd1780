"""Literal nodes: numbers, strings, booleans, null and lists."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any

from chillscript.core.errors import ErrorType
from chillscript.script.tokenizer import Token, TokenType
from chillscript.script.values import format_value

from .base import Expression

if TYPE_CHECKING:
    from chillscript.script.parser import ChillScriptParser
    from chillscript.script.runtime import ChillScriptRuntime


class LiteralExpression(Expression):
    """A single-token literal. Subclasses decide how the token becomes a value."""

    def __init__(self, token: Token):
        super().__init__()
        self.token = token
        self.set_start(token)
        self.set_end(token)

    @property
    def value(self) -> Any:
        raise NotImplementedError

    def detail(self) -> str:
        return self.token.value

    def evaluate(self, runtime: ChillScriptRuntime) -> Any:
        return self.value

    def __str__(self) -> str:
        return format_value(self.value)


class NumberLiteral(LiteralExpression):
    """A decimal number, kept exactly as written (``1.50`` keeps its scale)."""

    def __init__(self, token: Token):
        super().__init__(token)
        self._value = Decimal(token.value)

    @property
    def value(self) -> Decimal:
        return self._value


class StringLiteral(LiteralExpression):
    @property
    def value(self) -> str:
        return self.token.value

    def detail(self) -> str:
        return format_value(self.token.value)


class BooleanLiteral(LiteralExpression):
    @property
    def value(self) -> bool:
        return self.token.value == "true"


class NullLiteral(LiteralExpression):
    @property
    def value(self) -> None:
        return None


class ListLiteral(Expression):
    """``[item, item, ...]``; evaluates every item in order into a new list."""

    def __init__(self, open_bracket: Token, items: list[Expression], close_bracket: Token):
        super().__init__()
        self.items = [self.add_child(item) for item in items]
        self.set_start(open_bracket)
        self.set_end(close_bracket)

    def evaluate(self, runtime: ChillScriptRuntime) -> list[Any]:
        return [item.evaluate(runtime) for item in self.items]

    def __str__(self) -> str:
        return "[" + ", ".join(str(item) for item in self.items) + "]"

    @classmethod
    def parse(cls, parser: ChillScriptParser) -> Expression:
        """list_literal -> "[" (expression ("," expression)*)? "]" """
        open_bracket = parser.require(TokenType.LBRACKET, ErrorType.UNEXPECTED_TOKEN)
        items: list[Expression] = []
        if not parser.match(TokenType.RBRACKET):
            items.append(parser.parse("expression"))
            while parser.match_and_consume(TokenType.COMMA):
                items.append(parser.parse("expression"))
        close_bracket = parser.require(TokenType.RBRACKET, ErrorType.UNTERMINATED_LIST)
        return cls(open_bracket, items, close_bracket)


_KEYWORD_LITERALS: dict[str, type[LiteralExpression]] = {
    "true": BooleanLiteral,
    "false": BooleanLiteral,
    "null": NullLiteral,
}


def literal_for(token: Token) -> LiteralExpression | None:
    """The literal node a token starts, or None if it starts no literal."""
    if token.type == TokenType.NUMBER:
        return NumberLiteral(token)
    if token.type == TokenType.STRING:
        return StringLiteral(token)
    if token.type == TokenType.KEYWORD and token.value in _KEYWORD_LITERALS:
        return _KEYWORD_LITERALS[token.value](token)
    return None
