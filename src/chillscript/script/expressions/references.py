"""
Reference nodes: identifiers and the indirect forms built on them.

``indirect_expression`` chains property reads and index lookups onto a
primary expression: ``order.lines[0].price``.
"""

from __future__ import annotations

from collections.abc import Hashable, Mapping
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from chillscript.core.errors import ErrorType, EvaluationError, value_type_name
from chillscript.script.tokenizer import Token, TokenType
from chillscript.script.values import is_number, to_value

from .base import Expression

if TYPE_CHECKING:
    from chillscript.script.parser import ChillScriptParser
    from chillscript.script.runtime import ChillScriptRuntime


class IdentifierExpression(Expression):
    """A bare name, resolved through the runtime."""

    def __init__(self, token: Token):
        super().__init__()
        self.token = token
        self.set_start(token)
        self.set_end(token)

    @property
    def name(self) -> str:
        return self.token.value

    def detail(self) -> str:
        return self.name

    def __str__(self) -> str:
        return self.name

    def evaluate(self, runtime: ChillScriptRuntime) -> Any:
        try:
            return runtime.lookup(self.name)
        except EvaluationError as e:
            e.expression = self
            raise


class PropertyAccessExpression(Expression):
    """``target.name``: a map key or a host object attribute."""

    def __init__(self, target: Expression, name: Token):
        super().__init__()
        self.target = self.add_child(target)
        self.name = name
        self.set_start(target.start or name)
        self.set_end(name)

    def detail(self) -> str:
        return self.name.value

    def __str__(self) -> str:
        return f"{self.target}.{self.name.value}"

    def evaluate(self, runtime: ChillScriptRuntime) -> Any:
        target = self.target.evaluate(runtime)
        name = self.name.value

        if isinstance(target, Mapping):
            if name in target:
                return to_value(target[name])
            raise EvaluationError(f"No property '{name}' on map", self)

        if target is None or isinstance(target, (bool, str, list, Decimal)):
            raise EvaluationError(
                f"Cannot read property '{name}' of {value_type_name(target)}", self
            )

        if name.startswith("_") or not hasattr(target, name):
            raise EvaluationError(
                f"No property '{name}' on {value_type_name(target)}", self
            )
        return to_value(getattr(target, name))


class IndexExpression(Expression):
    """``target[index]`` on lists, strings and maps."""

    def __init__(self, target: Expression, index: Expression, close_bracket: Token):
        super().__init__()
        self.target = self.add_child(target)
        self.index = self.add_child(index)
        self.set_start(target.start or close_bracket)
        self.set_end(close_bracket)

    def __str__(self) -> str:
        return f"{self.target}[{self.index}]"

    def evaluate(self, runtime: ChillScriptRuntime) -> Any:
        target = self.target.evaluate(runtime)
        index = self.index.evaluate(runtime)

        if isinstance(target, Mapping):
            if isinstance(index, Hashable) and index in target:
                return to_value(target[index])
            raise EvaluationError(f"No key {index!r} in map", self)

        if isinstance(target, (list, str)):
            if not is_number(index) or not index.is_finite() or index != index.to_integral_value():
                raise EvaluationError(
                    f"Index must be a whole number, got {value_type_name(index)}", self
                )
            if not 0 <= index < len(target):
                raise EvaluationError(f"Index {index} out of range", self)
            return to_value(target[int(index)])

        raise EvaluationError(f"Cannot index into {value_type_name(target)}", self)


def parse_indirect(parser: ChillScriptParser) -> Expression:
    """indirect_expression -> primary_expression ("." IDENT | "[" expression "]")*"""
    expression = parser.parse("primary_expression")
    while True:
        if parser.match_and_consume(TokenType.DOT):
            if not parser.match(TokenType.IDENTIFIER):
                raise parser.error(ErrorType.EXPECTED_PROPERTY_NAME)
            expression = PropertyAccessExpression(expression, parser.consume_token())
        elif parser.match_and_consume(TokenType.LBRACKET):
            index = parser.parse("expression")
            close_bracket = parser.require(TokenType.RBRACKET, ErrorType.UNTERMINATED_INDEX)
            expression = IndexExpression(expression, index, close_bracket)
        else:
            return expression
