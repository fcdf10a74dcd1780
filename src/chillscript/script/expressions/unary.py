"""Unary operators: negation and logical not."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from chillscript.core.errors import EvaluationError, UnsupportedOperationError
from chillscript.script.tokenizer import Token, TokenType
from chillscript.script.values import EXACT_CONTEXT, NEGATIVE_ONE, checked, is_number

from .base import Expression

if TYPE_CHECKING:
    from chillscript.script.parser import ChillScriptParser
    from chillscript.script.runtime import ChillScriptRuntime


class UnaryExpression(Expression):
    """``operator right_hand_side``.

    The parser accepts any operator token here; legality is checked when the
    node is evaluated.
    """

    def __init__(self, operator: Token, right_hand_side: Expression):
        super().__init__()
        self.operator = operator
        self.right_hand_side = self.add_child(right_hand_side)
        self.set_start(operator)
        self.set_end(operator)

    def detail(self) -> str:
        return self.operator.value

    def __str__(self) -> str:
        if self.operator.type == TokenType.KEYWORD:
            return f"{self.operator.value} {self.right_hand_side}"
        return f"{self.operator.value}{self.right_hand_side}"

    def evaluate(self, runtime: ChillScriptRuntime) -> Any:
        value = self.right_hand_side.evaluate(runtime)
        operator = self.operator.value
        if self.operator.type == TokenType.MINUS:
            if is_number(value):
                try:
                    return checked(operator, EXACT_CONTEXT.multiply, value, NEGATIVE_ONE)
                except EvaluationError as e:
                    e.expression = self
                    raise
        elif self.operator.type == TokenType.KEYWORD and operator == "not":
            if isinstance(value, bool):
                return not value
        raise UnsupportedOperationError(operator, value, self)

    @classmethod
    def parse(cls, parser: ChillScriptParser) -> Expression:
        """unary_expression -> filler? ("-" unary_expression | indirect_expression)"""
        parser.skip_filler()
        if parser.match(TokenType.MINUS):
            operator = parser.consume_token()
            right_hand_side = parser.parse("unary_expression")
            unary = cls(operator, right_hand_side)
            unary.set_end(right_hand_side.end)
            return unary
        return parser.parse("indirect_expression")

    @classmethod
    def parse_not(cls, parser: ChillScriptParser) -> Expression:
        """not_expression -> "not" not_expression | comparison_expression"""
        if parser.match("not"):
            operator = parser.consume_token()
            operand = parser.parse("not_expression")
            negation = cls(operator, operand)
            negation.set_end(operand.end)
            return negation
        return parser.parse("comparison_expression")
