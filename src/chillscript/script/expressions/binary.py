"""Binary operators: arithmetic, comparison and short-circuit logic."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from chillscript.core.errors import EvaluationError
from chillscript.script.tokenizer import Token
from chillscript.script.values import apply_binary, require_boolean

from .base import Expression

if TYPE_CHECKING:
    from chillscript.script.runtime import ChillScriptRuntime


class BinaryExpression(Expression):
    """``left operator right``; spans from the left operand to the right."""

    def __init__(self, left: Expression, operator: Token, right: Expression):
        super().__init__()
        self.left = self.add_child(left)
        self.operator = operator
        self.right = self.add_child(right)
        self.set_start(left.start or operator)
        self.set_end(right.end or operator)

    def detail(self) -> str:
        return self.operator.value

    def __str__(self) -> str:
        return f"({self.left} {self.operator.value} {self.right})"

    def evaluate(self, runtime: ChillScriptRuntime) -> Any:
        operator = self.operator.value
        try:
            if operator == "and":
                if not require_boolean(operator, self.left.evaluate(runtime)):
                    return False
                return require_boolean(operator, self.right.evaluate(runtime))
            if operator == "or":
                if require_boolean(operator, self.left.evaluate(runtime)):
                    return True
                return require_boolean(operator, self.right.evaluate(runtime))

            left = self.left.evaluate(runtime)
            right = self.right.evaluate(runtime)
            return apply_binary(operator, left, right, runtime.settings.division_precision)
        except EvaluationError as e:
            if e.expression is None:
                e.expression = self
            raise
