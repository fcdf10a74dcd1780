"""
Runtime values and the operations defined on them.

Script values are a closed set of Python types:

    number   -> decimal.Decimal
    string   -> str
    boolean  -> bool
    null     -> None
    list     -> list
    map      -> collections.abc.Mapping

Anything else a host binds is carried as an opaque host object whose
attributes can be read. Operators never coerce between kinds: an operand
of the wrong kind raises ``UnsupportedOperationError``.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from decimal import (
    MAX_EMAX,
    MAX_PREC,
    MIN_EMIN,
    Context,
    Decimal,
    DecimalException,
    DivisionByZero,
    InvalidOperation,
    Overflow,
)
from typing import Any

from chillscript.core.errors import EvaluationError, UnsupportedOperationError

NEGATIVE_ONE = Decimal("-1")

# Addition, subtraction, multiplication and remainder are exact in this context.
EXACT_CONTEXT = Context(
    prec=MAX_PREC,
    Emax=MAX_EMAX,
    Emin=MIN_EMIN,
    traps=[InvalidOperation, DivisionByZero, Overflow],
)


def is_number(value: Any) -> bool:
    return isinstance(value, Decimal)


def checked(operator: str, operation: Callable[..., Decimal], *operands: Decimal) -> Decimal:
    """Run a decimal context operation; trapped conditions become EvaluationError."""
    try:
        return operation(*operands)
    except DecimalException as e:
        raise EvaluationError(f"Numeric overflow in {operator}") from e


def to_value(host: Any) -> Any:
    """Normalize a host value into a script value.

    ``int`` and ``float`` become ``Decimal`` (floats through their shortest
    repr, so ``0.1`` becomes ``Decimal("0.1")``); tuples become lists.
    """
    if isinstance(host, bool) or host is None:
        return host
    if isinstance(host, int):
        return Decimal(host)
    if isinstance(host, float):
        return Decimal(repr(host))
    if isinstance(host, tuple):
        return [to_value(item) for item in host]
    return host


# ---------------------------------------------------------------------------
# Arithmetic
# ---------------------------------------------------------------------------


def add(left: Any, right: Any) -> Any:
    if is_number(left) and is_number(right):
        return checked("+", EXACT_CONTEXT.add, left, right)
    if isinstance(left, str) and isinstance(right, str):
        return left + right
    raise UnsupportedOperationError("+", _offending(left, right, str))


def subtract(left: Any, right: Any) -> Decimal:
    _require_numbers("-", left, right)
    return checked("-", EXACT_CONTEXT.subtract, left, right)


def multiply(left: Any, right: Any) -> Decimal:
    _require_numbers("*", left, right)
    return checked("*", EXACT_CONTEXT.multiply, left, right)


def divide(left: Any, right: Any, precision: int) -> Decimal:
    """Divide, rounding the quotient to ``precision`` significant digits."""
    _require_numbers("/", left, right)
    if right.is_zero():
        raise EvaluationError("Division by zero")
    context = Context(prec=precision, traps=[InvalidOperation, Overflow])
    return checked("/", context.divide, left, right)


def remainder(left: Any, right: Any) -> Decimal:
    """Remainder with the sign of the dividend."""
    _require_numbers("%", left, right)
    if right.is_zero():
        raise EvaluationError("Modulo by zero")
    return checked("%", EXACT_CONTEXT.remainder, left, right)


# ---------------------------------------------------------------------------
# Comparison and logic
# ---------------------------------------------------------------------------


def values_equal(left: Any, right: Any) -> bool:
    """Equality without cross-kind coercion (``true`` never equals ``1``)."""
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    if is_number(left) != is_number(right):
        return False
    if isinstance(left, list) and isinstance(right, list):
        return len(left) == len(right) and all(
            values_equal(a, b) for a, b in zip(left, right, strict=True)
        )
    return bool(left == right)


def compare(operator: str, left: Any, right: Any) -> bool:
    """Ordering comparison between two numbers or two strings."""
    same_kind = (is_number(left) and is_number(right)) or (
        isinstance(left, str) and isinstance(right, str)
    )
    if not same_kind:
        raise UnsupportedOperationError(operator, _offending(left, right, str))
    if operator == "<":
        return bool(left < right)
    if operator == ">":
        return bool(left > right)
    if operator == "<=":
        return bool(left <= right)
    if operator == ">=":
        return bool(left >= right)
    raise UnsupportedOperationError(operator, left)


def require_boolean(operator: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise UnsupportedOperationError(operator, value)
    return value


def apply_binary(operator: str, left: Any, right: Any, precision: int) -> Any:
    """Apply a non-short-circuit binary operator to evaluated operands."""
    if operator == "+":
        return add(left, right)
    if operator == "-":
        return subtract(left, right)
    if operator == "*":
        return multiply(left, right)
    if operator == "/":
        return divide(left, right, precision)
    if operator == "%":
        return remainder(left, right)
    if operator == "==":
        return values_equal(left, right)
    if operator == "!=":
        return not values_equal(left, right)
    if operator in ("<", ">", "<=", ">="):
        return compare(operator, left, right)
    raise UnsupportedOperationError(operator, left)


def _require_numbers(operator: str, left: Any, right: Any) -> None:
    if not is_number(left):
        raise UnsupportedOperationError(operator, left)
    if not is_number(right):
        raise UnsupportedOperationError(operator, right)


def _offending(left: Any, right: Any, other_kind: type) -> Any:
    """Pick the operand to blame when two operands do not form a valid pair."""
    if is_number(left) or isinstance(left, other_kind):
        return right
    return left


# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------


def format_value(value: Any) -> str:
    """Render a value the way a script would write it."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if is_number(value):
        return str(value)
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    if isinstance(value, list):
        return "[" + ", ".join(format_value(item) for item in value) + "]"
    if isinstance(value, Mapping):
        items = ", ".join(f"{key}: {format_value(item)}" for key, item in value.items())
        return "{" + items + "}"
    return repr(value)
