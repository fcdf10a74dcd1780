"""
Rule registry for the chill-script parser.

A grammar maps rule names to rule procedures. A procedure receives the
parser and returns an Expression; it reaches other precedence levels only
through ``parser.parse(name)``, so levels compose by name and a grammar can
be extended by registering new names without touching existing rules.

Default grammar (precedence low to high):
    expression                -> or_expression
    or_expression             -> and_expression ("or" and_expression)*
    and_expression            -> not_expression ("and" not_expression)*
    not_expression            -> "not" not_expression | comparison_expression
    comparison_expression     -> additive_expression (cmp_op additive_expression)?
    additive_expression       -> multiplicative_expression (("+"|"-") multiplicative_expression)*
    multiplicative_expression -> unary_expression (("*"|"/"|"%") unary_expression)*
    unary_expression          -> filler? ("-" unary_expression | indirect_expression)
    indirect_expression       -> primary_expression ("." IDENT | "[" expression "]")*
    primary_expression        -> literal | IDENT | "(" expression ")" | list_literal
    list_literal              -> "[" (expression ("," expression)*)? "]"
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING

from chillscript.core.errors import GrammarError

from .expressions import BinaryExpression, Expression, ListLiteral, UnaryExpression
from .expressions.parenthesized import parse_primary
from .expressions.references import parse_indirect
from .tokenizer import TokenType

if TYPE_CHECKING:
    from .parser import ChillScriptParser

RuleFn = Callable[["ChillScriptParser"], Expression]
Operator = TokenType | str


class Grammar:
    """Mapping of rule name to rule procedure."""

    def __init__(self, rules: dict[str, RuleFn] | None = None):
        self._rules: dict[str, RuleFn] = dict(rules or {})

    def register(self, name: str, rule: RuleFn) -> None:
        """Register (or replace) the procedure for ``name``."""
        if not name:
            raise GrammarError("Rule name must not be empty")
        self._rules[name] = rule

    def rule(self, name: str) -> Callable[[RuleFn], RuleFn]:
        """Decorator form of ``register``."""

        def decorator(fn: RuleFn) -> RuleFn:
            self.register(name, fn)
            return fn

        return decorator

    def __getitem__(self, name: str) -> RuleFn:
        try:
            return self._rules[name]
        except KeyError:
            raise GrammarError(f"No grammar rule registered under '{name}'") from None

    def __contains__(self, name: object) -> bool:
        return name in self._rules

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def copy(self) -> Grammar:
        return Grammar(self._rules)


def delegate(rule_name: str) -> RuleFn:
    """A rule that is exactly another rule."""

    def rule(parser: ChillScriptParser) -> Expression:
        return parser.parse(rule_name)

    return rule


def binary_rule(operand_rule: str, operators: tuple[Operator, ...], repeat: bool = True) -> RuleFn:
    """A left-associative precedence level over ``operand_rule``.

    With ``repeat=False`` the level takes at most one operator, so
    ``a < b < c`` stops after ``a < b``.
    """

    def rule(parser: ChillScriptParser) -> Expression:
        left = parser.parse(operand_rule)
        while parser.match(*operators):
            operator = parser.consume_token()
            right = parser.parse(operand_rule)
            left = BinaryExpression(left, operator, right)
            parser.check_height(left, operator)
            if not repeat:
                break
        return left

    return rule


def default_grammar() -> Grammar:
    """The expression grammar every parser starts from."""
    grammar = Grammar()
    grammar.register("expression", delegate("or_expression"))
    grammar.register("or_expression", binary_rule("and_expression", ("or",)))
    grammar.register("and_expression", binary_rule("not_expression", ("and",)))
    grammar.register("not_expression", UnaryExpression.parse_not)
    grammar.register(
        "comparison_expression",
        binary_rule(
            "additive_expression",
            (TokenType.EQ, TokenType.NE, TokenType.LT, TokenType.GT, TokenType.LE, TokenType.GE),
            repeat=False,
        ),
    )
    grammar.register(
        "additive_expression",
        binary_rule("multiplicative_expression", (TokenType.PLUS, TokenType.MINUS)),
    )
    grammar.register(
        "multiplicative_expression",
        binary_rule("unary_expression", (TokenType.STAR, TokenType.SLASH, TokenType.PERCENT)),
    )
    grammar.register("unary_expression", UnaryExpression.parse)
    grammar.register("indirect_expression", parse_indirect)
    grammar.register("primary_expression", parse_primary)
    grammar.register("list_literal", ListLiteral.parse)
    return grammar
