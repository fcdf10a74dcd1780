"""
Unit tests for the chill-script parser.

Tests cover:
- The unary rule: negation chains, filler words, fall-through
- Span recording for parsed nodes
- Operator precedence and associativity
- Parse failures and their ErrorType
- Token primitives (match, match_and_consume, consume_token, require)
- Grammar registry and extension with new rules
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import pytest

from chillscript.core.config import ScriptSettings
from chillscript.core.errors import ChillScriptError, ErrorType, GrammarError, ParseError
from chillscript.script import (
    ChillScriptParser,
    default_grammar,
    evaluate,
    evaluate_source,
    parse,
    tokenize,
)
from chillscript.script.expressions import (
    BinaryExpression,
    Expression,
    IdentifierExpression,
    IndexExpression,
    ListLiteral,
    NumberLiteral,
    ParenthesizedExpression,
    PropertyAccessExpression,
    StringLiteral,
    UnaryExpression,
)
from chillscript.script.grammar import Grammar
from chillscript.script.tokenizer import TokenType


def parser_for(source: str, **kwargs: Any) -> ChillScriptParser:
    return ChillScriptParser(tokenize(source), source=source, **kwargs)


class TestUnaryRule:
    """Tests for unary_expression."""

    def test_single_negation(self) -> None:
        expr = parse("-5")
        assert isinstance(expr, UnaryExpression)
        assert expr.operator.type == TokenType.MINUS
        assert isinstance(expr.right_hand_side, NumberLiteral)
        assert expr.right_hand_side.value == Decimal("5")

    @pytest.mark.parametrize(
        "source,depth,expected",
        [
            ("- 5", 1, Decimal("-5")),
            ("- - 5", 2, Decimal("5")),
            ("- - - 5", 3, Decimal("-5")),
        ],
    )
    def test_negation_chains_nest(self, source: str, depth: int, expected: Decimal) -> None:
        node: Expression = parse(source)
        for _ in range(depth):
            assert isinstance(node, UnaryExpression)
            node = node.right_hand_side
        assert isinstance(node, NumberLiteral)
        assert evaluate(parse(source)) == expected

    def test_negation_extends_to_operand_end(self) -> None:
        expr = parse("- 5")
        assert isinstance(expr, UnaryExpression)
        assert expr.end is expr.right_hand_side.end
        assert expr.span is not None
        assert expr.span.start == 0
        assert expr.span.end == 3
        assert expr.span.end == expr.right_hand_side.span.end  # type: ignore[union-attr]

    def test_nested_negation_spans(self) -> None:
        expr = parse("- - x")
        assert isinstance(expr, UnaryExpression)
        inner = expr.right_hand_side
        assert inner.span is not None
        assert (inner.span.start, inner.span.end) == (2, 5)
        assert expr.span is not None
        assert (expr.span.start, expr.span.end) == (0, 5)

    def test_fall_through_matches_indirect_rule(self) -> None:
        source = "price[0] + 1"
        via_unary = parser_for(source)
        via_indirect = parser_for(source)

        a = via_unary.parse("unary_expression")
        b = via_indirect.parse("indirect_expression")

        assert a == b
        assert a.span == b.span
        assert isinstance(a, IndexExpression)
        assert via_unary.stream.position == via_indirect.stream.position == 4
        assert via_unary.current.type == TokenType.PLUS

    def test_filler_word_is_skipped(self) -> None:
        with_filler = parse("the -5")
        without = parse("-5")

        assert with_filler == without
        assert with_filler.span != without.span
        assert with_filler.span is not None
        assert with_filler.span.start == 4
        assert evaluate(with_filler) == evaluate(without) == Decimal("-5")

    def test_filler_word_before_identifier(self) -> None:
        expr = parse("the x")
        assert isinstance(expr, IdentifierExpression)
        assert expr.name == "x"

    def test_filler_word_inside_binary(self) -> None:
        expr = parse("price * the qty")
        assert isinstance(expr, BinaryExpression)
        assert isinstance(expr.right, IdentifierExpression)
        assert expr.right.name == "qty"

    def test_filler_words_come_from_settings(self) -> None:
        custom = ScriptSettings(filler_words=("an",))
        assert isinstance(parse("an -5", settings=custom), UnaryExpression)
        # Without the setting "an" is an ordinary identifier.
        assert isinstance(parse("an -5"), BinaryExpression)

    def test_filler_word_not_skipped_twice(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse("the the 5")
        assert exc_info.value.kind == ErrorType.UNEXPECTED_TOKEN


class TestPrecedence:
    """Tests for operator precedence and associativity."""

    def test_multiplication_binds_tighter(self) -> None:
        assert str(parse("a + b * c")) == "(a + (b * c))"

    def test_left_associative(self) -> None:
        assert str(parse("10 - 4 - 3")) == "((10 - 4) - 3)"

    def test_negation_binds_tighter_than_multiplication(self) -> None:
        expr = parse("-2 * 3")
        assert isinstance(expr, BinaryExpression)
        assert isinstance(expr.left, UnaryExpression)

    def test_subtracting_a_negation(self) -> None:
        expr = parse("2 - -3")
        assert isinstance(expr, BinaryExpression)
        assert expr.operator.value == "-"
        assert isinstance(expr.right, UnaryExpression)

    def test_negation_of_indirect(self) -> None:
        expr = parse("-order.total")
        assert isinstance(expr, UnaryExpression)
        assert isinstance(expr.right_hand_side, PropertyAccessExpression)

    def test_logic_levels(self) -> None:
        expr = parse("a or b and not c")
        assert isinstance(expr, BinaryExpression)
        assert expr.operator.value == "or"
        assert isinstance(expr.right, BinaryExpression)
        assert expr.right.operator.value == "and"
        assert isinstance(expr.right.right, UnaryExpression)
        assert expr.right.right.operator.value == "not"

    def test_comparison_below_arithmetic(self) -> None:
        expr = parse("a + 1 == b * 2")
        assert isinstance(expr, BinaryExpression)
        assert expr.operator.value == "=="

    def test_comparison_does_not_chain(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse("1 < 2 < 3")
        assert exc_info.value.kind == ErrorType.UNEXPECTED_TOKEN
        assert exc_info.value.position.column == 7

    def test_parentheses_group(self) -> None:
        expr = parse("(1 + 2) * 3")
        assert isinstance(expr, BinaryExpression)
        assert isinstance(expr.left, ParenthesizedExpression)

    def test_list_literal(self) -> None:
        expr = parse('[1, "a", x]')
        assert isinstance(expr, ListLiteral)
        assert isinstance(expr.items[1], StringLiteral)
        assert len(expr.items) == 3

    def test_empty_list(self) -> None:
        expr = parse("[]")
        assert isinstance(expr, ListLiteral)
        assert expr.items == []

    def test_index_on_list_literal(self) -> None:
        expr = parse("[10, 20][1]")
        assert isinstance(expr, IndexExpression)
        assert isinstance(expr.target, ListLiteral)


class TestParseErrors:
    """Tests for parse failures."""

    def test_unterminated_list_at_eof(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse("[1, 2")
        assert exc_info.value.kind == ErrorType.UNTERMINATED_LIST
        assert exc_info.value.position.column == 6

    def test_unterminated_list_missing_comma(self) -> None:
        with pytest.raises(ParseError, match="Expected close bracket for list") as exc_info:
            parse("[1 2]")
        assert exc_info.value.token is not None
        assert exc_info.value.token.value == "2"

    def test_unterminated_parenthesis(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse("(1 + 2")
        assert exc_info.value.kind == ErrorType.UNTERMINATED_PARENTHESIS

    def test_unterminated_index(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse("items[1")
        assert exc_info.value.kind == ErrorType.UNTERMINATED_INDEX

    def test_expected_property_name(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse("order.1")
        assert exc_info.value.kind == ErrorType.EXPECTED_PROPERTY_NAME

    def test_operator_with_no_operand(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse("-")
        assert exc_info.value.kind == ErrorType.UNEXPECTED_TOKEN
        assert exc_info.value.token is not None
        assert exc_info.value.token.type == TokenType.EOF

    def test_unexpected_token(self) -> None:
        with pytest.raises(ParseError, match="Unexpected Token") as exc_info:
            parse("* 2")
        assert exc_info.value.kind == ErrorType.UNEXPECTED_TOKEN

    def test_trailing_tokens_rejected(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse("1 2")
        assert exc_info.value.kind == ErrorType.UNEXPECTED_TOKEN
        assert exc_info.value.token is not None
        assert exc_info.value.token.value == "2"

    def test_empty_source(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse("")
        assert exc_info.value.kind == ErrorType.UNEXPECTED_TOKEN

    def test_tokenizer_error_gets_context(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse("1 @ 2")
        assert exc_info.value.kind == ErrorType.UNEXPECTED_CHARACTER
        assert exc_info.value.context is not None
        assert str(exc_info.value).startswith("<script>:1:3")

    def test_error_message_has_caret_snippet(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse("[1 2]")
        lines = str(exc_info.value).split("\n")
        assert lines[0] == "<script>:1:4"
        assert lines[1] == "   1 | [1 2]"
        assert lines[2] == " " * 10 + "^"
        assert lines[3] == "Expected close bracket for list: found '2' at line 1, column 4"

    def test_source_name_in_location(self) -> None:
        settings = ScriptSettings(source_name="pricing.chill")
        with pytest.raises(ParseError, match=r"^pricing\.chill:1:1"):
            parse(")", settings=settings)

    def test_nesting_limit(self) -> None:
        settings = ScriptSettings(max_depth=20)
        with pytest.raises(ParseError) as exc_info:
            parse("((((((1))))))", settings=settings)
        assert exc_info.value.kind == ErrorType.NESTING_TOO_DEEP
        assert "limit is 20" in str(exc_info.value)

    def test_long_negation_chain_within_default_limit(self) -> None:
        assert evaluate(parse("- " * 50 + "1")) == Decimal("1")

    def test_long_operator_chain_rejected(self) -> None:
        source = " + ".join(["1"] * 3000)
        with pytest.raises(ParseError) as exc_info:
            parse(source)
        assert exc_info.value.kind == ErrorType.NESTING_TOO_DEEP
        with pytest.raises(ChillScriptError):
            evaluate_source(source)

    def test_operator_chain_limit_is_tree_height(self) -> None:
        settings = ScriptSettings(max_depth=10)
        assert parse(" + ".join(["1"] * 10), settings=settings).height == 10
        with pytest.raises(ParseError) as exc_info:
            parse(" + ".join(["1"] * 11), settings=settings)
        assert exc_info.value.kind == ErrorType.NESTING_TOO_DEEP
        assert exc_info.value.token is not None
        assert exc_info.value.token.value == "+"

    def test_parenthesis_nesting_within_default_limit(self) -> None:
        assert evaluate(parse("(" * 20 + "1" + ")" * 20)) == Decimal("1")
        with pytest.raises(ParseError) as exc_info:
            parse("(" * 30 + "1" + ")" * 30)
        assert exc_info.value.kind == ErrorType.NESTING_TOO_DEEP


class TestTokenPrimitives:
    """Tests for the parser's token helpers."""

    def test_match_does_not_consume(self) -> None:
        parser = parser_for("the - 5")
        assert parser.match("the")
        assert parser.match(TokenType.NUMBER, TokenType.IDENTIFIER)
        assert parser.stream.position == 0

    def test_match_and_consume(self) -> None:
        parser = parser_for("the - 5")
        assert not parser.match_and_consume(TokenType.MINUS)
        assert parser.stream.position == 0
        assert parser.match_and_consume("the")
        assert parser.stream.position == 1

    def test_consume_token(self) -> None:
        parser = parser_for("- 5")
        token = parser.consume_token()
        assert token.type == TokenType.MINUS
        assert parser.current.value == "5"

    def test_literal_match_ignores_string_tokens(self) -> None:
        parser = parser_for('"the"')
        assert not parser.match("the")
        assert not parser.is_filler(parser.current)

    def test_require_raises_given_kind(self) -> None:
        parser = parser_for("1")
        with pytest.raises(ParseError) as exc_info:
            parser.require(TokenType.RPAREN, ErrorType.UNTERMINATED_PARENTHESIS)
        assert exc_info.value.kind == ErrorType.UNTERMINATED_PARENTHESIS
        assert parser.stream.position == 0

    def test_is_filler_only_for_identifiers(self) -> None:
        parser = parser_for("the")
        assert parser.is_filler(parser.current)
        assert parser.skip_filler()
        assert not parser.skip_filler()

    def test_parse_from_named_rule(self) -> None:
        expr = parse("1 + 2", "additive_expression")
        assert isinstance(expr, BinaryExpression)

    def test_rule_leaves_remaining_tokens(self) -> None:
        parser = parser_for("1 + 2")
        expr = parser.parse("primary_expression")
        assert isinstance(expr, NumberLiteral)
        assert parser.current.type == TokenType.PLUS


class AbsoluteExpression(Expression):
    """Test node: ``abs operand``. Leaves its span to the parser."""

    def __init__(self, operand: Expression):
        super().__init__()
        self.operand = self.add_child(operand)

    def evaluate(self, runtime: Any) -> Any:
        return abs(self.operand.evaluate(runtime))


class TestGrammar:
    """Tests for the rule registry."""

    def test_default_rules(self) -> None:
        grammar = default_grammar()
        for name in (
            "expression",
            "or_expression",
            "and_expression",
            "not_expression",
            "comparison_expression",
            "additive_expression",
            "multiplicative_expression",
            "unary_expression",
            "indirect_expression",
            "primary_expression",
            "list_literal",
        ):
            assert name in grammar
        assert len(grammar) == 11

    def test_unknown_rule(self) -> None:
        with pytest.raises(GrammarError, match="statement"):
            parse("1", "statement")

    def test_unknown_rule_from_parser(self) -> None:
        with pytest.raises(GrammarError):
            parser_for("1").parse("no_such_rule")

    def test_empty_rule_name(self) -> None:
        with pytest.raises(GrammarError):
            Grammar().register("", lambda parser: parser.parse("expression"))

    def test_extension_with_new_rule(self) -> None:
        grammar = default_grammar().copy()

        @grammar.rule("absolute_expression")
        def absolute(parser: ChillScriptParser) -> Expression:
            if parser.match_and_consume("abs"):
                return AbsoluteExpression(parser.parse("absolute_expression"))
            return parser.parse("expression")

        expr = parse("abs -5", "absolute_expression", grammar=grammar)
        assert isinstance(expr, AbsoluteExpression)
        assert evaluate(expr) == Decimal("5")
        # Span filled in by the parser from the rule's first and last tokens.
        assert expr.span is not None
        assert (expr.span.start, expr.span.end) == (0, 6)
        assert "absolute_expression" not in default_grammar()

    def test_copy_is_independent(self) -> None:
        base = default_grammar()
        extended = base.copy()
        extended.register("extra", lambda parser: parser.parse("expression"))
        assert "extra" in extended
        assert "extra" not in base
        assert set(base) <= set(extended)
