"""
Property-based tests using Hypothesis.

These tests verify invariants of the tokenizer, parser and evaluator
across a wide range of inputs.
"""

from __future__ import annotations

from decimal import Decimal

from hypothesis import given, settings
from hypothesis import strategies as st

from chillscript.core.errors import ChillScriptError, ParseError
from chillscript.script import ChillScriptRuntime, evaluate, parse, tokenize
from chillscript.script.expressions import Expression, NumberLiteral, UnaryExpression
from chillscript.script.tokenizer import TokenType

finite_decimals = st.decimals(allow_nan=False, allow_infinity=False)


class TestTokenizerProperties:
    """Property-based tests for the tokenizer."""

    @given(st.text(max_size=200))
    @settings(max_examples=200)
    def test_never_crashes_on_arbitrary_input(self, text: str) -> None:
        """Invariant: tokenize returns EOF-terminated tokens or raises ParseError."""
        try:
            tokens = tokenize(text)
        except ParseError:
            return
        assert tokens[-1].type == TokenType.EOF
        assert sum(1 for t in tokens if t.type == TokenType.EOF) == 1

    @given(st.text(alphabet="abc +-*()[]0123456789.\n", max_size=100))
    def test_offsets_increase(self, text: str) -> None:
        tokens = tokenize(text)
        offsets = [t.offset for t in tokens]
        assert offsets == sorted(offsets)
        for token in tokens:
            assert token.value == text[token.offset : token.end_offset]


class TestParserProperties:
    """Property-based tests for the parser."""

    @given(st.text(alphabet="abt he-+*/%()[],.0123456789 \"", max_size=80))
    @settings(max_examples=300)
    def test_only_script_errors(self, text: str) -> None:
        """Invariant: parse either succeeds or raises a ChillScriptError."""
        try:
            tree = parse(text)
        except ChillScriptError:
            return
        for node in tree.walk():
            assert node.span is not None

    @given(st.integers(min_value=1, max_value=40))
    def test_negation_chain_depth(self, depth: int) -> None:
        node: Expression = parse("- " * depth + "5")
        for _ in range(depth):
            assert isinstance(node, UnaryExpression)
            node = node.right_hand_side
        assert isinstance(node, NumberLiteral)

    @given(st.integers(min_value=0, max_value=10), st.booleans())
    def test_filler_does_not_change_shape(self, depth: int, filler: bool) -> None:
        source = "- " * depth + "x"
        prefixed = ("the " if filler else "") + source
        assert parse(prefixed) == parse(source)


class TestEvaluationProperties:
    """Property-based tests for decimal evaluation."""

    @given(finite_decimals, st.integers(min_value=0, max_value=12))
    def test_negation_parity(self, value: Decimal, depth: int) -> None:
        """Invariant: n negations equal the value for even n, its negation for odd n."""
        runtime = ChillScriptRuntime({"x": value})
        result = evaluate(parse("- " * depth + "x"), runtime)
        if depth % 2 == 0:
            assert result == value
            assert result.as_tuple() == value.as_tuple()
        else:
            assert result == value.copy_negate()

    @given(finite_decimals)
    def test_number_literals_are_exact(self, value: Decimal) -> None:
        """Invariant: a decimal written as source evaluates back to itself."""
        result = evaluate(parse(str(value)))
        assert result == value
        assert result.as_tuple() == value.as_tuple()

    @given(st.integers(min_value=-(10**40), max_value=10**40))
    def test_bound_ints_are_exact(self, value: int) -> None:
        runtime = ChillScriptRuntime({"n": value})
        assert evaluate(parse("n + 0"), runtime) == Decimal(value)
