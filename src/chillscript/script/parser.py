"""
Named-rule recursive descent parser for chill-script.

The parser owns one token stream and dispatches by rule name through a
``Grammar``. Rule procedures use the helper primitives here:

    match(...)              peek without consuming
    match_and_consume(...)  advance only when the current token matches
    consume_token()         unconditional advance
    require(..., kind)      consume or fail with a ParseError of ``kind``

Matching accepts a ``TokenType`` or a literal string value (``"the"``,
``"and"``). There is no error recovery: the first failure aborts the parse.
"""

from __future__ import annotations

import logging

from chillscript.core.config import ScriptSettings
from chillscript.core.errors import ErrorContext, ErrorType, ParseError, make_parse_error

from .expressions import Expression
from .grammar import Grammar, Operator, default_grammar
from .tokenizer import Token, TokenStream, TokenType, tokenize

logger = logging.getLogger(__name__)

_default_grammar: Grammar | None = None


def _shared_default_grammar() -> Grammar:
    global _default_grammar
    if _default_grammar is None:
        _default_grammar = default_grammar()
    return _default_grammar


class ChillScriptParser:
    """Parser over one exclusively-owned token stream."""

    def __init__(
        self,
        tokens: list[Token] | TokenStream,
        grammar: Grammar | None = None,
        settings: ScriptSettings | None = None,
        source: str | None = None,
    ):
        self.stream = tokens if isinstance(tokens, TokenStream) else TokenStream(tokens)
        self.grammar = grammar if grammar is not None else _shared_default_grammar()
        self.settings = settings if settings is not None else ScriptSettings()
        self.source = source
        self.depth = 0

    @property
    def current(self) -> Token:
        return self.stream.current

    # -- Rule dispatch --

    def parse(self, rule_name: str) -> Expression:
        """Parse the named rule at the current position.

        Fills in the node's start (token at rule entry) and end (last token
        consumed) when the rule procedure did not set them, and rejects
        results taller than ``max_depth`` levels.

        Raises:
            ParseError: If the current tokens cannot satisfy the rule.
            GrammarError: If no rule is registered under ``rule_name``.
        """
        rule = self.grammar[rule_name]
        entry = self.current

        self.depth += 1
        try:
            if self.depth > self.settings.max_depth:
                raise self.error(
                    ErrorType.NESTING_TOO_DEEP, detail=f"limit is {self.settings.max_depth}"
                )
            logger.debug("Rule %s at %r", rule_name, entry)
            expression = rule(self)
        finally:
            self.depth -= 1

        self.check_height(expression, entry)
        if expression.start is None:
            expression.set_start(entry)
        if expression.end is None:
            expression.set_end(self.stream.last_consumed or entry)
        return expression

    def check_height(self, expression: Expression, token: Token | None = None) -> None:
        """Reject a tree taller than ``max_depth`` levels."""
        if expression.height > self.settings.max_depth:
            raise self.error(
                ErrorType.NESTING_TOO_DEEP,
                token=token,
                detail=f"limit is {self.settings.max_depth}",
            )

    # -- Token primitives --

    def match(self, *expected: Operator) -> bool:
        """True if the current token matches any of ``expected`` (no advance)."""
        token = self.current
        for item in expected:
            if isinstance(item, TokenType):
                if token.type == item:
                    return True
            elif token.type not in (TokenType.STRING, TokenType.EOF) and token.value == item:
                return True
        return False

    def match_and_consume(self, *expected: Operator) -> bool:
        if self.match(*expected):
            self.stream.advance()
            return True
        return False

    def consume_token(self) -> Token:
        return self.stream.advance()

    def require(self, expected: Operator, kind: ErrorType = ErrorType.UNEXPECTED_TOKEN) -> Token:
        """Consume a token that must be present; otherwise fail with ``kind``."""
        if not self.match(expected):
            raise self.error(kind)
        return self.consume_token()

    def is_filler(self, token: Token) -> bool:
        return token.type == TokenType.IDENTIFIER and token.value in self.settings.filler_words

    def skip_filler(self) -> bool:
        """Consume one optional readability word such as ``the``."""
        if self.is_filler(self.current):
            self.stream.advance()
            return True
        return False

    def error(
        self, kind: ErrorType, token: Token | None = None, detail: str | None = None
    ) -> ParseError:
        """Build a ParseError positioned at ``token`` (default: current token)."""
        return make_parse_error(
            kind,
            token if token is not None else self.current,
            source=self.source,
            source_name=self.settings.source_name,
            detail=detail,
        )


def parse(
    source: str,
    rule_name: str = "expression",
    *,
    grammar: Grammar | None = None,
    settings: ScriptSettings | None = None,
) -> Expression:
    """Parse a whole source string from the named start rule.

    Args:
        source: Script text (e.g., "- - price * 2")
        rule_name: Start rule, "expression" by default
        grammar: Grammar to dispatch through; the default grammar if omitted
        settings: Parser settings; defaults if omitted

    Returns:
        Root of the parsed expression tree.

    Raises:
        ParseError: If tokenizing or parsing fails, or tokens remain after
            the start rule.
        GrammarError: If ``rule_name`` is not registered.
    """
    settings = settings if settings is not None else ScriptSettings()
    try:
        tokens = tokenize(source)
    except ParseError as e:
        if e.context is None:
            e.with_context(ErrorContext.from_source(source, e.position, settings.source_name))
        raise

    parser = ChillScriptParser(tokens, grammar=grammar, settings=settings, source=source)
    expression = parser.parse(rule_name)

    if not parser.stream.at_end:
        raise parser.error(ErrorType.UNEXPECTED_TOKEN)

    logger.debug("Parsed %d tokens into %s", len(tokens), expression.debug_label)
    return expression
