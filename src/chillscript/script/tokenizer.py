"""
Tokenizer for chill-script.

Converts source text into an EOF-terminated list of immutable tokens with
offset, line and column tracking, and provides ``TokenStream``, the
replayable cursor the parser consumes.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from chillscript.core.errors import ErrorType, ParseError, SourcePosition


class TokenType(Enum):
    """Lexical categories."""

    # Literals
    NUMBER = "NUMBER"
    STRING = "STRING"
    IDENTIFIER = "IDENTIFIER"
    KEYWORD = "KEYWORD"

    # Operators
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    PERCENT = "%"
    EQ = "=="
    NE = "!="
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="

    # Punctuation
    LPAREN = "("
    RPAREN = ")"
    LBRACKET = "["
    RBRACKET = "]"
    COMMA = ","
    DOT = "."

    EOF = "EOF"


KEYWORDS = frozenset({"true", "false", "null", "and", "or", "not"})


@dataclass(frozen=True)
class Token:
    """
    A single token.

    Attributes:
        type: Lexical category
        value: String value (string literals hold their unescaped contents)
        offset: Start offset in the source
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        length: Number of source characters the token covers
    """

    type: TokenType
    value: str
    offset: int
    line: int
    column: int
    length: int = 0

    @property
    def end_offset(self) -> int:
        return self.offset + self.length

    @property
    def position(self) -> SourcePosition:
        return SourcePosition(offset=self.offset, line=self.line, column=self.column)

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"


# Number pattern: digits, optional fraction, optional exponent
_NUMBER_RE = re.compile(r"\d+(\.\d+)?([eE][+-]?\d+)?")
_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

_TWO_CHAR = {
    "==": TokenType.EQ,
    "!=": TokenType.NE,
    "<=": TokenType.LE,
    ">=": TokenType.GE,
}

_SINGLE_CHAR = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "%": TokenType.PERCENT,
    "<": TokenType.LT,
    ">": TokenType.GT,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
}


class Tokenizer:
    """Single-use tokenizer over one source string."""

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.line_start = 0
        self.tokens: list[Token] = []

    def _emit(self, token_type: TokenType, value: str, start: int) -> None:
        self.tokens.append(
            Token(
                type=token_type,
                value=value,
                offset=start,
                line=self.line,
                column=start - self.line_start + 1,
                length=self.pos - start,
            )
        )

    def _error(self, kind: ErrorType, offset: int) -> ParseError:
        return ParseError(kind, SourcePosition.of(self.source, offset))

    def tokenize(self) -> list[Token]:
        source = self.source
        n = len(source)

        while self.pos < n:
            c = source[self.pos]

            if c == "\n":
                self.pos += 1
                self.line += 1
                self.line_start = self.pos
                continue

            if c in " \t\r":
                self.pos += 1
                continue

            # Comments run to end of line
            if c == "#":
                while self.pos < n and source[self.pos] != "\n":
                    self.pos += 1
                continue

            start = self.pos

            if c in ('"', "'"):
                value = self._read_string()
                self._emit(TokenType.STRING, value, start)
                continue

            if "0" <= c <= "9":
                m = _NUMBER_RE.match(source, self.pos)
                assert m is not None
                self.pos = m.end()
                self._emit(TokenType.NUMBER, m.group(0), start)
                continue

            if c.isascii() and (c.isalpha() or c == "_"):
                m = _IDENT_RE.match(source, self.pos)
                assert m is not None
                word = m.group(0)
                self.pos = m.end()
                kind = TokenType.KEYWORD if word in KEYWORDS else TokenType.IDENTIFIER
                self._emit(kind, word, start)
                continue

            two = source[self.pos : self.pos + 2]
            if two in _TWO_CHAR:
                self.pos += 2
                self._emit(_TWO_CHAR[two], two, start)
                continue

            if c in _SINGLE_CHAR:
                self.pos += 1
                self._emit(_SINGLE_CHAR[c], c, start)
                continue

            raise self._error(ErrorType.UNEXPECTED_CHARACTER, start)

        self._emit(TokenType.EOF, "", self.pos)
        return self.tokens

    def _read_string(self) -> str:
        """Read a quoted string literal; the cursor ends after the closing quote."""
        source = self.source
        start = self.pos
        quote = source[start]
        i = start + 1
        chars: list[str] = []

        while i < len(source):
            c = source[i]
            if c == "\\" and i + 1 < len(source):
                chars.append(source[i + 1])
                i += 2
                continue
            if c == quote:
                self.pos = i + 1
                return "".join(chars)
            if c == "\n":
                break
            chars.append(c)
            i += 1

        raise self._error(ErrorType.UNTERMINATED_STRING, start)


def tokenize(source: str) -> list[Token]:
    """Tokenize ``source`` into a list ending with an EOF token.

    Raises:
        ParseError: UNEXPECTED_CHARACTER or UNTERMINATED_STRING.
    """
    return Tokenizer(source).tokenize()


class TokenStream:
    """Replayable cursor over a finite token list.

    The cursor never moves past the trailing EOF token.
    """

    def __init__(self, tokens: list[Token]):
        if not tokens or tokens[-1].type != TokenType.EOF:
            raise ValueError("Token list must end with an EOF token")
        self.tokens = tokens
        self.position = 0
        self.last_consumed: Token | None = None

    @classmethod
    def from_source(cls, source: str) -> TokenStream:
        return cls(tokenize(source))

    @property
    def current(self) -> Token:
        return self.tokens[self.position]

    def peek(self, offset: int = 0) -> Token:
        idx = self.position + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return self.tokens[-1]

    @property
    def at_end(self) -> bool:
        return self.current.type == TokenType.EOF

    def advance(self) -> Token:
        """Consume and return the current token."""
        token = self.current
        if token.type != TokenType.EOF:
            self.position += 1
        self.last_consumed = token
        return token

    def mark(self) -> tuple[int, Token | None]:
        return self.position, self.last_consumed

    def reset(self, mark: tuple[int, Token | None]) -> None:
        self.position, self.last_consumed = mark

    def __len__(self) -> int:
        return len(self.tokens)
