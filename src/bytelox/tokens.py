"""Token kinds and token representation for the bytelox lexer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from types import MappingProxyType
from typing import TYPE_CHECKING, Mapping, Union

if TYPE_CHECKING:
    from bytelox.source import Span


class TokenKind(Enum):
    # Single-character tokens
    LEFT_PAREN = auto()
    RIGHT_PAREN = auto()
    LEFT_BRACE = auto()
    RIGHT_BRACE = auto()
    COMMA = auto()
    DOT = auto()
    MINUS = auto()
    PLUS = auto()
    SEMICOLON = auto()
    SLASH = auto()
    STAR = auto()

    # One or two character tokens
    BANG = auto()
    BANG_EQUAL = auto()
    EQUAL = auto()
    EQUAL_EQUAL = auto()
    GREATER = auto()
    GREATER_EQUAL = auto()
    LESS = auto()
    LESS_EQUAL = auto()

    # Literals
    IDENTIFIER = auto()
    STRING = auto()
    NUMBER = auto()

    # Keywords
    AND = auto()
    CLASS = auto()
    ELSE = auto()
    FALSE = auto()
    FOR = auto()
    FUN = auto()
    IF = auto()
    NIL = auto()
    OR = auto()
    PRINT = auto()
    RETURN = auto()
    SUPER = auto()
    THIS = auto()
    TRUE = auto()
    VAR = auto()
    WHILE = auto()

    # Special
    ERROR = auto()
    COMMENT = auto()
    EOF = auto()


TokenValue = Union[float, str, None]


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: TokenValue
    span: Span

    @property
    def start(self) -> int:
        return self.span.start

    @property
    def length(self) -> int:
        return self.span.length

    @property
    def line(self) -> int:
        return self.span.line


# Keywords bucketed by first letter; a word is a keyword only on an exact match.
KEYWORDS: Mapping[str, Mapping[str, TokenKind]] = MappingProxyType({
    "a": {"and": TokenKind.AND},
    "c": {"class": TokenKind.CLASS},
    "e": {"else": TokenKind.ELSE},
    "f": {
        "false": TokenKind.FALSE,
        "for": TokenKind.FOR,
        "fun": TokenKind.FUN,
    },
    "i": {"if": TokenKind.IF},
    "n": {"nil": TokenKind.NIL},
    "o": {"or": TokenKind.OR},
    "p": {"print": TokenKind.PRINT},
    "r": {"return": TokenKind.RETURN},
    "s": {"super": TokenKind.SUPER},
    "t": {
        "this": TokenKind.THIS,
        "true": TokenKind.TRUE,
    },
    "v": {"var": TokenKind.VAR},
    "w": {"while": TokenKind.WHILE},
})

SINGLE_CHAR_TOKENS: Mapping[str, TokenKind] = MappingProxyType({
    "(": TokenKind.LEFT_PAREN,
    ")": TokenKind.RIGHT_PAREN,
    "{": TokenKind.LEFT_BRACE,
    "}": TokenKind.RIGHT_BRACE,
    ",": TokenKind.COMMA,
    ".": TokenKind.DOT,
    "-": TokenKind.MINUS,
    "+": TokenKind.PLUS,
    ";": TokenKind.SEMICOLON,
    "*": TokenKind.STAR,
})

# Operators that may be followed by '=': (alone, with '=')
RELATIONAL_TOKENS: Mapping[str, tuple[TokenKind, TokenKind]] = MappingProxyType({
    "!": (TokenKind.BANG, TokenKind.BANG_EQUAL),
    "=": (TokenKind.EQUAL, TokenKind.EQUAL_EQUAL),
    "<": (TokenKind.LESS, TokenKind.LESS_EQUAL),
    ">": (TokenKind.GREATER, TokenKind.GREATER_EQUAL),
})

# Tokens that begin a new declaration or statement; used for error recovery.
STATEMENT_STARTS: frozenset[TokenKind] = frozenset({
    TokenKind.CLASS,
    TokenKind.FUN,
    TokenKind.VAR,
    TokenKind.FOR,
    TokenKind.IF,
    TokenKind.WHILE,
    TokenKind.PRINT,
    TokenKind.RETURN,
})


def keyword_kind(word: str) -> TokenKind | None:
    """Return the keyword kind for ``word``, or None for a plain identifier."""
    bucket = KEYWORDS.get(word[0])
    if bucket is None:
        return None
    return bucket.get(word)
