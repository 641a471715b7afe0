"""Lexer for the bytelox scripting language.

Produces tokens lazily, one per call to ``scan_token``. Lexical errors do
not raise: they come back as ERROR tokens whose value is the message, and
the compiler reports them through its normal error path.
"""

from __future__ import annotations

from collections.abc import Iterator

from bytelox.source import Span
from bytelox.tokens import (
    RELATIONAL_TOKENS,
    SINGLE_CHAR_TOKENS,
    Token,
    TokenKind,
    TokenValue,
    keyword_kind,
)


def _is_alpha(ch: str) -> bool:
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z") or ch == "_"


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


class Lexer:
    """Tokenizes bytelox source code."""

    def __init__(self, source: str, *, keep_comments: bool = False) -> None:
        self.source = source
        self.keep_comments = keep_comments
        self.start = 0
        self.pos = 0
        self.line = 1

    def __iter__(self) -> Iterator[Token]:
        """Yield tokens up to and including the first EOF."""
        while True:
            tok = self.scan_token()
            yield tok
            if tok.kind == TokenKind.EOF:
                return

    def lex(self) -> list[Token]:
        """Tokenize the remaining source and return the token list."""
        return list(self)

    def scan_token(self) -> Token:
        """Scan and return the next token."""
        self._skip_whitespace()
        self.start = self.pos

        if self._at_end():
            return self._make(TokenKind.EOF)

        ch = self._advance()

        if ch == "/" and self._peek() == "/":
            return self._line_comment()
        if ch == "/":
            return self._make(TokenKind.SLASH)
        if ch in SINGLE_CHAR_TOKENS:
            return self._make(SINGLE_CHAR_TOKENS[ch])
        if ch in RELATIONAL_TOKENS:
            alone, with_equal = RELATIONAL_TOKENS[ch]
            return self._make(with_equal if self._match("=") else alone)
        if ch == '"':
            return self._string()
        if _is_digit(ch):
            return self._number()
        if _is_alpha(ch):
            return self._identifier()

        return self._error(f"Unknown Token {ch}")

    # ── Helpers ───────────────────────────────────────────────────

    def _at_end(self) -> bool:
        return self.pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return "\0"

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == "\n":
            self.line += 1
        return ch

    def _match(self, expected: str) -> bool:
        if self._at_end() or self.source[self.pos] != expected:
            return False
        self.pos += 1
        return True

    def _make(self, kind: TokenKind, value: TokenValue = None) -> Token:
        span = Span(self.start, self.pos - self.start, self.line)
        return Token(kind, value, span)

    def _error(self, message: str) -> Token:
        return self._make(TokenKind.ERROR, message)

    def _skip_whitespace(self) -> None:
        while not self._at_end():
            ch = self.source[self.pos]
            if ch in " \r\t\n":
                self._advance()
            elif ch == "/" and self._peek(1) == "/" and not self.keep_comments:
                self._skip_line()
            else:
                return

    # ── Comments ─────────────────────────────────────────────────

    def _skip_line(self) -> None:
        while not self._at_end() and self.source[self.pos] != "\n":
            self._advance()

    def _line_comment(self) -> Token:
        self._skip_line()
        return self._make(TokenKind.COMMENT, self.source[self.start + 2 : self.pos])

    # ── Literals ─────────────────────────────────────────────────

    def _string(self) -> Token:
        while not self._at_end() and self.source[self.pos] != '"':
            self._advance()

        if self._at_end():
            return self._error("Unterminated string")

        self._advance()  # closing "
        return self._make(TokenKind.STRING, self.source[self.start + 1 : self.pos - 1])

    def _number(self) -> Token:
        while _is_digit(self._peek()):
            self._advance()

        # A fractional part needs at least one digit after the dot.
        if self._peek() == "." and _is_digit(self._peek(1)):
            self._advance()
            while _is_digit(self._peek()):
                self._advance()

        return self._make(TokenKind.NUMBER, float(self.source[self.start : self.pos]))

    def _identifier(self) -> Token:
        while _is_alpha(self._peek()) or _is_digit(self._peek()):
            self._advance()
        word = self.source[self.start : self.pos]

        kind = keyword_kind(word)
        if kind is not None:
            return self._make(kind)
        return self._make(TokenKind.IDENTIFIER, word)
