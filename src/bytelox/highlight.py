"""Pygments lexer for the bytelox scripting language."""

from pygments import highlight
from pygments.formatters import NullFormatter, TerminalFormatter
from pygments.lexer import RegexLexer, words
from pygments.token import (
    Comment,
    Error,
    Keyword,
    Name,
    Number,
    Operator,
    Punctuation,
    String,
    Text,
)


class ByteloxLexer(RegexLexer):
    """Pygments lexer for the bytelox scripting language."""

    name = "bytelox"
    aliases = ["bytelox", "lox"]
    filenames = ["*.lox"]
    mimetypes = ["text/x-lox"]

    tokens = {
        "root": [
            # Whitespace
            (r"\s+", Text),
            # Line comments (// ...)
            (r"//.*$", Comment.Single),
            # Strings run to the closing quote and may span lines
            (r'"[^"]*"', String),
            (r'"[^"]*\Z', Error),
            # Numbers
            (r"[0-9]+\.[0-9]+", Number.Float),
            (r"[0-9]+", Number.Integer),
            # Declarations
            (words(("var", "fun", "class"), prefix=r"\b", suffix=r"\b"), Keyword.Declaration),
            # Constants
            (words(("true", "false", "nil"), prefix=r"\b", suffix=r"\b"), Keyword.Constant),
            # Core keywords
            (
                words(
                    (
                        "and",
                        "else",
                        "for",
                        "if",
                        "or",
                        "print",
                        "return",
                        "super",
                        "this",
                        "while",
                    ),
                    prefix=r"\b",
                    suffix=r"\b",
                ),
                Keyword,
            ),
            # Operators (two-char before single-char)
            (r"==|!=|<=|>=", Operator),
            (r"[+\-*/<>!=]", Operator),
            # Identifiers
            (r"[A-Za-z_][A-Za-z0-9_]*", Name),
            # Punctuation
            (r"[(){},.;]", Punctuation),
            # Anything else is an unknown token
            (r".", Error),
        ],
    }


def highlight_source(source: str, *, color: bool = True) -> str:
    """Render ``source`` for a terminal."""
    formatter = TerminalFormatter() if color else NullFormatter()
    return highlight(source, ByteloxLexer(), formatter)
