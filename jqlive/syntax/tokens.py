"""Lexer for JSON-like text.

The tokenizer is total: every character of the input ends up in exactly one
token, and characters no rule accepts become single-character
``INVALID_CHAR`` tokens. Whitespace and newlines are kept in the stream so
the original text can be rebuilt and line boundaries stay visible to the
viewport.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Sequence


class TokenKind(Enum):
    OPEN_BRACE = "open-brace"
    CLOSE_BRACE = "close-brace"
    OPEN_BRACKET = "open-bracket"
    CLOSE_BRACKET = "close-bracket"
    COMMA = "comma"
    COLON = "colon"
    WHITESPACE = "whitespace"
    NEWLINE = "newline"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    INVALID_CHAR = "invalid-char"
    EOF = "eof"

    @property
    def is_whitespace(self) -> bool:
        return self in (TokenKind.WHITESPACE, TokenKind.NEWLINE)


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    lexeme: str


@dataclass(frozen=True)
class PatternRule:
    kind: TokenKind
    pattern: re.Pattern[str]

    @classmethod
    def compile(cls, kind: TokenKind, regex: str) -> "PatternRule":
        return cls(kind, re.compile(regex))


EOF_TOKEN = Token(TokenKind.EOF, "")

# Order matters: the first rule that matches wins, not the longest one.
DEFAULT_RULES: tuple[PatternRule, ...] = (
    PatternRule.compile(TokenKind.OPEN_BRACE, r"\{"),
    PatternRule.compile(TokenKind.CLOSE_BRACE, r"\}"),
    PatternRule.compile(TokenKind.OPEN_BRACKET, r"\["),
    PatternRule.compile(TokenKind.CLOSE_BRACKET, r"\]"),
    PatternRule.compile(TokenKind.COMMA, r","),
    PatternRule.compile(TokenKind.COLON, r":"),
    PatternRule.compile(TokenKind.NEWLINE, r"\r?\n"),
    PatternRule.compile(TokenKind.WHITESPACE, r"[ \t]+"),
    PatternRule.compile(TokenKind.BOOLEAN, r"(?:true|false)"),
    PatternRule.compile(TokenKind.STRING, r'"(?:[^"\\]|\\.)*"'),
    # Numbers are split into three rules: ".5", "5." and "5" are all accepted.
    PatternRule.compile(TokenKind.NUMBER, r"-?\d*\.\d+"),
    PatternRule.compile(TokenKind.NUMBER, r"-?\d+\.\d*"),
    PatternRule.compile(TokenKind.NUMBER, r"-?\d+"),
)


class Tokenizer:
    """Splits text into tokens using an ordered, immutable rule table."""

    def __init__(self, rules: Sequence[PatternRule] = DEFAULT_RULES) -> None:
        self.rules: tuple[PatternRule, ...] = tuple(rules)

    def iter_tokens(self, text: str) -> Iterator[Token]:
        pos = 0
        end = len(text)
        while pos < end:
            token = self._match_at(text, pos)
            yield token
            pos += len(token.lexeme)

    def tokenize(self, text: str) -> list[Token]:
        return list(self.iter_tokens(text))

    def _match_at(self, text: str, pos: int) -> Token:
        for rule in self.rules:
            match = rule.pattern.match(text, pos)
            # an empty match would stall the cursor; treat it as no match
            if match is not None and match.end() > pos:
                return Token(rule.kind, match.group(0))
        return Token(TokenKind.INVALID_CHAR, text[pos])


_DEFAULT_TOKENIZER = Tokenizer()


def tokenize(text: str) -> list[Token]:
    """Tokenize ``text`` with the default rule table."""
    return _DEFAULT_TOKENIZER.tokenize(text)


def iter_tokens(text: str) -> Iterator[Token]:
    """Lazily tokenize ``text`` with the default rule table."""
    return _DEFAULT_TOKENIZER.iter_tokens(text)
