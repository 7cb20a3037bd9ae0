"""Recursive-descent parser over the token stream.

Leaves keep their exact source lexeme: numbers are not converted and strings
are not unescaped, so the tree always reflects the original formatting.
Failures inside an array element are recorded in ``Parser.soft_errors`` and
the array keeps going; everywhere else a failure aborts the whole parse.
Nesting deeper than ``MAX_DEPTH`` containers also aborts the whole parse.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Union

from .tokens import EOF_TOKEN, Token, TokenKind, Tokenizer

MAX_DEPTH = 200


@dataclass(frozen=True)
class JsonKey:
    lexeme: str


@dataclass(frozen=True)
class StringNode:
    lexeme: str


@dataclass(frozen=True)
class NumberNode:
    lexeme: str


@dataclass(frozen=True)
class BooleanNode:
    lexeme: str


@dataclass(frozen=True)
class ArrayNode:
    items: tuple["ParseNode", ...] = ()


@dataclass(frozen=True)
class ObjectNode:
    entries: tuple[tuple[JsonKey, "ParseNode"], ...] = ()


ParseNode = Union[ObjectNode, ArrayNode, StringNode, NumberNode, BooleanNode]

_KIND_NAMES = {
    TokenKind.OPEN_BRACE: "'{'",
    TokenKind.CLOSE_BRACE: "'}'",
    TokenKind.OPEN_BRACKET: "'['",
    TokenKind.CLOSE_BRACKET: "']'",
    TokenKind.COMMA: "','",
    TokenKind.COLON: "':'",
    TokenKind.WHITESPACE: "whitespace",
    TokenKind.NEWLINE: "newline",
    TokenKind.STRING: "string",
    TokenKind.NUMBER: "number",
    TokenKind.BOOLEAN: "boolean",
    TokenKind.INVALID_CHAR: "invalid character",
    TokenKind.EOF: "end of input",
}


def describe_kind(kind: TokenKind) -> str:
    return _KIND_NAMES[kind]


def describe_token(token: Token) -> str:
    if token.kind is TokenKind.EOF:
        return describe_kind(token.kind)
    if token.kind in (TokenKind.STRING, TokenKind.NUMBER, TokenKind.BOOLEAN, TokenKind.INVALID_CHAR):
        return f"{describe_kind(token.kind)} {token.lexeme!r}"
    return describe_kind(token.kind)


class ParseError(Exception):
    def __init__(self, message: str, *, line: Optional[int] = None, column: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column

    def describe(self) -> str:
        if self.line is None:
            return self.message
        return f"{self.message} (line {self.line}, column {self.column})"


class NestingError(ParseError):
    """Raised when containers nest deeper than ``MAX_DEPTH``; never recovered."""


class Parser:
    def __init__(
        self,
        text: str,
        tokenizer: Optional[Tokenizer] = None,
        *,
        max_depth: int = MAX_DEPTH,
    ) -> None:
        self.text = text
        self.max_depth = max_depth
        self.depth = 0
        self.tokens: list[Token] = (tokenizer or Tokenizer()).tokenize(text)
        self.cursor = 0
        self.soft_errors: list[ParseError] = []
        self._offsets: list[int] = []
        offset = 0
        for token in self.tokens:
            self._offsets.append(offset)
            offset += len(token.lexeme)
        self._dispatch: dict[TokenKind, Callable[[], ParseNode]] = {
            TokenKind.OPEN_BRACE: self.parse_object,
            TokenKind.OPEN_BRACKET: self.parse_array,
            TokenKind.STRING: self.parse_string,
            TokenKind.NUMBER: self.parse_number,
            TokenKind.BOOLEAN: self.parse_boolean,
        }

    def peek(self) -> Token:
        if self.cursor < len(self.tokens):
            return self.tokens[self.cursor]
        return EOF_TOKEN

    def advance(self) -> Token:
        token = self.peek()
        if token.kind is not TokenKind.EOF:
            self.cursor += 1
        return token

    def skip_whitespace(self) -> None:
        while self.peek().kind.is_whitespace:
            self.cursor += 1

    def expect(self, kind: TokenKind) -> Token:
        self.skip_whitespace()
        token = self.peek()
        if token.kind is not kind:
            raise self._error(f"expected {describe_kind(kind)}, found {describe_token(token)}")
        return self.advance()

    def parse(self) -> ParseNode:
        node = self.parse_value()
        self.skip_whitespace()
        token = self.peek()
        if token.kind is not TokenKind.EOF:
            raise self._error(f"expected end of input, found {describe_token(token)}")
        return node

    def parse_value(self) -> ParseNode:
        self.skip_whitespace()
        token = self.peek()
        production = self._dispatch.get(token.kind)
        if production is None:
            raise self._error(f"expected a value, found {describe_token(token)}")
        if token.kind in (TokenKind.OPEN_BRACE, TokenKind.OPEN_BRACKET):
            if self.depth >= self.max_depth:
                line, column = self._position()
                raise NestingError(
                    f"nesting too deep: more than {self.max_depth} levels",
                    line=line,
                    column=column,
                )
            self.depth += 1
            try:
                return production()
            finally:
                self.depth -= 1
        return production()

    def parse_object(self) -> ObjectNode:
        self.expect(TokenKind.OPEN_BRACE)
        self.skip_whitespace()
        if self.peek().kind is TokenKind.CLOSE_BRACE:
            self.advance()
            return ObjectNode()

        entries: list[tuple[JsonKey, ParseNode]] = []
        while True:
            key = JsonKey(self.expect(TokenKind.STRING).lexeme)
            self.expect(TokenKind.COLON)
            entries.append((key, self.parse_value()))

            self.skip_whitespace()
            token = self.peek()
            if token.kind is TokenKind.COMMA:
                self.advance()
                continue
            if token.kind is TokenKind.CLOSE_BRACE:
                self.advance()
                return ObjectNode(tuple(entries))
            raise self._error(f"expected ',' or '}}' in object, found {describe_token(token)}")

    def parse_array(self) -> ArrayNode:
        self.expect(TokenKind.OPEN_BRACKET)
        self.skip_whitespace()
        if self.peek().kind is TokenKind.CLOSE_BRACKET:
            self.advance()
            return ArrayNode()

        items: list[ParseNode] = []
        while True:
            try:
                items.append(self.parse_value())
            except NestingError:
                raise
            except ParseError as exc:
                self.soft_errors.append(exc)

            self.skip_whitespace()
            token = self.peek()
            if token.kind is TokenKind.COMMA:
                self.advance()
                continue
            if token.kind is TokenKind.CLOSE_BRACKET:
                self.advance()
                return ArrayNode(tuple(items))
            raise self._error(f"expected ',' or ']' in array, found {describe_token(token)}")

    def parse_string(self) -> StringNode:
        return StringNode(self.expect(TokenKind.STRING).lexeme)

    def parse_number(self) -> NumberNode:
        return NumberNode(self.expect(TokenKind.NUMBER).lexeme)

    def parse_boolean(self) -> BooleanNode:
        return BooleanNode(self.expect(TokenKind.BOOLEAN).lexeme)

    def _error(self, message: str) -> ParseError:
        line, column = self._position()
        return ParseError(message, line=line, column=column)

    def _position(self) -> tuple[int, int]:
        if self.cursor < len(self._offsets):
            offset = self._offsets[self.cursor]
        else:
            offset = len(self.text)
        line = self.text.count("\n", 0, offset) + 1
        column = offset - (self.text.rfind("\n", 0, offset) + 1) + 1
        return line, column


def parse(text: str) -> ParseNode:
    """Parse ``text`` into a tree, raising ``ParseError`` on a hard failure."""
    return Parser(text).parse()


def parse_with_recovery(text: str) -> tuple[ParseNode, list[ParseError]]:
    """Parse ``text`` and also return the array-element errors that were skipped."""
    parser = Parser(text)
    node = parser.parse()
    return node, list(parser.soft_errors)


def dumps(node: ParseNode) -> str:
    """Rebuild compact text from a tree using only its lexemes and delimiters."""
    if isinstance(node, ObjectNode):
        body = ",".join(f"{key.lexeme}:{dumps(value)}" for key, value in node.entries)
        return "{" + body + "}"
    if isinstance(node, ArrayNode):
        return "[" + ",".join(dumps(item) for item in node.items) + "]"
    return node.lexeme
