"""Tokenizer and parser for the document format."""

from .parser import (
    ArrayNode,
    BooleanNode,
    JsonKey,
    MAX_DEPTH,
    NestingError,
    NumberNode,
    ObjectNode,
    ParseError,
    ParseNode,
    Parser,
    StringNode,
    dumps,
    parse,
    parse_with_recovery,
)
from .tokens import DEFAULT_RULES, EOF_TOKEN, PatternRule, Token, TokenKind, Tokenizer, tokenize

__all__ = [
    "ArrayNode",
    "BooleanNode",
    "DEFAULT_RULES",
    "EOF_TOKEN",
    "JsonKey",
    "MAX_DEPTH",
    "NestingError",
    "NumberNode",
    "ObjectNode",
    "ParseError",
    "ParseNode",
    "Parser",
    "PatternRule",
    "StringNode",
    "Token",
    "TokenKind",
    "Tokenizer",
    "dumps",
    "parse",
    "parse_with_recovery",
    "tokenize",
]
