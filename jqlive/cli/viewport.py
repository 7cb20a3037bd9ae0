from __future__ import annotations

from typing import Iterable, Optional

from ..core.session_log import log_debug
from ..syntax.tokens import Token, TokenKind, tokenize

Span = tuple[str, str]
Line = list[Span]

STRING_STYLE = "class:json.string"
NUMBER_STYLE = "class:json.number"
INVALID_STYLE = "class:json.invalid"

_STYLE_BY_KIND = {
    TokenKind.STRING: STRING_STYLE,
    TokenKind.NUMBER: NUMBER_STYLE,
    TokenKind.INVALID_CHAR: INVALID_STYLE,
}

VIEWPORT_STYLES = {
    "json.string": "ansigreen",
    "json.number": "ansicyan",
    "json.invalid": "reverse ansired",
}


def style_for(kind: TokenKind) -> str:
    return _STYLE_BY_KIND.get(kind, "")


class ScrollText:
    """Styled, scrollable lines for the output pane.

    Lines are built once per content change; scrolling only moves the offset.
    """

    def __init__(self, lines: Optional[list[Line]] = None) -> None:
        self.lines: list[Line] = lines or []
        self.line_offset = 0

    @classmethod
    def from_tokens(cls, tokens: Iterable[Token]) -> "ScrollText":
        lines: list[Line] = []
        current: Line = []
        for token in tokens:
            if token.kind is TokenKind.NEWLINE:
                current.append(("", token.lexeme))
                lines.append(current)
                current = []
                continue
            current.append((style_for(token.kind), token.lexeme))
        if current:
            lines.append(current)
        return cls(lines)

    @classmethod
    def from_text(cls, text: str) -> "ScrollText":
        return cls.from_tokens(tokenize(text))

    @classmethod
    def plain(cls, text: str) -> "ScrollText":
        """Unstyled lines, split the same way ``from_text`` splits them."""
        pieces = text.split("\n")
        lines: list[Line] = [[("", piece + "\n")] for piece in pieces[:-1]]
        if pieces[-1]:
            lines.append([("", pieces[-1])])
        return cls(lines)

    def __len__(self) -> int:
        return len(self.lines)

    def text(self) -> str:
        return "".join(text for line in self.lines for _, text in line)

    def scroll_up(self) -> None:
        self.line_offset = max(self.line_offset - 1, 0)
        log_debug("viewport", "viewport.scroll", {"line_offset": self.line_offset})

    def scroll_down(self) -> None:
        self.line_offset += 1
        log_debug("viewport", "viewport.scroll", {"line_offset": self.line_offset})

    def visible_lines(self, rows: Optional[int] = None) -> list[Line]:
        if rows is None:
            return self.lines[self.line_offset :]
        if rows <= 0:
            return []
        return self.lines[self.line_offset : self.line_offset + rows]

    def to_fragments(self, rows: Optional[int] = None) -> list[Span]:
        """Formatted text for prompt_toolkit; each visible line ends with one ``\\n``."""
        fragments: list[Span] = []
        for line in self.visible_lines(rows):
            ended = False
            for style, text in line:
                if text.endswith("\n"):
                    fragments.append((style, text.rstrip("\r\n") + "\n"))
                    ended = True
                else:
                    fragments.append((style, text))
            if not ended:
                fragments.append(("", "\n"))
        return fragments
