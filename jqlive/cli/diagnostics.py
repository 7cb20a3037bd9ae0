from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.text import Text
from rich.tree import Tree

from ..core.session_log import log_info
from ..syntax.parser import (
    ArrayNode,
    BooleanNode,
    NumberNode,
    ObjectNode,
    ParseError,
    ParseNode,
    StringNode,
    parse_with_recovery,
)

EXIT_OK = 0
EXIT_PARSE_ERROR = 1
EXIT_SOFT_ERRORS = 2

_LEAF_STYLES = {
    StringNode: ("string", "green"),
    NumberNode: ("number", "cyan"),
    BooleanNode: ("boolean", "magenta"),
}


def _label(node: ParseNode, prefix: str = "") -> Text:
    text = Text(prefix)
    if isinstance(node, ObjectNode):
        text.append(f"object ({len(node.entries)} entries)", style="bold")
    elif isinstance(node, ArrayNode):
        text.append(f"array ({len(node.items)} items)", style="bold")
    else:
        name, style = _LEAF_STYLES[type(node)]
        text.append(f"{name} ", style="dim")
        text.append(node.lexeme, style=style)
    return text


def _add_children(tree: Tree, node: ParseNode) -> None:
    if isinstance(node, ObjectNode):
        for key, value in node.entries:
            branch = tree.add(_label(value, prefix=f"{key.lexeme}: "))
            _add_children(branch, value)
    elif isinstance(node, ArrayNode):
        for idx, item in enumerate(node.items):
            branch = tree.add(_label(item, prefix=f"[{idx}] "))
            _add_children(branch, item)


def render_parse_tree(node: ParseNode) -> Tree:
    tree = Tree(_label(node), guide_style="dim")
    _add_children(tree, node)
    return tree


def run_diagnostics(text: str, console: Console) -> int:
    """Parse ``text`` without the external tool and print what was found."""
    try:
        node, soft_errors = parse_with_recovery(text)
    except ParseError as exc:
        log_info("diagnostics", "parse.failed", exc.describe())
        console.print(
            Panel(
                Text(exc.describe()),
                title="Parse error",
                border_style="red",
            )
        )
        return EXIT_PARSE_ERROR

    console.print(render_parse_tree(node))
    if not soft_errors:
        return EXIT_OK
    for err in soft_errors:
        console.print(Text.assemble(("skipped array element: ", "yellow"), err.describe()))
    return EXIT_SOFT_ERRORS
