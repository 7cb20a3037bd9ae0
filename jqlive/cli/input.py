from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional, TextIO

from prompt_toolkit.input import Input, create_input

from ..core.session_log import log_info

TTY_PATH = "/dev/tty"


class InputError(Exception):
    """Raised when the document cannot be read."""


def read_document(path: Optional[str] = None, stdin: Optional[TextIO] = None) -> str:
    """Read the whole document from ``path`` or, when absent or ``-``, from stdin."""
    if path and path != "-":
        file_path = Path(path).expanduser()
        try:
            text = file_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise InputError(f"No such file: {file_path}") from None
        except (OSError, UnicodeDecodeError) as exc:
            raise InputError(f"Could not read {file_path}: {exc}") from exc
        log_info("input", "input.file", {"path": str(file_path), "chars": len(text)})
        return text

    stream = stdin if stdin is not None else sys.stdin
    if stream is None or stream.isatty():
        raise InputError("No input: pipe a document on stdin or pass a file path.")
    text = stream.read()
    log_info("input", "input.stdin", {"chars": len(text)})
    return text


def open_terminal_input(stdin: Optional[TextIO] = None) -> tuple[Optional[Input], Optional[TextIO]]:
    """Return a prompt_toolkit input bound to the controlling terminal.

    When the document arrived on stdin, keystrokes have to come from the tty
    instead. The returned handle must be closed by the caller.
    """
    stream = stdin if stdin is not None else sys.stdin
    if stream is not None and stream.isatty():
        return None, None
    handle = open(TTY_PATH, "r", encoding="utf-8")
    return create_input(stdin=handle), handle
