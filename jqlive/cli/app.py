from __future__ import annotations

import argparse
import asyncio
from contextlib import suppress
from dataclasses import dataclass
from typing import Optional

from prompt_toolkit.application import Application
from prompt_toolkit.buffer import Buffer
from prompt_toolkit.filters import Condition
from prompt_toolkit.input import Input
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import Layout
from prompt_toolkit.layout.containers import ConditionalContainer, HSplit, Window
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.output import ColorDepth, Output
from prompt_toolkit.styles import DynamicStyle, Style
from prompt_toolkit.widgets import Frame, TextArea
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from ..config import ConfigManager, JqliveSettings
from ..core.session_log import (
    SessionLogger,
    log_exception,
    log_info,
    set_active_logger,
)
from ..jobs import JobClient, JobSuccess
from ..paths import JqlivePaths
from .diagnostics import run_diagnostics
from .input import InputError, open_terminal_input, read_document
from .viewport import VIEWPORT_STYLES, ScrollText

ERROR_PANEL_MIN_ROWS = 4
ERROR_PANEL_MAX_ROWS = 64

BASE_STYLE = {
    **VIEWPORT_STYLES,
    "error.frame": "ansired bold",
    "query.frame": "",
    "status": "reverse",
}
ERROR_STYLE_OVERRIDES = {"query.frame": "ansired"}


@dataclass(frozen=True)
class ErrorPanel:
    title: str
    message: str

    def height(self) -> int:
        """Rows for the message body; the frame adds its own border."""
        rows = len(self.message.splitlines())
        return max(ERROR_PANEL_MIN_ROWS, min(rows, ERROR_PANEL_MAX_ROWS))


class JqliveApp:
    """Interactive filter editor: query line, live output, error panel."""

    def __init__(
        self,
        document: str,
        settings: Optional[JqliveSettings] = None,
        *,
        client: Optional[JobClient] = None,
    ) -> None:
        self.settings = settings or JqliveSettings()
        self.original = document
        self.viewport = self._make_viewport(document)
        self.error: ErrorPanel | None = None
        self.running = True
        self.last_query: str | None = None
        self.client = client or JobClient(self.settings.tool, self.settings.tool_args)
        self.query_area: TextArea | None = None
        self._app: Application | None = None
        self._output_window: Window | None = None
        self._stop_event: asyncio.Event | None = None
        self._base_style = Style.from_dict(BASE_STYLE)
        self._error_style = Style.from_dict({**BASE_STYLE, **ERROR_STYLE_OVERRIDES})

    def submit_query(self, query: Optional[str] = None) -> None:
        if query is None:
            query = self.query_area.text if self.query_area is not None else ""
        self.last_query = query
        self.client.submit(self.original, query)

    def update(self) -> bool:
        """Consume a finished job, if any. Returns True when the display changed."""
        result = self.client.poll()
        if result is None:
            return False
        if isinstance(result, JobSuccess):
            self.viewport = self._make_viewport(result.output)
            self.error = None
        else:
            self.error = ErrorPanel(result.title, result.message)
        return True

    def _make_viewport(self, text: str) -> ScrollText:
        if self.settings.color:
            return ScrollText.from_text(text)
        return ScrollText.plain(text)

    def scroll_up(self) -> None:
        self.viewport.scroll_up()

    def scroll_down(self) -> None:
        self.viewport.scroll_down()

    def quit(self) -> None:
        self.running = False
        if self._stop_event is not None:
            self._stop_event.set()
        if self._app is not None and self._app.is_running:
            self._app.exit()

    def _format_status(self, elapsed: float) -> str:
        return f"running {self.settings.tool} ({elapsed:.1f}s)"

    def status_text(self) -> str:
        job = self.client.current
        if job is not None:
            return self._format_status(job.elapsed())
        if self.error is not None:
            return "last query failed; showing previous output"
        return "Enter: run  Up/Down: scroll  Esc: quit"

    async def run_async(
        self,
        tui_input: Optional[Input] = None,
        output: Optional[Output] = None,
    ) -> None:
        self._app = self._build_application(tui_input, output)
        self._stop_event = asyncio.Event()
        tick_task = asyncio.create_task(self._tick())
        try:
            await self._app.run_async()
        finally:
            self._stop_event.set()
            with suppress(asyncio.CancelledError):
                await tick_task
            self.running = False

    async def _tick(self) -> None:
        if self._stop_event is None:
            self._stop_event = asyncio.Event()
        while not self._stop_event.is_set():
            changed = self.update()
            if self._app is not None and (changed or self.client.pending):
                self._app.invalidate()
            try:
                await asyncio.wait_for(
                    self._stop_event.wait(), timeout=self.settings.poll_interval_s
                )
            except asyncio.TimeoutError:
                continue

    def _output_fragments(self) -> list[tuple[str, str]]:
        rows = None
        if self._output_window is not None and self._output_window.render_info is not None:
            rows = self._output_window.render_info.window_height
        return self.viewport.to_fragments(rows)

    def _error_message(self) -> str:
        return self.error.message if self.error is not None else ""

    def _error_title(self) -> str:
        return self.error.title if self.error is not None else ""

    def _error_height(self) -> int:
        return self.error.height() if self.error is not None else 0

    def _style(self) -> Style:
        return self._error_style if self.error is not None else self._base_style

    def _accept_query(self, buffer: Buffer) -> bool:
        self.submit_query(buffer.text)
        return True

    def _key_bindings(self) -> KeyBindings:
        bindings = KeyBindings()

        @bindings.add("escape", eager=True)
        @bindings.add("c-c")
        def _quit(event) -> None:  # type: ignore[no-untyped-def]
            self.quit()

        @bindings.add("up")
        def _up(event) -> None:  # type: ignore[no-untyped-def]
            self.scroll_up()
            event.app.invalidate()

        @bindings.add("down")
        def _down(event) -> None:  # type: ignore[no-untyped-def]
            self.scroll_down()
            event.app.invalidate()

        @bindings.add("tab")
        @bindings.add("s-tab")
        def _ignore(event) -> None:  # type: ignore[no-untyped-def]
            pass

        return bindings

    def _build_application(
        self,
        tui_input: Optional[Input] = None,
        output: Optional[Output] = None,
    ) -> Application:
        self.query_area = TextArea(
            multiline=False,
            wrap_lines=False,
            accept_handler=self._accept_query,
        )
        self._output_window = Window(
            FormattedTextControl(self._output_fragments, focusable=False),
            wrap_lines=False,
        )
        error_window = Window(
            FormattedTextControl(self._error_message, focusable=False),
            wrap_lines=True,
            height=self._error_height,
        )
        root = HSplit(
            [
                Frame(self._output_window, title="output"),
                ConditionalContainer(
                    Frame(error_window, title=self._error_title, style="class:error.frame"),
                    filter=Condition(lambda: self.error is not None),
                ),
                Frame(self.query_area, title=self.settings.tool, style="class:query.frame"),
                Window(
                    FormattedTextControl(lambda: [("class:status", f" {self.status_text()}")]),
                    height=1,
                    style="class:status",
                ),
            ]
        )
        return Application(
            layout=Layout(root, focused_element=self.query_area),
            key_bindings=self._key_bindings(),
            style=DynamicStyle(self._style),
            color_depth=None if self.settings.color else ColorDepth.MONOCHROME,
            input=tui_input,
            output=output,
            mouse_support=False,
            full_screen=True,
        )


def _print_startup_error(console: Console, message: str) -> None:
    console.print(Panel(Text(message), title="jqlive", border_style="red"))


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="jqlive - build jq filters interactively against a document")
    parser.add_argument("file", nargs="?", help="Document to load (default: standard input)")
    parser.add_argument("--tool", help="Filter executable to run (default: jq)")
    parser.add_argument(
        "--level",
        choices=["off", "error", "warn", "info", "debug"],
        help="Log level for ~/.jqlive/logs",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument(
        "--parse",
        action="store_true",
        help="Parse the document with the built-in parser, print the tree and exit",
    )
    parser.add_argument("-v", "--version", action="store_true", help="Show version and exit")
    args = parser.parse_args(argv)
    if args.version:
        from jqlive import __version__

        print(f"jqlive {__version__}")
        return

    console = Console(stderr=True, no_color=args.no_color)
    paths = JqlivePaths()
    settings = ConfigManager(paths, console).load_settings(
        {
            "tool": args.tool,
            "debug": args.level,
            "color": False if args.no_color else None,
        }
    )
    logger = SessionLogger(paths, settings.debug)
    set_active_logger(logger)
    try:
        try:
            document = read_document(args.file)
        except InputError as exc:
            _print_startup_error(console, str(exc))
            raise SystemExit(1) from None

        if args.parse:
            raise SystemExit(run_diagnostics(document, Console(no_color=not settings.color)))

        try:
            tui_input, tty_handle = open_terminal_input()
        except OSError as exc:
            log_exception("cli", exc)
            _print_startup_error(console, f"Could not open the terminal for input: {exc}")
            raise SystemExit(1) from None

        log_info("cli", "app.start", {"tool": settings.tool, "chars": len(document)})
        app = JqliveApp(document, settings)
        try:
            asyncio.run(app.run_async(tui_input))
        finally:
            if tty_handle is not None:
                tty_handle.close()
    finally:
        logger.close()
        set_active_logger(None)


if __name__ == "__main__":
    main()
