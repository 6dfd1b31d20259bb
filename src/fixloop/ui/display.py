"""Two-pane live terminal display for test output and model reasoning."""

from __future__ import annotations

import math
import re
from contextlib import contextmanager
from typing import Callable, Iterator

from rich.cells import cell_len
from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from fixloop.ui.log_store import LogStore

# Show/hide cursor sequences emitted by test runners fight with Live's cursor handling
CURSOR_CODES_RE = re.compile(r"\x1b\[\?25[hl]")

# Panel border plus padding, per side
PANEL_CHROME = 2


def strip_cursor_codes(text: str) -> str:
    return CURSOR_CODES_RE.sub("", text)


def tail_lines(text: str, height: int, width: int) -> str:
    """Return the last lines of text that fit in height rows of the given width."""
    if height <= 0:
        return ""
    width = max(width, 1)
    kept: list[str] = []
    rows = 0
    for line in reversed(text.splitlines()):
        line_rows = max(1, math.ceil(cell_len(Text.from_ansi(line).plain) / width))
        if rows + line_rows > height and kept:
            break
        kept.append(line)
        rows += line_rows
    return "\n".join(reversed(kept))


class DisplaySink:
    """Mirrors an output stream and a reasoning stream to the terminal.

    Lifecycle is initialize -> append_* -> destroy. While initialized on a
    terminal, text goes into a LogStore rendered by a full-screen rich Live
    layout. Otherwise (not started, destroyed, disabled or not a TTY) text is
    written straight to the console.
    """

    def __init__(
        self,
        console: Console | None = None,
        store: LogStore | None = None,
        enabled: bool = True,
    ) -> None:
        self.console = console or Console()
        self.store = store or LogStore()
        self.enabled = enabled
        self._live: Live | None = None
        self._unsubscribe: Callable[[], None] | None = None
        # Console writes deferred while a confirmation prompt is open
        self._held: list[tuple[str, str | None]] | None = None

    @property
    def is_active(self) -> bool:
        return self._live is not None

    def initialize(self) -> None:
        """Start the live layout. Repeated calls are ignored."""
        if self._live is not None or not self.enabled:
            return
        if not self.console.is_terminal:
            return

        live = Live(
            self._render(),
            console=self.console,
            screen=True,
            auto_refresh=False,
            redirect_stdout=False,
            redirect_stderr=False,
        )
        live.start()
        self._live = live
        self._unsubscribe = self.store.subscribe(self.refresh)

    def append_output(self, text: str) -> None:
        if self.is_active:
            self.store.append_output(strip_cursor_codes(text))
        else:
            self._write(text)

    def append_reasoning(self, text: str) -> None:
        if self.is_active:
            self.store.append_reasoning(strip_cursor_codes(text))
        else:
            self._write(text, style="dim")

    def refresh(self) -> None:
        if self._live is not None:
            self._live.update(self._render(), refresh=True)

    def destroy(self) -> None:
        """Stop the live layout and restore the terminal. Safe to call repeatedly."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._live is not None:
            live, self._live = self._live, None
            live.stop()

    def __enter__(self) -> DisplaySink:
        self.initialize()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.destroy()

    @contextmanager
    def hold(self) -> Iterator[None]:
        """Defer console writes until the block exits, then flush them in order.

        Used around a confirmation prompt so output from other files cannot
        land between a diff and its answer. Text bound for the live layout
        is unaffected.
        """
        if self._held is not None:
            yield
            return
        self._held = []
        try:
            yield
        finally:
            held, self._held = self._held, None
            for text, style in held:
                self._write(text, style)

    def _write(self, text: str, style: str | None = None) -> None:
        if self._held is not None:
            self._held.append((text, style))
            return
        # from_ansi drops the trailing newline of the chunk
        rendered = Text.from_ansi(strip_cursor_codes(text), style=style or "", end="")
        self.console.print(rendered, end="\n" if text.endswith("\n") else "", soft_wrap=True)

    def _panel(self, text: str, title: str, border: str, height: int, style: str = "") -> Panel:
        width = self.console.width - 2 * PANEL_CHROME
        body = Text.from_ansi(tail_lines(text, height, width), style=style)
        return Panel(body, title=title, title_align="left", border_style=border)

    def _render(self) -> Layout:
        height = max(self.console.height // 2 - PANEL_CHROME, 1)
        layout = Layout()
        layout.split_column(
            Layout(self._panel(self.store.output, " Test Results ", "cyan", height), name="output"),
            Layout(
                self._panel(self.store.reasoning, " Reasoning ", "green", height, style="grey62"),
                name="reasoning",
            ),
        )
        return layout
