"""Diff preview and y/N confirmation before a file is overwritten."""

from __future__ import annotations

import asyncio
import threading
from contextlib import nullcontext
from typing import TYPE_CHECKING, Callable

from rich.console import Console
from rich.text import Text

from fixloop.utils.diff_generator import highlight_changes

if TYPE_CHECKING:
    from fixloop.ui.display import DisplaySink

AFFIRMATIVE_ANSWERS = frozenset({"y", "yes"})


class ConfirmationGate:
    """Asks the user to accept or decline one proposed file change at a time.

    Model round-trips for several files may finish together; the lock keeps
    their previews and prompts from interleaving on the terminal, and the
    display's console output is held back while a prompt is open.
    """

    def __init__(
        self,
        console: Console | None = None,
        prompt_fn: Callable[[Text], str] | None = None,
        display: DisplaySink | None = None,
    ) -> None:
        self.console = console or Console()
        self._prompt_fn = prompt_fn or self.console.input
        self.display = display
        self._lock = asyncio.Lock()

    async def confirm(self, file_path: str, original: str, proposed: str) -> bool:
        """Show the diff for file_path and return True only on an explicit yes."""
        async with self._lock:
            hold = self.display.hold() if self.display is not None else nullcontext()
            with hold:
                self.console.rule(Text(file_path, style="bold"))
                self.console.print(highlight_changes(original, proposed))
                prompt = Text.assemble(("Apply changes?", "bold green"), " [y/N]: ")
                try:
                    answer = await self._ask(prompt)
                except EOFError:
                    return False
                return answer.strip().lower() in AFFIRMATIVE_ANSWERS

    async def _ask(self, prompt: Text) -> str:
        """Read one answer on a daemon thread.

        A blocked read must not keep the event loop's shutdown waiting after
        an interrupt, so the default executor is not used.
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future[str] = loop.create_future()

        def _deliver(answer: str | None, error: Exception | None) -> None:
            if future.done():
                return
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(answer)

        def _read() -> None:
            try:
                answer, error = self._prompt_fn(prompt), None
            except Exception as exc:
                answer, error = None, exc
            try:
                loop.call_soon_threadsafe(_deliver, answer, error)
            except RuntimeError:
                # Loop already closed after an interrupt; nobody is waiting
                pass

        threading.Thread(target=_read, name="fixloop-confirm", daemon=True).start()
        return await future
