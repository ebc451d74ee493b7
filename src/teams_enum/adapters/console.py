from __future__ import annotations

import threading
from typing import Optional

from rich.console import Console

from teams_enum.ports.sink import ConsolePort


class RichConsole(ConsolePort):
    """Console output shared by all workers; one line per call, never interleaved."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console(highlight=False)
        self.lock = threading.RLock()

    def print_line(self, text: str, style: Optional[str] = None) -> None:
        with self.lock:
            self.console.print(text, style=style, markup=False, soft_wrap=True)
