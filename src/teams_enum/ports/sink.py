from __future__ import annotations

from typing import Optional, Protocol


class ResultSinkPort(Protocol):
    """Output port receiving confirmed identities, one per call."""

    def record(self, identity: str) -> None:
        ...


class ConsolePort(Protocol):
    """Human-readable progress output."""

    def print_line(self, text: str, style: Optional[str] = None) -> None:
        ...
