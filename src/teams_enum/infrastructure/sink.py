from __future__ import annotations

import sys
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterator, List, Optional, Union

from teams_enum.errors import SinkIOError
from teams_enum.ports.sink import ResultSinkPort


class LineResultSink(ResultSinkPort):
    """Writes one confirmed identity per line to a shared stream."""

    def __init__(self, stream: IO[str], lock: Optional[threading.RLock] = None) -> None:
        self.stream = stream
        self.lock = lock or threading.RLock()

    def record(self, identity: str) -> None:
        with self.lock:
            self.stream.write(f"{identity}\n")
            self.stream.flush()

    @classmethod
    @contextmanager
    def open(
        cls, path: Optional[Union[str, Path]] = None, lock: Optional[threading.RLock] = None
    ) -> Iterator["LineResultSink"]:
        """Open the destination once for a run; stdout when ``path`` is None.

        Pass the console's lock when both share stdout so their lines never interleave.
        """
        if path is None:
            yield cls(sys.stdout, lock=lock)
            return
        target = Path(path)
        try:
            handle = open(target, "w", encoding="utf-8")
        except OSError as e:
            raise SinkIOError(f"Can't create {target}: {e}") from e
        with handle:
            yield cls(handle, lock=lock)


class InMemoryResultSink(ResultSinkPort):
    def __init__(self) -> None:
        self.identities: List[str] = []
        self._lock = threading.Lock()

    def record(self, identity: str) -> None:
        with self._lock:
            self.identities.append(identity)
