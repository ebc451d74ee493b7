from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, Optional, Union

from teams_enum.domain.models import is_valid_identity
from teams_enum.errors import SourceIOError

logger = logging.getLogger(__name__)


def iter_identities(lines: Iterable[str]) -> Iterator[str]:
    """Yield candidate identities, dropping blank lines and illegal entries."""
    for line in lines:
        identity = line.rstrip("\r\n")
        if not identity:
            continue
        if not is_valid_identity(identity):
            logger.debug(f"Skipping {identity!r}: contains illegal characters")
            continue
        yield identity


@contextmanager
def open_identity_source(path: Optional[Union[str, Path]] = None) -> Iterator[Iterator[str]]:
    """Open ``path`` (or stdin for ``None``/``"-"``) and yield its identities."""
    if path is None or str(path) == "-":
        yield iter_identities(sys.stdin)
        return
    try:
        # Undecodable bytes become U+FFFD so one bad line cannot abort the batch.
        handle = open(path, "r", encoding="utf-8", errors="replace")
    except OSError as e:
        raise SourceIOError(f"Can't open {path}: {e}") from e
    with handle:
        yield iter_identities(handle)
