from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from teams_enum.domain.models import DirectoryRecord, PresenceRecord


@dataclass(frozen=True)
class SearchResult:
    # 0 means the request never produced a response.
    status_code: int
    record: Optional[DirectoryRecord] = None


class DirectoryLookupPort:
    """Searches the external directory for an identity."""

    def search_identity(self, identity: str) -> SearchResult:
        raise NotImplementedError


class PresenceLookupPort:
    """Reads live presence for a directory subject."""

    def fetch_presence(self, mri: str) -> PresenceRecord:
        raise NotImplementedError
