from __future__ import annotations

import threading
import time
from typing import Dict, List, Optional

from teams_enum.domain.models import DirectoryRecord, PresenceRecord
from teams_enum.ports.lookup import DirectoryLookupPort, PresenceLookupPort, SearchResult


class MockTeamsClient(DirectoryLookupPort, PresenceLookupPort):
    """
    In-memory stand-in for the Teams APIs.

    ``records`` maps an identity to the directory record the search returns
    (status 200). ``statuses`` forces a bare status code for an identity, e.g.
    403 or 401. Identities in neither map get a 200 with an empty array.
    Presence comes from ``presence`` keyed by mri; unknown mris are offline.

    ``delay`` seconds are slept on every call to simulate network latency.
    """

    def __init__(
        self,
        records: Optional[Dict[str, DirectoryRecord]] = None,
        statuses: Optional[Dict[str, int]] = None,
        presence: Optional[Dict[str, PresenceRecord]] = None,
        delay: float = 0.0,
    ) -> None:
        self.records = dict(records or {})
        self.statuses = dict(statuses or {})
        self.presence = dict(presence or {})
        self.delay = delay
        self.searched: List[str] = []
        self.presence_requests: List[str] = []
        self._lock = threading.Lock()

    def __enter__(self) -> "MockTeamsClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        pass

    def search_identity(self, identity: str) -> SearchResult:
        with self._lock:
            self.searched.append(identity)
        if self.delay:
            time.sleep(self.delay)
        if identity in self.statuses:
            return SearchResult(status_code=self.statuses[identity])
        return SearchResult(status_code=200, record=self.records.get(identity))

    def fetch_presence(self, mri: str) -> PresenceRecord:
        with self._lock:
            self.presence_requests.append(mri)
        if self.delay:
            time.sleep(self.delay)
        return self.presence.get(mri, PresenceRecord.unavailable())
