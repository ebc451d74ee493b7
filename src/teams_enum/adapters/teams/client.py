from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from teams_enum.domain.models import DirectoryRecord, PresenceRecord
from teams_enum.ports.lookup import DirectoryLookupPort, PresenceLookupPort, SearchResult

logger = logging.getLogger(__name__)

SEARCH_URL = "https://teams.microsoft.com/api/mt/emea/beta/users/{identity}/externalsearchv3"
PRESENCE_URL = "https://presence.teams.microsoft.com/v1/presence/getpresence/"
CLIENT_VERSION = "27/1.0.0.2021011237"


def _first_entry(data: Any) -> Optional[dict]:
    if isinstance(data, list) and data and isinstance(data[0], dict):
        return data[0]
    return None


class TeamsClient(DirectoryLookupPort, PresenceLookupPort):
    """HTTP client for the Teams external search and presence APIs.

    One instance is shared by every worker. httpx.Client is thread-safe and the
    bearer token is fixed at construction.
    """

    def __init__(
        self,
        token: str,
        search_url: str = SEARCH_URL,
        presence_url: str = PRESENCE_URL,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        if not token.startswith("Bearer "):
            token = f"Bearer {token}"
        self.search_url = search_url
        self.presence_url = presence_url
        self.client = httpx.Client(
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": token,
                "x-ms-client-version": CLIENT_VERSION,
            },
        )
        logger.info(f"Initialized TeamsClient with timeout={timeout}")

    def __enter__(self) -> "TeamsClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.client.close()

    def search_identity(self, identity: str) -> SearchResult:
        url = self.search_url.format(identity=quote(identity, safe="@"))
        try:
            response = self.client.get(url)
        except httpx.TimeoutException as e:
            logger.error(f"Timeout searching Teams for {identity}: {e}")
            return SearchResult(status_code=0)
        except httpx.HTTPError as e:
            logger.error(f"Failed to reach Teams search API for {identity}: {e}")
            return SearchResult(status_code=0)

        try:
            entry = _first_entry(response.json())
            record = DirectoryRecord.model_validate(entry) if entry is not None else None
        except (ValueError, ValidationError) as e:
            # Error statuses usually come back without a body.
            level = logging.WARNING if response.status_code == 200 else logging.DEBUG
            logger.log(level, f"Could not decode search response for {identity} (status {response.status_code}): {e}")
            record = None
        return SearchResult(status_code=response.status_code, record=record)

    def fetch_presence(self, mri: str) -> PresenceRecord:
        try:
            response = self.client.post(
                self.presence_url,
                json=[{"mri": mri}],
                headers={"Content-Type": "application/json"},
            )
            entry = _first_entry(response.json())
            if entry is None:
                # No entry: the user is offline or hidden.
                return PresenceRecord.unavailable()
            return PresenceRecord.model_validate(entry.get("presence", {}))
        except httpx.TimeoutException as e:
            logger.error(f"Timeout fetching presence for {mri}: {e}")
        except httpx.HTTPError as e:
            logger.error(f"Failed to reach Teams presence API for {mri}: {e}")
        except (ValueError, ValidationError) as e:
            logger.warning(f"Could not decode presence response for {mri}: {e}")
        return PresenceRecord.unavailable()
