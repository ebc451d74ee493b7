from __future__ import annotations

from teams_enum.domain.models import VerdictKind
from teams_enum.ports.lookup import SearchResult


def needs_presence(result: SearchResult) -> bool:
    """True when the search found a provisioned user worth enriching."""
    return result.status_code == 200 and result.record is not None and result.record.is_provisioned()


def classify(result: SearchResult) -> VerdictKind:
    """Map a search result to a verdict.

    A 403 is treated as a hit: the service blocks the lookup instead of
    answering, which only happens for existing accounts.
    """
    if result.status_code == 200:
        return VerdictKind.CONFIRMED if needs_presence(result) else VerdictKind.NOT_FOUND
    if result.status_code == 403:
        return VerdictKind.CONFIRMED
    if result.status_code == 401:
        return VerdictKind.AUTH_ERROR
    return VerdictKind.TRANSIENT_ERROR
