from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# Characters that cannot appear in the search path segment.
ILLEGAL_CHARACTERS = frozenset('"/\\:;|=,+*?<>')


def is_valid_identity(identity: str) -> bool:
    return bool(identity) and not any(char in ILLEGAL_CHARACTERS for char in identity)


class DirectoryRecord(BaseModel):
    """First entry of an external search response."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    display_name: Optional[str] = Field(default=None, alias="displayName")
    mri: Optional[str] = None
    user_principal_name: Optional[str] = Field(default=None, alias="userPrincipalName")
    given_name: Optional[str] = Field(default=None, alias="givenName")

    def is_provisioned(self) -> bool:
        # Unprovisioned placeholders come back with identical display and given names.
        return self.display_name != self.given_name


class PresenceRecord(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    availability: str
    device_type: str = Field(alias="deviceType")

    @classmethod
    def unavailable(cls) -> "PresenceRecord":
        return cls(availability="error", device_type="error")


class VerdictKind(str, Enum):
    CONFIRMED = "confirmed"
    NOT_FOUND = "not_found"
    AUTH_ERROR = "auth_error"
    TRANSIENT_ERROR = "transient_error"


class Verdict(BaseModel):
    """Outcome of probing a single identity."""

    model_config = ConfigDict(frozen=True)

    identity: str
    kind: VerdictKind
    status_code: int = 0
    record: Optional[DirectoryRecord] = None
    presence: Optional[PresenceRecord] = None
    message: Optional[str] = None

    @property
    def is_confirmed(self) -> bool:
        return self.kind == VerdictKind.CONFIRMED

    def summary(self) -> str:
        """Console line for this verdict, e.g. ``[+] jane@contoso.com - Jane Doe - Available - Desktop``."""
        if not self.is_confirmed:
            return f"[-] {self.identity}"
        parts = [self.identity]
        if self.record is not None and self.presence is not None:
            parts.extend([self.record.display_name or "", self.presence.availability, self.presence.device_type])
        return "[+] " + " - ".join(parts)
