from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, model_validator

# The usable JWT is the run starting at "ey" up to the next percent-encoded separator.
_JWT_PATTERN = re.compile(r"ey.*?%")


def normalize_token(raw: str) -> str:
    """Extract the bearer JWT from a token string copied out of a browser session.

    Returns the bare token; callers add the ``Bearer`` scheme.
    """
    token = raw.strip()
    if token.lower().startswith("bearer "):
        token = token[len("bearer ") :].strip()
    match = _JWT_PATTERN.search(token.replace("&", "%26"))
    if match:
        return match.group(0)[:-1]
    return token


class EnumSettings(BaseModel):
    """Parameters of a single enumeration run."""

    email: Optional[str] = None
    file: Optional[Path] = None
    token: str
    threads: int = Field(default=5, ge=1)
    output: Optional[Path] = None
    verbose: bool = False
    queue_size: int = Field(default=256, ge=1)

    @model_validator(mode="after")
    def validate_mode(self) -> "EnumSettings":
        if self.email is None and self.file is None:
            raise ValueError("argument -f or -e required")
        if self.email is not None and self.file is not None:
            raise ValueError("only argument -f or -e should be specified")
        return self

    @property
    def bearer(self) -> str:
        return normalize_token(self.token)
