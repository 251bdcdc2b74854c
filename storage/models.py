"""
storage/models.py

Pydantic v2 data models for the MediSync backend layer.

These models describe the shape of data flowing between the hosted backend
(Supabase auth + REST) and the workflow layer.  They are NOT table rows;
table rows are described in workflows/schemas.py.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class AuthEvent(str, Enum):
    """Notifications emitted on the session-change channel."""
    initial_session = "INITIAL_SESSION"
    signed_in = "SIGNED_IN"
    signed_out = "SIGNED_OUT"
    token_refreshed = "TOKEN_REFRESHED"
    user_updated = "USER_UPDATED"


# ---------------------------------------------------------------------------
# Auth models
# ---------------------------------------------------------------------------


class AuthUser(BaseModel):
    """The account record attached to a session."""
    model_config = ConfigDict(extra="ignore")

    id: str
    email: str | None = None
    user_metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: str | None = None


class Session(BaseModel):
    """
    An authenticated session as issued by the auth service.

    Only the fields the application reads are modelled; anything else in the
    token response is ignored.
    """
    model_config = ConfigDict(extra="ignore")

    access_token: str
    refresh_token: str = ""
    token_type: str = "bearer"
    expires_in: int | None = None
    expires_at: int | None = Field(
        default=None, description="Unix timestamp (seconds) at which the access token expires."
    )
    user: AuthUser

    @property
    def subject(self) -> str:
        return self.user.id

    def expires_within(self, margin: float, now: float | None = None) -> bool:
        """True when the access token expires in less than *margin* seconds."""
        if self.expires_at is None:
            return False
        now = time.time() if now is None else now
        return self.expires_at - now < margin


# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------


@dataclass
class BackendResult:
    """
    Outcome of a single backend call.

    Backend calls never raise; they return either a success carrying ``data``
    (and ``count`` for counting queries) or a failure carrying an error code
    and a human-readable message.
    """

    ok: bool
    data: Any = None
    count: int | None = None
    error_code: str | None = None
    error_message: str | None = None

    @classmethod
    def success(cls, data: Any = None, count: int | None = None) -> "BackendResult":
        return cls(ok=True, data=data, count=count)

    @classmethod
    def failure(cls, code: str, message: str) -> "BackendResult":
        return cls(ok=False, error_code=code, error_message=message)

    def rows(self) -> list[dict[str, Any]]:
        """Data as a list of rows, wrapping a single object if needed."""
        if isinstance(self.data, list):
            return [r for r in self.data if isinstance(r, dict)]
        if isinstance(self.data, dict):
            return [self.data]
        return []

    def first(self) -> dict[str, Any] | None:
        rows = self.rows()
        return rows[0] if rows else None
