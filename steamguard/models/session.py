"""Session models for the browser credentials used on the community site.

A session is the ``sessionid`` / ``steamLoginSecure`` cookie pair obtained
at login, plus bookkeeping timestamps.  Records are immutable; the
lifecycle service produces updated copies via ``model_copy(update={...})``
and hands them to the session store.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SessionInvalidReason(str, Enum):  # noqa: UP042
    """Why a stored session cannot be used for authenticated calls."""

    NO_SESSION = "NO_SESSION"                   # nothing stored for the account
    INCOMPLETE_SESSION = "INCOMPLETE_SESSION"   # one of the two tokens is empty
    SESSION_EXPIRED = "SESSION_EXPIRED"         # hard age limit or idle timeout hit


class SessionRecord(BaseModel):
    """Stored credentials for one account."""

    model_config = ConfigDict(frozen=True)

    # Sent as the ``sessionid`` cookie.
    session_token: str = Field(default="", repr=False)
    # Sent as the ``steamLoginSecure`` cookie.
    auth_token: str = Field(default="", repr=False)
    # Refresh / OAuth token kept for the login collaborator; unused here.
    extra_token: str | None = Field(default=None, repr=False)
    created_at: datetime
    last_used_at: datetime | None = None
    last_refreshed_at: datetime | None = None

    @property
    def is_complete(self) -> bool:
        return bool(self.session_token) and bool(self.auth_token)

    def cookie_header(self) -> str:
        """Render the cookie pair the community endpoints expect."""
        return f"sessionid={self.session_token}; steamLoginSecure={self.auth_token}"


class SessionValidation(BaseModel):
    """Result of evaluating a stored session against the expiry policy."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    reason: SessionInvalidReason | None = None
    session: SessionRecord | None = Field(default=None, exclude=True)


class SessionAgeInfo(BaseModel):
    """Read-only view of a session's age, for diagnostics only."""

    model_config = ConfigDict(frozen=True)

    age_seconds: int
    age_days: int
    age_hours: int
    age_formatted: str
    expires_in_seconds: int
    expires_in_days: int
    last_used_at: datetime | None = None


class SessionStatus(BaseModel):
    """Validation, age and policy thresholds combined for user-facing reports."""

    model_config = ConfigDict(frozen=True)

    account_id: str
    has_session: bool
    valid: bool
    reason: SessionInvalidReason | None = None
    age: SessionAgeInfo | None = None
    max_age_days: int
    idle_timeout_days: int
