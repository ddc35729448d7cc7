"""steamguard domain models, re-exports all public model classes.

Other modules may import from ``steamguard.models`` directly instead of the
individual submodules:
    - account.py      : the account value object (ids + secrets)
    - confirmation.py : pending confirmations, operations, batch outcomes
    - guard.py        : generated codes and signed parameter sets
    - session.py      : stored sessions and their validation/age views
"""

from __future__ import annotations

from steamguard.models.account import Account
from steamguard.models.confirmation import (
    BatchItemResult,
    BatchResult,
    Confirmation,
    ConfirmationOperation,
)
from steamguard.models.guard import PLATFORM_MARKER, GuardCode, SignedParams
from steamguard.models.session import (
    SessionAgeInfo,
    SessionInvalidReason,
    SessionRecord,
    SessionStatus,
    SessionValidation,
)

__all__ = [
    "PLATFORM_MARKER",
    "Account",
    "BatchItemResult",
    "BatchResult",
    "Confirmation",
    "ConfirmationOperation",
    "GuardCode",
    "SessionAgeInfo",
    "SessionInvalidReason",
    "SessionRecord",
    "SessionStatus",
    "SessionValidation",
    "SignedParams",
]
