"""Utility modules for steamguard.

Available utility modules (all re-exported here for convenience):

- **errors** -- Exception hierarchy rooted at SteamGuardError; callers map
  ``LoginRequiredError`` to a re-authentication prompt and read per-item
  outcomes off ``BatchFailedError.result``.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output interactively, structured JSON in production.
- **secret_codec** -- hex-or-base64 decoding of account secrets.
- **device_id** -- deterministic ``android:`` device ids from steam ids.
"""

from steamguard.utils.device_id import generate_device_id
from steamguard.utils.errors import (
    BatchFailedError,
    ConfigurationError,
    EmptyBatchError,
    InvalidOperationError,
    InvalidSecretError,
    LoginRequiredError,
    MalformedConfirmationError,
    MissingSecretError,
    RemoteError,
    SteamGuardError,
)
from steamguard.utils.logging import configure_logging, get_logger
from steamguard.utils.secret_codec import decode_secret

__all__ = [
    "BatchFailedError",
    "ConfigurationError",
    "EmptyBatchError",
    "InvalidOperationError",
    "InvalidSecretError",
    "LoginRequiredError",
    "MalformedConfirmationError",
    "MissingSecretError",
    "RemoteError",
    "SteamGuardError",
    "configure_logging",
    "decode_secret",
    "generate_device_id",
    "get_logger",
]
