"""Custom exception hierarchy for steamguard.

All application exceptions inherit from :class:`SteamGuardError`, which
carries an optional ``provider_name`` so error handlers can identify which
remote surface (e.g. "steam_community", "steam_api") caused the failure.

The hierarchy is organized by the vocabulary callers map onto user-facing
behaviour:

    SteamGuardError  (base -- catch-all for any steamguard error)
    +-- InvalidSecretError          (secret text could not be decoded)
    +-- MissingSecretError          (a required secret is absent/undecodable)
    +-- LoginRequiredError          (session absent/expired, or remote 401/403)
    +-- InvalidOperationError       (operation is not allow/cancel)
    +-- EmptyBatchError             (no confirmations supplied)
    +-- MalformedConfirmationError  (confirmation without id or key)
    +-- RemoteError                 (non-2xx response or transport failure)
    |   +-- BatchFailedError        (one or more batch items failed)
    +-- ConfigurationError          (startup / missing config)

A caller-facing layer presents ``LoginRequiredError`` as "please
re-authenticate" and ``BatchFailedError`` as a per-item report built from
its ``result`` attribute.  Nothing in this package retries on its own.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from steamguard.models.confirmation import BatchResult


class SteamGuardError(Exception):
    """Base exception for all steamguard errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which remote surface triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[steam_community] HTTP 500``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Secret errors
# ---------------------------------------------------------------------------

class InvalidSecretError(SteamGuardError):
    """Raised when secret text is empty or decodes to zero bytes."""

    def __init__(
        self,
        message: str = "Secret is empty or not valid hex/base64",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class MissingSecretError(SteamGuardError):
    """Raised when a shared or identity secret is required but unusable."""

    def __init__(
        self,
        message: str = "Required secret is missing",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Session errors
# ---------------------------------------------------------------------------

class LoginRequiredError(SteamGuardError):
    """Raised when the account must re-authenticate before continuing.

    ``reason`` is one of the session validation reasons (``NO_SESSION``,
    ``INCOMPLETE_SESSION``, ``SESSION_EXPIRED``) or ``REMOTE_REJECTED``
    when the remote service answered 401/403.  When the rejection arrives
    in the middle of a batch, ``result`` holds the outcomes recorded up to
    and including the rejected item; otherwise it is ``None``.
    """

    def __init__(
        self,
        message: str = "LOGIN_REQUIRED",
        provider_name: str | None = None,
        reason: str | None = None,
        result: BatchResult | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self._reason = reason
        self._result = result

    @property
    def reason(self) -> str | None:
        return self._reason

    @property
    def result(self) -> BatchResult | None:
        return self._result


# ---------------------------------------------------------------------------
# Caller input errors
# ---------------------------------------------------------------------------

class InvalidOperationError(SteamGuardError):
    """Raised when a confirmation operation is not ``allow`` or ``cancel``."""

    def __init__(
        self,
        message: str = 'Invalid operation. Must be "allow" or "cancel"',
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class EmptyBatchError(SteamGuardError):
    """Raised when an act call receives no confirmations."""

    def __init__(
        self,
        message: str = "No confirmations provided",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class MalformedConfirmationError(SteamGuardError):
    """Raised when a confirmation lacks its id or key."""

    def __init__(
        self,
        message: str = "Confirmation is missing its id or key",
        provider_name: str | None = None,
        index: int | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self._index = index

    @property
    def index(self) -> int | None:
        return self._index


# ---------------------------------------------------------------------------
# Remote errors
# ---------------------------------------------------------------------------

class RemoteError(SteamGuardError):
    """Raised on a non-2xx response or a transport failure.

    ``status`` is the HTTP status code, or ``None`` when no response was
    received (timeout, connection refused) or for batch-level failures.
    """

    def __init__(
        self,
        message: str = "Remote call failed",
        provider_name: str | None = None,
        status: int | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self._status = status

    @property
    def status(self) -> int | None:
        return self._status


class BatchFailedError(RemoteError):
    """Raised after a batch completes with one or more failed items.

    The full per-item outcome stays available on ``result`` so callers can
    report partial success instead of a single opaque error.
    """

    def __init__(
        self,
        result: BatchResult,
        provider_name: str | None = None,
    ) -> None:
        self._result = result
        self._failed_ids = [item.id for item in result.items if not item.success]
        super().__init__(
            message=f"Failed to process confirmations: {', '.join(self._failed_ids)}",
            provider_name=provider_name,
        )

    @property
    def result(self) -> BatchResult:
        return self._result

    @property
    def failed_ids(self) -> list[str]:
        return list(self._failed_ids)


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------

class ConfigurationError(SteamGuardError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
