"""Signatures for calls against the confirmation endpoints.

Each call carries ``k = base64(HMAC-SHA1(identity_secret, uint32be(0) ||
uint32be(t) || tag))`` where ``t`` is the synchronized timestamp and
``tag`` names the action (``conf``, ``allow``, ``cancel``, ...).  The
remote service recomputes the same value, so the timestamp sent in ``t``
must be the one that was signed.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import struct

from steamguard.models.account import Account
from steamguard.models.guard import SignedParams
from steamguard.services.clock_sync import ClockSync
from steamguard.utils.errors import InvalidSecretError, MissingSecretError
from steamguard.utils.secret_codec import decode_secret

_PROVIDER = "request_signer"


def sign(identity_secret: str | bytes | None, time: int, tag: str = "") -> str:
    """Base64 HMAC-SHA1 signature of *time* and *tag*.

    Raises
    ------
    MissingSecretError
        If *identity_secret* is absent or cannot be decoded.
    """
    try:
        secret = decode_secret(identity_secret)
    except InvalidSecretError as exc:
        raise MissingSecretError(
            message=f"Identity secret unavailable: {exc.message}",
            provider_name=_PROVIDER,
        ) from exc

    buffer = struct.pack(">II", 0, int(time) & 0xFFFFFFFF)
    if tag:
        buffer += tag.encode("utf-8")
    digest = hmac.new(secret, buffer, hashlib.sha1).digest()
    return base64.b64encode(digest).decode("ascii")


class RequestSigner:
    """Builds the signed parameter set for one confirmation call."""

    def __init__(self, clock: ClockSync) -> None:
        self._clock = clock

    def build_signed_params(self, account: Account, tag: str) -> SignedParams:
        """Sign *tag* at the current synchronized time for *account*."""
        timestamp = self._clock.current_time()
        return SignedParams(
            device_id=account.device_id,
            steam_id=account.steam_id,
            signature=sign(account.identity_secret, timestamp, tag),
            timestamp=timestamp,
            tag=tag,
        )
