"""Five-character login codes derived from the shared secret.

The algorithm is TOTP-shaped (HMAC-SHA1 over a 30 second time step,
dynamic truncation) but renders the truncated value in a 26 letter
alphabet instead of decimal digits:

    time_step = floor(t / 30)
    digest    = HMAC-SHA1(secret, 0x00000000 || uint32be(time_step))
    value     = 31-bit big-endian int at digest[digest[19] & 0x0F]
    code      = five rounds of  ALPHABET[value % 26], value //= 26

:func:`generate_code` is pure.  :func:`current_code` adds the clock
correction from :class:`~steamguard.services.clock_sync.ClockSync`.
"""

from __future__ import annotations

import hashlib
import hmac
import struct

from steamguard.models.guard import GuardCode
from steamguard.services.clock_sync import ClockSync
from steamguard.utils.errors import InvalidSecretError, MissingSecretError
from steamguard.utils.secret_codec import decode_secret

CODE_ALPHABET = "23456789BCDFGHJKMNPQRTVWXY"
CODE_LENGTH = 5
TIME_STEP_SECONDS = 30

_PROVIDER = "guard_code"


def generate_code(shared_secret: str | bytes | None, timestamp: int) -> str:
    """Return the code for the 30 second window containing *timestamp*.

    Raises
    ------
    MissingSecretError
        If *shared_secret* is absent or cannot be decoded.
    """
    try:
        secret = decode_secret(shared_secret)
    except InvalidSecretError as exc:
        raise MissingSecretError(
            message=f"Shared secret unavailable: {exc.message}",
            provider_name=_PROVIDER,
        ) from exc

    time_step = int(timestamp) // TIME_STEP_SECONDS
    buffer = struct.pack(">II", 0, time_step & 0xFFFFFFFF)
    digest = hmac.new(secret, buffer, hashlib.sha1).digest()

    start = digest[19] & 0x0F
    value = struct.unpack(">I", digest[start:start + 4])[0] & 0x7FFFFFFF

    chars = []
    for _ in range(CODE_LENGTH):
        chars.append(CODE_ALPHABET[value % len(CODE_ALPHABET)])
        value //= len(CODE_ALPHABET)
    return "".join(chars)


def current_code(shared_secret: str | bytes | None, clock: ClockSync) -> GuardCode:
    """Code for the current synchronized time and its remaining lifetime."""
    now = clock.current_time()
    return GuardCode(
        code=generate_code(shared_secret, now),
        valid_for_seconds=TIME_STEP_SECONDS - (now % TIME_STEP_SECONDS),
    )
