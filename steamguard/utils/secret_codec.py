"""Decode account secrets stored as hex or base64 text.

Authenticator exports have stored ``shared_secret`` / ``identity_secret``
inconsistently over the years: most tools write base64, some older ones
write the raw 20-byte key as 40 hexadecimal characters.  Both forms are
accepted here so the rest of the package only ever deals with key bytes.
"""

from __future__ import annotations

import base64
import binascii
import re

from steamguard.utils.errors import InvalidSecretError

_HEX_SECRET = re.compile(r"^[0-9a-fA-F]{40}$")


def decode_secret(secret: str | bytes | None) -> bytes:
    """Return the raw key bytes for *secret*.

    Exactly 40 hex characters (any case) are decoded as hex; anything else
    is treated as base64.  Base64 decoding is forgiving in the same way the
    authenticator apps are: surrounding whitespace, missing ``=`` padding
    and the URL-safe alphabet are all accepted.

    Raises
    ------
    InvalidSecretError
        If *secret* is empty, is not decodable, or decodes to zero bytes.
    """
    if isinstance(secret, (bytes, bytearray)):
        if not secret:
            raise InvalidSecretError("Secret is empty")
        return bytes(secret)
    if not secret:
        raise InvalidSecretError("Secret is empty")

    text = secret.strip()
    if _HEX_SECRET.match(text):
        return bytes.fromhex(text)

    normalized = text.replace("-", "+").replace("_", "/").rstrip("=")
    normalized += "=" * (-len(normalized) % 4)
    try:
        key = base64.b64decode(normalized, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidSecretError(f"Secret is not valid base64: {exc}") from exc

    if not key:
        raise InvalidSecretError("Secret decoded to zero bytes")
    return key
