"""Deterministic mobile device identifiers."""

from __future__ import annotations

import hashlib


def generate_device_id(steam_id: str | int) -> str:
    """Derive the ``android:`` device id the mobile app reports for *steam_id*.

    The id is the SHA-1 of the decimal steam id, laid out as a UUID
    (8-4-4-4-12 hex groups).  The same steam id always yields the same
    device id, so confirmations signed here look like they come from one
    stable phone.
    """
    digest = hashlib.sha1(str(steam_id).encode("utf-8")).hexdigest()
    return (
        f"android:{digest[0:8]}-{digest[8:12]}-{digest[12:16]}"
        f"-{digest[16:20]}-{digest[20:32]}"
    )
