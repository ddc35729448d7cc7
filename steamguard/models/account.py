"""Account value object consumed by every protocol component.

The account registry that produces these records (``.maFile`` import,
manifest handling) lives outside this package; the engine only needs the
identifiers and the two secrets below.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from steamguard.utils.device_id import generate_device_id


class Account(BaseModel):
    """Identifiers and secrets for one authenticator-enabled account.

    ``account_id`` keys the session store and defaults to ``steam_id``.
    ``device_id`` defaults to the deterministic id derived from ``steam_id``
    so an account always presents the same device to the remote service.
    Secrets are opaque hex-or-base64 text; they are excluded from ``repr``.
    """

    model_config = ConfigDict(frozen=True)

    account_id: str
    steam_id: str
    device_id: str
    account_name: str = ""
    shared_secret: str = Field(default="", repr=False)
    identity_secret: str = Field(default="", repr=False)

    @field_validator("account_id", "steam_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        # 64-bit steam ids arrive as JSON numbers from some exporters.
        if isinstance(value, int):
            return str(value)
        return value

    @model_validator(mode="before")
    @classmethod
    def _fill_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        steam_id = data.get("steam_id")
        if steam_id is not None:
            if not data.get("account_id"):
                data["account_id"] = steam_id
            if not data.get("device_id"):
                data["device_id"] = generate_device_id(steam_id)
        return data
