"""Outputs of the code generator and the request signer."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

PLATFORM_MARKER = "android"


class GuardCode(BaseModel):
    """A five-character login code and how long it stays valid."""

    model_config = ConfigDict(frozen=True)

    code: str
    valid_for_seconds: int


class SignedParams(BaseModel):
    """The parameter set every signed confirmation call must carry.

    The remote service rejects a request if any of these six fields is
    missing, so :meth:`to_query` always emits all of them and nothing else.
    """

    model_config = ConfigDict(frozen=True)

    device_id: str
    steam_id: str
    signature: str = Field(repr=False)
    timestamp: int
    tag: str
    platform: str = PLATFORM_MARKER

    def to_query(self) -> dict[str, str]:
        """Return the wire names the mobile endpoints expect."""
        return {
            "p": self.device_id,
            "a": self.steam_id,
            "k": self.signature,
            "t": str(self.timestamp),
            "m": self.platform,
            "tag": self.tag,
        }
