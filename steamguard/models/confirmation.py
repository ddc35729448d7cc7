"""Confirmation queue models.

Pending confirmations come back from the mobile confirmation list endpoint
and are acted on one at a time.  The orchestrator never persists them; the
``key`` (the remote ``nonce``) is echoed back exactly as received.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, computed_field, field_validator


class ConfirmationOperation(str, Enum):  # noqa: UP042
    """What to do with a pending confirmation; also used as the signing tag."""

    ALLOW = "allow"
    CANCEL = "cancel"


class Confirmation(BaseModel):
    """A pending trade or market action awaiting allow/cancel.

    Only ``id`` and ``key`` matter to the protocol.  The remaining fields
    are descriptive metadata from the list call, kept for display.  Both
    protocol fields default to ``""`` so a caller-built confirmation with a
    missing part is rejected by the orchestrator with a clear error instead
    of a validation traceback.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = Field(default="", validation_alias=AliasChoices("id", "confirmationId", "cid"))
    key: str = Field(
        default="", validation_alias=AliasChoices("key", "nonce", "ck"), repr=False
    )
    type: int | None = None
    type_name: str = ""
    creator_id: str | None = None
    creation_time: int | None = None
    headline: str = ""
    summary: list[str] = Field(default_factory=list)
    icon: str | None = None

    @field_validator("id", "key", mode="before")
    @classmethod
    def _coerce_protocol_field(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("creator_id", mode="before")
    @classmethod
    def _coerce_creator_id(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("summary", mode="before")
    @classmethod
    def _coerce_summary(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value


class BatchItemResult(BaseModel):
    """Outcome of acting on a single confirmation."""

    model_config = ConfigDict(frozen=True)

    id: str
    success: bool
    error: str | None = None


class BatchResult(BaseModel):
    """Per-item outcomes of an allow/cancel batch, in submission order."""

    model_config = ConfigDict(frozen=True)

    operation: ConfirmationOperation
    items: list[BatchItemResult] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def success_count(self) -> int:
        return sum(1 for item in self.items if item.success)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def failure_count(self) -> int:
        return sum(1 for item in self.items if not item.success)

    @property
    def failed_ids(self) -> list[str]:
        return [item.id for item in self.items if not item.success]
