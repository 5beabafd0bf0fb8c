"""Alert records written to a tenant's alert stream."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.shared import AlertKind


def _new_alert_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Alert(BaseModel):
    """A notification targeted at one holder, or broadcast to the tenant.

    Alerts are never edited; the only change allowed is appending a holder to
    `acknowledged_by`, which `acknowledge()` does on a copy.
    """
    model_config = ConfigDict(frozen=True)

    alert_id: str = Field(default_factory=_new_alert_id)
    tenant_id: str
    kind: AlertKind
    title: str
    description: str = ""
    created_at: datetime = Field(default_factory=_utcnow)
    target_holder_id: Optional[str] = None  # None = tenant broadcast
    acknowledged_by: List[str] = Field(default_factory=list)
    tier: Optional[str] = None  # AlertTier value when raised by the scanner
    author: str = "system"

    @field_validator("acknowledged_by")
    @classmethod
    def _unique_holders(cls, value: List[str]) -> List[str]:
        return list(dict.fromkeys(value))

    @property
    def is_broadcast(self) -> bool:
        return self.target_holder_id is None

    def is_visible_to(self, holder_id: str) -> bool:
        return self.target_holder_id is None or self.target_holder_id == holder_id

    def is_acknowledged_by(self, holder_id: str) -> bool:
        return holder_id in self.acknowledged_by

    def acknowledge(self, holder_id: str) -> "Alert":
        """Return a copy with holder_id appended to acknowledged_by."""
        if holder_id in self.acknowledged_by:
            return self
        return self.model_copy(update={"acknowledged_by": [*self.acknowledged_by, holder_id]})

    def dedup_key(self, include_tier: bool = False) -> tuple:
        if include_tier:
            return (self.target_holder_id, self.title, self.tier)
        return (self.target_holder_id, self.title)
