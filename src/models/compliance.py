"""Compliance fact and tenant configuration models.

Facts (document expiries, duty events) are owned by the record layer and are
read-only here. Their dates are kept as delivered by the store and parsed at
evaluation time, so one malformed value is skipped without rejecting the
whole person record.
"""
from __future__ import annotations

from typing import Any, Optional, List

import structlog
from pydantic import BaseModel, ConfigDict, Field, model_validator

from models.shared import DutyWindow
from utils.error_handler import InvalidConfiguration

logger = structlog.get_logger(__name__)


class DocumentExpiry(BaseModel):
    """An expiring document (medical, license, passport, visa, ...)."""
    model_config = ConfigDict(extra="allow")

    holder_id: str
    document_type: str
    expiry_date: Any = None  # date, datetime or ISO string


class DutyEvent(BaseModel):
    """A flight or duty period attributable to one person."""
    model_config = ConfigDict(extra="allow")

    holder_id: str
    role: str = "pilot"  # role-in-event: pilot, instructor, student, ...
    event_date: Any = None  # date, datetime or ISO string
    duration_hours: float = Field(default=0.0, ge=0.0)
    event_id: Optional[str] = None


class Person(BaseModel):
    """Active person of a tenant with their embedded document expiries."""
    model_config = ConfigDict(extra="allow")

    person_id: str
    tenant_id: str
    name: str = ""
    role: str = ""
    active: bool = True
    documents: List[DocumentExpiry] = Field(default_factory=list)


class ExpiryCutoffs(BaseModel):
    """Day-count cutoffs for the expiry tiers (urgent < warning)."""
    model_config = ConfigDict(frozen=True)

    urgent_days: int = Field(default=30, ge=0)
    warning_days: int = Field(default=60, ge=0)

    @model_validator(mode="after")
    def _check_order(self) -> "ExpiryCutoffs":
        if self.urgent_days >= self.warning_days:
            raise InvalidConfiguration(
                "expiry_cutoffs",
                f"urgent_days ({self.urgent_days}) must be less than warning_days ({self.warning_days})",
            )
        return self


class DutyLimitCeilings(BaseModel):
    """Regulatory maximum hours per rolling window for the deployment."""
    model_config = ConfigDict(frozen=True)

    daily: float = 8.0
    weekly: float = 30.0
    monthly: float = 100.0

    def for_window(self, window: DutyWindow) -> float:
        return getattr(self, window.value)


class DutyLimitConfig(BaseModel):
    """Per-tenant duty limits, always at or below the regulatory ceilings.

    Use `DutyLimitConfig.configure()` to build one from user input; it clamps
    each requested limit to its ceiling. Direct construction with a limit
    above its ceiling is rejected.
    """
    model_config = ConfigDict(frozen=True)

    daily_limit: float = Field(default=8.0, ge=0.0)
    weekly_limit: float = Field(default=30.0, ge=0.0)
    monthly_limit: float = Field(default=100.0, ge=0.0)
    ceilings: DutyLimitCeilings = Field(default_factory=DutyLimitCeilings)

    @model_validator(mode="after")
    def _check_ceilings(self) -> "DutyLimitConfig":
        for window in DutyWindow:
            limit = self.limit_for(window)
            ceiling = self.ceilings.for_window(window)
            if limit > ceiling:
                raise ValueError(
                    f"{window.value} limit {limit} exceeds regulatory ceiling {ceiling}"
                )
        return self

    @classmethod
    def configure(
        cls,
        daily: Optional[float] = None,
        weekly: Optional[float] = None,
        monthly: Optional[float] = None,
        ceilings: Optional[DutyLimitCeilings] = None,
    ) -> "DutyLimitConfig":
        """Build a config from requested limits, clamping to the ceilings.

        A limit left as None defaults to its ceiling.
        """
        ceilings = ceilings or DutyLimitCeilings()
        requested = {
            DutyWindow.DAILY: daily,
            DutyWindow.WEEKLY: weekly,
            DutyWindow.MONTHLY: monthly,
        }
        values: dict[str, float] = {}
        for window, value in requested.items():
            ceiling = ceilings.for_window(window)
            if value is None:
                values[f"{window.value}_limit"] = ceiling
                continue
            if value < 0:
                raise InvalidConfiguration(f"duty_limits.{window.value}", f"limit must not be negative, got {value}")
            if value > ceiling:
                logger.warning(
                    "duty_limit_clamped",
                    window=window.value,
                    requested=value,
                    ceiling=ceiling,
                )
                value = ceiling
            values[f"{window.value}_limit"] = float(value)
        return cls(ceilings=ceilings, **values)

    def limit_for(self, window: DutyWindow) -> float:
        return getattr(self, f"{window.value}_limit")


class TenantConfig(BaseModel):
    """Everything an evaluator needs to know about a tenant's settings."""
    model_config = ConfigDict(frozen=True)

    tenant_id: str
    duty_limits: DutyLimitConfig = Field(default_factory=DutyLimitConfig)
    expiry_cutoffs: ExpiryCutoffs = Field(default_factory=ExpiryCutoffs)
    # Include the tier in the dedup key so Warning -> Urgent re-alerts
    escalate_on_tier_change: bool = False
