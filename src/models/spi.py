"""Safety Performance Indicator models."""
from __future__ import annotations

from typing import Any, Optional, List

from pydantic import BaseModel, ConfigDict, Field, model_validator

from models.shared import CalculationMode, IndicatorType, SpiTier, TargetDirection


class SpiThresholds(BaseModel):
    """Target plus alert levels 2 (Monitor), 3 (Action) and 4 (Urgent)."""
    model_config = ConfigDict(frozen=True)

    target: float = Field(ge=0)
    alert2: float = Field(ge=0)
    alert3: float = Field(ge=0)
    alert4: float = Field(ge=0)

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.target, self.alert2, self.alert3, self.alert4)


class SafetyEvent(BaseModel):
    """Historical safety report as seen by the SPI monitor."""
    model_config = ConfigDict(extra="allow")

    event_id: str
    tenant_id: str
    report_number: str = ""
    occurrence_date: Any = None  # date, datetime or ISO string
    report_type: str = ""
    occurrence_category: Optional[str] = None
    sub_category: Optional[str] = None
    status: str = "Open"
    heading: str = ""


class SafetyEventFilter(BaseModel):
    """Declarative predicate selecting which safety events an SPI aggregates.

    Empty lists match everything. All populated criteria must match.
    """
    model_config = ConfigDict(frozen=True)

    report_types: List[str] = Field(default_factory=list)
    occurrence_categories: List[str] = Field(default_factory=list)
    sub_categories: List[str] = Field(default_factory=list)
    statuses: List[str] = Field(default_factory=list)
    keyword: Optional[str] = None  # case-insensitive match on the heading

    def matches(self, event: SafetyEvent) -> bool:
        if self.report_types and event.report_type not in self.report_types:
            return False
        if self.occurrence_categories and event.occurrence_category not in self.occurrence_categories:
            return False
        if self.sub_categories and event.sub_category not in self.sub_categories:
            return False
        if self.statuses and event.status not in self.statuses:
            return False
        if self.keyword and self.keyword.lower() not in (event.heading or "").lower():
            return False
        return True


class SpiDefinition(BaseModel):
    """A configured indicator with its alert thresholds.

    Threshold ordering is validated on construction, so a malformed
    definition is rejected when it is saved, not when it is evaluated.
    """
    model_config = ConfigDict(frozen=True)

    spi_id: str
    name: str
    indicator_type: IndicatorType = IndicatorType.LAGGING
    calculation_mode: CalculationMode = CalculationMode.COUNT
    unit: str = "per year"
    rate_scale: float = Field(default=100.0, gt=0)  # "per 100 hours"
    period_days: int = Field(default=365, gt=0)  # calendar days, reference date included
    target_direction: TargetDirection = TargetDirection.LOWER_IS_BETTER
    thresholds: SpiThresholds
    event_filter: SafetyEventFilter = Field(default_factory=SafetyEventFilter)

    @model_validator(mode="after")
    def _check_threshold_order(self) -> "SpiDefinition":
        from checks.threshold_evaluator import validate_threshold_order

        validate_threshold_order(self.thresholds, self.target_direction)
        return self

    def with_thresholds(self, thresholds: SpiThresholds) -> "SpiDefinition":
        """Explicit edit path; re-runs the ordering check."""
        data = self.model_dump()
        data["thresholds"] = thresholds.model_dump()
        return SpiDefinition.model_validate(data)


class SpiEvaluation(BaseModel):
    """Current value and alert tier of one indicator.

    `current_value` is None when the value cannot be computed; the tier is
    then NO_DATA rather than a threshold tier.
    """
    definition: SpiDefinition
    current_value: Optional[float]
    tier: SpiTier
    event_count: int = 0
    normalizer_hours: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "spi_id": self.definition.spi_id,
            "name": self.definition.name,
            "calculation_mode": self.definition.calculation_mode.value,
            "unit": self.definition.unit,
            "current_value": None if self.current_value is None else round(self.current_value, 3),
            "tier": self.tier.value,
            "event_count": self.event_count,
            "normalizer_hours": self.normalizer_hours,
            "thresholds": self.definition.thresholds.model_dump(),
            "target_direction": self.definition.target_direction.value,
        }
