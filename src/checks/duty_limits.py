"""Compare aggregated duty time with a tenant's configured limits."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from checks.duty_aggregator import aggregate_duty
from models.compliance import DutyEvent, DutyLimitConfig
from models.shared import DUTY_WINDOW_DAYS, DutyWindow, UtilizationBand


@dataclass(frozen=True)
class DutyWindowStatus:
    """Accumulated hours for one rolling window against its limit."""
    window: DutyWindow
    total_hours: float
    limit_hours: float
    utilization_pct: float
    band: UtilizationBand
    exceeded: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "window": self.window.value,
            "total_hours": self.total_hours,
            "limit_hours": self.limit_hours,
            "utilization_pct": self.utilization_pct,
            "band": self.band.value,
            "exceeded": self.exceeded,
        }


def utilization_band(utilization_pct: float) -> UtilizationBand:
    if utilization_pct > 90:
        return UtilizationBand.CRITICAL
    if utilization_pct > 75:
        return UtilizationBand.HIGH
    if utilization_pct > 50:
        return UtilizationBand.ELEVATED
    return UtilizationBand.NORMAL


def evaluate_duty_limits(
    events: Iterable[DutyEvent],
    limits: DutyLimitConfig,
    reference: Any,
) -> list[DutyWindowStatus]:
    """Aggregate daily, weekly and monthly totals and check each limit."""
    event_list = list(events)
    statuses: list[DutyWindowStatus] = []

    for window, days in DUTY_WINDOW_DAYS.items():
        total = aggregate_duty(event_list, days, reference)
        limit = limits.limit_for(window)
        if limit > 0:
            pct = round(total / limit * 100, 1)
        else:
            pct = 100.0 if total > 0 else 0.0
        statuses.append(DutyWindowStatus(
            window=window,
            total_hours=total,
            limit_hours=limit,
            utilization_pct=pct,
            band=utilization_band(pct),
            exceeded=total > limit,
        ))

    return statuses
