"""Rolling-window aggregation of flight and duty time."""
from __future__ import annotations

from datetime import timedelta
from typing import Any, Iterable

import structlog

from checks.expiry_classifier import parse_fact_date
from models.compliance import DutyEvent
from utils.error_handler import MalformedDate

logger = structlog.get_logger(__name__)

DEFAULT_WINDOWS: tuple[int, ...] = (1, 7, 30)


def aggregate_duty(events: Iterable[DutyEvent], window_days: int, reference: Any) -> float:
    """Sum durations of events dated within [reference - window_days, reference].

    Both ends are inclusive and dates compare at day granularity. Events with
    an unparseable date are skipped and logged.
    """
    if window_days < 0:
        raise ValueError(f"window_days must not be negative, got {window_days}")

    reference_day = parse_fact_date(reference)
    window_start = reference_day - timedelta(days=window_days)

    total = 0.0
    for event in events:
        try:
            event_day = parse_fact_date(event.event_date)
        except MalformedDate as e:
            logger.warning(
                "duty_event_skipped",
                holder_id=event.holder_id,
                event_id=event.event_id,
                reason=e.message,
            )
            continue
        if window_start <= event_day <= reference_day:
            total += event.duration_hours

    return round(total, 2)


def aggregate_windows(
    events: Iterable[DutyEvent],
    reference: Any,
    windows: Iterable[int] = DEFAULT_WINDOWS,
) -> dict[int, float]:
    """Evaluate each window independently over the same event list."""
    event_list = list(events)
    return {window: aggregate_duty(event_list, window, reference) for window in windows}
