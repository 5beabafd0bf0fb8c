"""Document expiry classification at day granularity."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from models.compliance import ExpiryCutoffs
from models.shared import ExpiryTier
from utils.error_handler import MalformedDate


@dataclass(frozen=True)
class ExpiryStatus:
    """Days left until expiry and the resulting tier."""
    days_remaining: int
    tier: ExpiryTier

    def to_dict(self) -> dict[str, Any]:
        return {"days_remaining": self.days_remaining, "tier": self.tier.value}


def parse_fact_date(value: Any) -> date:
    """Normalize a fact date to a calendar day.

    Accepts date, datetime (time-of-day discarded) and ISO-8601 strings.

    Raises:
        MalformedDate: for anything else
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise MalformedDate(value)
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            raise MalformedDate(value) from None
    raise MalformedDate(value)


def classify_expiry(expiry: Any, today: Any, cutoffs: ExpiryCutoffs) -> ExpiryStatus:
    """Classify an expiry date relative to today.

    - days_remaining < 0: Expired
    - 0 <= days_remaining <= urgent_days: Urgent
    - urgent_days < days_remaining <= warning_days: Warning
    - otherwise: None

    Raises:
        MalformedDate: if either date cannot be parsed
    """
    expiry_day = parse_fact_date(expiry)
    today_day = parse_fact_date(today)
    days_remaining = (expiry_day - today_day).days

    if days_remaining < 0:
        tier = ExpiryTier.EXPIRED
    elif days_remaining <= cutoffs.urgent_days:
        tier = ExpiryTier.URGENT
    elif days_remaining <= cutoffs.warning_days:
        tier = ExpiryTier.WARNING
    else:
        tier = ExpiryTier.NONE

    return ExpiryStatus(days_remaining=days_remaining, tier=tier)
