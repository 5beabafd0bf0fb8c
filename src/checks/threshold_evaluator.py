"""Multi-level threshold evaluation for Safety Performance Indicators."""
from __future__ import annotations

from typing import Union

from models.shared import SPI_TIER_ORDER, SpiTier, TargetDirection
from models.spi import SpiThresholds
from utils.error_handler import InvalidThresholdOrder

ThresholdSet = Union[SpiThresholds, tuple[float, float, float, float]]

# Number of thresholds breached -> tier. Alert level 3 raises the same
# Action tier as level 2; only alert level 4 escalates to Urgent.
BREACH_TIERS: list[SpiTier] = [
    SpiTier.ON_TARGET,
    SpiTier.MONITOR,
    SpiTier.ACTION,
    SpiTier.ACTION,
    SpiTier.URGENT,
]


def _as_tuple(thresholds: ThresholdSet) -> tuple[float, float, float, float]:
    if isinstance(thresholds, SpiThresholds):
        return thresholds.as_tuple()
    values = tuple(float(v) for v in thresholds)
    if len(values) != 4:
        raise ValueError(f"expected 4 thresholds (target, alert2, alert3, alert4), got {len(values)}")
    return values  # type: ignore[return-value]


def validate_threshold_order(thresholds: ThresholdSet, direction: TargetDirection) -> None:
    """Reject thresholds not ordered for the declared direction.

    LOWER_IS_BETTER needs target <= alert2 <= alert3 <= alert4,
    HIGHER_IS_BETTER needs target >= alert2 >= alert3 >= alert4.

    Raises:
        InvalidThresholdOrder
    """
    values = _as_tuple(thresholds)
    direction = TargetDirection(direction)
    pairs = zip(values, values[1:])
    if direction == TargetDirection.LOWER_IS_BETTER:
        ordered = all(a <= b for a, b in pairs)
    else:
        ordered = all(a >= b for a, b in pairs)
    if not ordered:
        raise InvalidThresholdOrder(direction.value, values)


def count_breaches(value: float, thresholds: ThresholdSet, direction: TargetDirection) -> int:
    """Number of thresholds the value is strictly beyond in the bad direction."""
    values = _as_tuple(thresholds)
    if TargetDirection(direction) == TargetDirection.LOWER_IS_BETTER:
        return sum(1 for t in values if value > t)
    return sum(1 for t in values if value < t)


def evaluate_threshold(value: float, thresholds: ThresholdSet, direction: TargetDirection) -> SpiTier:
    """Return the highest tier whose threshold the value breaches.

    Ordering is assumed valid; it is enforced when the SPI definition is
    saved (see validate_threshold_order).

    Example (LOWER_IS_BETTER, thresholds 5/10/15/20):
        4 -> OnTarget, 7 -> Monitor, 12 -> Action, 22 -> Urgent
    """
    return BREACH_TIERS[count_breaches(value, thresholds, direction)]


def tier_rank(tier: SpiTier) -> int:
    return SPI_TIER_ORDER.index(SpiTier(tier))
