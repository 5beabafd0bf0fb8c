"""Rank-based risk scorer for the likelihood x severity matrix.

Score bands:
- score <= 4: Low
- score <= 9: Medium
- score <= 16: High
- otherwise: Extreme

The scorer only knows ranks 1-5. Domain label sets are mapped to ranks in
scoring.risk_domains before calling in.
"""
from __future__ import annotations

from typing import Any, Optional

from models.risk import RiskAssessment
from models.shared import RiskDomain, RiskTier, Tolerability
from utils.error_handler import InvalidRank

MIN_RANK = 1
MAX_RANK = 5
MAX_SCORE = MAX_RANK * MAX_RANK

# (upper bound inclusive, tier)
TIER_BANDS: list[tuple[int, RiskTier]] = [
    (4, RiskTier.LOW),
    (9, RiskTier.MEDIUM),
    (16, RiskTier.HIGH),
    (MAX_SCORE, RiskTier.EXTREME),
]

TIER_COLORS: dict[RiskTier, str] = {
    RiskTier.LOW: "#16a34a",
    RiskTier.MEDIUM: "#eab308",
    RiskTier.HIGH: "#f97316",
    RiskTier.EXTREME: "#dc2626",
}

# Severity rank -> ICAO severity letter (5 = Catastrophic = A)
SEVERITY_LETTERS: dict[int, str] = {5: "A", 4: "B", 3: "C", 2: "D", 1: "E"}


def _check_rank(field: str, value: Any) -> int:
    # bool is an int subclass; a checkbox value is not a rank
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidRank(field, value)
    if value < MIN_RANK or value > MAX_RANK:
        raise InvalidRank(field, value)
    return value


def tier_for_score(score: int) -> RiskTier:
    for upper, tier in TIER_BANDS:
        if score <= upper:
            return tier
    return RiskTier.EXTREME


def tolerability_for_score(score: int) -> Tolerability:
    if score >= 15:
        return Tolerability.INTOLERABLE
    if score >= 10:
        return Tolerability.TOLERABLE
    return Tolerability.ACCEPTABLE


def color_for_tier(tier: RiskTier) -> str:
    return TIER_COLORS[tier]


def gradient_color(score: int) -> str:
    """Continuous green-to-red HSL colour for a score in 1..25."""
    clamped = min(MAX_SCORE, max(1, score))
    normalized = (clamped - 1) / (MAX_SCORE - 1)
    hue = round(120 * (1 - normalized))
    return f"hsl({hue}, 80%, 45%)"


def risk_code(likelihood_rank: int, severity_rank: int) -> str:
    """ICAO style matrix cell code, e.g. likelihood 4 / severity 4 -> '4B'."""
    likelihood_rank = _check_rank("likelihood_rank", likelihood_rank)
    severity_rank = _check_rank("severity_rank", severity_rank)
    return f"{likelihood_rank}{SEVERITY_LETTERS[severity_rank]}"


def score_risk(
    likelihood_rank: int,
    severity_rank: int,
    domain: Optional[RiskDomain] = None,
    likelihood_label: Optional[str] = None,
    severity_label: Optional[str] = None,
) -> RiskAssessment:
    """Score a likelihood/severity rank pair.

    Args:
        likelihood_rank: Ordinal likelihood 1-5
        severity_rank: Ordinal severity 1-5
        domain, likelihood_label, severity_label: Optional provenance when
            the ranks came from a domain label set

    Returns:
        RiskAssessment with score, tier, tolerability, risk_code and color

    Raises:
        InvalidRank: if either rank is not an integer in [1, 5]
    """
    likelihood_rank = _check_rank("likelihood_rank", likelihood_rank)
    severity_rank = _check_rank("severity_rank", severity_rank)

    score = likelihood_rank * severity_rank
    tier = tier_for_score(score)

    return RiskAssessment(
        likelihood_rank=likelihood_rank,
        severity_rank=severity_rank,
        score=score,
        tier=tier,
        tolerability=tolerability_for_score(score),
        risk_code=risk_code(likelihood_rank, severity_rank),
        color=color_for_tier(tier),
        domain=domain,
        likelihood_label=likelihood_label,
        severity_label=severity_label,
    )


def reassess(
    assessment: RiskAssessment,
    likelihood_rank: Optional[int] = None,
    severity_rank: Optional[int] = None,
) -> RiskAssessment:
    """Re-run the scorer in full after either rank changes.

    Labels are dropped when the ranks no longer come from them.
    """
    new_likelihood = assessment.likelihood_rank if likelihood_rank is None else likelihood_rank
    new_severity = assessment.severity_rank if severity_rank is None else severity_rank
    return score_risk(
        new_likelihood,
        new_severity,
        domain=assessment.domain,
        likelihood_label=assessment.likelihood_label if likelihood_rank is None else None,
        severity_label=assessment.severity_label if severity_rank is None else None,
    )
