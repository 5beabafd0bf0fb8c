"""Scoring modules for the monitoring core.

This package contains:
- risk_scorer.py: Rank-based likelihood x severity scoring
- risk_domains.py: Per-domain label sets mapped to ranks
"""
from scoring.risk_scorer import (
    TIER_BANDS,
    color_for_tier,
    gradient_color,
    reassess,
    risk_code,
    score_risk,
    tier_for_score,
    tolerability_for_score,
)
from scoring.risk_domains import (
    DOMAIN_SCALES,
    DomainScale,
    assess,
    assess_residual,
    labels_for,
)

__all__ = [
    # Scorer
    "TIER_BANDS",
    "color_for_tier",
    "gradient_color",
    "reassess",
    "risk_code",
    "score_risk",
    "tier_for_score",
    "tolerability_for_score",
    # Domains
    "DOMAIN_SCALES",
    "DomainScale",
    "assess",
    "assess_residual",
    "labels_for",
]
