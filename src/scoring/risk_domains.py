"""Per-domain likelihood/severity label sets mapped onto scorer ranks.

Safety occurrence triage and the change-management hazard log describe the
same 1-5 ranks with different words. Each domain is a small lookup that
feeds the rank-only scorer.
"""
from __future__ import annotations

from dataclasses import dataclass

from models.risk import RiskAssessment
from models.shared import RiskDomain
from scoring.risk_scorer import score_risk
from utils.error_handler import InvalidRank


@dataclass(frozen=True)
class DomainScale:
    """Ordered labels for one domain, lowest rank first."""
    likelihood: tuple[str, ...]
    severity: tuple[str, ...]

    def likelihood_rank(self, label: str) -> int:
        return _rank_of(self.likelihood, label, "likelihood")

    def severity_rank(self, label: str) -> int:
        return _rank_of(self.severity, label, "severity")


def _rank_of(labels: tuple[str, ...], label: str, field: str) -> int:
    try:
        return labels.index(label) + 1
    except ValueError:
        raise InvalidRank(field, label) from None


DOMAIN_SCALES: dict[RiskDomain, DomainScale] = {
    RiskDomain.SAFETY_OCCURRENCE: DomainScale(
        likelihood=("Rare", "Unlikely", "Possible", "Likely", "Certain"),
        severity=("Insignificant", "Minor", "Moderate", "Major", "Catastrophic"),
    ),
    RiskDomain.CHANGE_HAZARD: DomainScale(
        likelihood=("Extremely Improbable", "Improbable", "Remote", "Occasional", "Frequent"),
        severity=("Negligible", "Minor", "Major", "Hazardous", "Catastrophic"),
    ),
}


def labels_for(domain: RiskDomain) -> DomainScale:
    return DOMAIN_SCALES[RiskDomain(domain)]


def assess(domain: RiskDomain, likelihood_label: str, severity_label: str) -> RiskAssessment:
    """Score a matrix cell selected by its domain labels.

    Raises:
        InvalidRank: if a label is not part of the domain's vocabulary
    """
    domain = RiskDomain(domain)
    scale = DOMAIN_SCALES[domain]
    return score_risk(
        scale.likelihood_rank(likelihood_label),
        scale.severity_rank(severity_label),
        domain=domain,
        likelihood_label=likelihood_label,
        severity_label=severity_label,
    )


def assess_residual(initial: RiskAssessment, likelihood_label: str, severity_label: str) -> RiskAssessment:
    """Score the post-mitigation cell in the same domain as the initial assessment."""
    if initial.domain is None:
        raise InvalidRank("domain", None)
    return assess(initial.domain, likelihood_label, severity_label)
