"""Risk assessment model produced by the risk scorer."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from models.shared import RiskDomain, RiskTier, Tolerability


class RiskAssessment(BaseModel):
    """A scored cell of the likelihood x severity matrix.

    Immutable once built. The derived fields (score, tier, risk_code,
    tolerability, color) are always computed together by the scorer; an
    instance whose score or tier disagrees with its ranks fails validation.
    """
    model_config = ConfigDict(frozen=True)

    likelihood_rank: int = Field(ge=1, le=5)
    severity_rank: int = Field(ge=1, le=5)
    score: int = Field(ge=1, le=25)
    tier: RiskTier
    tolerability: Tolerability
    risk_code: str
    color: str

    # Set when the assessment came from a domain label pair
    domain: Optional[RiskDomain] = None
    likelihood_label: Optional[str] = None
    severity_label: Optional[str] = None

    @model_validator(mode="after")
    def _check_derived_fields(self) -> "RiskAssessment":
        from scoring.risk_scorer import tier_for_score

        expected = self.likelihood_rank * self.severity_rank
        if self.score != expected:
            raise ValueError(
                f"score {self.score} != likelihood_rank * severity_rank ({expected})"
            )
        if self.tier != tier_for_score(self.score):
            raise ValueError(f"tier {self.tier.value} does not match score {self.score}")
        return self

    def to_dict(self) -> dict:
        return {
            "likelihood_rank": self.likelihood_rank,
            "severity_rank": self.severity_rank,
            "score": self.score,
            "tier": self.tier.value,
            "tolerability": self.tolerability.value,
            "risk_code": self.risk_code,
            "color": self.color,
            "domain": self.domain.value if self.domain else None,
            "likelihood_label": self.likelihood_label,
            "severity_label": self.severity_label,
        }
