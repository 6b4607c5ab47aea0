"""
Decision-matrix models.

A ``DecisionMatrix`` re-ranks competing recommendations as *alternatives*
scored against a weighted set of *criteria*.  Three structural invariants are
validated on construction:

  - Criteria weights sum to 1.0 (tolerance ±0.01).
  - Alternative ids are unique.
  - ``rankings`` assigns each alternative exactly one rank, and the ranks
    form the permutation ``1..len(alternatives)``.
"""

from __future__ import annotations

from pydantic import field_validator, model_validator

from sage_advisor.models.base import AdvisoryModel
from sage_advisor.taxonomy.advisory_taxonomy import CriterionType

WEIGHT_SUM_TOLERANCE = 0.01


class Criterion(AdvisoryModel):
    """One weighted scoring dimension."""

    name: str
    weight: float
    type: CriterionType
    description: str = ""

    @field_validator("weight")
    @classmethod
    def validate_weight(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"criterion weight must be in [0.0, 1.0], got {v}.")
        return v


class Alternative(AdvisoryModel):
    """A candidate scored per criterion (scores in [0, 1])."""

    id: str
    name: str
    description: str = ""
    scores: dict[str, float]
    feasible: bool = True

    @field_validator("scores")
    @classmethod
    def validate_scores(cls, v: dict[str, float]) -> dict[str, float]:
        for name, score in v.items():
            if not 0.0 <= score <= 1.0:
                raise ValueError(f"score for '{name}' must be in [0.0, 1.0], got {score}.")
        return v


class AlternativeRanking(AdvisoryModel):
    alternative_id: str
    score: float
    rank: int


class DecisionMatrix(AdvisoryModel):
    """Weighted multi-criteria matrix over alternatives.

    Attributes:
        alternatives: One alternative per surviving recommendation.
        criteria:     Weighted criteria.
        scores:       alternative_id → criterion name → raw score.
        rankings:     Alternatives ordered by weighted score (rank 1 first).
    """

    alternatives: list[Alternative]
    criteria: list[Criterion]
    scores: dict[str, dict[str, float]]
    rankings: list[AlternativeRanking]

    @model_validator(mode="after")
    def validate_structure(self) -> "DecisionMatrix":
        total = sum(c.weight for c in self.criteria)
        if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
            raise ValueError(
                f"criteria weights must sum to 1.0 (±{WEIGHT_SUM_TOLERANCE}), got {total:.3f}."
            )
        ranks = sorted(r.rank for r in self.rankings)
        if ranks != list(range(1, len(self.alternatives) + 1)):
            raise ValueError(
                f"rankings must be a permutation of 1..{len(self.alternatives)}, got {ranks}."
            )
        alt_ids = {a.id for a in self.alternatives}
        if len(alt_ids) != len(self.alternatives):
            raise ValueError("alternative ids must be unique.")
        ranked_ids = {r.alternative_id for r in self.rankings}
        if alt_ids != ranked_ids:
            raise ValueError("rankings must reference every alternative exactly once.")
        return self
