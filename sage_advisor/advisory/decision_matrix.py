"""
Decision matrix builder: re-ranks surviving recommendations as alternatives
scored against five fixed criteria.

Criteria
--------
    confidence   benefit  0.30   recommendation confidence
    impact       benefit  0.25   impact mapped via the ranker's table
    urgency      benefit  0.20   urgency mapped via the ranker's table
    feasibility  benefit  0.15   see estimate_feasibility()
    risk         cost     0.10   see estimate_risk()

Weighted score per alternative::

    Σ (1 - score if criterion is cost else score) * weight

Alternatives are ranked by weighted score descending; ties keep candidate
order; ranks are 1-based with no gaps or duplicates.  Alternative ids are
the recommendation ids, made unique by suffix when a rule repeats one.

Fewer than two recommendations → no matrix (``None``), not an error.
"""

from __future__ import annotations

from typing import Optional

from sage_advisor.config import HeuristicsConfig
from sage_advisor.models.context import AdvisoryContext
from sage_advisor.models.decision import (
    Alternative,
    AlternativeRanking,
    Criterion,
    DecisionMatrix,
)
from sage_advisor.models.recommendation import Recommendation
from sage_advisor.taxonomy.advisory_taxonomy import CriterionType, ImpactLevel, UrgencyLevel

MIN_ALTERNATIVES = 2

DEFAULT_CRITERIA: tuple[Criterion, ...] = (
    Criterion(name="confidence",  weight=0.30, type=CriterionType.BENEFIT,
              description="Recommendation confidence"),
    Criterion(name="impact",      weight=0.25, type=CriterionType.BENEFIT,
              description="Expected impact level"),
    Criterion(name="urgency",     weight=0.20, type=CriterionType.BENEFIT,
              description="Implementation urgency"),
    Criterion(name="feasibility", weight=0.15, type=CriterionType.BENEFIT,
              description="Implementation feasibility"),
    Criterion(name="risk",        weight=0.10, type=CriterionType.COST,
              description="Associated risks"),
)


def estimate_feasibility(
    recommendation: Recommendation,
    context: AdvisoryContext,
    heuristics: HeuristicsConfig,
) -> float:
    """Feasibility in [0, 1].

    Starts at the base (0.7); halved when the declared financial need
    exceeds the budget; ×0.6 when the context is immediate but the
    recommendation only lists long-term steps.
    """
    feasibility = heuristics.feasibility_base

    financial = recommendation.resources.financial if recommendation.resources else None
    if context.budget is not None and financial is not None and financial > context.budget:
        feasibility *= heuristics.over_budget_multiplier

    if (
        context.timeline == "immediate"
        and recommendation.timeline is not None
        and recommendation.timeline.only_long_term
    ):
        feasibility *= heuristics.timeline_mismatch_multiplier

    return _clamp(feasibility, 0.0, 1.0)


def estimate_risk(recommendation: Recommendation, heuristics: HeuristicsConfig) -> float:
    """Risk in [0, 1]: base 0.3, raised by impact, immediacy and listed risks."""
    risk = heuristics.risk_base

    if recommendation.impact == ImpactLevel.CRITICAL:
        risk += heuristics.risk_critical_impact
    elif recommendation.impact == ImpactLevel.HIGH:
        risk += heuristics.risk_high_impact

    if recommendation.urgency == UrgencyLevel.IMMEDIATE:
        risk += heuristics.risk_immediate_urgency

    if len(recommendation.risks) > heuristics.many_risks_threshold:
        risk += heuristics.risk_many_risks

    return _clamp(risk, 0.0, 1.0)


def score_alternative(
    recommendation: Recommendation,
    context: AdvisoryContext,
    heuristics: HeuristicsConfig,
    alternative_id: Optional[str] = None,
) -> Alternative:
    return Alternative(
        id=alternative_id or recommendation.id,
        name=recommendation.title,
        description=recommendation.description,
        scores={
            "confidence":  recommendation.confidence,
            "impact":      heuristics.impact_weights[recommendation.impact],
            "urgency":     heuristics.urgency_weights[recommendation.urgency],
            "feasibility": estimate_feasibility(recommendation, context, heuristics),
            "risk":        estimate_risk(recommendation, heuristics),
        },
        feasible=True,
    )


def unique_alternative_ids(recommendations: list[Recommendation]) -> list[str]:
    """Recommendation ids, with repeats suffixed ``-2``, ``-3`` … in order."""
    used: set[str] = set()
    ids: list[str] = []
    for rec in recommendations:
        candidate, n = rec.id, 1
        while candidate in used:
            n += 1
            candidate = f"{rec.id}-{n}"
        used.add(candidate)
        ids.append(candidate)
    return ids


def weighted_score(alternative: Alternative, criteria: tuple[Criterion, ...]) -> float:
    total = 0.0
    for criterion in criteria:
        score = alternative.scores.get(criterion.name, 0.0)
        adjusted = 1.0 - score if criterion.type == CriterionType.COST else score
        total += adjusted * criterion.weight
    return total


def build_decision_matrix(
    recommendations: list[Recommendation],
    context: AdvisoryContext,
    heuristics: Optional[HeuristicsConfig] = None,
    criteria: tuple[Criterion, ...] = DEFAULT_CRITERIA,
) -> Optional[DecisionMatrix]:
    """Build the matrix for ``recommendations`` (already ranked and filtered).

    Args:
        recommendations: Surviving recommendations in ranked order.
        context:         Resolved advisory context.
        heuristics:      Tunable constants; defaults if None.
        criteria:        Weighted criteria (must sum to 1.0 ±0.01).

    Returns:
        ``DecisionMatrix``, or ``None`` when fewer than two recommendations.
    """
    if len(recommendations) < MIN_ALTERNATIVES:
        return None

    h = heuristics or HeuristicsConfig()
    alternatives = [
        score_alternative(rec, context, h, alt_id)
        for rec, alt_id in zip(recommendations, unique_alternative_ids(recommendations))
    ]

    weighted = [
        (weighted_score(alt, criteria), index, alt)
        for index, alt in enumerate(alternatives)
    ]
    # Descending score; equal scores keep candidate order.
    weighted.sort(key=lambda t: (-t[0], t[1]))

    rankings = [
        AlternativeRanking(alternative_id=alt.id, score=round(score, 6), rank=rank)
        for rank, (score, _, alt) in enumerate(weighted, start=1)
    ]

    return DecisionMatrix(
        alternatives=alternatives,
        criteria=list(criteria),
        scores={alt.id: dict(alt.scores) for alt in alternatives},
        rankings=rankings,
    )


# ── Helper ────────────────────────────────────────────────────────────────────

def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))
