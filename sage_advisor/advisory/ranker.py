"""
Recommendation ranker: composite scoring, stable ordering, filtering.

Score formula (weighted sum, range 0–1)
---------------------------------------
    total = (
        confidence              * 0.4
        + impact_weight         * 0.3   # low .2 | medium .5 | high .8 | critical 1.0
        + urgency_weight        * 0.2   # low .1 | medium .3 | high .6 | immediate 1.0
        + context_priority      * 0.1   # context.priority_weights[category]
    )

``context_priority`` is looked up by the recommendation's category, or
``"general"`` when it has none; 0 when the context carries no priority
weights or none for that key.

Ordering
--------
Candidates are sorted by total descending with Python's stable sort, so
equal scores keep generation order.  This is relied on for determinism.

Usage flow
----------
1. rank_recommendations(candidates, context, heuristics)
   -> list[ScoredRecommendation]  (descending)

2. select_recommendations(ranked, threshold, max_n, categories)
   -> list[ScoredRecommendation]  (filtered, capped)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sage_advisor.config import HeuristicsConfig
from sage_advisor.models.context import AdvisoryContext
from sage_advisor.models.recommendation import Recommendation

DEFAULT_CATEGORY = "general"


@dataclass(frozen=True)
class CompositeScore:
    """All components of one recommendation's composite score.

    Attributes:
        confidence:       Recommendation confidence, 0–1.
        impact_weight:    Impact mapped to 0–1.
        urgency_weight:   Urgency mapped to 0–1.
        context_priority: Caller's priority weight for the category.
        total:            Weighted sum.
    """

    confidence:       float
    impact_weight:    float
    urgency_weight:   float
    context_priority: float
    total:            float


@dataclass(frozen=True)
class ScoredRecommendation:
    """A recommendation coupled with its composite score and generation index."""

    recommendation: Recommendation
    score:          CompositeScore
    order:          int


def context_priority_weight(recommendation: Recommendation, context: AdvisoryContext) -> float:
    if not context.priority_weights:
        return 0.0
    category = recommendation.category or DEFAULT_CATEGORY
    return float(context.priority_weights.get(category, 0.0))


def compute_composite_score(
    recommendation: Recommendation,
    context: AdvisoryContext,
    heuristics: Optional[HeuristicsConfig] = None,
) -> CompositeScore:
    """Compute the composite ranking score for one recommendation."""
    h = heuristics or HeuristicsConfig()

    impact   = h.impact_weights[recommendation.impact]
    urgency  = h.urgency_weights[recommendation.urgency]
    priority = context_priority_weight(recommendation, context)

    total = (
        recommendation.confidence * h.confidence_weight
        + impact                  * h.impact_weight
        + urgency                 * h.urgency_weight
        + priority                * h.priority_weight
    )
    return CompositeScore(
        confidence=recommendation.confidence,
        impact_weight=impact,
        urgency_weight=urgency,
        context_priority=priority,
        total=total,
    )


def rank_recommendations(
    candidates: list[Recommendation],
    context: AdvisoryContext,
    heuristics: Optional[HeuristicsConfig] = None,
) -> list[ScoredRecommendation]:
    """Score every candidate and sort by composite score descending.

    Ties preserve the candidates' original order (stable sort).
    """
    scored = [
        ScoredRecommendation(
            recommendation=rec,
            score=compute_composite_score(rec, context, heuristics),
            order=index,
        )
        for index, rec in enumerate(candidates)
    ]
    return sorted(scored, key=lambda s: -s.score.total)


def select_recommendations(
    ranked: list[ScoredRecommendation],
    confidence_threshold: float,
    max_recommendations: int,
    categories: Optional[list[str]] = None,
) -> list[ScoredRecommendation]:
    """Filter ranked candidates and cap the list.

    Steps, in order:
      1. Drop candidates outside ``categories`` (when given).
      2. Drop candidates with ``confidence < confidence_threshold``.
      3. Keep the first ``max_recommendations``.
    """
    allowed = set(categories) if categories else None
    survivors = [
        s for s in ranked
        if (allowed is None or s.recommendation.category in allowed)
        and s.recommendation.confidence >= confidence_threshold
    ]
    return survivors[:max_recommendations]
