"""
Result composer: assembles ranked recommendations, analysis and decision
matrix into an ``AdvisoryResult``.

Aggregate confidence
--------------------
    0.4 * top.confidence + 0.6 * mean(confidences)      (0 when empty)

Reasoning
---------
A deterministic template over domain, objective, recommendation count, top
title/confidence, risk level and risk tolerance — identical inputs always
produce identical text.

Data points
-----------
    len(historical_data) + len(current_state) + len(constraints)
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sage_advisor.config import EngineConfig, HeuristicsConfig
from sage_advisor.models.context import AdvisoryContext
from sage_advisor.models.decision import DecisionMatrix
from sage_advisor.models.recommendation import Recommendation
from sage_advisor.models.result import (
    AdvisoryResult,
    Analysis,
    OpportunityAssessment,
    ResultMetadata,
    RiskAssessment,
)
from sage_advisor.taxonomy.advisory_taxonomy import HIGH_IMPACT_LEVELS


def calculate_overall_confidence(
    recommendations: list[Recommendation],
    heuristics: Optional[HeuristicsConfig] = None,
) -> float:
    if not recommendations:
        return 0.0
    h = heuristics or HeuristicsConfig()
    mean = sum(r.confidence for r in recommendations) / len(recommendations)
    blended = (
        recommendations[0].confidence * h.top_confidence_weight
        + mean * h.mean_confidence_weight
    )
    return max(0.0, min(1.0, blended))


def count_data_points(context: AdvisoryContext) -> int:
    points = 0
    if context.historical_data:
        points += len(context.historical_data)
    if context.current_state:
        points += len(context.current_state)
    if context.constraints:
        points += len(context.constraints)
    return points


def build_reasoning(
    context: AdvisoryContext,
    recommendations: list[Recommendation],
    risk: RiskAssessment,
) -> str:
    """Assemble the reasoning paragraph.

    Example::

        Based on the analysis of your technology objective "improve
        performance", 2 key recommendations were identified. The top priority
        is "Technology Performance Optimization" with 82% confidence. The
        overall risk level is assessed as low. Given your medium risk
        tolerance, these recommendations are calibrated accordingly.
    """
    parts = [
        f'Based on the analysis of your {context.domain} objective "{context.objective}", '
        f"{len(recommendations)} key recommendation"
        f"{'' if len(recommendations) == 1 else 's'} "
        f"{'was' if len(recommendations) == 1 else 'were'} identified."
    ]
    if recommendations:
        top = recommendations[0]
        parts.append(
            f'The top priority is "{top.title}" with {round(top.confidence * 100)}% confidence.'
        )
    parts.append(f"The overall risk level is assessed as {risk.level}.")
    if context.risk_tolerance:
        parts.append(
            f"Given your {context.risk_tolerance} risk tolerance, "
            "these recommendations are calibrated accordingly."
        )
    return " ".join(parts)


def build_summary(context: AdvisoryContext, recommendations: list[Recommendation]) -> str:
    if not recommendations:
        return (
            f"No recommendations met the confidence threshold for the {context.domain} "
            f'objective "{context.objective}". Consider lowering the threshold, '
            "widening the category filter, or providing more context."
        )
    return (
        f"{len(recommendations)} recommendation"
        f"{'' if len(recommendations) == 1 else 's'} for the {context.domain} "
        f'objective "{context.objective}", led by "{recommendations[0].title}".'
    )


def build_key_findings(
    recommendations: list[Recommendation],
    risk: RiskAssessment,
    opportunity: OpportunityAssessment,
) -> list[str]:
    findings: list[str] = []
    if recommendations:
        top = recommendations[0]
        findings.append(
            f"Top recommendation: {top.title} ({top.type}, {top.impact} impact, "
            f"{round(top.confidence * 100)}% confidence)"
        )
        high = sum(1 for r in recommendations if r.impact in HIGH_IMPACT_LEVELS)
        findings.append(f"{high} of {len(recommendations)} recommendations are high impact")
    findings.append(f"Risk level: {risk.level} ({len(risk.factors)} factors)")
    findings.append(f"Opportunity level: {opportunity.level} ({len(opportunity.areas)} areas)")
    return findings


def compose_result(
    context: AdvisoryContext,
    recommendations: list[Recommendation],
    risk: RiskAssessment,
    opportunity: OpportunityAssessment,
    decision_matrix: Optional[DecisionMatrix],
    processing_time_ms: float,
    engine: Optional[EngineConfig] = None,
    heuristics: Optional[HeuristicsConfig] = None,
) -> AdvisoryResult:
    """Assemble the final ``AdvisoryResult``."""
    engine = engine or EngineConfig()
    return AdvisoryResult(
        recommendations=recommendations,
        analysis=Analysis(
            summary=build_summary(context, recommendations),
            key_findings=build_key_findings(recommendations, risk, opportunity),
            risk_assessment=risk,
            opportunity_assessment=opportunity,
        ),
        decision_matrix=decision_matrix,
        reasoning=build_reasoning(context, recommendations, risk),
        confidence=calculate_overall_confidence(recommendations, heuristics),
        metadata=ResultMetadata(
            analysis_method=engine.analysis_method,
            data_points=count_data_points(context),
            processing_time=round(processing_time_ms, 3),
            version=engine.version,
            timestamp=datetime.now(tz=timezone.utc),
        ),
    )
