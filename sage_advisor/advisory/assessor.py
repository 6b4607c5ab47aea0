"""
Risk and opportunity assessment: qualitative levels derived from context
signals and the surviving recommendation set.

Risk factors (each adds one factor and its paired mitigation)
-------------------------------------------------------------
    timeline contains "immediate"                 → time pressure
    budget present and < 10,000                   → limited budget
    more than 10 stakeholders                     → alignment challenges
    more than 3 recommendations with high/critical impact → change overload

    level: > 5 factors critical | > 3 high | > 1 medium | else low

Opportunity areas
-----------------
    domain technology | digital   → transformation, automation, analytics
    domain business | strategy    → market expansion, process, partnerships
    "innovation" in objective     → innovation lab, R&D, emerging technology

    level: > 5 areas exceptional | > 3 high | < 2 low | else medium
"""

from __future__ import annotations

from typing import Optional

from sage_advisor.config import HeuristicsConfig
from sage_advisor.models.context import AdvisoryContext
from sage_advisor.models.recommendation import Recommendation
from sage_advisor.models.result import OpportunityAssessment, RiskAssessment
from sage_advisor.taxonomy.advisory_taxonomy import (
    HIGH_IMPACT_LEVELS,
    OpportunityLevel,
    RiskLevel,
)

_TECHNOLOGY_DOMAINS = frozenset({"technology", "digital"})
_BUSINESS_DOMAINS   = frozenset({"business", "strategy"})

_TECHNOLOGY_AREAS = (
    "Digital transformation acceleration",
    "Automation opportunities",
    "Data analytics implementation",
)
_BUSINESS_AREAS = (
    "Market expansion",
    "Process optimization",
    "Strategic partnerships",
)
_INNOVATION_AREAS = (
    "Innovation lab creation",
    "R&D investment",
    "Emerging technology adoption",
)


def risk_level_for(factor_count: int) -> RiskLevel:
    if factor_count > 5:
        return RiskLevel.CRITICAL
    if factor_count > 3:
        return RiskLevel.HIGH
    if factor_count > 1:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def opportunity_level_for(area_count: int) -> OpportunityLevel:
    if area_count > 5:
        return OpportunityLevel.EXCEPTIONAL
    if area_count > 3:
        return OpportunityLevel.HIGH
    if area_count < 2:
        return OpportunityLevel.LOW
    return OpportunityLevel.MEDIUM


def assess_risks(
    context: AdvisoryContext,
    recommendations: list[Recommendation],
    heuristics: Optional[HeuristicsConfig] = None,
) -> RiskAssessment:
    """Accumulate risk factors and pick the risk level."""
    h = heuristics or HeuristicsConfig()
    factors: list[str] = []
    mitigations: list[str] = []

    if context.timeline and "immediate" in context.timeline.lower():
        factors.append("Time pressure may compromise quality")
        mitigations.append("Implement strict quality checkpoints despite time constraints")

    if context.budget is not None and context.budget < h.low_budget_threshold:
        factors.append("Limited budget may restrict implementation options")
        mitigations.append("Prioritize high-impact, low-cost initiatives")

    if context.stakeholders and len(context.stakeholders) > h.stakeholder_threshold:
        factors.append("Multiple stakeholders may create alignment challenges")
        mitigations.append("Establish clear communication and decision-making processes")

    high_impact = [r for r in recommendations if r.impact in HIGH_IMPACT_LEVELS]
    if len(high_impact) > h.change_overload_threshold:
        factors.append("Change overload: multiple high-impact changes may overwhelm the organization")
        mitigations.append("Implement phased rollout with careful change management")

    return RiskAssessment(
        level=risk_level_for(len(factors)),
        factors=factors,
        mitigations=mitigations,
    )


def assess_opportunities(context: AdvisoryContext) -> OpportunityAssessment:
    """Derive opportunity areas from domain and objective keywords."""
    areas: list[str] = []
    domain = context.domain.lower()

    if domain in _TECHNOLOGY_DOMAINS:
        areas.extend(_TECHNOLOGY_AREAS)
    if domain in _BUSINESS_DOMAINS:
        areas.extend(_BUSINESS_AREAS)
    if "innovation" in context.objective.lower():
        areas.extend(_INNOVATION_AREAS)

    return OpportunityAssessment(
        level=opportunity_level_for(len(areas)),
        areas=areas,
        timeline=context.timeline or "medium-term",
    )
