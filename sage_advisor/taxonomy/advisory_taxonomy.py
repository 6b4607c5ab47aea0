"""
Advisory taxonomy: the closed vocabularies every recommendation and result
is expressed in.

Four dimensions describe a recommendation:
  - ``RecommendationType`` — the *what*: what kind of advice is this?
  - ``ImpactLevel``        — the *how much*: expected effect if acted on.
  - ``UrgencyLevel``       — the *when*: how soon it should be acted on.
  - ``RiskTolerance``      — the caller's appetite, carried on the context.

Result-level summaries use ``RiskLevel`` and ``OpportunityLevel``.

Usage example::

    from sage_advisor.taxonomy.advisory_taxonomy import ImpactLevel, IMPACT_WEIGHTS

    weight = IMPACT_WEIGHTS[ImpactLevel.HIGH]   # 0.8

This module has NO imports from any other ``sage_advisor`` package.
"""

from enum import StrEnum


class RecommendationType(StrEnum):
    """Kind of advice a recommendation represents."""

    ACTION = "action"
    """A single concrete step to take."""

    STRATEGY = "strategy"
    """A multi-phase plan toward the objective."""

    OPTIMIZATION = "optimization"
    """An improvement to something that already exists."""

    RISK_MITIGATION = "risk-mitigation"
    """A measure that reduces exposure rather than adding upside."""

    DECISION = "decision"
    """A choice between alternatives."""


class ImpactLevel(StrEnum):
    """Expected magnitude of effect."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class UrgencyLevel(StrEnum):
    """How soon a recommendation should be acted on."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    IMMEDIATE = "immediate"


class RiskTolerance(StrEnum):
    """Caller's stated appetite for risk."""

    VERY_LOW = "very-low"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very-high"


class CriterionType(StrEnum):
    """Direction of a decision-matrix criterion."""

    BENEFIT = "benefit"
    """Higher raw score is better."""

    COST = "cost"
    """Lower raw score is better; scored as ``1 - value``."""


class RiskLevel(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class OpportunityLevel(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    EXCEPTIONAL = "exceptional"


class Outcome(StrEnum):
    """Reported real-world outcome of an acted-on recommendation."""

    SUCCESSFUL = "successful"
    FAILED = "failed"
    PARTIAL = "partial"


# ── Default weight tables ─────────────────────────────────────────────────────
# Shared by the composite ranker and the decision matrix; overridable through
# ``HeuristicsConfig``.

IMPACT_WEIGHTS: dict[str, float] = {
    ImpactLevel.LOW:      0.2,
    ImpactLevel.MEDIUM:   0.5,
    ImpactLevel.HIGH:     0.8,
    ImpactLevel.CRITICAL: 1.0,
}

URGENCY_WEIGHTS: dict[str, float] = {
    UrgencyLevel.LOW:       0.1,
    UrgencyLevel.MEDIUM:    0.3,
    UrgencyLevel.HIGH:      0.6,
    UrgencyLevel.IMMEDIATE: 1.0,
}

HIGH_IMPACT_LEVELS: frozenset[str] = frozenset({ImpactLevel.HIGH, ImpactLevel.CRITICAL})
LOW_RISK_TOLERANCES: frozenset[str] = frozenset({RiskTolerance.LOW, RiskTolerance.VERY_LOW})
