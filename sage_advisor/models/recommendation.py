"""
Recommendation value objects.

``Recommendation`` is a single proposed action with confidence, impact,
urgency and supporting reasoning.  Recommendations are created by generator
passes and rules, then ranked and truncated — never mutated.

``RecommendationTemplate`` is the content of a recommendation without its
identity (``id``, ``created_at``).  Built-in patterns and data-driven rules
declare templates; ``build()`` stamps a fresh identity on each use.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from pydantic import Field, field_validator

from sage_advisor.models.base import AdvisoryModel
from sage_advisor.taxonomy.advisory_taxonomy import (
    ImpactLevel,
    RecommendationType,
    UrgencyLevel,
)


class RecommendationTimeline(AdvisoryModel):
    """Implementation steps grouped by phase.

    Attributes:
        immediate:   Steps to start now.
        short_term:  1–3 months.
        medium_term: 3–12 months.
        long_term:   12+ months.
    """

    immediate: list[str] = []
    short_term: list[str] = []
    medium_term: list[str] = []
    long_term: list[str] = []

    @property
    def only_long_term(self) -> bool:
        """True when long-term steps are the only steps listed."""
        return bool(self.long_term) and not (
            self.immediate or self.short_term or self.medium_term
        )


class ResourceNeeds(AdvisoryModel):
    """Resources a recommendation declares it needs.

    Attributes:
        human:     Roles or teams.
        financial: Estimated spend, comparable to ``AdvisoryContext.budget``.
        technical: Systems or tooling.
    """

    human: list[str] = []
    financial: Optional[float] = None
    technical: list[str] = []


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class RecommendationTemplate(AdvisoryModel):
    """Recommendation content without identity.

    Attributes:
        id_prefix: Prefix for generated recommendation IDs, e.g. ``"perf-opt"``.
        (remaining fields mirror ``Recommendation``)
    """

    id_prefix: str = "rec"
    type: RecommendationType
    title: str
    description: str
    action: str
    confidence: float
    impact: ImpactLevel
    urgency: UrgencyLevel
    category: Optional[str] = None
    reasoning: str
    benefits: list[str] = []
    risks: list[str] = []
    prerequisites: list[str] = []
    timeline: Optional[RecommendationTimeline] = None
    resources: Optional[ResourceNeeds] = None
    alternatives: list[str] = []
    success_metrics: list[str] = []

    @field_validator("confidence")
    @classmethod
    def validate_confidence(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"confidence must be in [0.0, 1.0], got {v}.")
        return v

    def build(self, **overrides: Any) -> "Recommendation":
        """Create a ``Recommendation`` with a fresh ID and timestamp.

        Args:
            **overrides: Field values replacing the template's (e.g. a
                context-dependent ``confidence`` or ``reasoning``).

        Returns:
            New validated ``Recommendation``.
        """
        fields = self.model_dump(exclude={"id_prefix"})
        fields.update(overrides)
        return Recommendation(id=f"{self.id_prefix}-{uuid4().hex[:12]}", **fields)


class Recommendation(AdvisoryModel):
    """A single proposed action.

    Attributes:
        id:              Unique identifier within a result.
        type:            Kind of advice.
        title:           Short headline.
        description:     One-sentence summary.
        action:          What to do.
        confidence:      Confidence in [0, 1].
        impact:          Expected magnitude of effect.
        urgency:         How soon to act.
        category:        Free-form grouping used by priority weights and filters.
        reasoning:       Why this is recommended.
        benefits:        Expected upsides.
        risks:           Known downsides.
        prerequisites:   What must be true before starting.
        timeline:        Phased implementation steps.
        resources:       Declared resource needs.
        alternatives:    Other ways to reach the same end.
        success_metrics: How success is measured.
        metadata:        Free-form extra data from the producing rule.
        created_at:      UTC creation time.
    """

    id: str
    type: RecommendationType
    title: str
    description: str
    action: str
    confidence: float
    impact: ImpactLevel
    urgency: UrgencyLevel
    category: Optional[str] = None
    reasoning: str
    benefits: list[str] = []
    risks: list[str] = []
    prerequisites: list[str] = []
    timeline: Optional[RecommendationTimeline] = None
    resources: Optional[ResourceNeeds] = None
    alternatives: list[str] = []
    success_metrics: list[str] = []
    metadata: dict[str, Any] = {}
    created_at: datetime = Field(default_factory=_utcnow)

    @field_validator("confidence")
    @classmethod
    def validate_confidence(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"confidence must be in [0.0, 1.0], got {v}.")
        return v

    @field_validator("title", "reasoning")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("title and reasoning must not be empty.")
        return v.strip()
