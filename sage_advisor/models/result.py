"""
Advisory result models.

``AdvisoryResult`` is the single output of ``advise()``: ranked
recommendations, a qualitative analysis, an optional decision matrix,
deterministic reasoning text and an aggregate confidence.

``HistoryEntry`` pairs a context with the result produced for it; entries
are appended to the bounded history store and never mutated.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import field_validator

from sage_advisor.models.base import AdvisoryModel
from sage_advisor.models.context import AdvisoryContext
from sage_advisor.models.decision import DecisionMatrix
from sage_advisor.models.recommendation import Recommendation
from sage_advisor.taxonomy.advisory_taxonomy import OpportunityLevel, RiskLevel


class RiskAssessment(AdvisoryModel):
    level: RiskLevel
    factors: list[str] = []
    mitigations: list[str] = []


class OpportunityAssessment(AdvisoryModel):
    level: OpportunityLevel
    areas: list[str] = []
    timeline: str = "medium-term"


class Analysis(AdvisoryModel):
    """Qualitative analysis accompanying the recommendations."""

    summary: str
    key_findings: list[str] = []
    risk_assessment: RiskAssessment
    opportunity_assessment: OpportunityAssessment


class ResultMetadata(AdvisoryModel):
    """Provenance of a result.

    Attributes:
        analysis_method: Name of the analysis pipeline.
        data_points:     Entries contributed by historical data, current
                         state and constraints combined.
        processing_time: Wall-clock time spent in ``advise()``, milliseconds.
        version:         Engine version.
        timestamp:       UTC time the result was composed.
    """

    analysis_method: str
    data_points: int
    processing_time: float
    version: str
    timestamp: datetime


class AdvisoryResult(AdvisoryModel):
    """Complete output of one advisory request."""

    recommendations: list[Recommendation]
    analysis: Analysis
    decision_matrix: Optional[DecisionMatrix] = None
    reasoning: str
    confidence: float
    metadata: ResultMetadata

    @field_validator("confidence")
    @classmethod
    def validate_confidence(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"confidence must be in [0.0, 1.0], got {v}.")
        return v


class HistoryEntry(AdvisoryModel):
    """One (context, result) pair in the history store.

    Attributes:
        sequence:    Monotonic insertion number (1 = first ever appended).
        context:     The resolved context.
        result:      The result produced for it.
        recorded_at: UTC insertion time.
    """

    sequence: int
    context: AdvisoryContext
    result: AdvisoryResult
    recorded_at: datetime
