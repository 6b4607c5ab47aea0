"""
Advisory context and request options.

``AdvisoryContext`` is the canonical input to the engine: what the caller
wants to achieve (``objective``), in which ``domain``, under which
constraints.  It is produced by the context resolver from free text, a
structured mapping, or an opaque state object, and discarded after the
request completes.

``AdviseOptions`` carries the per-request knobs of ``advise()``.  Unset
fields fall back to ``EngineConfig`` defaults.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import field_validator

from sage_advisor.models.base import AdvisoryModel
from sage_advisor.taxonomy.advisory_taxonomy import RiskTolerance


class AdvisoryContext(AdvisoryModel):
    """Normalized description of a goal, domain and constraints.

    Non-emptiness of ``domain`` and ``objective`` is enforced by the resolver
    (which raises ``sage_advisor.exceptions.ValidationError``), not here, so
    that a structured input with empty fields can be reported with the
    engine's own error type.

    Attributes:
        domain:           Advisory domain key, e.g. ``"business"``.
        objective:        What the caller wants to achieve.
        constraints:      Free-form constraint mapping.
        preferences:      Named preference weights.
        stakeholders:     People or groups affected by the decision.
        timeline:         ``"immediate"``, ``"short-term"``, ``"medium-term"``,
                          ``"long-term"`` or any caller-supplied phrase.
        budget:           Available budget (currency-agnostic).
        resources:        Available resources, free-form.
        risk_tolerance:   Caller's appetite for risk.
        priority_weights: Category → weight used by the composite ranker.
        historical_data:  Prior observations, counted as data points.
        current_state:    Current metrics (e.g. ``efficiency``, ``error_rate``).
    """

    domain: str = "general"
    objective: str = ""
    constraints: Optional[dict[str, Any]] = None
    preferences: Optional[dict[str, float]] = None
    stakeholders: Optional[list[str]] = None
    timeline: Optional[str] = None
    budget: Optional[float] = None
    resources: Optional[dict[str, Any]] = None
    risk_tolerance: Optional[RiskTolerance] = None
    priority_weights: Optional[dict[str, float]] = None
    historical_data: Optional[list[Any]] = None
    current_state: Optional[dict[str, Any]] = None

    @field_validator("domain", "objective", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        if v is None:
            return ""
        return v.strip() if isinstance(v, str) else v

    @field_validator("budget")
    @classmethod
    def validate_budget(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v < 0:
            raise ValueError(f"budget must be non-negative, got {v}.")
        return v


class AdviseOptions(AdvisoryModel):
    """Per-request options for ``advise()``.

    Attributes:
        max_recommendations:  Upper bound on returned recommendations.
        confidence_threshold: Minimum confidence a recommendation must reach.
        categories:           If set, only candidates in these categories survive.
    """

    max_recommendations: Optional[int] = None
    confidence_threshold: Optional[float] = None
    categories: Optional[list[str]] = None

    @field_validator("max_recommendations")
    @classmethod
    def validate_max(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError(f"max_recommendations must be >= 0, got {v}.")
        return v

    @field_validator("confidence_threshold")
    @classmethod
    def validate_threshold(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and not 0.0 <= v <= 1.0:
            raise ValueError(f"confidence_threshold must be in [0.0, 1.0], got {v}.")
        return v
