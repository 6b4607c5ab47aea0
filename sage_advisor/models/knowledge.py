"""
Versioned knowledge configuration records.

Static knowledge tables, decision templates and data-driven domain rules
are schema-validated records loaded at startup from ``config/knowledge.toml``
and hot-swappable through the registry's extension API.  All are frozen.

Model hierarchy
---------------
  KnowledgeRecord    — domain → nested lists of named strategies
  DecisionTemplate   — reusable criteria set with weights and thresholds
  RuleDefinition     — keyword trigger + RecommendationTemplate for one domain

Validation
----------
``version`` is a positive integer.  ``DecisionTemplate`` weights must match
the criteria one-to-one and sum to 1.0 (±0.01).  ``RuleDefinition`` needs
at least one keyword unless ``always`` is set.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import field_validator, model_validator

from sage_advisor.models.base import AdvisoryModel
from sage_advisor.models.recommendation import RecommendationTemplate


class KnowledgeRecord(AdvisoryModel):
    """Static knowledge for one key (e.g. ``"risk_mitigation_strategies"``)."""

    key: str
    version: int = 1
    description: str = ""
    data: dict[str, Any]

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"version must be >= 1, got {v}.")
        return v


class DecisionTemplate(AdvisoryModel):
    """Reusable multi-criteria template (e.g. investment, vendor selection).

    Attributes:
        name:               Template key.
        version:            Schema/content version.
        criteria:           Criterion names.
        weights:            One weight per criterion, summing to 1.0.
        minimum_thresholds: Criterion name → minimum acceptable score.
    """

    name: str
    version: int = 1
    criteria: list[str]
    weights: list[float]
    minimum_thresholds: dict[str, float] = {}

    @model_validator(mode="after")
    def validate_weights(self) -> "DecisionTemplate":
        if self.version < 1:
            raise ValueError(f"version must be >= 1, got {self.version}.")
        if len(self.criteria) != len(self.weights):
            raise ValueError(
                f"Template '{self.name}' has {len(self.criteria)} criteria "
                f"but {len(self.weights)} weights."
            )
        total = sum(self.weights)
        if abs(total - 1.0) > 0.01:
            raise ValueError(
                f"Template '{self.name}' weights must sum to 1.0 (±0.01), got {total:.3f}."
            )
        unknown = set(self.minimum_thresholds) - set(self.criteria)
        if unknown:
            raise ValueError(
                f"Template '{self.name}' has thresholds for unknown criteria: {sorted(unknown)}."
            )
        return self

    def weight_of(self, criterion: str) -> float:
        return dict(zip(self.criteria, self.weights)).get(criterion, 0.0)


class RuleDefinition(AdvisoryModel):
    """Declarative domain rule: emit ``template`` when the objective matches.

    Attributes:
        name:     Rule name, unique within its domain.
        domain:   Domain key the rule is registered under (lower-cased).
        version:  Content version.
        keywords: Objective keywords; matching is case-insensitive substring.
        match:    ``"any"`` (one keyword suffices) or ``"all"``.
        always:   Fire regardless of keywords.
        template: Recommendation emitted when the rule fires.
    """

    name: str
    domain: str
    version: int = 1
    keywords: list[str] = []
    match: Literal["any", "all"] = "any"
    always: bool = False
    template: RecommendationTemplate

    @field_validator("domain")
    @classmethod
    def normalize_domain(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("rule domain must not be empty.")
        return v

    @model_validator(mode="after")
    def validate_trigger(self) -> "RuleDefinition":
        if not self.always and not self.keywords:
            raise ValueError(
                f"Rule '{self.name}' needs at least one keyword or always = true."
            )
        return self
