"""
Tests for sage_advisor/advisory/resolver.py.

What we test
------------
Free text:
  - Domain keywords pick business / technology / marketing / finance.
  - "strategy" maps to business; first matching domain wins.
  - No domain keyword → "general".
  - conservative/safe → low tolerance; aggressive/bold → high; else medium.
  - urgent/quick/strategic keywords pick the timeline; default medium-term.
  - The text itself becomes the objective.

Structured:
  - Mappings with objective/domain pass through validation.
  - camelCase keys are accepted.
  - Empty domain is replaced with "general".
  - Empty objective raises ValidationError naming the field.
  - Missing or None objective falls back to "goal", then the default.
  - Input fields win over hints; hints fill gaps.

Opaque state:
  - The object becomes current_state verbatim (non-string keys stringified).
  - Objective comes from a "goal" entry or the generic default.
  - Domain and risk tolerance come from hints.
"""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from sage_advisor.advisory.resolver import (
    DEFAULT_OBJECTIVE,
    detect_domain,
    detect_risk_tolerance,
    detect_timeline,
    ensure_resolved,
    resolve_context,
)
from sage_advisor.exceptions import ValidationError
from sage_advisor.models.context import AdvisoryContext
from sage_advisor.taxonomy.advisory_taxonomy import RiskTolerance


# ── Keyword detection ─────────────────────────────────────────────────────────

class TestDetectDomain:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("Grow the business in Europe", "business"),
            ("Define our product strategy", "business"),
            ("Modernize our tech stack", "technology"),
            ("Plan the marketing calendar", "marketing"),
            ("Restructure finance operations", "finance"),
            ("Help me decide", "general"),
        ],
    )
    def test_keyword_mapping(self, text, expected):
        assert detect_domain(text) == expected

    def test_first_match_wins(self):
        # both "business" and "technology" appear; business is checked first
        assert detect_domain("technology for the business") == "business"

    def test_case_insensitive(self):
        assert detect_domain("TECHNOLOGY roadmap") == "technology"


class TestDetectRiskTolerance:
    def test_conservative_is_low(self):
        assert detect_risk_tolerance("a conservative plan") == RiskTolerance.LOW

    def test_safe_is_low(self):
        assert detect_risk_tolerance("grow safely") == RiskTolerance.LOW

    def test_aggressive_is_high(self):
        assert detect_risk_tolerance("an aggressive expansion") == RiskTolerance.HIGH

    def test_bold_is_high(self):
        assert detect_risk_tolerance("Bold moves only") == RiskTolerance.HIGH

    def test_default_is_medium(self):
        assert detect_risk_tolerance("improve onboarding") == RiskTolerance.MEDIUM


class TestDetectTimeline:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("we need this asap", "immediate"),
            ("urgent fix needed", "immediate"),
            ("a quick win", "short-term"),
            ("strategic roadmap", "long-term"),
            ("improve onboarding", "medium-term"),
        ],
    )
    def test_keyword_mapping(self, text, expected):
        assert detect_timeline(text) == expected


# ── Free text ─────────────────────────────────────────────────────────────────

class TestResolveText:
    def test_text_becomes_objective(self):
        ctx = resolve_context("How can we improve tech performance quickly?")
        assert ctx.objective == "How can we improve tech performance quickly?"
        assert ctx.domain == "technology"
        assert ctx.timeline == "short-term"
        assert ctx.risk_tolerance == RiskTolerance.MEDIUM

    def test_text_is_stripped(self):
        ctx = resolve_context("   grow the business   ")
        assert ctx.objective == "grow the business"

    def test_hints_fill_constraints_and_budget(self):
        ctx = resolve_context("grow the business", {"budget": 5000, "constraints": {"team": 3}})
        assert ctx.budget == 5000
        assert ctx.constraints == {"team": 3}

    def test_empty_text_raises(self):
        with pytest.raises(ValidationError) as exc_info:
            resolve_context("   ")
        assert exc_info.value.field == "objective"


# ── Structured ────────────────────────────────────────────────────────────────

class TestResolveStructured:
    def test_mapping_passes_through(self):
        ctx = resolve_context({"domain": "finance", "objective": "cut costs"})
        assert ctx.domain == "finance"
        assert ctx.objective == "cut costs"

    def test_camel_case_keys_accepted(self):
        ctx = resolve_context(
            {"domain": "business", "objective": "grow", "riskTolerance": "very-low",
             "priorityWeights": {"growth": 0.9}}
        )
        assert ctx.risk_tolerance == RiskTolerance.VERY_LOW
        assert ctx.priority_weights == {"growth": 0.9}

    def test_empty_domain_becomes_general(self):
        ctx = resolve_context({"domain": "", "objective": "improve retention"})
        assert ctx.domain == "general"

    def test_empty_domain_and_objective_raises(self):
        with pytest.raises(ValidationError) as exc_info:
            resolve_context({"domain": "", "objective": ""})
        assert exc_info.value.field == "objective"

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            resolve_context({"domain": "business", "objective": "  "})

    def test_input_wins_over_hints(self):
        ctx = resolve_context(
            {"domain": "business", "objective": "grow", "budget": 100.0},
            {"budget": 999.0, "stakeholders": ["cfo"]},
        )
        assert ctx.budget == 100.0
        assert ctx.stakeholders == ["cfo"]

    def test_context_instance_passes_through(self):
        original = AdvisoryContext(domain="marketing", objective="launch campaign")
        assert resolve_context(original) == original

    def test_invalid_risk_tolerance_rejected(self):
        with pytest.raises(ValueError):
            resolve_context({"domain": "business", "objective": "grow", "riskTolerance": "yolo"})

    def test_missing_objective_falls_back_to_goal(self):
        ctx = resolve_context({"domain": "business", "objective": None, "goal": "grow revenue"})
        assert ctx.objective == "grow revenue"
        assert ctx.domain == "business"

    def test_missing_objective_uses_default(self):
        ctx = resolve_context({"domain": "finance"})
        assert ctx.objective == DEFAULT_OBJECTIVE


# ── Opaque state ──────────────────────────────────────────────────────────────

class TestResolveState:
    def test_mapping_without_objective_is_state(self):
        state = {"efficiency": 0.5, "error_rate": 0.1}
        ctx = resolve_context(state)
        assert ctx.current_state == state
        assert ctx.objective == DEFAULT_OBJECTIVE
        assert ctx.domain == "general"
        assert ctx.risk_tolerance == RiskTolerance.MEDIUM

    def test_goal_becomes_objective(self):
        ctx = resolve_context({"goal": "reduce churn", "churn": 0.07})
        assert ctx.objective == "reduce churn"

    def test_hints_supply_domain_and_tolerance(self):
        ctx = resolve_context({"cpu": 0.93}, {"domain": "technology", "riskTolerance": "high"})
        assert ctx.domain == "technology"
        assert ctx.risk_tolerance == RiskTolerance.HIGH

    def test_object_attributes_become_state(self):
        ctx = resolve_context(SimpleNamespace(efficiency=0.4))
        assert ctx.current_state == {"efficiency": 0.4}

    def test_scalar_is_wrapped(self):
        ctx = resolve_context(42)
        assert ctx.current_state == {"value": 42}

    def test_non_string_keys_are_stringified(self):
        ctx = resolve_context({1: 0.4, 2: 0.9})
        assert ctx.current_state == {"1": 0.4, "2": 0.9}
        assert ctx.objective == DEFAULT_OBJECTIVE


class TestEnsureResolved:
    def test_fills_empty_domain(self):
        ctx = ensure_resolved(AdvisoryContext(domain="", objective="x"))
        assert ctx.domain == "general"

    def test_rejects_empty_objective(self):
        with pytest.raises(ValidationError):
            ensure_resolved(AdvisoryContext(domain="business", objective=""))
