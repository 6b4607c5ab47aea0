"""
Tests for sage_advisor/advisory/engine.py — the end-to-end request pipeline.

What we test
------------
Scenarios:
  - Technology / "improve performance" → a high-impact optimization.
  - Business / "grow revenue" / low tolerance → a risk-mitigation rec.
  - Empty domain and objective → ValidationError.
  - History drops the first entry after capacity+1 requests.

Properties (checked over several contexts):
  - len(recommendations) <= maxRecommendations.
  - every confidence >= confidenceThreshold.
  - order matches a recomputed composite score.
  - matrix weights sum to 1 and ranks are a permutation.
  - identical inputs give identical content (ignoring id / createdAt).

Behaviour:
  - Options accepted as AdviseOptions, camelCase mapping or None.
  - Category filter, empty-result summary, matrix omitted below two recs.
  - execute() accepts free text and hints carrying options.
  - A failing registered rule does not fail the request.
  - A non-numeric process metric does not cost the resource recommendation.
  - Metrics, outcome validation and extension points.
"""

from __future__ import annotations

import pytest

from sage_advisor.advisory.engine import AdvisoryEngine
from sage_advisor.advisory.history import HistoryStore
from sage_advisor.advisory.ranker import compute_composite_score
from sage_advisor.config import AppConfig
from sage_advisor.exceptions import ValidationError
from sage_advisor.models.context import AdviseOptions, AdvisoryContext
from sage_advisor.taxonomy.advisory_taxonomy import (
    ImpactLevel,
    Outcome,
    RecommendationType,
    RiskTolerance,
)

_PROPERTY_CONTEXTS = [
    {"domain": "technology", "objective": "improve performance and scale",
     "riskTolerance": "low", "budget": 5000, "currentState": {"efficiency": 0.4}},
    {"domain": "business", "objective": "revenue growth", "riskTolerance": "high",
     "priorityWeights": {"growth": 1.0}},
    {"domain": "general", "objective": "efficiency review", "timeline": "immediate",
     "resources": {"team": 3}, "stakeholders": [f"s{i}" for i in range(12)]},
    {"domain": "marketing", "objective": "brand awareness"},
]


def _content(result):
    """Recommendation content without identity or timestamps."""
    return [
        r.model_dump(exclude={"id", "created_at"}) for r in result.recommendations
    ]


# ── Scenarios ─────────────────────────────────────────────────────────────────

class TestScenarios:
    def test_technology_performance(self, engine):
        result = engine.advise(
            {"domain": "technology", "objective": "improve performance", "riskTolerance": "medium"}
        )
        assert any(
            r.type == RecommendationType.OPTIMIZATION and r.impact == ImpactLevel.HIGH
            for r in result.recommendations
        )
        assert result.decision_matrix is not None

    def test_business_low_risk_tolerance(self, engine, business_context):
        result = engine.advise(business_context)
        assert any(r.type == RecommendationType.RISK_MITIGATION for r in result.recommendations)
        assert any(r.title == "Revenue Diversification Strategy" for r in result.recommendations)

    def test_empty_domain_and_objective(self, engine):
        with pytest.raises(ValidationError):
            engine.advise({"domain": "", "objective": ""})
        with pytest.raises(ValidationError):
            engine.advise(AdvisoryContext(domain="", objective=""))
        assert engine.metrics().error_count == 2

    def test_history_eviction(self):
        engine = AdvisoryEngine(AppConfig(), history=HistoryStore(capacity=3))
        for i in range(4):
            engine.advise({"domain": "business", "objective": f"plan {i}"})
        recent = engine.recent_history(3)
        assert len(recent) == 3
        assert all(e.context.objective != "plan 0" for e in recent)


# ── Properties ────────────────────────────────────────────────────────────────

class TestProperties:
    @pytest.mark.parametrize("raw", _PROPERTY_CONTEXTS)
    @pytest.mark.parametrize("max_n, threshold", [(5, 0.6), (2, 0.7), (10, 0.0)])
    def test_cap_and_threshold(self, engine, raw, max_n, threshold):
        result = engine.advise(raw, {"maxRecommendations": max_n, "confidenceThreshold": threshold})
        assert len(result.recommendations) <= max_n
        assert all(r.confidence >= threshold for r in result.recommendations)
        assert 0.0 <= result.confidence <= 1.0

    @pytest.mark.parametrize("raw", _PROPERTY_CONTEXTS)
    def test_sorted_by_composite_score(self, engine, app_config, raw):
        result = engine.advise(raw, {"confidenceThreshold": 0.0, "maxRecommendations": 10})
        ctx = engine.recent_history(1)[0].context
        totals = [
            compute_composite_score(r, ctx, app_config.heuristics).total
            for r in result.recommendations
        ]
        assert totals == sorted(totals, reverse=True)

    @pytest.mark.parametrize("raw", _PROPERTY_CONTEXTS)
    def test_matrix_invariants(self, engine, raw):
        result = engine.advise(raw, {"confidenceThreshold": 0.0, "maxRecommendations": 10})
        matrix = result.decision_matrix
        if len(result.recommendations) < 2:
            assert matrix is None
            return
        assert sum(c.weight for c in matrix.criteria) == pytest.approx(1.0, abs=0.01)
        assert sorted(r.rank for r in matrix.rankings) == list(
            range(1, len(matrix.alternatives) + 1)
        )
        assert {a.id for a in matrix.alternatives} == {r.id for r in result.recommendations}

    @pytest.mark.parametrize("raw", _PROPERTY_CONTEXTS)
    def test_deterministic(self, engine, raw):
        first = engine.advise(raw)
        second = engine.advise(raw)
        assert _content(first) == _content(second)
        assert first.reasoning == second.reasoning
        assert first.confidence == second.confidence


# ── Options & outcomes ────────────────────────────────────────────────────────

class TestAdviseOptions:
    def test_defaults_from_config(self, engine):
        result = engine.advise(_PROPERTY_CONTEXTS[0])
        assert len(result.recommendations) <= 5
        assert all(r.confidence >= 0.6 for r in result.recommendations)

    def test_options_model(self, engine):
        result = engine.advise(_PROPERTY_CONTEXTS[0], AdviseOptions(max_recommendations=1))
        assert len(result.recommendations) == 1
        assert result.decision_matrix is None

    def test_category_filter(self, engine):
        result = engine.advise(
            _PROPERTY_CONTEXTS[0], {"categories": ["process"], "confidenceThreshold": 0.0}
        )
        assert [r.category for r in result.recommendations] == ["process"]

    def test_threshold_above_everything(self, engine, tech_context):
        result = engine.advise(tech_context, {"confidenceThreshold": 0.99})
        assert result.recommendations == []
        assert result.confidence == 0.0
        assert result.decision_matrix is None
        assert "No recommendations met the confidence threshold" in result.analysis.summary

    def test_invalid_option_rejected(self, engine, tech_context):
        with pytest.raises(ValueError):
            engine.advise(tech_context, {"confidenceThreshold": 1.5})

    def test_unknown_domain_still_answers(self, engine):
        result = engine.advise(
            {"domain": "astrology", "objective": "efficiency", "riskTolerance": "low"}
        )
        assert {r.type for r in result.recommendations} == {
            RecommendationType.OPTIMIZATION, RecommendationType.RISK_MITIGATION,
        }

    def test_record_false_skips_history(self, engine, tech_context):
        engine.advise(tech_context, record=False)
        assert engine.recent_history() == []


class TestExecute:
    def test_free_text(self, engine):
        result = engine.execute("How can we improve tech performance conservatively?")
        ctx = engine.recent_history(1)[0].context
        assert ctx.domain == "technology"
        assert ctx.risk_tolerance == RiskTolerance.LOW
        assert any(r.type == RecommendationType.RISK_MITIGATION for r in result.recommendations)

    def test_hints_carry_options(self, engine):
        result = engine.execute(
            "improve performance", {"domain": "technology", "maxRecommendations": 1}
        )
        assert len(result.recommendations) == 1

    def test_opaque_state(self, engine):
        result = engine.execute({"efficiency": 0.3}, {"domain": "technology"})
        assert any(r.category == "process" for r in result.recommendations)

    def test_data_points_counted(self, engine):
        result = engine.execute({"efficiency": 0.3, "throughput": 10})
        assert result.metadata.data_points == 2

    def test_opaque_state_with_int_keys(self, engine):
        result = engine.execute({1: 0.4, 2: 0.9})
        assert result.metadata.data_points == 2
        assert engine.recent_history(1)[0].context.current_state == {"1": 0.4, "2": 0.9}


class TestFailureIsolation:
    def test_failing_rule_does_not_fail_request(self, engine, tech_context, caplog):
        def flaky(context):
            raise ConnectionError("rule backend unreachable")

        engine.add_rule("technology", flaky)
        with caplog.at_level("WARNING"):
            result = engine.advise(tech_context)

        assert result.recommendations
        assert "Partial degradation" in caplog.text
        assert engine.metrics().error_count == 0

    def test_non_numeric_metric_keeps_resource_rec(self, engine, caplog):
        with caplog.at_level("WARNING"):
            result = engine.execute({"efficiency": "n/a"}, {"budget": 50000})

        titles = [r.title for r in result.recommendations]
        assert "Resource Allocation Optimization" in titles
        assert "Process Efficiency Improvement" in titles
        assert "Partial degradation" not in caplog.text


class TestMetricsAndOutcomes:
    def test_metrics(self, engine, tech_context):
        engine.advise(tech_context)
        engine.advise(tech_context)
        metrics = engine.metrics()
        assert metrics.execution_count == 2
        assert metrics.average_execution_ms >= 0.0
        assert metrics.last_executed_at is not None

    def test_validate_recommendation(self, engine, tech_context):
        rec = engine.advise(tech_context).recommendations[0]
        record = engine.validate_recommendation(rec.id, "successful")
        assert record.outcome == Outcome.SUCCESSFUL
        assert engine.outcomes() == [record]

    def test_invalid_outcome(self, engine):
        with pytest.raises(ValueError):
            engine.validate_recommendation("x", "meh")


class TestExtensionPoints:
    def test_add_and_remove_rule(self, engine, make_rec):
        ctx = {"domain": "finance", "objective": "restructure debt"}
        assert engine.advise(ctx, {"confidenceThreshold": 0.0}).recommendations == []

        def debt_rule(context):
            return [make_rec("debt-1", confidence=0.9, category="finance")]

        engine.add_rule("Finance", debt_rule)
        assert [r.id for r in engine.advise(ctx).recommendations] == ["debt-1"]

        assert engine.remove_rule("finance") == 1
        assert engine.advise(ctx, {"confidenceThreshold": 0.0}).recommendations == []

    def test_knowledge_round(self, engine):
        record = engine.add_knowledge("pricing_levers", {"discounts": ["Volume"]})
        assert record.version == 1
        assert engine.get_knowledge("pricing_levers") == {"discounts": ["Volume"]}
        assert engine.get_knowledge("missing") is None

    def test_rule_repeating_an_id(self, engine, make_rec):
        def twin_rule(context):
            return [
                make_rec("x", confidence=0.9, category="finance"),
                make_rec("x", confidence=0.8, category="finance"),
            ]

        engine.add_rule("finance", twin_rule)
        result = engine.advise({"domain": "finance", "objective": "restructure debt"})
        matrix = result.decision_matrix
        assert len(result.recommendations) == 2
        assert len(matrix.alternatives) == len(matrix.scores) == 2
