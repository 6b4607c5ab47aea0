"""
Tests for sage_advisor/advisory/assessor.py.

What we test
------------
risk_level_for() / opportunity_level_for():
  - Threshold boundaries.

assess_risks():
  - Each context signal adds one factor with its paired mitigation.
  - Budget and stakeholder thresholds are strict.
  - More than three high/critical-impact recommendations → change overload.
  - Quiet context → low, no factors.

assess_opportunities():
  - technology / digital / business / strategy areas.
  - "innovation" in the objective adds three areas.
  - Timeline defaults to medium-term.
"""

from __future__ import annotations

import pytest

from sage_advisor.advisory.assessor import (
    assess_opportunities,
    assess_risks,
    opportunity_level_for,
    risk_level_for,
)
from sage_advisor.models.context import AdvisoryContext
from sage_advisor.taxonomy.advisory_taxonomy import ImpactLevel, OpportunityLevel, RiskLevel


def _ctx(**kwargs) -> AdvisoryContext:
    kwargs.setdefault("domain", "general")
    kwargs.setdefault("objective", "improve onboarding")
    return AdvisoryContext(**kwargs)


# ── Level mapping ─────────────────────────────────────────────────────────────

class TestLevels:
    @pytest.mark.parametrize(
        "count, expected",
        [(0, RiskLevel.LOW), (1, RiskLevel.LOW), (2, RiskLevel.MEDIUM),
         (3, RiskLevel.MEDIUM), (4, RiskLevel.HIGH), (6, RiskLevel.CRITICAL)],
    )
    def test_risk_levels(self, count, expected):
        assert risk_level_for(count) == expected

    @pytest.mark.parametrize(
        "count, expected",
        [(0, OpportunityLevel.LOW), (1, OpportunityLevel.LOW), (2, OpportunityLevel.MEDIUM),
         (3, OpportunityLevel.MEDIUM), (4, OpportunityLevel.HIGH),
         (6, OpportunityLevel.EXCEPTIONAL)],
    )
    def test_opportunity_levels(self, count, expected):
        assert opportunity_level_for(count) == expected


# ── Risks ─────────────────────────────────────────────────────────────────────

class TestAssessRisks:
    def test_quiet_context(self):
        risk = assess_risks(_ctx(), [])
        assert risk.level == RiskLevel.LOW
        assert risk.factors == []
        assert risk.mitigations == []

    def test_immediate_timeline(self):
        risk = assess_risks(_ctx(timeline="immediate"), [])
        assert risk.factors == ["Time pressure may compromise quality"]
        assert len(risk.mitigations) == 1

    def test_low_budget(self):
        assert len(assess_risks(_ctx(budget=9_999), []).factors) == 1
        assert assess_risks(_ctx(budget=10_000), []).factors == []

    def test_stakeholders(self):
        eleven = [f"s{i}" for i in range(11)]
        assert len(assess_risks(_ctx(stakeholders=eleven), []).factors) == 1
        assert assess_risks(_ctx(stakeholders=eleven[:10]), []).factors == []

    def test_change_overload(self, make_rec):
        four_high = [
            make_rec(f"r{i}", impact=ImpactLevel.CRITICAL if i == 0 else ImpactLevel.HIGH)
            for i in range(4)
        ]
        risk = assess_risks(_ctx(), four_high)
        assert len(risk.factors) == 1
        assert risk.factors[0].startswith("Change overload")

        assert assess_risks(_ctx(), four_high[:3]).factors == []

    def test_all_four_factors_is_high(self, make_rec):
        ctx = _ctx(timeline="immediate", budget=100, stakeholders=[str(i) for i in range(20)])
        risk = assess_risks(ctx, [make_rec(f"r{i}", impact=ImpactLevel.HIGH) for i in range(5)])
        assert len(risk.factors) == 4
        assert len(risk.mitigations) == 4
        assert risk.level == RiskLevel.HIGH

    def test_factors_and_mitigations_paired(self):
        risk = assess_risks(_ctx(timeline="immediate", budget=1), [])
        assert len(risk.factors) == len(risk.mitigations) == 2
        assert risk.level == RiskLevel.MEDIUM


# ── Opportunities ─────────────────────────────────────────────────────────────

class TestAssessOpportunities:
    def test_technology(self):
        opp = assess_opportunities(_ctx(domain="technology"))
        assert len(opp.areas) == 3
        assert opp.level == OpportunityLevel.MEDIUM

    def test_digital_counts_as_technology(self):
        assert "Automation opportunities" in assess_opportunities(_ctx(domain="digital")).areas

    def test_strategy_counts_as_business(self):
        assert "Market expansion" in assess_opportunities(_ctx(domain="strategy")).areas

    def test_innovation_adds_areas(self):
        opp = assess_opportunities(_ctx(domain="business", objective="drive innovation"))
        assert len(opp.areas) == 6
        assert opp.level == OpportunityLevel.EXCEPTIONAL

    def test_general_domain_low(self):
        opp = assess_opportunities(_ctx())
        assert opp.areas == []
        assert opp.level == OpportunityLevel.LOW

    def test_timeline_default(self):
        assert assess_opportunities(_ctx()).timeline == "medium-term"
        assert assess_opportunities(_ctx(timeline="long-term")).timeline == "long-term"
