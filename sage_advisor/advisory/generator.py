"""
Recommendation generator: runs three independent passes against a resolved
context and pools their candidates.

Passes (in order)
-----------------
1. Domain rules   — every rule registered under ``context.domain`` in the
                    registry snapshot.  Unknown domain → no candidates.
2. General patterns — deterministic objective / risk-tolerance triggers:
       "performance" | "efficiency" in objective → optimization (conf 0.8)
       risk tolerance low | very-low             → risk-mitigation (conf 0.85)
       "growth" | "scale" in objective           → strategy (conf 0.75 if
                                                   tolerance high, else 0.65)
3. Optimization rules — current-state process metrics and resources:
       process efficiency < 0.7                  → process optimization (0.75)
       budget or resources present               → resource optimization (0.7)

Failure isolation
-----------------
A pass (or a single domain rule) that raises is logged as a partial
degradation and contributes nothing; the other passes still run.  The
names of failed passes/rules are reported alongside the candidates.

Knowledge tables from the registry supply each pattern's ``alternatives``.
All constants come from ``HeuristicsConfig``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from sage_advisor.config import HeuristicsConfig
from sage_advisor.knowledge.registry import RegistrySnapshot
from sage_advisor.models.context import AdvisoryContext
from sage_advisor.models.recommendation import (
    Recommendation,
    RecommendationTemplate,
    RecommendationTimeline,
)
from sage_advisor.taxonomy.advisory_taxonomy import (
    LOW_RISK_TOLERANCES,
    ImpactLevel,
    RecommendationType,
    RiskTolerance,
    UrgencyLevel,
)

logger = logging.getLogger(__name__)

PROCESS_METRICS: tuple[str, ...] = (
    "efficiency", "cycle_time", "throughput", "quality_score", "error_rate",
)

# ── Pattern templates ─────────────────────────────────────────────────────────
# Confidence values here are placeholders; the generator always overrides
# them from HeuristicsConfig.

PERFORMANCE_TEMPLATE = RecommendationTemplate(
    id_prefix="perf-opt",
    type=RecommendationType.OPTIMIZATION,
    title="Performance Optimization Strategy",
    description="Implement systematic performance improvements based on identified bottlenecks",
    action="Conduct performance analysis and implement targeted optimizations",
    confidence=0.8,
    impact=ImpactLevel.HIGH,
    urgency=UrgencyLevel.MEDIUM,
    category="performance",
    reasoning=(
        "Performance improvements typically yield measurable returns and user "
        "satisfaction gains"
    ),
    benefits=["Improved user experience", "Reduced operational costs", "Enhanced scalability"],
    risks=["Implementation complexity", "Potential service disruption during optimization"],
    timeline=RecommendationTimeline(
        immediate=["Performance baseline measurement", "Bottleneck identification"],
        short_term=["Quick wins implementation", "Monitoring setup"],
        medium_term=["Major optimizations", "Architecture improvements"],
    ),
    success_metrics=["Response time reduction", "Throughput increase", "Resource efficiency"],
)

RISK_MITIGATION_TEMPLATE = RecommendationTemplate(
    id_prefix="risk-mit",
    type=RecommendationType.RISK_MITIGATION,
    title="Conservative Risk Mitigation Approach",
    description=(
        "Implement comprehensive risk management strategies to minimize potential downsides"
    ),
    action="Establish robust risk management framework with early warning systems",
    confidence=0.85,
    impact=ImpactLevel.MEDIUM,
    urgency=UrgencyLevel.HIGH,
    category="risk-management",
    reasoning="Low risk tolerance requires proactive risk identification and mitigation",
    benefits=["Reduced uncertainty", "Predictable outcomes", "Stakeholder confidence"],
    risks=["Higher initial investment", "Slower implementation", "Potential over-engineering"],
    prerequisites=["Risk assessment completion", "Stakeholder alignment"],
    timeline=RecommendationTimeline(
        immediate=["Risk inventory creation", "Critical risk identification"],
        short_term=["Mitigation plan development", "Monitoring system setup"],
    ),
    success_metrics=["Risk reduction percentage", "Incident frequency", "Recovery time"],
)

GROWTH_TEMPLATE = RecommendationTemplate(
    id_prefix="growth",
    type=RecommendationType.STRATEGY,
    title="Sustainable Growth Strategy",
    description="Implement scalable growth approach balancing opportunity with risk",
    action="Develop phased growth plan with measurable milestones",
    confidence=0.65,
    impact=ImpactLevel.HIGH,
    urgency=UrgencyLevel.MEDIUM,
    category="growth",
    reasoning="Structured growth approach reduces risks while maximizing opportunities",
    benefits=["Market expansion", "Revenue increase", "Competitive advantage"],
    risks=["Resource strain", "Quality dilution", "Market saturation"],
    timeline=RecommendationTimeline(
        short_term=["Market analysis", "Pilot program launch"],
        medium_term=["Scaling infrastructure", "Team expansion"],
        long_term=["Market leadership", "International expansion"],
    ),
    success_metrics=["Revenue growth rate", "Market share", "Customer acquisition cost"],
)

PROCESS_TEMPLATE = RecommendationTemplate(
    id_prefix="process-opt",
    type=RecommendationType.OPTIMIZATION,
    title="Process Efficiency Improvement",
    description="Streamline processes to improve efficiency and reduce waste",
    action="Implement process improvement methodology (Lean/Six Sigma)",
    confidence=0.75,
    impact=ImpactLevel.MEDIUM,
    urgency=UrgencyLevel.MEDIUM,
    category="process",
    reasoning="Process efficiency is below target, indicating improvement potential",
    benefits=["Reduced cycle time", "Lower operational costs", "Improved quality"],
    risks=["Change resistance", "Initial productivity dip", "Training requirements"],
    timeline=RecommendationTimeline(
        immediate=["Process mapping", "Baseline metrics"],
        short_term=["Quick improvements", "Training programs"],
        medium_term=["Major process redesign", "Automation implementation"],
    ),
    success_metrics=["Process efficiency percentage", "Cycle time reduction", "Error rate"],
)

RESOURCE_TEMPLATE = RecommendationTemplate(
    id_prefix="resource-opt",
    type=RecommendationType.OPTIMIZATION,
    title="Resource Allocation Optimization",
    description="Optimize resource allocation to maximize return on investment",
    action="Conduct resource audit and implement data-driven allocation strategy",
    confidence=0.7,
    impact=ImpactLevel.HIGH,
    urgency=UrgencyLevel.LOW,
    category="resource-management",
    reasoning="Strategic resource allocation can significantly improve overall performance",
    benefits=["Cost reduction", "Improved ROI", "Better resource utilization"],
    risks=["Disruption to current operations", "Need for detailed analysis"],
    timeline=RecommendationTimeline(
        short_term=["Resource audit", "Performance analysis"],
        medium_term=["Reallocation implementation", "Monitoring systems"],
    ),
    success_metrics=["ROI improvement", "Cost per outcome", "Resource utilization rate"],
)


# ── Result type ───────────────────────────────────────────────────────────────


@dataclass
class GenerationReport:
    """Pooled candidates plus the passes/rules that failed.

    Attributes:
        candidates: Candidates in generation order (domain rules first).
        failures:   Names of failed passes or rules, e.g. ``"rule:business/churn"``.
    """

    candidates: list[Recommendation] = field(default_factory=list)
    failures:   list[str]            = field(default_factory=list)


# ── Helpers ───────────────────────────────────────────────────────────────────


def has_process_metrics(state: Mapping[str, Any]) -> bool:
    return any(metric in state for metric in PROCESS_METRICS)


def _metric(state: Mapping[str, Any], name: str) -> float | None:
    """Return ``state[name]`` as a float, or None when absent or not a number."""
    value = state.get(name)
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.debug("Ignoring non-numeric process metric %s=%r", name, value)
        return None
    return None if math.isnan(number) else number


def calculate_process_efficiency(state: Mapping[str, Any], default: float = 0.5) -> float:
    """Estimate process efficiency from whichever metric is present.

    Precedence: ``efficiency`` → ``1 - error_rate`` → ``quality_score`` → ``default``.
    A metric that is not a number counts as absent.
    """
    efficiency = _metric(state, "efficiency")
    if efficiency is None:
        error_rate = _metric(state, "error_rate")
        if error_rate is not None:
            efficiency = 1.0 - error_rate
    if efficiency is None:
        efficiency = _metric(state, "quality_score")
    if efficiency is None:
        efficiency = default
    return max(0.0, min(1.0, efficiency))


def _knowledge_items(snapshot: RegistrySnapshot, key: str, *groups: str) -> list[str]:
    """Flatten knowledge lists for ``key`` (all groups, or only ``groups``)."""
    record = snapshot.knowledge.get(key)
    if record is None:
        return []
    names = groups or tuple(record.data.keys())
    items: list[str] = []
    for name in names:
        value = record.data.get(name, [])
        if isinstance(value, list):
            items.extend(str(v) for v in value)
    return items


def _contains_any(text: str, words: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(w in lowered for w in words)


# ── Passes ────────────────────────────────────────────────────────────────────


def apply_domain_rules(
    context: AdvisoryContext,
    snapshot: RegistrySnapshot,
    failures: list[str] | None = None,
) -> list[Recommendation]:
    """Run every rule registered for the context's domain.

    A rule that raises is logged and skipped; its name is appended to
    ``failures`` when a list is supplied.
    """
    recommendations: list[Recommendation] = []
    for rule in snapshot.rules_for(context.domain):
        try:
            recommendations.extend(rule.apply(context))
        except Exception as exc:
            logger.warning(
                "Partial degradation: domain rule %s/%s failed: %s",
                rule.domain, rule.name, exc,
                exc_info=True,
            )
            if failures is not None:
                failures.append(f"rule:{rule.domain}/{rule.name}")
    return recommendations


def apply_general_patterns(
    context: AdvisoryContext,
    heuristics: HeuristicsConfig,
    snapshot: RegistrySnapshot,
) -> list[Recommendation]:
    recommendations: list[Recommendation] = []

    if _contains_any(context.objective, ("performance", "efficiency")):
        recommendations.append(
            PERFORMANCE_TEMPLATE.build(
                confidence=heuristics.performance_confidence,
                alternatives=_knowledge_items(snapshot, "tech_optimization", "performance"),
                metadata={"pattern": "performance"},
            )
        )

    if context.risk_tolerance in LOW_RISK_TOLERANCES:
        recommendations.append(
            RISK_MITIGATION_TEMPLATE.build(
                confidence=heuristics.risk_mitigation_confidence,
                alternatives=_knowledge_items(snapshot, "risk_mitigation_strategies"),
                metadata={"pattern": "risk-mitigation"},
            )
        )

    if _contains_any(context.objective, ("growth", "scale")):
        confidence = (
            heuristics.growth_confidence_high_tolerance
            if context.risk_tolerance == RiskTolerance.HIGH
            else heuristics.growth_confidence_default
        )
        recommendations.append(
            GROWTH_TEMPLATE.build(
                confidence=confidence,
                alternatives=_knowledge_items(snapshot, "business_growth_strategies"),
                metadata={"pattern": "growth"},
            )
        )

    return recommendations


def apply_optimization_rules(
    context: AdvisoryContext,
    heuristics: HeuristicsConfig,
) -> list[Recommendation]:
    recommendations: list[Recommendation] = []

    state = context.current_state
    if state and has_process_metrics(state):
        efficiency = calculate_process_efficiency(state, heuristics.default_process_efficiency)
        if efficiency < heuristics.process_efficiency_threshold:
            recommendations.append(
                PROCESS_TEMPLATE.build(
                    confidence=heuristics.process_confidence,
                    reasoning=(
                        f"Current process efficiency is {round(efficiency * 100)}%, "
                        "indicating significant improvement potential"
                    ),
                    metadata={"pattern": "process", "process_efficiency": round(efficiency, 4)},
                )
            )

    if context.budget is not None or context.resources:
        recommendations.append(
            RESOURCE_TEMPLATE.build(
                confidence=heuristics.resource_confidence,
                metadata={"pattern": "resource"},
            )
        )

    return recommendations


# ── Entry point ───────────────────────────────────────────────────────────────


def generate_candidates(
    context: AdvisoryContext,
    snapshot: RegistrySnapshot,
    heuristics: HeuristicsConfig,
) -> GenerationReport:
    """Run all three passes and pool their candidates in pass order.

    Args:
        context:    Resolved advisory context.
        snapshot:   Registry snapshot taken for this request.
        heuristics: Tunable constants.

    Returns:
        ``GenerationReport`` with pooled candidates and failure names.
    """
    report = GenerationReport()

    passes: tuple[tuple[str, Callable[[], list[Recommendation]]], ...] = (
        ("domain-rules",   lambda: apply_domain_rules(context, snapshot, report.failures)),
        ("general-patterns", lambda: apply_general_patterns(context, heuristics, snapshot)),
        ("optimization",   lambda: apply_optimization_rules(context, heuristics)),
    )

    for name, run_pass in passes:
        try:
            produced = run_pass()
        except Exception as exc:
            logger.warning(
                "Partial degradation: generator pass '%s' failed: %s",
                name, exc,
                exc_info=True,
            )
            report.failures.append(f"pass:{name}")
            continue
        report.candidates.extend(produced)
        logger.debug("Generator pass '%s' produced %d candidate(s)", name, len(produced))

    return report
