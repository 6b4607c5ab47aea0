"""
Built-in knowledge seeded into every registry.

These records are the defaults the registry starts from; a knowledge file
loaded afterwards replaces any record with the same key.
"""

from __future__ import annotations

from sage_advisor.models.knowledge import DecisionTemplate, KnowledgeRecord, RuleDefinition
from sage_advisor.models.recommendation import RecommendationTemplate
from sage_advisor.taxonomy.advisory_taxonomy import (
    ImpactLevel,
    RecommendationType,
    UrgencyLevel,
)

# ── Knowledge tables ──────────────────────────────────────────────────────────

BUILTIN_KNOWLEDGE: tuple[KnowledgeRecord, ...] = (
    KnowledgeRecord(
        key="business_growth_strategies",
        description="Organic, inorganic and digital growth levers.",
        data={
            "organic":   ["Market penetration", "Product development", "Market development"],
            "inorganic": ["Mergers", "Acquisitions", "Strategic partnerships"],
            "digital":   ["Digital transformation", "E-commerce expansion", "Platform strategies"],
        },
    ),
    KnowledgeRecord(
        key="risk_mitigation_strategies",
        description="Mitigation levers grouped by risk family.",
        data={
            "financial":   ["Diversification", "Hedging", "Insurance", "Reserve funds"],
            "operational": ["Backup systems", "Process standardization", "Cross-training"],
            "strategic":   ["Scenario planning", "Contingency planning", "Agile methodology"],
        },
    ),
    KnowledgeRecord(
        key="tech_optimization",
        description="Technology optimisation techniques by concern.",
        data={
            "performance": ["Caching", "Database optimization", "CDN implementation"],
            "scalability": ["Microservices", "Load balancing", "Auto-scaling"],
            "security":    ["Encryption", "Access controls", "Security monitoring"],
        },
    ),
)

# ── Decision templates ────────────────────────────────────────────────────────

BUILTIN_TEMPLATES: tuple[DecisionTemplate, ...] = (
    DecisionTemplate(
        name="investment",
        criteria=["ROI", "Risk level", "Time to breakeven", "Strategic fit"],
        weights=[0.3, 0.25, 0.2, 0.25],
        minimum_thresholds={"ROI": 0.15, "Risk level": 0.7},
    ),
    DecisionTemplate(
        name="vendor",
        criteria=["Cost", "Quality", "Reliability", "Support", "Innovation"],
        weights=[0.25, 0.25, 0.2, 0.15, 0.15],
        minimum_thresholds={"Quality": 0.8, "Reliability": 0.85},
    ),
)

# ── Domain rules ──────────────────────────────────────────────────────────────

BUILTIN_RULES: tuple[RuleDefinition, ...] = (
    RuleDefinition(
        name="revenue-diversification",
        domain="business",
        keywords=["revenue"],
        template=RecommendationTemplate(
            id_prefix="revenue",
            type=RecommendationType.STRATEGY,
            title="Revenue Diversification Strategy",
            description="Implement multiple revenue streams to reduce dependency risk",
            action="Develop and launch complementary revenue channels",
            confidence=0.78,
            impact=ImpactLevel.HIGH,
            urgency=UrgencyLevel.MEDIUM,
            category="revenue",
            reasoning=(
                "Revenue diversification reduces business risk and creates "
                "growth opportunities"
            ),
            benefits=["Reduced revenue volatility", "Multiple growth vectors", "Market resilience"],
            risks=["Resource dilution", "Complexity increase", "Brand confusion"],
        ),
    ),
    RuleDefinition(
        name="technology-performance",
        domain="technology",
        keywords=["performance"],
        template=RecommendationTemplate(
            id_prefix="tech-perf",
            type=RecommendationType.OPTIMIZATION,
            title="Technology Performance Optimization",
            description="Implement systematic technology performance improvements",
            action="Deploy performance monitoring and optimization framework",
            confidence=0.82,
            impact=ImpactLevel.HIGH,
            urgency=UrgencyLevel.MEDIUM,
            category="technology",
            reasoning=(
                "Technology performance directly impacts user experience and "
                "operational efficiency"
            ),
            benefits=[
                "Improved user satisfaction", "Reduced operational costs", "Better scalability",
            ],
            risks=[
                "Implementation complexity", "Temporary performance impact",
                "Resource requirements",
            ],
        ),
    ),
)
