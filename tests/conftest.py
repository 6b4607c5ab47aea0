"""
Shared pytest fixtures for the Sage Advisor test suite.

Provides:
  - ``app_config``: Built-in defaults (no knowledge file, no env overrides).
  - ``registry`` / ``snapshot``: A registry seeded with the built-in rules
    and knowledge only.
  - ``engine``: An ``AdvisoryEngine`` over that registry.
  - Sample context and recommendation factories shared by several modules.
"""

from __future__ import annotations

import logging

import pytest

from sage_advisor.advisory.engine import AdvisoryEngine
from sage_advisor.config import AppConfig, HeuristicsConfig
from sage_advisor.knowledge.registry import KnowledgeRegistry, RegistrySnapshot
from sage_advisor.models.context import AdvisoryContext
from sage_advisor.models.recommendation import Recommendation
from sage_advisor.taxonomy.advisory_taxonomy import (
    ImpactLevel,
    RecommendationType,
    RiskTolerance,
    UrgencyLevel,
)


# ── Logging isolation ─────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def _restore_root_logger():
    """Undo configure_logging() calls made by CLI and logging tests."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


# ── Config & registry ─────────────────────────────────────────────────────────

@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig()


@pytest.fixture
def heuristics() -> HeuristicsConfig:
    return HeuristicsConfig()


@pytest.fixture
def registry(app_config: AppConfig) -> KnowledgeRegistry:
    """Fresh registry per test so extension-point tests cannot leak rules."""
    return KnowledgeRegistry.from_config(app_config.knowledge)


@pytest.fixture
def snapshot(registry: KnowledgeRegistry) -> RegistrySnapshot:
    return registry.snapshot()


@pytest.fixture
def engine(app_config: AppConfig, registry: KnowledgeRegistry) -> AdvisoryEngine:
    return AdvisoryEngine(app_config, registry=registry)


# ── Sample domain object factories ────────────────────────────────────────────

@pytest.fixture
def tech_context() -> AdvisoryContext:
    """Technology context whose objective triggers the performance paths."""
    return AdvisoryContext(
        domain="technology",
        objective="improve performance",
        risk_tolerance=RiskTolerance.MEDIUM,
    )


@pytest.fixture
def business_context() -> AdvisoryContext:
    """Low-risk business context: revenue rule + risk-mitigation pattern."""
    return AdvisoryContext(
        domain="business",
        objective="grow revenue",
        risk_tolerance=RiskTolerance.LOW,
    )


def _make_recommendation(
    rec_id: str = "rec-1",
    confidence: float = 0.8,
    impact: ImpactLevel = ImpactLevel.MEDIUM,
    urgency: UrgencyLevel = UrgencyLevel.MEDIUM,
    category: str | None = "general",
    risks: list[str] | None = None,
    **extra,
) -> Recommendation:
    """Build a minimal valid ``Recommendation`` for unit tests."""
    return Recommendation(
        id=rec_id,
        type=extra.pop("type", RecommendationType.ACTION),
        title=extra.pop("title", f"Recommendation {rec_id}"),
        description="Test recommendation",
        action="Do the thing",
        confidence=confidence,
        impact=impact,
        urgency=urgency,
        category=category,
        reasoning="Because the test says so",
        risks=risks or [],
        **extra,
    )


@pytest.fixture
def make_rec():
    """Factory fixture: ``make_rec("a", confidence=0.9, impact=ImpactLevel.HIGH)``."""
    return _make_recommendation
