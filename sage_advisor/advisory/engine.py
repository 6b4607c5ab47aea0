"""
Advisory engine: the request pipeline.

    resolve → generate → rank → filter/cap → decision matrix
            → risk/opportunity → compose → history

Two entry points:
  advise(context, options)  — context already structured (or a mapping).
  execute(raw_input, hints) — any input shape; hints may also carry the
                              request options (``maxRecommendations`` …).

The computation is synchronous and bounded.  Per-request state is local;
the only shared state is the registry (read through one snapshot per
request) and the history store (lock-serialized appends).  Engine metrics
are updated under their own lock.

Usage::

    engine = AdvisoryEngine(load_config())
    result = engine.execute("How do we grow revenue safely?")
    for rec in result.recommendations:
        print(rec.title, rec.confidence)
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union

from sage_advisor.advisory.assessor import assess_opportunities, assess_risks
from sage_advisor.advisory.composer import compose_result
from sage_advisor.advisory.decision_matrix import build_decision_matrix
from sage_advisor.advisory.generator import generate_candidates
from sage_advisor.advisory.history import HistoryStore
from sage_advisor.advisory.ranker import rank_recommendations, select_recommendations
from sage_advisor.advisory.resolver import ensure_resolved, resolve_context
from sage_advisor.config import AppConfig
from sage_advisor.knowledge.registry import KnowledgeRegistry
from sage_advisor.knowledge.rules import ExpertRule, RuleFunction
from sage_advisor.models.context import AdviseOptions, AdvisoryContext
from sage_advisor.models.knowledge import KnowledgeRecord
from sage_advisor.models.result import AdvisoryResult, HistoryEntry
from sage_advisor.taxonomy.advisory_taxonomy import Outcome

logger = logging.getLogger(__name__)

_OPTION_KEYS = {
    "max_recommendations", "maxRecommendations",
    "confidence_threshold", "confidenceThreshold",
    "categories",
}


@dataclass(frozen=True)
class EngineMetrics:
    """Point-in-time copy of the engine's execution counters."""

    execution_count:      int
    error_count:          int
    average_execution_ms: float
    last_executed_at:     Optional[datetime]


@dataclass(frozen=True)
class OutcomeRecord:
    """Reported outcome of an acted-on recommendation."""

    recommendation_id: str
    outcome:           Outcome
    recorded_at:       datetime


class AdvisoryEngine:
    """Advisory / decision-support engine.

    Args:
        config:   Application config; built-in defaults if None.
        registry: Knowledge registry; built from ``config.knowledge`` if None.
        history:  History store; sized from ``config.history`` if None.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        registry: Optional[KnowledgeRegistry] = None,
        history: Optional[HistoryStore] = None,
    ) -> None:
        self.config = config or AppConfig()
        self.registry = registry or KnowledgeRegistry.from_config(self.config.knowledge)
        self.history = history or HistoryStore(self.config.history.capacity)

        self._metrics_lock = threading.Lock()
        self._execution_count = 0
        self._error_count = 0
        self._average_ms = 0.0
        self._last_executed_at: Optional[datetime] = None
        self._outcomes: deque[OutcomeRecord] = deque(maxlen=self.config.history.capacity)

        snap = self.registry.snapshot()
        logger.info(
            "Advisory engine initialized with %d knowledge entries, %d rules across %d domains",
            len(snap.knowledge), snap.rule_count, len(snap.rules),
        )

    # ── Request pipeline ──────────────────────────────────────────────────────

    def _resolve_options(
        self, options: Union[AdviseOptions, Mapping[str, Any], None]
    ) -> tuple[int, float, Optional[list[str]]]:
        if options is None:
            opts = AdviseOptions()
        elif isinstance(options, AdviseOptions):
            opts = options
        else:
            opts = AdviseOptions.model_validate(
                {k: v for k, v in options.items() if k in _OPTION_KEYS}
            )
        defaults = self.config.engine
        max_n = (
            opts.max_recommendations
            if opts.max_recommendations is not None
            else defaults.max_recommendations
        )
        threshold = (
            opts.confidence_threshold
            if opts.confidence_threshold is not None
            else defaults.confidence_threshold
        )
        return max_n, threshold, opts.categories

    def advise(
        self,
        context: Union[AdvisoryContext, Mapping[str, Any]],
        options: Union[AdviseOptions, Mapping[str, Any], None] = None,
        record: bool = True,
    ) -> AdvisoryResult:
        """Produce ranked, explained recommendations for one context.

        Args:
            context: ``AdvisoryContext`` or a structured mapping.
            options: ``AdviseOptions`` or a mapping with ``maxRecommendations``,
                     ``confidenceThreshold``, ``categories``.
            record:  Append the (context, result) pair to history.

        Returns:
            ``AdvisoryResult``.

        Raises:
            sage_advisor.exceptions.ValidationError: If the objective is empty.
        """
        started = time.perf_counter()
        try:
            if isinstance(context, AdvisoryContext):
                context = ensure_resolved(context)
            else:
                context = resolve_context(context)
            max_n, threshold, categories = self._resolve_options(options)
            result = self._run(context, max_n, threshold, categories, started)
        except Exception as exc:
            with self._metrics_lock:
                self._error_count += 1
            logger.error("Advisory analysis failed: %s", exc)
            raise

        if record:
            self.history.append(context, result)
        self._record_execution(result.metadata.processing_time)
        return result

    def execute(
        self,
        raw_input: Any,
        hints: Optional[Mapping[str, Any]] = None,
    ) -> AdvisoryResult:
        """Resolve any input shape, then ``advise``.

        Args:
            raw_input: Free text, structured mapping/context, or opaque state.
            hints:     Context hints and request options in one mapping.
        """
        hints = hints or {}
        try:
            context = resolve_context(raw_input, hints)
        except Exception as exc:
            with self._metrics_lock:
                self._error_count += 1
            logger.error("Advisory context resolution failed: %s", exc)
            raise
        return self.advise(context, options=hints)

    def _run(
        self,
        context: AdvisoryContext,
        max_n: int,
        threshold: float,
        categories: Optional[list[str]],
        started: float,
    ) -> AdvisoryResult:
        heuristics = self.config.heuristics
        logger.debug("Analyzing advisory context: %s - %s", context.domain, context.objective)

        snapshot = self.registry.snapshot()
        report = generate_candidates(context, snapshot, heuristics)
        ranked = rank_recommendations(report.candidates, context, heuristics)
        selected = select_recommendations(ranked, threshold, max_n, categories)
        recommendations = [s.recommendation for s in selected]

        matrix = build_decision_matrix(recommendations, context, heuristics)
        risk = assess_risks(context, recommendations, heuristics)
        opportunity = assess_opportunities(context)

        elapsed_ms = (time.perf_counter() - started) * 1000.0
        result = compose_result(
            context=context,
            recommendations=recommendations,
            risk=risk,
            opportunity=opportunity,
            decision_matrix=matrix,
            processing_time_ms=elapsed_ms,
            engine=self.config.engine,
            heuristics=heuristics,
        )

        logger.info(
            "Advised on %s | candidates=%d | returned=%d | failures=%d | risk=%s | %.1fms",
            context.domain, len(report.candidates), len(recommendations),
            len(report.failures), risk.level, elapsed_ms,
            extra={
                "domain": context.domain,
                "returned": len(recommendations),
                "elapsed_ms": round(elapsed_ms, 3),
            },
        )
        return result

    # ── Metrics & feedback ────────────────────────────────────────────────────

    def _record_execution(self, elapsed_ms: float) -> None:
        with self._metrics_lock:
            self._execution_count += 1
            n = self._execution_count
            self._average_ms = (self._average_ms * (n - 1) + elapsed_ms) / n
            self._last_executed_at = datetime.now(tz=timezone.utc)

    def metrics(self) -> EngineMetrics:
        with self._metrics_lock:
            return EngineMetrics(
                execution_count=self._execution_count,
                error_count=self._error_count,
                average_execution_ms=self._average_ms,
                last_executed_at=self._last_executed_at,
            )

    def validate_recommendation(
        self, recommendation_id: str, outcome: Union[Outcome, str]
    ) -> OutcomeRecord:
        """Record the real-world outcome of a recommendation.

        Outcomes are kept in a bounded log for future calibration; nothing
        about scoring changes.

        Raises:
            ValueError: If ``outcome`` is not successful, failed or partial.
        """
        outcome_record = OutcomeRecord(
            recommendation_id=recommendation_id,
            outcome=Outcome(outcome),
            recorded_at=datetime.now(tz=timezone.utc),
        )
        with self._metrics_lock:
            self._outcomes.append(outcome_record)
        logger.info("Recommendation %s outcome: %s", recommendation_id, outcome_record.outcome)
        return outcome_record

    def outcomes(self) -> list[OutcomeRecord]:
        with self._metrics_lock:
            return list(self._outcomes)

    def recent_history(self, n: Optional[int] = None) -> list[HistoryEntry]:
        return self.history.recent(n)

    # ── Registry extension points ─────────────────────────────────────────────

    def add_rule(self, domain: str, rule: Union[ExpertRule, RuleFunction]) -> ExpertRule:
        return self.registry.add_rule(domain, rule)

    def remove_rule(self, domain: str, name: Optional[str] = None) -> int:
        return self.registry.remove_rule(domain, name)

    def add_knowledge(self, key: str, data: dict[str, Any]) -> KnowledgeRecord:
        return self.registry.add_knowledge(key, data)

    def get_knowledge(self, key: str) -> Optional[dict[str, Any]]:
        return self.registry.get_knowledge(key)
