"""
Context resolver: normalizes any accepted input shape into an ``AdvisoryContext``.

Three input shapes are accepted
-------------------------------
Free text (``str``):
    Lower-cased keyword matching selects the domain, risk tolerance and
    timeline.  The text itself becomes the objective.

Structured (``AdvisoryContext`` or a mapping with ``objective``/``domain``):
    Passed through after validation.  An empty domain becomes ``"general"``.
    A mapping that omits ``objective`` (or sets it to None) falls back to its
    ``goal`` entry, then to the generic sentence.

Opaque state (any other object):
    The object becomes ``current_state`` with its keys as strings; the
    objective is taken from a ``goal``/``objective`` entry or defaults to a
    generic sentence.

Caller hints (``constraints``, ``budget``, ``domain``, ``riskTolerance`` …)
fill gaps the input itself leaves open.

Only one failure is possible: a structured input that explicitly supplies an
empty objective raises ``sage_advisor.exceptions.ValidationError``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

from sage_advisor.exceptions import ValidationError
from sage_advisor.models.context import AdvisoryContext
from sage_advisor.taxonomy.advisory_taxonomy import RiskTolerance

logger = logging.getLogger(__name__)

DEFAULT_DOMAIN = "general"
DEFAULT_OBJECTIVE = "Provide general advisory recommendations"

# First match wins; order matters ("business" before "technology").
_DOMAIN_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("business",   ("business", "strategy")),
    ("technology", ("technology", "tech")),
    ("marketing",  ("marketing",)),
    ("finance",    ("finance",)),
)

_LOW_RISK_WORDS  = ("conservative", "safe")
_HIGH_RISK_WORDS = ("aggressive", "bold")

_TIMELINE_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("immediate",  ("immediate", "urgent", "asap")),
    ("short-term", ("short", "quick")),
    ("long-term",  ("long", "strategic")),
)
DEFAULT_TIMELINE = "medium-term"

# Hint keys copied onto a context when the input does not set them.
_HINT_FIELDS = (
    "constraints", "budget", "stakeholders", "preferences",
    "priority_weights", "priorityWeights", "resources",
)


def detect_domain(text: str) -> str:
    lowered = text.lower()
    for domain, words in _DOMAIN_KEYWORDS:
        if any(w in lowered for w in words):
            return domain
    return DEFAULT_DOMAIN


def detect_risk_tolerance(text: str) -> RiskTolerance:
    lowered = text.lower()
    if any(w in lowered for w in _LOW_RISK_WORDS):
        return RiskTolerance.LOW
    if any(w in lowered for w in _HIGH_RISK_WORDS):
        return RiskTolerance.HIGH
    return RiskTolerance.MEDIUM


def detect_timeline(text: str) -> str:
    lowered = text.lower()
    for timeline, words in _TIMELINE_KEYWORDS:
        if any(w in lowered for w in words):
            return timeline
    return DEFAULT_TIMELINE


def _hint_values(hints: Mapping[str, Any]) -> dict[str, Any]:
    return {k: hints[k] for k in _HINT_FIELDS if hints.get(k) is not None}


def _from_text(query: str, hints: Mapping[str, Any]) -> AdvisoryContext:
    return AdvisoryContext(
        domain=detect_domain(query),
        objective=query,
        risk_tolerance=detect_risk_tolerance(query),
        timeline=detect_timeline(query),
        **_hint_values(hints),
    )


def _from_structured(data: Mapping[str, Any], hints: Mapping[str, Any]) -> AdvisoryContext:
    merged = {**_hint_values(hints), **{k: v for k, v in data.items() if v is not None}}
    if "objective" not in merged:
        merged["objective"] = str(merged.get("goal") or DEFAULT_OBJECTIVE)
    return AdvisoryContext.model_validate(merged)


def _state_of(obj: Any) -> dict[str, Any]:
    if isinstance(obj, Mapping):
        return {str(k): v for k, v in obj.items()}
    if hasattr(obj, "__dict__"):
        return {str(k): v for k, v in vars(obj).items()}
    return {"value": obj}


def _from_state(obj: Any, hints: Mapping[str, Any]) -> AdvisoryContext:
    state = _state_of(obj)
    objective = state.get("goal") or state.get("objective") or DEFAULT_OBJECTIVE
    return AdvisoryContext(
        domain=hints.get("domain") or DEFAULT_DOMAIN,
        objective=str(objective),
        risk_tolerance=(
            hints.get("risk_tolerance") or hints.get("riskTolerance") or RiskTolerance.MEDIUM
        ),
        current_state=state,
        **_hint_values(hints),
    )


def ensure_resolved(context: AdvisoryContext) -> AdvisoryContext:
    """Apply the post-resolution invariants to an already-built context.

    Returns:
        ``context`` unchanged, or a copy with ``domain="general"`` if empty.

    Raises:
        ValidationError: If ``objective`` is empty.
    """
    if not context.objective:
        raise ValidationError("objective")
    if not context.domain:
        context = context.model_copy(update={"domain": DEFAULT_DOMAIN})
    return context


def resolve_context(
    raw_input: Any,
    hints: Optional[Mapping[str, Any]] = None,
) -> AdvisoryContext:
    """Resolve free text, a structured context or an opaque state object.

    Args:
        raw_input: ``str``, ``AdvisoryContext``, mapping, or any object.
        hints:     Optional caller-supplied context hints.

    Returns:
        ``AdvisoryContext`` with non-empty ``domain`` and ``objective``.

    Raises:
        ValidationError: If the resolved objective is empty.
        pydantic.ValidationError: If structured fields have invalid values
            (e.g. an unknown risk tolerance).
    """
    hints = hints or {}

    if isinstance(raw_input, AdvisoryContext):
        context = raw_input
        shape = "structured"
    elif isinstance(raw_input, str):
        context = _from_text(raw_input.strip(), hints)
        shape = "text"
    elif isinstance(raw_input, Mapping) and ("objective" in raw_input or "domain" in raw_input):
        context = _from_structured(raw_input, hints)
        shape = "structured"
    else:
        context = _from_state(raw_input, hints)
        shape = "state"

    context = ensure_resolved(context)
    logger.debug(
        "Resolved %s input | domain=%s | objective=%r", shape, context.domain, context.objective
    )
    return context
