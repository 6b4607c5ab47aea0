"""
Sample advisory contexts for demos and smoke runs.

All randomness in the project lives here, behind an injected
``random.Random``.  Scoring and ranking never draw random numbers, so a
seeded generator reproduces the exact same demo run.
"""

from __future__ import annotations

import random
from typing import Optional

from sage_advisor.models.context import AdvisoryContext
from sage_advisor.taxonomy.advisory_taxonomy import RiskTolerance

_OBJECTIVES: dict[str, tuple[str, ...]] = {
    "business": (
        "Grow revenue in existing markets",
        "Scale operations across regions",
        "Drive innovation in the product line",
    ),
    "technology": (
        "Improve platform performance",
        "Increase deployment efficiency",
        "Scale the data pipeline",
    ),
    "marketing": (
        "Grow brand awareness",
        "Improve campaign efficiency",
    ),
    "finance": (
        "Reduce operating costs",
        "Scale treasury operations safely",
    ),
}

_TIMELINES = ("immediate", "short-term", "medium-term", "long-term")


def generate_sample_context(rng: random.Random) -> AdvisoryContext:
    domain = rng.choice(sorted(_OBJECTIVES))
    objective = rng.choice(_OBJECTIVES[domain])

    current_state: Optional[dict[str, float]] = None
    if rng.random() < 0.5:
        current_state = {
            "efficiency": round(rng.uniform(0.4, 0.95), 2),
            "error_rate": round(rng.uniform(0.0, 0.2), 3),
        }

    return AdvisoryContext(
        domain=domain,
        objective=objective,
        risk_tolerance=rng.choice(list(RiskTolerance)),
        timeline=rng.choice(_TIMELINES),
        budget=round(rng.uniform(2_000, 250_000), 2) if rng.random() < 0.6 else None,
        stakeholders=[f"stakeholder-{i}" for i in range(rng.randint(1, 14))],
        current_state=current_state,
    )


def generate_sample_contexts(n: int, rng: Optional[random.Random] = None) -> list[AdvisoryContext]:
    """Return ``n`` sample contexts drawn from ``rng`` (a fresh unseeded one if None)."""
    rng = rng or random.Random()
    return [generate_sample_context(rng) for _ in range(n)]
