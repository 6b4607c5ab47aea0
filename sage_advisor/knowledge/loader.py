"""
Knowledge file loader.

Parses ``config/knowledge.toml`` (or a caller-supplied path) into validated
knowledge records, decision templates and rule definitions.

TOML structure expected
-----------------------
    [knowledge.<key>]
    version     = 2
    description = "..."

    [knowledge.<key>.data]
    financial = ["Diversification", "Hedging"]

    [templates.<name>]
    criteria = ["Cost", "Quality"]
    weights  = [0.5, 0.5]

    [templates.<name>.minimum_thresholds]
    Quality = 0.8

    [[rules]]
    name     = "brand-awareness"
    domain   = "marketing"
    keywords = ["brand", "awareness"]

    [rules.template]
    type  = "strategy"
    title = "..."
    ...
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from sage_advisor.models.knowledge import DecisionTemplate, KnowledgeRecord, RuleDefinition


@dataclass(frozen=True)
class KnowledgeBundle:
    """Everything parsed from one knowledge file."""

    knowledge: list[KnowledgeRecord] = field(default_factory=list)
    templates: list[DecisionTemplate] = field(default_factory=list)
    rules:     list[RuleDefinition]   = field(default_factory=list)


def _parse_knowledge(key: str, raw: dict) -> KnowledgeRecord:
    return KnowledgeRecord(
        key=raw.get("key", key),
        version=raw.get("version", 1),
        description=raw.get("description", ""),
        data=raw.get("data", {}),
    )


def _parse_template(name: str, raw: dict) -> DecisionTemplate:
    return DecisionTemplate(
        name=raw.get("name", name),
        version=raw.get("version", 1),
        criteria=raw.get("criteria", []),
        weights=raw.get("weights", []),
        minimum_thresholds=raw.get("minimum_thresholds", {}),
    )


def load_knowledge_file(path: Path | str) -> KnowledgeBundle:
    """Load and validate a knowledge TOML file.

    Args:
        path: Path to the knowledge file.

    Returns:
        ``KnowledgeBundle`` with every record validated.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        tomllib.TOMLDecodeError: If the TOML is malformed.
        pydantic.ValidationError: If any record fails validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(
            f"Knowledge file not found: {path}\n"
            "Set knowledge.knowledge_file in config/default.toml or leave it unset."
        )

    with open(path, "rb") as f:
        raw = tomllib.load(f)

    return KnowledgeBundle(
        knowledge=[_parse_knowledge(k, v) for k, v in raw.get("knowledge", {}).items()],
        templates=[_parse_template(k, v) for k, v in raw.get("templates", {}).items()],
        rules=[RuleDefinition(**r) for r in raw.get("rules", [])],
    )
