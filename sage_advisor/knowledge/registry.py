"""
Knowledge & rule registry.

Holds three process-wide tables:
  - domain rules     : domain key → ordered tuple of ``ExpertRule``
  - knowledge        : key → ``KnowledgeRecord``
  - decision templates : name → ``DecisionTemplate``

Concurrency
-----------
The registry is read-mostly.  All three tables live in one immutable
``RegistrySnapshot``; readers take ``snapshot()`` once per request and
never observe a torn state.  Writers serialize on a lock, build a new
snapshot from the current one and swap the reference (copy-on-write).

Usage
-----
    registry = KnowledgeRegistry.from_config(config.knowledge)
    registry.add_rule("finance", my_rule_function)
    registry.remove_rule("finance")
    registry.add_knowledge("pricing_levers", {"discounts": ["Volume", "Seasonal"]})

    snap = registry.snapshot()
    rules = snap.rules_for("business")
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

from sage_advisor.config import KnowledgeConfig
from sage_advisor.exceptions import UnknownDomainError
from sage_advisor.knowledge.builtin import BUILTIN_KNOWLEDGE, BUILTIN_RULES, BUILTIN_TEMPLATES
from sage_advisor.knowledge.loader import load_knowledge_file
from sage_advisor.knowledge.rules import CallableRule, ExpertRule, RuleFunction, TemplateRule
from sage_advisor.models.knowledge import DecisionTemplate, KnowledgeRecord

logger = logging.getLogger(__name__)


def _empty() -> Mapping:
    return MappingProxyType({})


def _frozen(d: dict) -> Mapping:
    return MappingProxyType(dict(d))


@dataclass(frozen=True)
class RegistrySnapshot:
    """Immutable, consistent view of the registry at one point in time.

    Attributes:
        rules:     domain → tuple of rules, in registration order.
        knowledge: key → knowledge record.
        templates: name → decision template.
        revision:  Incremented on every mutation.
    """

    rules:     Mapping[str, tuple[ExpertRule, ...]] = field(default_factory=_empty)
    knowledge: Mapping[str, KnowledgeRecord]        = field(default_factory=_empty)
    templates: Mapping[str, DecisionTemplate]       = field(default_factory=_empty)
    revision:  int = 0

    def rules_for(self, domain: str) -> tuple[ExpertRule, ...]:
        """Return rules registered under ``domain`` (case-insensitive)."""
        return self.rules.get(domain.strip().lower(), ())

    @property
    def rule_count(self) -> int:
        return sum(len(r) for r in self.rules.values())


class KnowledgeRegistry:
    """Thread-safe registry of domain rules, knowledge and decision templates."""

    def __init__(self) -> None:
        self._write_lock = threading.Lock()
        self._snapshot = RegistrySnapshot()

    # ── Construction ──────────────────────────────────────────────────────────

    @classmethod
    def from_config(cls, config: Optional[KnowledgeConfig] = None) -> "KnowledgeRegistry":
        """Build a registry seeded with built-ins and the configured knowledge file.

        Args:
            config: Knowledge section of ``AppConfig``; defaults apply if None.

        Returns:
            Populated registry.

        Raises:
            FileNotFoundError: If ``config.knowledge_file`` is set but missing.
            pydantic.ValidationError: If a record in the file is invalid.
        """
        config = config or KnowledgeConfig()
        registry = cls()

        for record in BUILTIN_KNOWLEDGE:
            registry.add_knowledge(record.key, record)
        for template in BUILTIN_TEMPLATES:
            registry.add_template(template)
        if config.load_builtin_rules:
            for definition in BUILTIN_RULES:
                registry.add_rule(definition.domain, TemplateRule(definition))

        if config.knowledge_file:
            bundle = load_knowledge_file(config.knowledge_file)
            for record in bundle.knowledge:
                registry.add_knowledge(record.key, record)
            for template in bundle.templates:
                registry.add_template(template)
            for definition in bundle.rules:
                registry.add_rule(definition.domain, TemplateRule(definition))
            logger.info(
                "Knowledge file loaded: %s (%d knowledge, %d templates, %d rules)",
                config.knowledge_file,
                len(bundle.knowledge), len(bundle.templates), len(bundle.rules),
            )

        return registry

    # ── Reads ─────────────────────────────────────────────────────────────────

    def snapshot(self) -> RegistrySnapshot:
        """Return the current immutable snapshot."""
        return self._snapshot

    def domains(self) -> list[str]:
        return sorted(self._snapshot.rules.keys())

    def get_knowledge(self, key: str, strict: bool = False) -> Optional[dict[str, Any]]:
        """Return the data of knowledge record ``key``.

        Raises:
            UnknownDomainError: If ``strict`` and nothing is registered under ``key``.
        """
        record = self._snapshot.knowledge.get(key)
        if record is None:
            if strict:
                raise UnknownDomainError(key, sorted(self._snapshot.knowledge.keys()))
            return None
        return record.data

    def get_template(self, name: str) -> Optional[DecisionTemplate]:
        return self._snapshot.templates.get(name)

    # ── Writes ────────────────────────────────────────────────────────────────

    def add_rule(self, domain: str, rule: Union[ExpertRule, RuleFunction]) -> ExpertRule:
        """Register a rule under ``domain``.

        A rule with the same name already registered for the domain is
        replaced in place; otherwise the rule is appended.

        Args:
            domain: Domain key (case-insensitive).
            rule:   An ``ExpertRule`` or a plain ``context -> list[Recommendation]``
                    function.

        Returns:
            The registered ``ExpertRule``.
        """
        key = domain.strip().lower()
        if not key:
            raise ValueError("domain must not be empty.")
        if not isinstance(rule, ExpertRule):
            rule = CallableRule(key, rule)

        with self._write_lock:
            current = self._snapshot
            existing = list(current.rules.get(key, ()))
            names = [r.name for r in existing]
            if rule.name in names:
                existing[names.index(rule.name)] = rule
            else:
                existing.append(rule)
            rules = dict(current.rules)
            rules[key] = tuple(existing)
            self._snapshot = replace(
                current, rules=_frozen(rules), revision=current.revision + 1
            )

        logger.info("Added expert rule '%s' for domain: %s", rule.name, key)
        return rule

    def remove_rule(self, domain: str, name: Optional[str] = None, strict: bool = False) -> int:
        """Remove rules for ``domain``: all of them, or only the one called ``name``.

        Returns:
            Number of rules removed.

        Raises:
            UnknownDomainError: If ``strict`` and no rules are registered for ``domain``.
        """
        key = domain.strip().lower()
        with self._write_lock:
            current = self._snapshot
            existing = current.rules.get(key)
            if not existing:
                if strict:
                    raise UnknownDomainError(key, sorted(current.rules.keys()))
                return 0

            kept = tuple(r for r in existing if name is not None and r.name != name)
            removed = len(existing) - len(kept)
            rules = dict(current.rules)
            if kept:
                rules[key] = kept
            else:
                del rules[key]
            self._snapshot = replace(
                current, rules=_frozen(rules), revision=current.revision + 1
            )

        logger.info("Removed %d expert rule(s) for domain: %s", removed, key)
        return removed

    def add_knowledge(
        self,
        key: str,
        data: Union[KnowledgeRecord, dict[str, Any]],
        version: Optional[int] = None,
        description: str = "",
    ) -> KnowledgeRecord:
        """Add or replace the knowledge record for ``key``.

        When ``data`` is a plain dict and no ``version`` is given, the version
        is one more than the record it replaces (1 for a new key).
        """
        with self._write_lock:
            current = self._snapshot
            if isinstance(data, KnowledgeRecord):
                record = data
            else:
                previous = current.knowledge.get(key)
                record = KnowledgeRecord(
                    key=key,
                    version=version or (previous.version + 1 if previous else 1),
                    description=description,
                    data=data,
                )
            knowledge = dict(current.knowledge)
            knowledge[key] = record
            self._snapshot = replace(
                current, knowledge=_frozen(knowledge), revision=current.revision + 1
            )

        logger.info("Added knowledge for domain: %s (v%d)", key, record.version)
        return record

    def remove_knowledge(self, key: str) -> bool:
        with self._write_lock:
            current = self._snapshot
            if key not in current.knowledge:
                return False
            knowledge = dict(current.knowledge)
            del knowledge[key]
            self._snapshot = replace(
                current, knowledge=_frozen(knowledge), revision=current.revision + 1
            )
        logger.info("Removed knowledge for domain: %s", key)
        return True

    def add_template(self, template: DecisionTemplate) -> None:
        with self._write_lock:
            current = self._snapshot
            templates = dict(current.templates)
            templates[template.name] = template
            self._snapshot = replace(
                current, templates=_frozen(templates), revision=current.revision + 1
            )
        logger.debug("Registered decision template: %s (v%d)", template.name, template.version)
