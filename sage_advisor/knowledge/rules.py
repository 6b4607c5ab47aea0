"""
Domain expert rules.

A rule is a named object registered under a domain key that turns a
resolved context into zero or more recommendations::

    class MyRule(ExpertRule):
        name = "churn-watch"
        domain = "business"

        def apply(self, context: AdvisoryContext) -> list[Recommendation]:
            ...

Rules hold no per-request state, so a registry snapshot can hand the same
rule object to any number of concurrent requests.

Two concrete kinds are provided:
  TemplateRule — declarative keyword trigger + recommendation template,
                 built from a ``RuleDefinition`` (code or knowledge.toml).
  CallableRule — wraps a plain ``context -> list[Recommendation]`` function
                 supplied through ``KnowledgeRegistry.add_rule``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

from sage_advisor.models.context import AdvisoryContext
from sage_advisor.models.knowledge import RuleDefinition
from sage_advisor.models.recommendation import Recommendation

RuleFunction = Callable[[AdvisoryContext], list[Recommendation]]


class ExpertRule(ABC):
    """Abstract base for domain rules.

    Attributes:
        name:   Identifier, unique within the domain.
        domain: Lower-cased domain key the rule applies to.
    """

    name: str
    domain: str

    @abstractmethod
    def apply(self, context: AdvisoryContext) -> list[Recommendation]:
        """Return recommendations for ``context`` (may be empty)."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(domain={self.domain!r}, name={self.name!r})"


class TemplateRule(ExpertRule):
    """Emit a fixed recommendation template when objective keywords match."""

    def __init__(self, definition: RuleDefinition) -> None:
        self.definition = definition
        self.name = definition.name
        self.domain = definition.domain

    def matches(self, context: AdvisoryContext) -> bool:
        if self.definition.always:
            return True
        objective = context.objective.lower()
        hits = [kw.lower() in objective for kw in self.definition.keywords]
        return all(hits) if self.definition.match == "all" else any(hits)

    def apply(self, context: AdvisoryContext) -> list[Recommendation]:
        if not self.matches(context):
            return []
        return [
            self.definition.template.build(
                metadata={"rule": self.name, "rule_version": self.definition.version},
            )
        ]


class CallableRule(ExpertRule):
    """Adapter for a plain function rule."""

    def __init__(self, domain: str, func: RuleFunction, name: str | None = None) -> None:
        self.func = func
        self.domain = domain.strip().lower()
        self.name = name or getattr(func, "__name__", "rule")

    def apply(self, context: AdvisoryContext) -> list[Recommendation]:
        return list(self.func(context))
