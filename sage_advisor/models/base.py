"""
Shared pydantic base for advisory models.

Fields are declared in snake_case and exposed in camelCase (``riskTolerance``,
``priorityWeights``, ``decisionMatrix`` …) so structured contexts written in
the external camelCase shape validate directly.  Both spellings are accepted
on input; ``model_dump(by_alias=True)`` produces the external shape.

All advisory models are frozen — once produced, recommendations and results
are value objects and must not be mutated.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class AdvisoryModel(BaseModel):
    """Frozen base model with camelCase aliases."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )
