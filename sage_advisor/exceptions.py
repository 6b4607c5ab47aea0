"""
Engine-level exceptions.

Model-level invariants (confidence range, closed enums, weight sums) are
enforced by pydantic and surface as ``pydantic.ValidationError``.  The
exceptions below cover the request-level failures the engine itself raises.
"""

from __future__ import annotations


class ValidationError(ValueError):
    """Raised when a resolved context is still missing a required field.

    Surfaced immediately to the caller; the engine never retries.

    Attributes:
        field: Name of the offending context field (e.g. ``"objective"``).
    """

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        super().__init__(
            message or f"Advisory context field '{field}' must not be empty."
        )


class UnknownDomainError(KeyError):
    """Raised by strict registry lookups for a domain with nothing registered.

    Attributes:
        domain:    The requested domain key.
        available: Sorted list of domains that are registered.
    """

    def __init__(self, domain: str, available: list[str]) -> None:
        self.domain    = domain
        self.available = available
        super().__init__(
            f"Domain '{domain}' not found in registry.  "
            f"Available domains: {available}"
        )
