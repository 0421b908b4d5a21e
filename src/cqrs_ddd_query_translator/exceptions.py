"""
Query translator exception hierarchy.

All exceptions inherit from ``QueryTranslatorError`` and provide
``to_dict()`` for API-friendly error responses.

Errors raised by a storage backend (connection failures, unknown columns,
type mismatches) are *not* part of this hierarchy: they propagate to the
caller unchanged.
"""

from __future__ import annotations

from difflib import get_close_matches
from typing import Any


class QueryTranslatorError(Exception):
    """Base exception for all query translator errors."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": str(self),
        }


class UnknownFamilyError(QueryTranslatorError):
    """
    A filter was requested for a scalar family that is not registered.

    Provides fuzzy-matched suggestions for likely intended family names.
    """

    def __init__(self, family: str, known_families: list[str]) -> None:
        self.family = family
        self.known_families = known_families
        self.suggestions = get_close_matches(family, known_families, n=3, cutoff=0.6)

        message = f"Unknown filter family: '{family}'."
        if self.suggestions:
            message += f" Did you mean: {', '.join(self.suggestions)}?"
        message += f" Known families: {', '.join(sorted(known_families))}"
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "UNKNOWN_FAMILY",
            "family": self.family,
            "suggestions": self.suggestions,
            "known_families": sorted(self.known_families),
        }


class UnsupportedPredicateError(QueryTranslatorError):
    """A backend adapter cannot lower the given predicate operator."""

    def __init__(self, operator: str, backend: str) -> None:
        self.operator = operator
        self.backend = backend
        super().__init__(f"Unsupported predicate operator for {backend}: {operator}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "UNSUPPORTED_PREDICATE",
            "operator": self.operator,
            "backend": self.backend,
        }
