# File: featureforge/errors.py
"""
featureforge - Exceptions
==========================
Only programming errors are raised.  A refused feature enable is a
``Rejection`` value (see ``featureforge.models``), never an exception.
"""

from __future__ import annotations

from typing import List, Optional, Sequence


class CatalogError(ValueError):
    """The static tables are inconsistent.  Raised once, at construction."""

    def __init__(self, message: str, codes: Optional[Sequence[str]] = None) -> None:
        super().__init__(message)
        self.codes: List[str] = list(codes or [])


class DependencyCycleError(CatalogError):
    """A feature requires itself, directly or transitively."""

    def __init__(self, cycle: Sequence[str]) -> None:
        self.cycle: List[str] = list(cycle)
        super().__init__(
            "Dependency cycle detected: " + " → ".join(self.cycle),
            codes=["DEPENDENCY_CYCLE"],
        )


class TargetMismatchError(ValueError):
    """A framework was paired with a language it does not belong to."""

    def __init__(self, language: str, framework: str) -> None:
        self.language: str = language
        self.framework: str = framework
        super().__init__(
            f"Framework '{framework}' does not belong to language '{language}'."
        )


__all__: List[str] = [
    "CatalogError",
    "DependencyCycleError",
    "TargetMismatchError",
]
