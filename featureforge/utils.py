# File: featureforge/utils.py
"""
featureforge - Utility Functions & Helpers
============================================
String normalisation for feature keys and a small profiling timer.

Feature keys are stored in camelCase (``passwordReset``), but documents and
command lines written by hand often use snake_case (``password_reset``) or the
enum member name (``PASSWORD_RESET``).  ``parse_feature_key`` accepts all
three.  The case conversions are cached with ``@lru_cache(maxsize=None)``:
the key set is closed, so the cache stays small.
"""

from __future__ import annotations

import functools
import logging
import re
import time
from typing import Dict, List, Optional, Type, TypeVar

from featureforge.models import FeatureKey, Framework, Language

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("featureforge.utils")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns (compiled once at module load)
# ---------------------------------------------------------------------------

_CAMEL_TO_SNAKE_RE1: re.Pattern[str] = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_TO_SNAKE_RE2: re.Pattern[str] = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALPHANUM_RE: re.Pattern[str] = re.compile(r"[^a-zA-Z0-9]")
_MULTI_UNDERSCORE_RE: re.Pattern[str] = re.compile(r"_{2,}")
_LEADING_TRAILING_UNDERSCORE_RE: re.Pattern[str] = re.compile(r"^_+|_+$")

_E = TypeVar("_E", Language, Framework)


# ---------------------------------------------------------------------------
# Cached string transformation functions
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def to_snake_case(name: str) -> str:
    """
    Convert any string to snake_case.

    Examples:
        >>> to_snake_case("passwordReset")
        'password_reset'
        >>> to_snake_case("HATEOAS")
        'hateoas'
        >>> to_snake_case("already_snake")
        'already_snake'
    """
    if not name:
        return ""
    s: str = _CAMEL_TO_SNAKE_RE1.sub(r"\1_\2", name)
    s = _CAMEL_TO_SNAKE_RE2.sub(r"\1_\2", s)
    s = _NON_ALPHANUM_RE.sub("_", s)
    s = _MULTI_UNDERSCORE_RE.sub("_", s)
    s = _LEADING_TRAILING_UNDERSCORE_RE.sub("", s)
    return s.lower()


# ---------------------------------------------------------------------------
# Feature key / enum normalisation
# ---------------------------------------------------------------------------

# snake_case form -> key, so "password_reset" and "PASSWORD_RESET" resolve
# to the same camelCase value.
_FEATURE_BY_SNAKE: Dict[str, FeatureKey] = {
    to_snake_case(key.value): key for key in FeatureKey
}


@functools.lru_cache(maxsize=None)
def parse_feature_key(name: str) -> FeatureKey:
    """
    Resolve a user-supplied feature name to a ``FeatureKey``.

    Accepts the stored camelCase value, snake_case / kebab-case spellings and
    the enum member name, case-insensitively for the latter two.

    Raises:
        ValueError: ``name`` matches no feature.
    """
    candidate: str = name.strip()
    try:
        return FeatureKey(candidate)
    except ValueError:
        pass
    key: Optional[FeatureKey] = _FEATURE_BY_SNAKE.get(to_snake_case(candidate))
    if key is None:
        key = _FEATURE_BY_SNAKE.get(to_snake_case(candidate.lower()))
    if key is None:
        raise ValueError(f"Unknown feature '{name}'.")
    return key


def parse_enum_value(enum_cls: Type[_E], name: str) -> _E:
    """
    Resolve a language or framework name, ignoring case and ``_``/``-``.

    Raises:
        ValueError: ``name`` matches no member of ``enum_cls``.
    """
    wanted: str = _NON_ALPHANUM_RE.sub("", name).lower()
    for member in enum_cls:
        if _NON_ALPHANUM_RE.sub("", member.value).lower() == wanted:
            return member
    valid: str = ", ".join(member.value for member in enum_cls)
    raise ValueError(f"Unknown {enum_cls.__name__.lower()} '{name}'. Expected one of: {valid}.")


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Simple context-manager timer for profiling engine steps.

    Usage:
        with Timer("resolve") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.debug(
            "Timer [%s]: %.4f seconds",
            self.label,
            self.elapsed,
        )

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "to_snake_case",
    "parse_feature_key",
    "parse_enum_value",
    "Timer",
]
