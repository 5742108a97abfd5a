# File: featureforge/notifications.py
"""
featureforge - Change Notifications
=====================================
Turns a resolver change log into short user-facing summaries.

Changes are grouped by ``(reason, cause)`` in the order the groups first
appear.  One ``Notification`` is produced per group:

* unsupported  -> warning, "X is not supported by Rust and has been disabled."
* required_by  -> info,    "X was automatically enabled (required by Y)."
* requires     -> info,    "X was automatically disabled (depends on Y)."

Unsupported groups collapse to a count once they exceed ``max_listed``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from featureforge.catalog import FeatureCatalog
from featureforge.models import ChangeReason, FeatureChange, FeatureKey, Target
from featureforge.utils import parse_feature_key


@dataclass(frozen=True, slots=True)
class Notification:
    """A toast-sized message about automatic changes."""

    level: str
    title: str
    message: str

    def __str__(self) -> str:
        return f"[{self.level}] {self.title}: {self.message}"


def _cause_label(catalog: FeatureCatalog, cause: Optional[str]) -> str:
    if cause is None:
        return "another feature"
    try:
        return catalog.label(parse_feature_key(cause))
    except ValueError:
        return cause


def _unsupported(
    catalog: FeatureCatalog,
    target: Target,
    features: List[FeatureKey],
    max_listed: int,
) -> Notification:
    language: str = catalog.language_label(target.language)
    labels: List[str] = catalog.labels(features)
    if len(labels) == 1:
        return Notification(
            level="warning",
            title="Feature Disabled",
            message=f"{labels[0]} is not supported by {language} and has been disabled.",
        )
    if len(labels) <= max_listed:
        return Notification(
            level="warning",
            title="Features Disabled",
            message=(
                f"{', '.join(labels)} are not supported by {language} "
                f"and have been disabled."
            ),
        )
    return Notification(
        level="warning",
        title="Features Disabled",
        message=f"{len(labels)} features are not supported by {language} and have been disabled.",
    )


def _enabled(labels: List[str], cause: str) -> Notification:
    if len(labels) == 1:
        return Notification(
            level="info",
            title="Dependency Enabled",
            message=f"{labels[0]} was automatically enabled (required by {cause}).",
        )
    return Notification(
        level="info",
        title="Dependencies Enabled",
        message=f"{', '.join(labels)} were automatically enabled (required by {cause}).",
    )


def _disabled(labels: List[str], cause: str) -> Notification:
    if len(labels) == 1:
        return Notification(
            level="info",
            title="Dependent Feature Disabled",
            message=f"{labels[0]} was automatically disabled (depends on {cause}).",
        )
    return Notification(
        level="info",
        title="Dependent Features Disabled",
        message=f"{', '.join(labels)} were automatically disabled (depend on {cause}).",
    )


def build_notifications(
    changes: Iterable[FeatureChange],
    catalog: FeatureCatalog,
    target: Target,
    max_listed: int = 3,
) -> List[Notification]:
    """
    Summarise ``changes`` for display.

    Args:
        changes: Side effects reported by the resolver.
        catalog: Supplies feature and language labels.
        target: The target the changes were resolved against.
        max_listed: Unsupported groups larger than this show only a count.

    Returns:
        One notification per ``(reason, cause)`` group; empty for no changes.
    """
    if max_listed < 1:
        raise ValueError("max_listed must be at least 1.")

    groups: Dict[Tuple[ChangeReason, Optional[str]], List[FeatureKey]] = {}
    for change in changes:
        groups.setdefault((change.reason, change.cause), []).append(change.feature)

    notifications: List[Notification] = []
    for (reason, cause), features in groups.items():
        if reason == ChangeReason.UNSUPPORTED:
            notifications.append(_unsupported(catalog, target, features, max_listed))
        elif reason == ChangeReason.REQUIRED_BY:
            notifications.append(_enabled(catalog.labels(features), _cause_label(catalog, cause)))
        else:
            notifications.append(_disabled(catalog.labels(features), _cause_label(catalog, cause)))
    return notifications


__all__: List[str] = ["Notification", "build_notifications"]
