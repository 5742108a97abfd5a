# File: featureforge/matrix.py
"""
featureforge - Compatibility Evaluator
========================================
Support decisions over a ``FeatureCatalog``:

    supported(lang, fw, f) = (f ∈ base(lang) or f ∈ added(fw)) and f ∉ removed(fw)

Framework overrides win in both directions: an addition rescues a feature
the language lacks, a removal revokes one the language has.

``supported_features`` / ``unsupported_features`` partition the whole
feature enumeration.
"""

from __future__ import annotations

import logging
from typing import FrozenSet, List, Tuple

from featureforge.catalog import FeatureCatalog, FrameworkOverride
from featureforge.errors import TargetMismatchError
from featureforge.models import FeatureKey, Framework, Language, Target

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("featureforge.matrix")


class SupportMatrix:
    """Evaluates feature support for language/framework pairs."""

    __slots__ = ("_catalog", "_all")

    def __init__(self, catalog: FeatureCatalog) -> None:
        self._catalog: FeatureCatalog = catalog
        self._all: FrozenSet[FeatureKey] = frozenset(catalog.features)

    @property
    def catalog(self) -> FeatureCatalog:
        return self._catalog

    # -- Target pairing -----------------------------------------------------

    def frameworks_for_language(self, language: Language) -> Tuple[Framework, ...]:
        return self._catalog.language_frameworks.get(language, ())

    def default_framework(self, language: Language) -> Framework:
        frameworks: Tuple[Framework, ...] = self.frameworks_for_language(language)
        if not frameworks:
            raise ValueError(f"Language '{language.value}' has no frameworks.")
        return frameworks[0]

    def is_framework_of(self, language: Language, framework: Framework) -> bool:
        return framework in self.frameworks_for_language(language)

    def check_target(self, language: Language, framework: Framework) -> Target:
        """Return the pair as a ``Target``, or raise ``TargetMismatchError``."""
        if not self.is_framework_of(language, framework):
            logger.debug("Rejected pairing %s/%s.", language.value, framework.value)
            raise TargetMismatchError(language.value, framework.value)
        return Target(language=language, framework=framework)

    # -- Support decisions --------------------------------------------------

    def is_supported_by_language(self, language: Language, feature: FeatureKey) -> bool:
        return feature in self._catalog.language_support.get(language, frozenset())

    def is_supported_by_framework(
        self,
        language: Language,
        framework: Framework,
        feature: FeatureKey,
    ) -> bool:
        """
        Whether ``feature`` is available for the pair.

        Raises:
            TargetMismatchError: ``framework`` is not one of ``language``'s.
        """
        self.check_target(language, framework)
        override: FrameworkOverride = self._catalog.override_for(framework)
        base: bool = self.is_supported_by_language(language, feature)
        return (base or feature in override.added) and feature not in override.removed

    def supported_features(self, language: Language, framework: Framework) -> FrozenSet[FeatureKey]:
        self.check_target(language, framework)
        override: FrameworkOverride = self._catalog.override_for(framework)
        base: FrozenSet[FeatureKey] = self._catalog.language_support.get(language, frozenset())
        supported: FrozenSet[FeatureKey] = frozenset((base | override.added) - override.removed) & self._all
        return supported

    def unsupported_features(self, language: Language, framework: Framework) -> FrozenSet[FeatureKey]:
        return self._all - self.supported_features(language, framework)

    def ordered(self, features) -> List[FeatureKey]:
        """``features`` in catalog order, for stable listings."""
        wanted = set(features)
        return [f for f in self._catalog.features if f in wanted]

    # -- Reverse lookups (for suggestions) ---------------------------------

    def languages_for_feature(self, feature: FeatureKey) -> List[Language]:
        """Languages whose base set includes ``feature``."""
        return [
            language
            for language in Language
            if self.is_supported_by_language(language, feature)
        ]

    def frameworks_supporting(self, feature: FeatureKey) -> List[Framework]:
        """Frameworks that support ``feature`` under at least one of their languages."""
        found: List[Framework] = []
        for language in Language:
            for framework in self.frameworks_for_language(language):
                if framework in found:
                    continue
                if feature in self.supported_features(language, framework):
                    found.append(framework)
        return found

    def __repr__(self) -> str:
        return f"<SupportMatrix {self._catalog!r}>"


__all__: List[str] = ["SupportMatrix"]
