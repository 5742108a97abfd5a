# File: featureforge/engine.py
"""
featureforge - Engine Façade
==============================
``FeatureEngine`` wires one catalog into a ``SupportMatrix``, a
``DependencyGraph`` and a ``CascadeResolver`` and exposes the calls a UI
binder makes:

    engine = FeatureEngine.default()
    result = engine.enable(state, target, FeatureKey.PASSWORD_RESET)
    for note in engine.notifications_for(result):
        toast(note.level, note.title, note.message)

The engine holds no project state.  The caller owns the current
``(state, target)`` pair, replaces it with ``result.state`` /
``result.target`` after each call and must serialise mutations.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import FrozenSet, List, Optional, Tuple

from featureforge.catalog import FeatureCatalog, default_catalog
from featureforge.config import EngineConfig
from featureforge.graph import DependencyGraph
from featureforge.loader import load_catalog_file, load_project_file
from featureforge.matrix import SupportMatrix
from featureforge.models import (
    FeatureKey,
    FeatureToggle,
    Framework,
    FrameworkChange,
    Language,
    LanguageChange,
    Mutation,
    ProjectDocument,
    ProjectFeatureState,
    Rejection,
    ResolutionResult,
    Target,
)
from featureforge.notifications import Notification, build_notifications
from featureforge.resolver import CascadeResolver
from featureforge.validators import ValidationResult, validate_project_features

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("featureforge.engine")


class FeatureEngine:
    """
    Compatibility and cascade engine over one immutable catalog.

    Args:
        catalog: Validated static tables.  Defaults to the built-in catalog.
        config: Reporting and loading options.
    """

    __slots__ = ("catalog", "config", "matrix", "graph", "resolver")

    def __init__(
        self,
        catalog: Optional[FeatureCatalog] = None,
        config: Optional[EngineConfig] = None,
    ) -> None:
        self.catalog: FeatureCatalog = catalog or default_catalog()
        self.config: EngineConfig = config or EngineConfig()
        self.matrix: SupportMatrix = SupportMatrix(self.catalog)
        self.graph: DependencyGraph = DependencyGraph(self.catalog.dependencies)
        self.resolver: CascadeResolver = CascadeResolver(self.matrix, self.graph)
        logger.debug("Engine ready: %r", self.catalog)

    # -- Construction -------------------------------------------------------

    @classmethod
    def default(cls) -> "FeatureEngine":
        return cls()

    @classmethod
    def from_config(cls, config: EngineConfig) -> "FeatureEngine":
        """Build an engine, loading ``config.catalog_path`` when set."""
        catalog: Optional[FeatureCatalog] = None
        if config.catalog_path is not None:
            catalog = load_catalog_file(config.catalog_path, strict=config.strict_catalog)
        return cls(catalog=catalog, config=config)

    # -- Mutations ----------------------------------------------------------

    def resolve(
        self,
        state: ProjectFeatureState,
        target: Target,
        mutation: Mutation,
    ) -> ResolutionResult:
        """Apply one mutation.  See ``CascadeResolver.resolve``."""
        return self.resolver.resolve(state, target, mutation)

    def enable(
        self,
        state: ProjectFeatureState,
        target: Target,
        feature: FeatureKey,
    ) -> ResolutionResult:
        return self.resolve(state, target, FeatureToggle(feature=feature, enabled=True))

    def disable(
        self,
        state: ProjectFeatureState,
        target: Target,
        feature: FeatureKey,
    ) -> ResolutionResult:
        return self.resolve(state, target, FeatureToggle(feature=feature, enabled=False))

    def change_language(
        self,
        state: ProjectFeatureState,
        target: Target,
        language: Language,
        framework: Optional[Framework] = None,
    ) -> ResolutionResult:
        """Switch language; ``framework`` defaults to the language's first one."""
        chosen: Framework = framework or self.matrix.default_framework(language)
        return self.resolve(state, target, LanguageChange(language=language, framework=chosen))

    def change_framework(
        self,
        state: ProjectFeatureState,
        target: Target,
        framework: Framework,
    ) -> ResolutionResult:
        return self.resolve(state, target, FrameworkChange(framework=framework))

    def repair(self, state: ProjectFeatureState, target: Target) -> ResolutionResult:
        return self.resolver.repair(state, target)

    # -- Queries ------------------------------------------------------------

    def can_enable(self, target: Target, feature: FeatureKey) -> Optional[Rejection]:
        return self.resolver.can_enable(target, feature)

    def supported_features(self, target: Target) -> FrozenSet[FeatureKey]:
        return self.matrix.supported_features(target.language, target.framework)

    def unsupported_features(self, target: Target) -> FrozenSet[FeatureKey]:
        return self.matrix.unsupported_features(target.language, target.framework)

    def is_supported(self, target: Target, feature: FeatureKey) -> bool:
        return self.matrix.is_supported_by_framework(target.language, target.framework, feature)

    def dependencies_of(self, feature: FeatureKey) -> FrozenSet[FeatureKey]:
        return self.graph.dependencies_of(feature)

    def dependents_of(self, feature: FeatureKey) -> FrozenSet[FeatureKey]:
        return self.graph.dependents_of(feature)

    def default_target(self, language: Language) -> Target:
        return Target(language=language, framework=self.matrix.default_framework(language))

    # -- Reporting ----------------------------------------------------------

    def notifications_for(self, result: ResolutionResult) -> List[Notification]:
        """All notifications for ``result``'s side effects."""
        return build_notifications(
            result.changes,
            self.catalog,
            result.target,
            max_listed=self.config.max_listed_features,
        )

    def notification_for(self, result: ResolutionResult) -> Optional[Notification]:
        """The first notification for ``result``, or ``None`` if nothing changed."""
        notes: List[Notification] = self.notifications_for(result)
        return notes[0] if notes else None

    # -- Project documents --------------------------------------------------

    def check_project(self, document: ProjectDocument) -> ValidationResult:
        """
        Validate a project document against the engine invariant.

        With ``repair_on_load`` the inconsistencies a repair would fix are
        reported as warnings, and one ``REPAIRED`` warning is added per
        feature the repair switches off.  A target mismatch is always an
        error.
        """
        result: ValidationResult = validate_project_features(
            document.features, document.target, self.matrix, self.graph
        )
        if not result.has_errors or not self.config.repair_on_load:
            return result
        if "TARGET_MISMATCH" in result.codes():
            return result

        downgraded: ValidationResult = ValidationResult()
        for item in result.all_items:
            if item.level == "info":
                downgraded.add_info(item.code, item.message, item.context)
            else:
                downgraded.add_warning(item.code, item.message, item.context, item.suggestion)

        repaired: ResolutionResult = self.repair(document.features, document.target)
        for change in repaired.changes:
            downgraded.add_warning(
                "REPAIRED",
                f"\"{change.feature.value}\" will be disabled on load.",
                {"feature": change.feature.value, "reason": change.reason.value, "cause": change.cause},
            )
        return downgraded

    def repair_document(self, document: ProjectDocument) -> Tuple[ProjectDocument, ResolutionResult]:
        """Return a consistent copy of ``document`` and the repair change log."""
        result: ResolutionResult = self.repair(document.features, document.target)
        if not result.changes:
            return document, result
        fixed: ProjectDocument = document.model_copy(update={"features": result.state})
        return fixed, result

    def load_project(self, path: Path) -> ProjectDocument:
        """
        Load a project document, repairing it when ``repair_on_load`` is set.

        Raises:
            FileNotFoundError: The file does not exist.
            ValueError: The document cannot be parsed, or it is inconsistent
                and ``repair_on_load`` is off.
            TargetMismatchError: The document's framework is not one of its
                language's.
        """
        document: ProjectDocument = load_project_file(path, self.catalog)
        self.matrix.check_target(document.target.language, document.target.framework)

        if self.config.repair_on_load:
            fixed, result = self.repair_document(document)
            if result.changes:
                logger.warning(
                    "Project '%s' was inconsistent; disabled %s.",
                    document.name,
                    ", ".join(f.value for f in result.disabled_features),
                )
            return fixed

        report: ValidationResult = self.check_project(document)
        if report.has_errors:
            raise ValueError(report.format_report())
        return document

    def __repr__(self) -> str:
        return f"<FeatureEngine {self.catalog!r}>"


__all__: List[str] = ["FeatureEngine"]
