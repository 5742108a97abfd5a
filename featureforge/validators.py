# File: featureforge/validators.py
"""
featureforge - Catalog & Project Validators
=============================================
A **pure-function validation pipeline** over the models in
``featureforge.models``.

Pydantic handles structural correctness (known enum keys, field types).  This
module adds the semantic checks across tables:

* catalog checks, run once when a catalog is built: every language has a
  non-empty support set and at least one framework, no framework both adds
  and removes a feature, the dependency edges form a DAG;
* project checks, run on loaded documents: every enabled feature is
  supported by the target and has all of its requirements enabled.

Usage by downstream modules:
    from featureforge.validators import validate_catalog
    result = validate_catalog(definition)
    if result.has_errors:
        raise CatalogError(result.format_report())
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Set

from featureforge.graph import find_cycle
from featureforge.models import (
    CatalogDefinition,
    FeatureKey,
    Framework,
    Language,
    ProjectFeatureState,
    Target,
)

if TYPE_CHECKING:
    from featureforge.graph import DependencyGraph
    from featureforge.matrix import SupportMatrix

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("featureforge.validators")

# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class ValidationError:
    """Lightweight issue descriptor (no Pydantic overhead)."""

    __slots__ = ("level", "code", "message", "context", "suggestion")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        self.level: str = level  # "error" | "warning" | "info"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}
        self.suggestion: Optional[str] = suggestion

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "level": self.level,
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }
        if self.suggestion:
            data["suggestion"] = self.suggestion
        return data


class ValidationResult:
    """Accumulates ``ValidationError`` instances produced by the pipeline."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[ValidationError] = []

    # -- Mutation -----------------------------------------------------------

    def add_error(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        self._items.append(ValidationError("error", code, message, context, suggestion))

    def add_warning(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        self._items.append(ValidationError("warning", code, message, context, suggestion))

    def add_info(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationError("info", code, message, context))

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    # -- Query --------------------------------------------------------------

    @property
    def errors(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_error]

    @property
    def warnings(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_warning]

    @property
    def all_items(self) -> List[ValidationError]:
        return list(self._items)

    @property
    def has_errors(self) -> bool:
        return any(e.is_error for e in self._items)

    @property
    def has_warnings(self) -> bool:
        return any(e.is_warning for e in self._items)

    @property
    def error_count(self) -> int:
        return sum(1 for e in self._items if e.is_error)

    @property
    def warning_count(self) -> int:
        return sum(1 for e in self._items if e.is_warning)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    def codes(self) -> List[str]:
        return [e.code for e in self._items]

    def summary(self) -> str:
        return (
            f"Validation: {self.error_count} error(s), "
            f"{self.warning_count} warning(s), "
            f"{len(self._items)} total item(s)."
        )

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are NO errors (i.e. valid)."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)

    def format_report(self, include_info: bool = False) -> str:
        """Human-readable multi-line report."""
        lines: List[str] = [self.summary(), ""]
        for item in self._items:
            if not include_info and item.level == "info":
                continue
            prefix: str = {
                "error": "❌",
                "warning": "⚠️",
                "info": "ℹ️",
            }.get(item.level, "•")
            lines.append(f"  {prefix} [{item.code}] {item.message}")
            if item.suggestion:
                lines.append(f"       → {item.suggestion}")
            if item.context:
                for k, v in item.context.items():
                    lines.append(f"       {k}: {v}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Catalog validators (run once per catalog build)
# ---------------------------------------------------------------------------


def validate_feature_metadata(definition: CatalogDefinition) -> ValidationResult:
    """Every feature key should carry a label for notifications and tooltips."""
    result: ValidationResult = ValidationResult()
    for key in FeatureKey:
        if key not in definition.features:
            result.add_warning(
                "MISSING_FEATURE_INFO",
                f"Feature '{key.value}' has no label; its key will be shown instead.",
                {"feature": key.value},
            )
    return result


def validate_language_support(definition: CatalogDefinition) -> ValidationResult:
    """
    Every language must be declared, support at least one feature and list
    at least one framework that exists in the frameworks table.
    """
    result: ValidationResult = ValidationResult()

    for language in Language:
        info = definition.languages.get(language)
        ctx: Dict[str, Any] = {"language": language.value}

        if info is None:
            result.add_error(
                "MISSING_LANGUAGE",
                f"Language '{language.value}' has no entry in the support matrix.",
                ctx,
            )
            continue

        if not info.supported_features:
            result.add_error(
                "EMPTY_SUPPORT_SET",
                f"Language '{language.value}' supports no features.",
                ctx,
            )
        elif len(info.supported_features) != len(set(info.supported_features)):
            dupes: List[str] = sorted(
                {f.value for f in info.supported_features if info.supported_features.count(f) > 1}
            )
            result.add_info(
                "DUPLICATE_SUPPORTED_FEATURE",
                f"Language '{language.value}' lists {dupes} more than once.",
                {**ctx, "features": dupes},
            )

        if not info.frameworks:
            result.add_error(
                "NO_FRAMEWORKS",
                f"Language '{language.value}' lists no frameworks.",
                ctx,
            )

        for framework in info.frameworks:
            if framework not in definition.frameworks:
                result.add_error(
                    "UNKNOWN_FRAMEWORK",
                    f"Language '{language.value}' lists framework "
                    f"'{framework.value}' which has no entry in the frameworks table.",
                    {**ctx, "framework": framework.value},
                )

    logger.debug("validate_language_support: %d issue(s).", len(result))
    return result


def validate_framework_overrides(definition: CatalogDefinition) -> ValidationResult:
    """
    Check per-framework overrides:

    - a framework may not both add and remove the same feature;
    - every framework in the table must belong to some language;
    - additions already covered by the language, and removals of features
      the language never had, are reported as info (harmless but redundant).
    """
    result: ValidationResult = ValidationResult()

    owners: Dict[Framework, List[Language]] = {}
    for language, info in definition.languages.items():
        for framework in info.frameworks:
            owners.setdefault(framework, []).append(language)

    for framework, info in definition.frameworks.items():
        ctx: Dict[str, Any] = {"framework": framework.value}

        both: Set[FeatureKey] = set(info.added_features) & set(info.removed_features)
        if both:
            names: List[str] = sorted(f.value for f in both)
            result.add_error(
                "CONTRADICTORY_OVERRIDE",
                f"Framework '{framework.value}' both adds and removes {names}.",
                {**ctx, "features": names},
            )

        languages: List[Language] = owners.get(framework, [])
        if not languages:
            result.add_error(
                "ORPHAN_FRAMEWORK",
                f"Framework '{framework.value}' is not listed under any language.",
                ctx,
            )
            continue

        base: Set[FeatureKey] = set()
        for language in languages:
            base.update(definition.languages[language].supported_features)

        redundant_add: List[str] = sorted(
            f.value for f in info.added_features if f in base and f not in both
        )
        if redundant_add:
            result.add_info(
                "REDUNDANT_ADDITION",
                f"Framework '{framework.value}' adds {redundant_add}, already "
                f"supported by its language.",
                {**ctx, "features": redundant_add},
            )

        redundant_remove: List[str] = sorted(
            f.value for f in info.removed_features if f not in base and f not in both
        )
        if redundant_remove:
            result.add_info(
                "REDUNDANT_REMOVAL",
                f"Framework '{framework.value}' removes {redundant_remove}, which "
                f"its language does not support anyway.",
                {**ctx, "features": redundant_remove},
            )

    logger.debug("validate_framework_overrides: %d issue(s).", len(result))
    return result


def validate_dependency_graph(definition: CatalogDefinition) -> ValidationResult:
    """
    The dependency edges must form a DAG.

    Also reports (as info) features whose requirement is supported by fewer
    languages than the feature itself, since enabling them there will always
    be rejected.
    """
    result: ValidationResult = ValidationResult()

    cycle = find_cycle(definition.dependencies)
    if cycle is not None:
        path: List[str] = [f.value for f in cycle]
        result.add_error(
            "DEPENDENCY_CYCLE",
            "Dependency cycle detected: " + " → ".join(path),
            {"cycle": path},
        )

    for feature, requirements in definition.dependencies.items():
        for requirement in requirements:
            stranded: List[str] = sorted(
                language.value
                for language, info in definition.languages.items()
                if feature in info.supported_features
                and requirement not in info.supported_features
            )
            if stranded:
                result.add_info(
                    "UNSATISFIABLE_DEPENDENCY",
                    f"'{feature.value}' requires '{requirement.value}', which "
                    f"{stranded} do not support.",
                    {
                        "feature": feature.value,
                        "requires": requirement.value,
                        "languages": stranded,
                    },
                )

    logger.debug("validate_dependency_graph: %d issue(s).", len(result))
    return result


# Type alias for a catalog validation function
CatalogValidatorFn = Callable[[CatalogDefinition], ValidationResult]


def validate_catalog(definition: CatalogDefinition) -> ValidationResult:
    """
    **Master catalog validation entry point.**

    Runs every catalog validator and merges their results.  ``build_catalog``
    calls this and refuses to build when there are errors.
    """
    result: ValidationResult = ValidationResult()

    validators: List[CatalogValidatorFn] = [
        validate_feature_metadata,
        validate_language_support,
        validate_framework_overrides,
        validate_dependency_graph,
    ]

    for validator_fn in validators:
        logger.debug("Running validator: %s", validator_fn.__name__)
        result.merge(validator_fn(definition))

    if result.has_errors:
        logger.error("Catalog validation FAILED. %s", result.summary())
    else:
        logger.debug("Catalog validation passed. %s", result.summary())
    return result


# ---------------------------------------------------------------------------
# Project validators
# ---------------------------------------------------------------------------


def validate_project_features(
    state: ProjectFeatureState,
    target: Target,
    matrix: "SupportMatrix",
    graph: "DependencyGraph",
) -> ValidationResult:
    """
    Check the engine invariant for one project: every enabled feature is
    supported by ``target`` and all of its direct requirements are enabled.

    Complexity: O(F) where F = number of feature keys.
    """
    result: ValidationResult = ValidationResult()
    language: Language = target.language
    framework: Framework = target.framework

    if not matrix.is_framework_of(language, framework):
        result.add_error(
            "TARGET_MISMATCH",
            f"Framework '{framework.value}' does not belong to language "
            f"'{language.value}'.",
            {"language": language.value, "framework": framework.value},
            suggestion=(
                "Use one of: "
                + ", ".join(f.value for f in matrix.frameworks_for_language(language))
                + "."
            ),
        )
        return result

    enabled: List[FeatureKey] = list(state.enabled_features())

    for feature in enabled:
        ctx: Dict[str, Any] = {"feature": feature.value}

        if not matrix.is_supported_by_framework(language, framework, feature):
            if matrix.is_supported_by_language(language, feature):
                result.add_error(
                    "UNSUPPORTED_BY_FRAMEWORK",
                    f"Feature \"{feature.value}\" is not supported by {framework.value}.",
                    {**ctx, "framework": framework.value},
                    suggestion=_support_suggestion(matrix, feature, by_framework=True),
                )
            else:
                result.add_error(
                    "UNSUPPORTED_BY_LANGUAGE",
                    f"Feature \"{feature.value}\" is not supported for {language.value}.",
                    {**ctx, "language": language.value},
                    suggestion=_support_suggestion(matrix, feature, by_framework=False),
                )

        for requirement in sorted(graph.dependencies_of(feature), key=lambda k: k.value):
            if not state.is_enabled(requirement):
                result.add_error(
                    "MISSING_DEPENDENCY",
                    f"Feature \"{feature.value}\" requires \"{requirement.value}\" "
                    f"to be enabled.",
                    {**ctx, "requires": requirement.value},
                    suggestion=f"Enable the \"{requirement.value}\" feature to use this functionality.",
                )

    result.add_info(
        "FEATURE_STATS",
        f"{len(enabled)} of {len(FeatureKey)} features enabled for {target}.",
        {"enabled": len(enabled), "total": len(FeatureKey), "target": str(target)},
    )

    if result.has_errors:
        logger.info("Project features invalid for %s: %s", target, result.summary())
    else:
        logger.debug("Project features valid for %s.", target)
    return result


def _support_suggestion(matrix: "SupportMatrix", feature: FeatureKey, by_framework: bool) -> str:
    if by_framework:
        frameworks = matrix.frameworks_supporting(feature)
        if not frameworks:
            return "No framework in the catalog supports this feature."
        return "This feature is supported by: " + ", ".join(f.value for f in frameworks) + "."
    languages = matrix.languages_for_feature(feature)
    if not languages:
        return "No language in the catalog supports this feature."
    return "This feature is supported in: " + ", ".join(l.value for l in languages) + "."


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ValidationError",
    "ValidationResult",
    "validate_feature_metadata",
    "validate_language_support",
    "validate_framework_overrides",
    "validate_dependency_graph",
    "validate_catalog",
    "validate_project_features",
]

logger.debug("featureforge.validators loaded (%d public symbols).", len(__all__))
