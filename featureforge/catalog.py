# File: featureforge/catalog.py
"""
featureforge - Feature Catalog & Static Tables
================================================
The built-in static tables (feature labels, per-language support sets,
per-framework overrides, dependency edges) and the immutable
``FeatureCatalog`` value built from them.

The tables are authored as plain data, parsed into a ``CatalogDefinition``
and checked by ``validators.validate_catalog`` before a catalog is handed
out.  Any authoring defect (contradictory override, dependency cycle,
unknown framework) raises ``CatalogError`` at build time.

Usage::

    from featureforge.catalog import default_catalog
    catalog = default_catalog()            # built once per process
    catalog.label(FeatureKey.MAIL_SERVICE)  # 'Mail Service'
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple

from featureforge.errors import CatalogError, DependencyCycleError
from featureforge.models import (
    CatalogDefinition,
    FeatureCategory,
    FeatureInfo,
    FeatureKey,
    Framework,
    Language,
)
from featureforge.validators import ValidationResult, validate_catalog

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("featureforge.catalog")


# ---------------------------------------------------------------------------
# Built-in tables
# ---------------------------------------------------------------------------

_FEATURES: Dict[str, Dict[str, Any]] = {
    # Core
    "hateoas": {"label": "HATEOAS Links", "description": "Hypermedia links in responses", "category": "core"},
    "swagger": {"label": "Swagger/OpenAPI", "description": "Swagger/OpenAPI documentation", "category": "core"},
    "softDelete": {"label": "Soft Delete", "description": "Logical deletion instead of row removal", "category": "core"},
    "auditing": {"label": "Auditing", "description": "createdAt, updatedAt, createdBy, updatedBy columns", "category": "core"},
    "virtualThreads": {"label": "Virtual Threads", "description": "Java 21+ virtual threads", "category": "core"},
    "docker": {"label": "Docker", "description": "Docker configuration", "category": "core"},
    # Pagination & caching
    "caching": {"label": "Caching", "description": "Response caching", "category": "pagination_caching"},
    "cursorPagination": {"label": "Cursor Pagination", "description": "Cursor-based pagination", "category": "pagination_caching"},
    "etagSupport": {"label": "ETag Support", "description": "HTTP caching with ETags", "category": "pagination_caching"},
    # Advanced
    "rateLimiting": {"label": "Rate Limiting", "description": "Request rate limiting", "category": "advanced"},
    "i18n": {"label": "Internationalization", "description": "Localised messages", "category": "advanced"},
    "webhooks": {"label": "Webhooks", "description": "Outgoing webhooks on entity changes", "category": "advanced"},
    "bulkOperations": {"label": "Bulk Operations", "description": "Bulk import/export", "category": "advanced"},
    "batchOperations": {"label": "Batch Operations", "description": "Batch CRUD in a single request", "category": "advanced"},
    "domainEvents": {"label": "Domain Events", "description": "Publish events when entities change", "category": "advanced"},
    "sseUpdates": {"label": "SSE Updates", "description": "Server-Sent Events for updates", "category": "advanced"},
    # Architecture
    "multiTenancy": {"label": "Multi-Tenancy", "description": "Multiple tenants in one deployment", "category": "architecture"},
    "eventSourcing": {"label": "Event Sourcing", "description": "Store events instead of current state", "category": "architecture", "experimental": True},
    "apiVersioning": {"label": "API Versioning", "description": "Versioned API routes", "category": "architecture"},
    # Feature pack
    "socialLogin": {"label": "Social Login", "description": "OAuth2 login with social providers", "category": "feature_pack"},
    "passwordReset": {"label": "Password Reset", "description": "Email-based password recovery", "category": "feature_pack"},
    "mailService": {"label": "Mail Service", "description": "SMTP email sending", "category": "feature_pack"},
    "fileStorage": {"label": "File Storage", "description": "Local, S3, GCS or Azure file storage", "category": "feature_pack"},
    "jteTemplates": {"label": "JTE Templates", "description": "JTE templates for email rendering", "category": "feature_pack"},
    # Developer experience
    "miseTasks": {"label": "Mise Tasks", "description": "mise task runner configuration", "category": "developer_experience"},
    "preCommit": {"label": "Pre-commit Hooks", "description": ".pre-commit-config.yaml", "category": "developer_experience"},
    "setupScript": {"label": "Setup Scripts", "description": "scripts/setup.sh and scripts/setup.ps1", "category": "developer_experience"},
    "githubTemplates": {"label": "GitHub Templates", "description": "PR and issue templates", "category": "developer_experience"},
    "devCompose": {"label": "Dev Compose", "description": "docker-compose for local development", "category": "developer_experience"},
}

_DX: List[str] = ["miseTasks", "preCommit", "setupScript", "githubTemplates", "devCompose"]

_JVM_FEATURES: List[str] = [
    "hateoas", "swagger", "softDelete", "auditing", "virtualThreads", "docker",
    "caching", "cursorPagination", "etagSupport",
    "rateLimiting", "i18n", "webhooks", "bulkOperations", "batchOperations",
    "domainEvents", "sseUpdates",
    "multiTenancy", "eventSourcing", "apiVersioning",
    "socialLogin", "passwordReset", "mailService", "fileStorage", "jteTemplates",
] + _DX

_SCRIPTING_FEATURES: List[str] = [
    "hateoas", "swagger", "softDelete", "auditing", "docker",
    "caching", "cursorPagination", "etagSupport",
    "rateLimiting", "i18n", "webhooks", "bulkOperations", "batchOperations",
    "domainEvents", "sseUpdates",
    "multiTenancy", "apiVersioning",
    "socialLogin", "passwordReset", "mailService", "fileStorage",
] + _DX

_LANGUAGES: Dict[str, Dict[str, Any]] = {
    "java": {
        "label": "Java",
        "frameworks": ["spring-boot"],
        "supported_features": _JVM_FEATURES,
    },
    "kotlin": {
        "label": "Kotlin",
        "frameworks": ["spring-boot"],
        "supported_features": _JVM_FEATURES,
    },
    "python": {
        "label": "Python",
        "frameworks": ["fastapi"],
        "supported_features": _SCRIPTING_FEATURES,
    },
    "typescript": {
        "label": "TypeScript",
        "frameworks": ["nestjs"],
        "supported_features": _SCRIPTING_FEATURES,
    },
    "php": {
        "label": "PHP",
        "frameworks": ["laravel"],
        "supported_features": [f for f in _SCRIPTING_FEATURES if f != "sseUpdates"],
    },
    "go": {
        "label": "Go",
        "frameworks": ["gin", "chi"],
        "supported_features": [
            "swagger", "softDelete", "auditing", "docker",
            "caching", "cursorPagination", "etagSupport",
            "rateLimiting", "i18n", "webhooks", "batchOperations", "sseUpdates",
            "multiTenancy", "apiVersioning",
            "passwordReset", "mailService", "fileStorage",
        ] + _DX,
    },
    "rust": {
        "label": "Rust",
        "frameworks": ["axum"],
        "supported_features": [
            "swagger", "softDelete", "auditing", "docker",
            "caching", "cursorPagination", "etagSupport",
            "rateLimiting", "webhooks", "batchOperations", "sseUpdates",
            "apiVersioning",
            "passwordReset", "mailService", "fileStorage",
        ] + _DX,
    },
    "csharp": {
        "label": "C#",
        "frameworks": ["aspnet-core"],
        "supported_features": [f for f in _JVM_FEATURES if f not in ("virtualThreads", "jteTemplates")],
    },
}

_FRAMEWORKS: Dict[str, Dict[str, Any]] = {
    "spring-boot": {"label": "Spring Boot", "docs_url": "https://spring.io/projects/spring-boot"},
    "fastapi": {"label": "FastAPI", "docs_url": "https://fastapi.tiangolo.com/"},
    "nestjs": {"label": "NestJS", "docs_url": "https://nestjs.com/"},
    "laravel": {"label": "Laravel", "docs_url": "https://laravel.com/"},
    "gin": {
        "label": "Gin",
        "docs_url": "https://gin-gonic.com/",
        "removed_features": ["domainEvents"],
    },
    "chi": {
        "label": "Chi",
        "docs_url": "https://go-chi.io/",
        "added_features": ["bulkOperations"],
        "removed_features": ["domainEvents"],
    },
    "axum": {
        "label": "Axum",
        "docs_url": "https://github.com/tokio-rs/axum",
        "removed_features": ["i18n", "domainEvents", "bulkOperations"],
    },
    "aspnet-core": {"label": "ASP.NET Core", "docs_url": "https://dotnet.microsoft.com/apps/aspnet"},
}

_DEPENDENCIES: Dict[str, List[str]] = {
    "passwordReset": ["mailService"],
    "jteTemplates": ["mailService"],
    "eventSourcing": ["domainEvents"],
    "sseUpdates": ["domainEvents"],
}

DEFAULT_TABLES: Dict[str, Any] = {
    "features": _FEATURES,
    "languages": _LANGUAGES,
    "frameworks": _FRAMEWORKS,
    "dependencies": _DEPENDENCIES,
}


# ---------------------------------------------------------------------------
# FeatureCatalog (immutable runtime value)
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FrameworkOverride:
    """Per-framework adjustment of its language's base support set."""

    added: FrozenSet[FeatureKey] = frozenset()
    removed: FrozenSet[FeatureKey] = frozenset()


@dataclass(frozen=True, slots=True)
class FeatureCatalog:
    """
    Validated, read-only static tables.

    Built by ``build_catalog``; never construct directly from unchecked data.
    All mappings are ``MappingProxyType`` views over frozensets / tuples.
    """

    features: Tuple[FeatureKey, ...]
    feature_info: Mapping[FeatureKey, FeatureInfo]
    language_support: Mapping[Language, FrozenSet[FeatureKey]]
    language_labels: Mapping[Language, str]
    language_frameworks: Mapping[Language, Tuple[Framework, ...]]
    framework_labels: Mapping[Framework, str]
    overrides: Mapping[Framework, FrameworkOverride]
    dependencies: Mapping[FeatureKey, FrozenSet[FeatureKey]]

    def label(self, feature: FeatureKey) -> str:
        info: Optional[FeatureInfo] = self.feature_info.get(feature)
        return info.label if info is not None else feature.value

    def labels(self, features) -> List[str]:
        return [self.label(f) for f in features]

    def language_label(self, language: Language) -> str:
        return self.language_labels.get(language, language.value)

    def framework_label(self, framework: Framework) -> str:
        return self.framework_labels.get(framework, framework.value)

    def override_for(self, framework: Framework) -> FrameworkOverride:
        return self.overrides.get(framework, _NO_OVERRIDE)

    def features_by_category(self) -> Dict[FeatureCategory, List[FeatureKey]]:
        grouped: Dict[FeatureCategory, List[FeatureKey]] = {c: [] for c in FeatureCategory}
        for feature in self.features:
            info: Optional[FeatureInfo] = self.feature_info.get(feature)
            category: FeatureCategory = info.category if info else FeatureCategory.CORE
            grouped[category].append(feature)
        return grouped

    def __repr__(self) -> str:
        return (
            f"<FeatureCatalog features={len(self.features)} "
            f"languages={len(self.language_support)} "
            f"frameworks={len(self.framework_labels)}>"
        )


_NO_OVERRIDE: FrameworkOverride = FrameworkOverride()


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def parse_catalog(raw: Mapping[str, Any]) -> CatalogDefinition:
    """Parse raw tables into a ``CatalogDefinition``.  Raises ``ValueError``."""
    try:
        return CatalogDefinition.model_validate(dict(raw))
    except Exception as exc:
        raise ValueError(f"Catalog definition is malformed: {exc}") from exc


def build_catalog(
    definition: CatalogDefinition,
    strict: bool = True,
) -> FeatureCatalog:
    """
    Validate ``definition`` and freeze it into a ``FeatureCatalog``.

    Args:
        definition: Parsed static tables.
        strict: When True, catalog warnings are raised as errors too.

    Raises:
        DependencyCycleError: The dependency edges contain a cycle.
        CatalogError: Any other authoring defect.
    """
    result: ValidationResult = validate_catalog(definition)

    failing = result.errors + (result.warnings if strict else [])
    if failing:
        codes: List[str] = [item.code for item in failing]
        cycle_items = [item for item in failing if item.code == "DEPENDENCY_CYCLE"]
        if cycle_items:
            raise DependencyCycleError(cycle_items[0].context.get("cycle", []))
        raise CatalogError(result.format_report(), codes=codes)

    for warning in result.warnings:
        logger.warning("Catalog: %s", warning)

    features: Tuple[FeatureKey, ...] = tuple(FeatureKey)

    frozen = FeatureCatalog(
        features=features,
        feature_info=MappingProxyType(
            {
                key: definition.features.get(key) or FeatureInfo(label=key.value)
                for key in features
            }
        ),
        language_support=MappingProxyType(
            {
                lang: frozenset(info.supported_features)
                for lang, info in definition.languages.items()
            }
        ),
        language_labels=MappingProxyType(
            {lang: info.label for lang, info in definition.languages.items()}
        ),
        language_frameworks=MappingProxyType(
            {lang: tuple(info.frameworks) for lang, info in definition.languages.items()}
        ),
        framework_labels=MappingProxyType(
            {fw: info.label for fw, info in definition.frameworks.items()}
        ),
        overrides=MappingProxyType(
            {
                fw: FrameworkOverride(
                    added=frozenset(info.added_features),
                    removed=frozenset(info.removed_features),
                )
                for fw, info in definition.frameworks.items()
                if info.added_features or info.removed_features
            }
        ),
        dependencies=MappingProxyType(
            {
                key: frozenset(targets)
                for key, targets in definition.dependencies.items()
                if targets
            }
        ),
    )
    logger.debug("Built %r", frozen)
    return frozen


@functools.lru_cache(maxsize=1)
def default_catalog() -> FeatureCatalog:
    """The built-in catalog, built and validated once per process."""
    return build_catalog(parse_catalog(DEFAULT_TABLES))


__all__: List[str] = [
    "DEFAULT_TABLES",
    "FeatureCatalog",
    "FrameworkOverride",
    "parse_catalog",
    "build_catalog",
    "default_catalog",
]
