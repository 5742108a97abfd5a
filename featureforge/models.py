# File: featureforge/models.py
"""
featureforge - Core Data Models
================================
Pydantic V2 models for the feature compatibility engine: the closed
enumerations (features, languages, frameworks), the raw catalog definition
that static tables are parsed into, and the immutable values that flow
through the resolver (project feature state, targets, mutations, changes).

Structural correctness (known keys, field types) is enforced here.  Semantic
checks across tables (contradictory overrides, dependency cycles) live in
``featureforge.validators``.
"""

from __future__ import annotations

import logging
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Literal, Mapping, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("featureforge.models")

# ---------------------------------------------------------------------------
# Enums: fixed sets used across the entire project
# ---------------------------------------------------------------------------


class FeatureKey(str, Enum):
    """Every independently toggleable capability of the generated project.

    Declaration order is the catalog order used for listings and change logs.
    """

    # Core
    HATEOAS = "hateoas"
    SWAGGER = "swagger"
    SOFT_DELETE = "softDelete"
    AUDITING = "auditing"
    VIRTUAL_THREADS = "virtualThreads"
    DOCKER = "docker"

    # Pagination & caching
    CACHING = "caching"
    CURSOR_PAGINATION = "cursorPagination"
    ETAG_SUPPORT = "etagSupport"

    # Advanced
    RATE_LIMITING = "rateLimiting"
    I18N = "i18n"
    WEBHOOKS = "webhooks"
    BULK_OPERATIONS = "bulkOperations"
    BATCH_OPERATIONS = "batchOperations"
    DOMAIN_EVENTS = "domainEvents"
    SSE_UPDATES = "sseUpdates"

    # Architecture
    MULTI_TENANCY = "multiTenancy"
    EVENT_SOURCING = "eventSourcing"
    API_VERSIONING = "apiVersioning"

    # Feature pack
    SOCIAL_LOGIN = "socialLogin"
    PASSWORD_RESET = "passwordReset"
    MAIL_SERVICE = "mailService"
    FILE_STORAGE = "fileStorage"
    JTE_TEMPLATES = "jteTemplates"

    # Developer experience
    MISE_TASKS = "miseTasks"
    PRE_COMMIT = "preCommit"
    SETUP_SCRIPT = "setupScript"
    GITHUB_TEMPLATES = "githubTemplates"
    DEV_COMPOSE = "devCompose"


class FeatureCategory(str, Enum):
    """UI grouping for features."""

    CORE = "core"
    PAGINATION_CACHING = "pagination_caching"
    ADVANCED = "advanced"
    ARCHITECTURE = "architecture"
    FEATURE_PACK = "feature_pack"
    DEVELOPER_EXPERIENCE = "developer_experience"


class Language(str, Enum):
    """Target output languages."""

    JAVA = "java"
    KOTLIN = "kotlin"
    PYTHON = "python"
    TYPESCRIPT = "typescript"
    PHP = "php"
    GO = "go"
    RUST = "rust"
    CSHARP = "csharp"


class Framework(str, Enum):
    """Target frameworks.  Each one is listed under its language(s) in the catalog."""

    SPRING_BOOT = "spring-boot"
    FASTAPI = "fastapi"
    NESTJS = "nestjs"
    LARAVEL = "laravel"
    GIN = "gin"
    CHI = "chi"
    AXUM = "axum"
    ASPNET_CORE = "aspnet-core"


class ChangeReason(str, Enum):
    """Why the resolver flipped a feature."""

    UNSUPPORTED = "unsupported"
    REQUIRED_BY = "required_by"
    REQUIRES = "requires"


# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    extra="forbid",
)

_VALUE_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    frozen=True,
    extra="forbid",
)


# ---------------------------------------------------------------------------
# Catalog definition (raw static tables)
# ---------------------------------------------------------------------------


class FeatureInfo(BaseModel):
    """Display metadata for a single feature."""

    model_config = _SHARED_CONFIG

    label: str = Field(..., min_length=1, description="Human-readable label.")
    description: str = Field(default="", description="One-line description.")
    category: FeatureCategory = Field(
        default=FeatureCategory.CORE, description="UI grouping."
    )
    experimental: bool = Field(default=False)


class LanguageInfo(BaseModel):
    """A target language: its label, frameworks and base feature support."""

    model_config = _SHARED_CONFIG

    label: str = Field(..., min_length=1)
    frameworks: List[Framework] = Field(
        default_factory=list,
        description="Compatible frameworks; the first one is the default.",
    )
    supported_features: List[FeatureKey] = Field(
        default_factory=list,
        description="Base support set before framework overrides.",
    )

    @field_validator("frameworks")
    @classmethod
    def _unique_frameworks(cls, v: List[Framework]) -> List[Framework]:
        if len(v) != len(set(v)):
            raise ValueError(f"Duplicate frameworks listed: {v}")
        return v


class FrameworkInfo(BaseModel):
    """A target framework and its additive / subtractive overrides."""

    model_config = _SHARED_CONFIG

    label: str = Field(..., min_length=1)
    added_features: List[FeatureKey] = Field(
        default_factory=list,
        description="Features this framework supports beyond its language.",
    )
    removed_features: List[FeatureKey] = Field(
        default_factory=list,
        description="Features this framework drops even if its language has them.",
    )
    docs_url: Optional[str] = Field(default=None)


class CatalogDefinition(BaseModel):
    """
    The complete set of static tables, as authored.

    This is the parse target for both the built-in tables
    (``featureforge.catalog``) and user-supplied catalog files.  It is not
    used at runtime directly; ``build_catalog`` validates it and turns it
    into an immutable ``FeatureCatalog``.
    """

    model_config = _SHARED_CONFIG

    features: Dict[FeatureKey, FeatureInfo] = Field(default_factory=dict)
    languages: Dict[Language, LanguageInfo] = Field(default_factory=dict)
    frameworks: Dict[Framework, FrameworkInfo] = Field(default_factory=dict)
    dependencies: Dict[FeatureKey, List[FeatureKey]] = Field(
        default_factory=dict,
        description="feature -> features it requires (direct edges only).",
    )


# ---------------------------------------------------------------------------
# Runtime values
# ---------------------------------------------------------------------------


class Target(BaseModel):
    """An active (language, framework) pair."""

    model_config = _VALUE_CONFIG

    language: Language
    framework: Framework

    def __str__(self) -> str:
        return f"{self.language.value}/{self.framework.value}"


class ProjectFeatureState(BaseModel):
    """
    Enabled/disabled flag for every feature key.

    Missing keys are filled with ``False`` on construction, so a state always
    covers the whole catalog.  ``values`` is a read-only mapping; use
    ``with_values`` to derive a new state.
    """

    model_config = _VALUE_CONFIG

    values: Mapping[FeatureKey, bool] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _fill_missing(cls, data: Any) -> Any:
        if isinstance(data, dict):
            raw: Mapping[Any, Any] = data.get("values") or {}
            filled: Dict[Any, Any] = {key: False for key in FeatureKey}
            for key, flag in raw.items():
                filled[FeatureKey(key)] = flag
            return {**data, "values": filled}
        return data

    @field_validator("values", mode="after")
    @classmethod
    def _freeze_values(cls, value: Mapping[FeatureKey, bool]) -> Mapping[FeatureKey, bool]:
        return MappingProxyType(dict(value))

    @field_serializer("values")
    def _serialize_values(self, value: Mapping[FeatureKey, bool]) -> Dict[FeatureKey, bool]:
        return dict(value)

    # -- Constructors -------------------------------------------------------

    @classmethod
    def all_disabled(cls) -> "ProjectFeatureState":
        return cls(values={})

    @classmethod
    def from_enabled(cls, features: Iterable[Union[FeatureKey, str]]) -> "ProjectFeatureState":
        return cls(values={FeatureKey(f): True for f in features})

    # -- Query --------------------------------------------------------------

    def is_enabled(self, feature: FeatureKey) -> bool:
        return self.values.get(feature, False)

    def enabled_features(self) -> Tuple[FeatureKey, ...]:
        """Enabled keys in catalog order."""
        return tuple(key for key in FeatureKey if self.values.get(key, False))

    # -- Derivation ---------------------------------------------------------

    def with_values(self, updates: Mapping[FeatureKey, bool]) -> "ProjectFeatureState":
        if not updates:
            return self
        merged: Dict[FeatureKey, bool] = dict(self.values)
        merged.update(updates)
        return ProjectFeatureState(values=merged)

    def to_dict(self) -> Dict[str, bool]:
        """Serialise with camelCase string keys, as project documents store it."""
        return {key.value: self.values.get(key, False) for key in FeatureKey}

    def __repr__(self) -> str:
        enabled: str = ", ".join(f.value for f in self.enabled_features())
        return f"<ProjectFeatureState enabled=[{enabled}]>"


class FeatureChange(BaseModel):
    """A single side-effect flip applied by the resolver."""

    model_config = _VALUE_CONFIG

    feature: FeatureKey
    from_value: bool
    to_value: bool
    reason: ChangeReason
    cause: Optional[str] = Field(
        default=None,
        description="Feature key or target that triggered the change.",
    )

    def describe(self) -> str:
        verb: str = "enabled" if self.to_value else "disabled"
        if self.reason == ChangeReason.UNSUPPORTED:
            return f"{self.feature.value} {verb}: unsupported by {self.cause}"
        if self.reason == ChangeReason.REQUIRED_BY:
            return f"{self.feature.value} {verb}: required by {self.cause}"
        if self.reason == ChangeReason.REQUIRES:
            return f"{self.feature.value} {verb}: requires {self.cause}"
        return f"{self.feature.value} {verb}"


class Rejection(BaseModel):
    """Why an enable request was refused.  The state was not touched."""

    model_config = _VALUE_CONFIG

    feature: FeatureKey
    blocking: Tuple[FeatureKey, ...] = Field(
        ..., min_length=1, description="Closure members the target does not support."
    )
    message: str

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


class LanguageChange(BaseModel):
    """Switch to a new language (and one of its frameworks)."""

    model_config = _VALUE_CONFIG

    kind: Literal["language"] = "language"
    language: Language
    framework: Framework


class FrameworkChange(BaseModel):
    """Switch framework while keeping the current language."""

    model_config = _VALUE_CONFIG

    kind: Literal["framework"] = "framework"
    framework: Framework


class FeatureToggle(BaseModel):
    """Explicit user toggle of one feature."""

    model_config = _VALUE_CONFIG

    kind: Literal["toggle"] = "toggle"
    feature: FeatureKey
    enabled: bool


Mutation = Union[LanguageChange, FrameworkChange, FeatureToggle]


class ResolutionResult(BaseModel):
    """
    Output of one resolver call.

    On success ``rejection`` is ``None`` and ``state`` satisfies the engine
    invariant for ``target``.  On rejection ``state`` is the input state,
    ``changes`` is empty and ``target`` is the input target.
    """

    model_config = _VALUE_CONFIG

    state: ProjectFeatureState
    target: Target
    changes: Tuple[FeatureChange, ...] = ()
    rejection: Optional[Rejection] = None

    @property
    def accepted(self) -> bool:
        return self.rejection is None

    @property
    def enabled_features(self) -> List[FeatureKey]:
        return [c.feature for c in self.changes if c.to_value]

    @property
    def disabled_features(self) -> List[FeatureKey]:
        return [c.feature for c in self.changes if not c.to_value]


# ---------------------------------------------------------------------------
# Project document
# ---------------------------------------------------------------------------


class ProjectDocument(BaseModel):
    """The slice of a designer project the engine reads and writes."""

    model_config = _SHARED_CONFIG

    name: str = Field(default="project")
    target: Target
    features: ProjectFeatureState = Field(default_factory=ProjectFeatureState.all_disabled)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "targetConfig": {
                "language": self.target.language.value,
                "framework": self.target.framework.value,
            },
            "features": self.features.to_dict(),
        }


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "FeatureKey",
    "FeatureCategory",
    "Language",
    "Framework",
    "ChangeReason",
    "FeatureInfo",
    "LanguageInfo",
    "FrameworkInfo",
    "CatalogDefinition",
    "Target",
    "ProjectFeatureState",
    "FeatureChange",
    "Rejection",
    "LanguageChange",
    "FrameworkChange",
    "FeatureToggle",
    "Mutation",
    "ResolutionResult",
    "ProjectDocument",
]
