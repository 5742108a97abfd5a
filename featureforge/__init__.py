# File: featureforge/__init__.py
"""
featureforge - Feature Compatibility & Dependency Resolution Engine
=====================================================================

Decides which project features a (language, framework) target supports and
keeps a project's feature flags consistent as the target or individual flags
change: unsupported features are switched off, enabling a feature switches
on what it requires, and disabling one switches off what depends on it.

Architecture overview::

    ┌──────────────┐     ┌───────────────┐     ┌──────────────────┐
    │  CLI / Entry │────▶│ FeatureEngine │────▶│  CascadeResolver │
    │   (cli.py)   │     │  (engine.py)  │     │   (resolver.py)  │
    └──────────────┘     └───────┬───────┘     └────────┬─────────┘
                                 │                      │
                    ┌────────────┼────────────┐         │
                    ▼            ▼            ▼         ▼
             ┌──────────┐ ┌───────────┐ ┌───────────┐ ┌──────────┐
             │  loader  │ │  catalog  │ │validators │ │  matrix  │
             │  (.py)   │ │  (.py)    │ │  (.py)    │ │  graph   │
             └──────────┘ └───────────┘ └───────────┘ └──────────┘

Usage::

    # As a library
    from featureforge import FeatureEngine, FeatureKey, ProjectFeatureState, Target
    engine = FeatureEngine.default()
    target = Target(language="go", framework="chi")
    result = engine.enable(ProjectFeatureState.all_disabled(), target, FeatureKey.PASSWORD_RESET)
    result.state.enabled_features()   # (passwordReset, mailService)

    # From the command line
    python -m featureforge matrix -l rust

Public API:
    - FeatureEngine      - Façade over catalog, matrix, graph and resolver
    - FeatureCatalog     - Immutable static tables
    - SupportMatrix      - Support decisions
    - DependencyGraph    - Requirement edges and derived dependents
    - CascadeResolver    - Mutation handling
    - EngineConfig       - Engine settings model
"""

from __future__ import annotations

__version__: str = "1.0.0"
__license__: str = "MIT"

from featureforge.models import (
    CatalogDefinition,
    ChangeReason,
    FeatureCategory,
    FeatureChange,
    FeatureInfo,
    FeatureKey,
    FeatureToggle,
    Framework,
    FrameworkChange,
    FrameworkInfo,
    Language,
    LanguageChange,
    LanguageInfo,
    Mutation,
    ProjectDocument,
    ProjectFeatureState,
    Rejection,
    ResolutionResult,
    Target,
)
from featureforge.errors import CatalogError, DependencyCycleError, TargetMismatchError
from featureforge.validators import ValidationResult, validate_catalog, validate_project_features
from featureforge.catalog import FeatureCatalog, build_catalog, default_catalog, parse_catalog
from featureforge.graph import DependencyGraph
from featureforge.matrix import SupportMatrix
from featureforge.resolver import CascadeResolver
from featureforge.config import EngineConfig
from featureforge.notifications import Notification, build_notifications
from featureforge.loader import load_config_file, load_project_file, parse_project
from featureforge.engine import FeatureEngine
from featureforge.utils import Timer, parse_feature_key, to_snake_case

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    # Version info
    "__version__",
    "__license__",
    # Engine
    "FeatureEngine",
    "EngineConfig",
    "CascadeResolver",
    "SupportMatrix",
    "DependencyGraph",
    # Catalog
    "FeatureCatalog",
    "build_catalog",
    "default_catalog",
    "parse_catalog",
    # Models
    "CatalogDefinition",
    "ChangeReason",
    "FeatureCategory",
    "FeatureChange",
    "FeatureInfo",
    "FeatureKey",
    "FeatureToggle",
    "Framework",
    "FrameworkChange",
    "FrameworkInfo",
    "Language",
    "LanguageChange",
    "LanguageInfo",
    "Mutation",
    "ProjectDocument",
    "ProjectFeatureState",
    "Rejection",
    "ResolutionResult",
    "Target",
    # Errors
    "CatalogError",
    "DependencyCycleError",
    "TargetMismatchError",
    # Validation
    "ValidationResult",
    "validate_catalog",
    "validate_project_features",
    # Notifications
    "Notification",
    "build_notifications",
    # Loading
    "load_config_file",
    "load_project_file",
    "parse_project",
    # Utilities
    "Timer",
    "parse_feature_key",
    "to_snake_case",
]
