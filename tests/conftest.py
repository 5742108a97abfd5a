"""
tests/conftest.py
Shared fixtures for the featureforge test suite.

The built-in catalog is immutable and cached, so engine-level fixtures are
session-scoped.  Raw tables are deep-copied per test so a test can break
them freely.  Project documents are written into pytest's ``tmp_path``.
"""

from __future__ import annotations

import copy
import json
import pathlib
from typing import Any, Callable, Dict, Iterable

import pytest
import yaml

from featureforge.catalog import DEFAULT_TABLES, FeatureCatalog, build_catalog, default_catalog, parse_catalog
from featureforge.engine import FeatureEngine
from featureforge.graph import DependencyGraph
from featureforge.matrix import SupportMatrix
from featureforge.models import FeatureKey, Framework, Language, ProjectFeatureState, Target
from featureforge.resolver import CascadeResolver


# ---------------------------------------------------------------------------
# Engine components
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def catalog() -> FeatureCatalog:
    return default_catalog()


@pytest.fixture(scope="session")
def matrix(catalog: FeatureCatalog) -> SupportMatrix:
    return SupportMatrix(catalog)


@pytest.fixture(scope="session")
def graph(catalog: FeatureCatalog) -> DependencyGraph:
    return DependencyGraph(catalog.dependencies)


@pytest.fixture(scope="session")
def resolver(matrix: SupportMatrix, graph: DependencyGraph) -> CascadeResolver:
    return CascadeResolver(matrix, graph)


@pytest.fixture(scope="session")
def engine(catalog: FeatureCatalog) -> FeatureEngine:
    return FeatureEngine(catalog)


# ---------------------------------------------------------------------------
# Targets
# ---------------------------------------------------------------------------


@pytest.fixture()
def java_spring() -> Target:
    return Target(language=Language.JAVA, framework=Framework.SPRING_BOOT)


@pytest.fixture()
def go_gin() -> Target:
    return Target(language=Language.GO, framework=Framework.GIN)


@pytest.fixture()
def go_chi() -> Target:
    return Target(language=Language.GO, framework=Framework.CHI)


@pytest.fixture()
def rust_axum() -> Target:
    return Target(language=Language.RUST, framework=Framework.AXUM)


# ---------------------------------------------------------------------------
# States
# ---------------------------------------------------------------------------


@pytest.fixture()
def state_of() -> Callable[..., ProjectFeatureState]:
    """``state_of(FeatureKey.X, FeatureKey.Y)`` -> state with exactly those enabled."""

    def _make(*features: FeatureKey) -> ProjectFeatureState:
        return ProjectFeatureState.from_enabled(features)

    return _make


@pytest.fixture()
def empty_state() -> ProjectFeatureState:
    return ProjectFeatureState.all_disabled()


# ---------------------------------------------------------------------------
# Raw catalog tables
# ---------------------------------------------------------------------------


@pytest.fixture()
def tables() -> Dict[str, Any]:
    """A deep copy of the built-in tables that each test can mutate freely."""
    return copy.deepcopy(DEFAULT_TABLES)


@pytest.fixture()
def build_from() -> Callable[..., FeatureCatalog]:
    def _build(raw: Dict[str, Any], strict: bool = True) -> FeatureCatalog:
        return build_catalog(parse_catalog(raw), strict=strict)

    return _build


@pytest.fixture()
def go_with_domain_events(tables: Dict[str, Any], build_from) -> FeatureCatalog:
    """Go gains domainEvents in its base set, so gin/chi's removal of it is real."""
    tables["languages"]["go"]["supported_features"].append("domainEvents")
    return build_from(tables)


# ---------------------------------------------------------------------------
# Project documents on disk
# ---------------------------------------------------------------------------


def _project_dict(language: str, framework: str, enabled: Iterable[str], name: str) -> Dict[str, Any]:
    return {
        "name": name,
        "targetConfig": {"language": language, "framework": framework},
        "features": {feature: True for feature in enabled},
    }


@pytest.fixture()
def write_project(tmp_path: pathlib.Path) -> Callable[..., pathlib.Path]:
    """Write a project document (YAML by default) and return its path."""

    def _write(
        language: str,
        framework: str,
        enabled: Iterable[str] = (),
        name: str = "shop",
        filename: str = "project.yaml",
    ) -> pathlib.Path:
        data = _project_dict(language, framework, enabled, name)
        path = tmp_path / filename
        with open(path, "w", encoding="utf-8") as fh:
            if path.suffix == ".json":
                json.dump(data, fh, indent=2)
            else:
                yaml.dump(data, fh, default_flow_style=False)
        return path

    return _write


@pytest.fixture()
def consistent_project_path(write_project) -> pathlib.Path:
    return write_project("go", "chi", ["passwordReset", "mailService", "bulkOperations"])


@pytest.fixture()
def inconsistent_project_path(write_project) -> pathlib.Path:
    """go/gin with an unsupported feature and a missing requirement."""
    return write_project("go", "gin", ["hateoas", "passwordReset"])
