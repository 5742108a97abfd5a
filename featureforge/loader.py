# File: featureforge/loader.py
"""
featureforge - Document Loading
=================================
Reads catalog files, engine config files and project documents from JSON or
YAML and parses them into validated models.

Project documents come in two shapes.  The flat form::

    name: shop
    language: go
    framework: chi          # optional, defaults to the language's first
    features:
      password_reset: true  # camelCase or snake_case keys
      mailService: true

and the nested form a designer project is saved with::

    {"name": "shop",
     "targetConfig": {"language": "go", "framework": "chi"},
     "features": {"passwordReset": true, "mailService": true}}

Catalog files use the same layout as ``catalog.DEFAULT_TABLES``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from featureforge.catalog import FeatureCatalog, build_catalog, default_catalog, parse_catalog
from featureforge.config import EngineConfig
from featureforge.models import FeatureKey, Framework, Language, ProjectDocument, Target
from featureforge.utils import parse_enum_value, parse_feature_key

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("featureforge.loader")

_PROJECT_KEYS = frozenset({"name", "language", "framework", "features", "targetConfig", "target_config"})


# ---------------------------------------------------------------------------
# File readers
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    """Load and parse a JSON file. Raises ValueError on parse errors."""
    try:
        text: str = path.read_text(encoding="utf-8")
        data: Any = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a JSON object at top level, got {type(data).__name__}."
        )
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML file. Raises ValueError on parse errors."""
    try:
        text: str = path.read_text(encoding="utf-8")
        data: Any = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a YAML mapping at top level, got {type(data).__name__}."
        )
    return data


def load_document(path: Path) -> Dict[str, Any]:
    """
    Load a JSON or YAML document.

    Dispatches based on file extension.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    if not path.is_file():
        raise ValueError(f"Path is not a file: {path}")

    suffix: str = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        return _load_yaml_file(path)
    elif suffix == ".json":
        return _load_json_file(path)
    else:
        logger.info("Unknown extension '%s', trying JSON then YAML.", suffix)
        try:
            return _load_json_file(path)
        except ValueError:
            return _load_yaml_file(path)


def save_document(document: ProjectDocument, path: Path) -> Path:
    """Write ``document`` as JSON, or YAML for ``.yaml``/``.yml`` paths."""
    path = Path(path)
    data: Dict[str, Any] = document.to_dict()
    if path.suffix.lower() in (".yaml", ".yml"):
        text: str = yaml.safe_dump(data, sort_keys=False)
    else:
        text = json.dumps(data, indent=2) + "\n"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    logger.info("Wrote project document to %s", path)
    return path


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------


def parse_project(
    raw: Mapping[str, Any],
    catalog: Optional[FeatureCatalog] = None,
) -> ProjectDocument:
    """
    Parse a raw project mapping into a ``ProjectDocument``.

    The target is *not* checked against the catalog here beyond defaulting
    the framework; ``FeatureEngine.check_project`` reports mismatches.

    Raises:
        ValueError: Missing language, unknown keys or unknown feature names.
    """
    catalog = catalog or default_catalog()

    unknown: List[str] = sorted(str(k) for k in raw if k not in _PROJECT_KEYS)
    if unknown:
        raise ValueError(f"Unknown project keys: {', '.join(unknown)}")

    target_data: Mapping[str, Any] = raw.get("targetConfig") or raw.get("target_config") or raw
    language_name: Any = target_data.get("language")
    if not language_name:
        raise ValueError("Project document has no 'language'.")
    language: Language = parse_enum_value(Language, str(language_name))

    framework_name: Any = target_data.get("framework")
    if framework_name:
        framework: Framework = parse_enum_value(Framework, str(framework_name))
    else:
        frameworks = catalog.language_frameworks.get(language, ())
        if not frameworks:
            raise ValueError(f"Language '{language.value}' has no frameworks.")
        framework = frameworks[0]
        logger.debug("No framework given; defaulting to %s.", framework.value)

    raw_features: Any = raw.get("features") or {}
    if not isinstance(raw_features, Mapping):
        raise ValueError(
            f"'features' must be a mapping of feature to bool, got {type(raw_features).__name__}."
        )
    values: Dict[FeatureKey, bool] = {}
    for name, flag in raw_features.items():
        if not isinstance(flag, bool):
            raise ValueError(f"Feature '{name}' must be true or false, got {flag!r}.")
        values[parse_feature_key(str(name))] = flag

    try:
        return ProjectDocument.model_validate(
            {
                "name": raw.get("name") or "project",
                "target": Target(language=language, framework=framework),
                "features": {"values": values},
            }
        )
    except Exception as exc:
        raise ValueError(f"Project validation failed: {exc}") from exc


def load_project_file(path: Path, catalog: Optional[FeatureCatalog] = None) -> ProjectDocument:
    """Load and parse a project document."""
    document: ProjectDocument = parse_project(load_document(path), catalog)
    logger.info(
        "Loaded project '%s' (%s) with %d enabled feature(s).",
        document.name,
        document.target,
        len(document.features.enabled_features()),
    )
    return document


def load_catalog_file(path: Path, strict: bool = True) -> FeatureCatalog:
    """
    Load, validate and freeze a catalog file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: Parse errors; ``CatalogError`` for authoring defects.
    """
    catalog: FeatureCatalog = build_catalog(parse_catalog(load_document(path)), strict=strict)
    logger.info("Loaded catalog from %s: %r", path, catalog)
    return catalog


def load_config_file(path: Path) -> EngineConfig:
    """Load an ``EngineConfig`` from JSON or YAML."""
    return EngineConfig.from_mapping(load_document(path))


__all__: List[str] = [
    "load_document",
    "save_document",
    "parse_project",
    "load_project_file",
    "load_catalog_file",
    "load_config_file",
]
