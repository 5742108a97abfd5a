# File: featureforge/config.py
"""
featureforge - Engine Configuration
=====================================
Settings that shape how a ``FeatureEngine`` is assembled and how it reports.

Built from a plain mapping (``EngineConfig.from_mapping``) or a JSON/YAML
file (``featureforge.loader.load_config_file``).  Keys may be camelCase or
snake_case.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from featureforge.utils import to_snake_case

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("featureforge.config")

_CONFIG_MODEL_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    extra="forbid",
    frozen=True,
)


class EngineConfig(BaseModel):
    """Engine settings."""

    model_config = _CONFIG_MODEL_CONFIG

    catalog_path: Optional[Path] = Field(
        default=None,
        description="JSON/YAML file replacing the built-in catalog tables.",
    )
    repair_on_load: bool = Field(
        default=True,
        description="Repair inconsistent project documents instead of reporting errors.",
    )
    max_listed_features: int = Field(
        default=3,
        ge=1,
        description="Notifications list up to this many labels, then only a count.",
    )
    strict_catalog: bool = Field(
        default=True,
        description="Treat catalog warnings as errors.",
    )

    @field_validator("catalog_path", mode="before")
    @classmethod
    def _expand_path(cls, v: Any) -> Any:
        if isinstance(v, str):
            if not v.strip():
                return None
            return Path(v).expanduser()
        return v

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "EngineConfig":
        """
        Build a config from a mapping, accepting camelCase keys.

        Raises:
            ValueError: Unknown keys or invalid values.
        """
        normalised = {to_snake_case(str(key)): value for key, value in raw.items()}
        try:
            config = cls.model_validate(normalised)
        except Exception as exc:
            raise ValueError(f"Invalid engine configuration: {exc}") from exc
        logger.debug("Loaded %r", config)
        return config


__all__: List[str] = ["EngineConfig"]
