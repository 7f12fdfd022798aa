"""
Configuration loading for relplan.

    # relplan.yaml
    version: 1
    schema: schema.yaml
    action_key: apiAction
    identity_field: id
    max_depth: null
    log_level: WARNING
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml


DEFAULT_CONFIG_PATH = "relplan.yaml"


@dataclass
class PlannerConfig:
    """Settings shared by the resolver, the planner service and the CLI."""
    version: int = 1
    schema: Optional[str] = None  # path to the schema document
    action_key: str = "apiAction"
    identity_field: str = "id"
    max_depth: Optional[int] = None  # None = unbounded nesting
    log_level: str = "WARNING"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PlannerConfig":
        """Create config from dictionary."""
        max_depth = data.get("max_depth")
        return cls(
            version=data.get("version", 1),
            schema=data.get("schema"),
            action_key=data.get("action_key", "apiAction"),
            identity_field=data.get("identity_field", "id"),
            max_depth=int(max_depth) if max_depth is not None else None,
            log_level=str(data.get("log_level", "WARNING")).upper(),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary for YAML serialization."""
        return {
            "version": self.version,
            "schema": self.schema,
            "action_key": self.action_key,
            "identity_field": self.identity_field,
            "max_depth": self.max_depth,
            "log_level": self.log_level,
        }

    def schema_path(self, base: Path | str | None = None) -> Optional[Path]:
        """Schema path, resolved against ``base`` when relative."""
        if not self.schema:
            return None
        path = Path(self.schema)
        if base is not None and not path.is_absolute():
            path = Path(base) / path
        return path

    def save(self, path: Path | str = DEFAULT_CONFIG_PATH) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        content = yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)
        path.write_text(content)


def load_config(path: Path | str = DEFAULT_CONFIG_PATH) -> PlannerConfig | None:
    """Load configuration from YAML file."""
    path = Path(path)
    if not path.exists():
        return None

    data = yaml.safe_load(path.read_text()) or {}
    return PlannerConfig.from_dict(data)
