"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, zonekit.toml only contains
overrides. An empty file (or none at all) gives a SQLite-backed runtime that
resolves plugins through entry points and the local plugin directory.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

from zonekit.domain.descriptor import PluginConfig


class StateConfig(BaseModel):
    """[state] section."""

    model_config = {"frozen": True}

    backend: Literal["memory", "sqlite"] = "sqlite"
    path: Path = Path(".zonekit/state.db")


class LoaderConfig(BaseModel):
    """[loader] section."""

    model_config = {"frozen": True}

    package: str | None = None
    local_dir: Path | None = Path(".zonekit/plugins")
    entry_points: bool = True
    timeout: float | None = Field(default=None, gt=0)


class PluginOverride(BaseModel):
    """[plugins.<id>] section — host-side overrides for one plugin."""

    model_config = {"frozen": True}

    enabled: bool | None = None
    position: str | None = None
    section: str | None = None
    order: int | None = None
    settings: dict[str, Any] = Field(default_factory=dict)

    def apply(self, config: PluginConfig) -> PluginConfig:
        """Merge this override onto *config*; unset fields keep their value."""
        update: dict[str, Any] = {}
        if self.enabled is not None:
            update["enabled"] = self.enabled
        if self.position is not None:
            update["position"] = self.position
        if self.settings:
            update["settings"] = {**config.settings, **self.settings}
        return config.model_copy(update=update) if update else config
