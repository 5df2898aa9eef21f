"""Locate zonekit.toml by walking up from a start directory.

The ZONEKIT_CONFIG env var, when set, wins over the walk-up.
:class:`~zonekit.config.settings.ZonekitSettings` reads the file found here.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "zonekit.toml"
CONFIG_ENV_VAR = "ZONEKIT_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for zonekit.toml.

    Returns the path to the config file, or None if not found.
    Checks ZONEKIT_CONFIG env var first.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        if p.is_file():
            return p
        return None

    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None
