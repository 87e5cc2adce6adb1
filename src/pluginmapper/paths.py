from __future__ import annotations

import os
from pathlib import Path

from pluginmapper.internal_config import (
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG_NAME,
    HOME_CONFIG_DIR,
    HOME_CONFIG_NAME,
)


def resolve_config_path(explicit_path: str = "") -> Path | None:
    """Locate the mapper configuration file.

    An explicit path always wins, even when it does not exist, so callers can
    report the missing file. Otherwise the ``PLUGINMAPPER_CONFIG`` environment
    variable, ``./pluginmapper.json`` and ``~/.pluginmapper/config.json`` are
    tried in that order.
    """
    if explicit_path.strip():
        return Path(explicit_path).expanduser().absolute()

    env_path = os.environ.get(CONFIG_ENV_VAR, "").strip()
    if env_path:
        return Path(env_path).expanduser().absolute()

    candidates = [
        Path.cwd().joinpath(DEFAULT_CONFIG_NAME),
        Path.home().joinpath(HOME_CONFIG_DIR, HOME_CONFIG_NAME),
    ]
    for candidate in candidates:
        if candidate.is_file():
            return candidate.absolute()

    return None
