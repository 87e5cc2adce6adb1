from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

# for parsing config files that may include comments
import json5

from pluginmapper.exceptions import ConfigError

logger: logging.Logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MapperConfig:
    conversion_key: str = ""
    mappings: list[str] = field(default_factory=list)
    source: Path | None = None

    def merged(self, conversion_key: str = "", mappings: list[str] | None = None) -> MapperConfig:
        """Return a copy with command line values applied on top."""
        return MapperConfig(
            conversion_key=conversion_key or self.conversion_key,
            mappings=[*self.mappings, *(mappings or [])],
            source=self.source,
        )


def load_config(config_path: Path) -> MapperConfig:
    """Load a JSON5 mapper configuration file."""
    if not config_path.is_file():
        raise ConfigError(f"Mapper configuration not found: {config_path}")

    try:
        raw = json5.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigError(f"Invalid mapper configuration {config_path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(
            f"Invalid mapper configuration {config_path}: expected an object"
        )

    conversion_key = raw.get("conversionKey", "")
    if not isinstance(conversion_key, str):
        raise ConfigError(
            f"Invalid mapper configuration {config_path}: 'conversionKey' must be a string"
        )

    mappings = raw.get("mappings", [])
    if not isinstance(mappings, list) or not all(
        isinstance(item, str) for item in mappings
    ):
        raise ConfigError(
            f"Invalid mapper configuration {config_path}: 'mappings' must be a list of paths"
        )

    # relative mapping paths are relative to the config file, not the cwd
    base_dir = config_path.parent
    resolved = [
        str(Path(item) if Path(item).is_absolute() else base_dir.joinpath(item))
        for item in mappings
    ]
    logger.debug(f"Loaded mapper configuration from {config_path}")

    return MapperConfig(
        conversion_key=conversion_key,
        mappings=resolved,
        source=config_path,
    )
