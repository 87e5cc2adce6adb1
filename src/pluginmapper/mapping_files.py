from __future__ import annotations

import logging
from pathlib import Path

from pluginmapper.exceptions import MappingFileError

logger: logging.Logger = logging.getLogger(__name__)


def mapping_key_for_path(path: str | Path) -> str:
    """Mapping file names are assumed to be the provider key, minus the extension."""
    name = Path(path).name
    dot_index = name.rfind(".")
    if dot_index != -1:
        name = name[:dot_index]
    return name


def load_mapping_files(paths: list[str]) -> dict[str, bytes]:
    """Read every mapping file up front so a bad path fails before any lookup."""
    entries: dict[str, bytes] = {}
    for path in paths:
        try:
            data = Path(path).read_bytes()
        except OSError as e:
            raise MappingFileError(f"could not read mapping file '{path}': {e}") from e

        key = mapping_key_for_path(path)
        logger.debug(f"Loaded {len(data)} bytes of mapping data for {key} from {path}")
        entries[key] = data
    return entries
