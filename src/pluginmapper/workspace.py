from __future__ import annotations

import importlib.metadata
import logging
from typing import Protocol

from packaging.version import InvalidVersion, Version

from pluginmapper.internal_config import (
    LANGUAGE_ENTRY_POINT_GROUP,
    RESOURCE_ENTRY_POINT_GROUP,
)
from pluginmapper.models import PluginInfo, PluginKind

logger: logging.Logger = logging.getLogger(__name__)


class Workspace(Protocol):
    """The part of the plugin workspace the mapper needs: what is installed."""

    def get_plugins(self) -> list[PluginInfo]: ...


class EntryPointWorkspace(object):
    """List plugins installed as Python distributions exposing entry points."""

    groups: dict[PluginKind, str]

    def __init__(self, groups: dict[PluginKind, str] | None = None) -> None:
        self.groups = (
            groups
            if groups is not None
            else {
                PluginKind.RESOURCE: RESOURCE_ENTRY_POINT_GROUP,
                PluginKind.LANGUAGE: LANGUAGE_ENTRY_POINT_GROUP,
            }
        )

    def get_plugins(self) -> list[PluginInfo]:
        plugins: list[PluginInfo] = []
        for kind, group in self.groups.items():
            for entry_point in importlib.metadata.entry_points(group=group):
                plugin_version = _entry_point_version(entry_point)
                if plugin_version is None:
                    continue
                plugins.append(
                    PluginInfo(name=entry_point.name, kind=kind, version=plugin_version)
                )
        return plugins


def _entry_point_version(
    entry_point: importlib.metadata.EntryPoint,
) -> Version | None:
    dist = getattr(entry_point, "dist", None)
    if dist is None:
        logger.warning(
            f"Skipping plugin {entry_point.name}: no distribution metadata available"
        )
        return None
    try:
        return Version(dist.version)
    except InvalidVersion:
        logger.warning(
            f"Skipping plugin {entry_point.name}: invalid version '{dist.version}'"
        )
        return None


def default_workspace() -> Workspace:
    """Return the workspace backed by the installed Python distributions."""
    return EntryPointWorkspace()
