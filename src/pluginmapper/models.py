from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from packaging.version import Version


class PluginKind(str, Enum):
    RESOURCE = "resource"
    LANGUAGE = "language"


@dataclass(frozen=True)
class PluginInfo:
    name: str
    kind: PluginKind
    version: Version


@dataclass(frozen=True)
class MapperPluginSpec:
    name: str
    version: Version
