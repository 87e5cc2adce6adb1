from __future__ import annotations

import importlib.metadata
import logging
from typing import Callable, Protocol

from packaging.version import InvalidVersion, Version

from pluginmapper.exceptions import PluginLoadError
from pluginmapper.internal_config import RESOURCE_ENTRY_POINT_GROUP

logger: logging.Logger = logging.getLogger(__name__)


class Provider(Protocol):
    def get_mapping(self, key: str) -> tuple[bytes, str]:
        """Return ``(data, provider_name)`` for *key*.

        ``(b"", "")`` means the provider has no mapping for *key*. Raising
        means the query itself failed.
        """
        ...

    def close(self) -> None: ...


class PluginHost(Protocol):
    def provider(self, name: str, version: Version | None) -> Provider: ...

    def close_provider(self, provider: Provider) -> None: ...


ProviderFactory = Callable[[str, Version | None], Provider]


class HostManagedProvider(object):
    """Provider handed out by a PluginHost, closing it goes back through the host."""

    def __init__(self, provider: Provider, host: PluginHost) -> None:
        self.provider = provider
        self.host = host

    def get_mapping(self, key: str) -> tuple[bytes, str]:
        return self.provider.get_mapping(key)

    def close(self) -> None:
        self.host.close_provider(self.provider)


def provider_factory_from_host(host: PluginHost) -> ProviderFactory:
    """Build a ProviderFactory that uses *host* to create providers."""

    def _factory(name: str, version: Version | None) -> Provider:
        try:
            provider = host.provider(name, version)
        except Exception as e:
            desc = name if version is None else f"{name}@{version}"
            raise PluginLoadError(f"load plugin {desc}: {e}") from e

        return HostManagedProvider(provider, host)

    return _factory


class EntryPointPluginHost(object):
    """Load resource providers registered under the ``pluginmapper.resource`` group.

    Each entry point names a zero-argument callable (usually a class) that
    returns an object implementing the Provider protocol.
    """

    group: str
    live_providers: list[Provider]

    def __init__(self, group: str = RESOURCE_ENTRY_POINT_GROUP) -> None:
        self.group = group
        self.live_providers = []

    def _find_entry_point(
        self, name: str, version: Version | None
    ) -> importlib.metadata.EntryPoint:
        # Several distributions may register the same name, pick the one
        # installed at the requested version.
        installed: list[str] = []
        for entry_point in importlib.metadata.entry_points(group=self.group):
            if entry_point.name != name:
                continue
            if version is None:
                return entry_point

            dist = getattr(entry_point, "dist", None)
            dist_version = str(dist.version) if dist is not None else ""
            installed.append(dist_version)
            try:
                if dist_version and Version(dist_version) == version:
                    return entry_point
            except InvalidVersion:
                continue

        if not installed:
            raise PluginLoadError(f"no plugin named '{name}' in group '{self.group}'")
        raise PluginLoadError(
            f"plugin '{name}' is installed at version '{', '.join(installed)}', not '{version}'"
        )

    def provider(self, name: str, version: Version | None) -> Provider:
        entry_point = self._find_entry_point(name, version)

        logger.debug(f"Loading provider {name} from {entry_point.value}")
        provider = entry_point.load()()
        self.live_providers.append(provider)
        return provider

    def close_provider(self, provider: Provider) -> None:
        if provider in self.live_providers:
            self.live_providers.remove(provider)
        provider.close()


def default_provider_factory() -> ProviderFactory:
    return provider_factory_from_host(EntryPointPluginHost())
