from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Protocol

from packaging.version import Version

from pluginmapper.exceptions import (
    MappingQueryError,
    ProviderInstantiationError,
    WorkspaceError,
)
from pluginmapper.internal_config import TERRAFORM_CONVERSION_KEY, TF_ALIAS_KEY
from pluginmapper.mapping_files import load_mapping_files
from pluginmapper.models import MapperPluginSpec, PluginInfo, PluginKind
from pluginmapper.provider import Provider, ProviderFactory
from pluginmapper.workspace import Workspace

logger: logging.Logger = logging.getLogger(__name__)


class Mapper(Protocol):
    def get_mapping(self, provider: str) -> bytes:
        """Return the mapping data for *provider*, or ``b""`` if there is none."""
        ...


def latest_resource_plugins(plugins: list[PluginInfo]) -> list[MapperPluginSpec]:
    """Keep one spec per resource plugin name, the highest installed version.

    If we support a mapping in version 1 of a plugin it is unlikely to be gone
    in version 2, so only the latest local version is asked. Users wanting an
    older mapping can remove the newer plugin from their environment.
    """
    latest_versions: dict[str, Version] = {}
    for plugin in plugins:
        if plugin.kind != PluginKind.RESOURCE:
            continue

        current = latest_versions.get(plugin.name)
        if current is None or plugin.version > current:
            if current is not None:
                logger.debug(
                    f"Ignoring {plugin.name} {current} in favour of {plugin.version}"
                )
            latest_versions[plugin.name] = plugin.version

    return [
        MapperPluginSpec(name=name, version=version)
        for name, version in latest_versions.items()
    ]


class PluginMapper(object):
    """Resolve mapping data for a conversion key from files and installed plugins.

    Plugins are only asked lazily: a plugin whose name matches the requested
    provider is tried first, then the remaining plugins are popped one by one
    until one claims the provider. Every plugin is asked at most once over the
    lifetime of the mapper, and whatever it claims is cached, so later lookups
    for other providers can be answered without asking again.

    Mappings loaded from files take precedence over anything a plugin returns.
    A mapper is not safe to share between threads.
    """

    provider_factory: ProviderFactory
    conversion_key: str
    plugins: list[MapperPluginSpec]
    entries: dict[str, bytes]

    def __init__(
        self,
        workspace: Workspace,
        provider_factory: ProviderFactory,
        conversion_key: str,
        mappings: list[str] | None = None,
    ) -> None:
        if provider_factory is None:
            raise ValueError("provider_factory must not be None")
        if workspace is None:
            raise ValueError("workspace must not be None")

        # Ask the workspace for everything installed so that, for example, a
        # terraform conversion finds the aws mapping just by having the aws
        # plugin available, without it being named anywhere.
        try:
            all_plugins = workspace.get_plugins()
        except Exception as e:
            raise WorkspaceError(f"could not get plugins: {e}") from e

        self.provider_factory = provider_factory
        self.conversion_key = conversion_key
        # The conversion might never ask for a mapping, so plugins are not
        # started here.
        self.plugins = latest_resource_plugins(all_plugins)
        # File mappings fail early if unreadable, and are never overwritten.
        self.entries = load_mapping_files(list(mappings or []))
        logger.debug(
            f"Mapper for '{conversion_key}' has {len(self.plugins)} candidate plugins"
            f" and {len(self.entries)} file mappings"
        )

    @contextmanager
    def _open_provider(self, spec: MapperPluginSpec) -> Iterator[Provider]:
        try:
            provider = self.provider_factory(spec.name, spec.version)
        except Exception as e:
            # Failing to start a provider is fatal rather than skipped.
            raise ProviderInstantiationError(
                f"could not create provider '{spec.name}': {e}"
            ) from e

        try:
            yield provider
        finally:
            try:
                provider.close()
            except Exception as e:
                logger.warning(f"Failed to close provider '{spec.name}': {e}")

    def _query_provider(self, spec: MapperPluginSpec, key: str) -> tuple[bytes, str]:
        with self._open_provider(spec) as provider:
            try:
                data, mapped_provider = provider.get_mapping(key)
            except Exception as e:
                raise MappingQueryError(
                    f"could not get mapping for provider '{spec.name}': {e}"
                ) from e

        if mapped_provider and data:
            return data, mapped_provider

        # Only the bytes reach the converter, which reads empty as "no
        # mapping", so a name without data is no mapping either.
        if mapped_provider and not data:
            logger.warning(
                f"provider '{spec.name}' returned empty data but a filled provider name "
                f"'{mapped_provider}' for '{key}', this is unexpected behaviour assuming no mapping"
            )
        return b"", ""

    def _get_mapping_for_plugin(self, spec: MapperPluginSpec) -> tuple[bytes, str]:
        """Ask one plugin for its mapping, returning ``(data, provider_name)``.

        When looking up "terraform" and getting nothing back this also asks for
        "tf", since tfbridge providers originally only answered to "tf".
        """
        logger.debug(f"Asking {spec.name} {spec.version} for a '{self.conversion_key}' mapping")
        data, mapped_provider = self._query_provider(spec, self.conversion_key)
        if mapped_provider:
            return data, mapped_provider

        # TODO: remove once bridged providers answer to "terraform" as well as "tf".
        if self.conversion_key == TERRAFORM_CONVERSION_KEY:
            return self._query_provider(spec, TF_ALIAS_KEY)

        return b"", ""

    def _record(self, data: bytes, mapped_provider: str) -> None:
        if not mapped_provider:
            return
        if not data:
            raise RuntimeError(
                f"_get_mapping_for_plugin returned empty data but non-empty provider name, {mapped_provider}"
            )
        # first one wins
        if mapped_provider not in self.entries:
            logger.debug(f"Caching mapping for {mapped_provider}")
            self.entries[mapped_provider] = data

    def _pop_matching_plugin(self, provider: str) -> MapperPluginSpec | None:
        for index, spec in enumerate(self.plugins):
            if spec.name == provider:
                # order doesn't matter, swap with the last spec and drop it
                self.plugins[index] = self.plugins[-1]
                self.plugins.pop()
                return spec
        return None

    def get_mapping(self, provider: str) -> bytes:
        entry = self.entries.get(provider)
        if entry is not None:
            return entry

        # Plugin names usually match the provider they map, so try that
        # plugin before searching through all of them.
        spec = self._pop_matching_plugin(provider)
        if spec is not None:
            data, mapped_provider = self._get_mapping_for_plugin(spec)
            self._record(data, mapped_provider)
            if mapped_provider and mapped_provider == provider:
                return data

        # Fall back to popping plugins until one claims this provider. This
        # assumes only one plugin provides a mapping for each provider, and
        # the first answer is kept if that turns out to be wrong.
        while self.plugins:
            spec = self.plugins.pop()
            data, mapped_provider = self._get_mapping_for_plugin(spec)
            self._record(data, mapped_provider)
            if mapped_provider and mapped_provider == provider:
                return data

        logger.debug(f"No mapping found for {provider}")
        return b""
