from __future__ import annotations


class PluginMapperError(Exception):
    """Base class for all pluginmapper domain errors."""


class WorkspaceError(RuntimeError, PluginMapperError):
    """Raised when the installed plugins cannot be listed."""


class MappingFileError(OSError, PluginMapperError):
    """Raised when a user supplied mapping file cannot be read."""


class PluginLoadError(RuntimeError, PluginMapperError):
    """Raised when a plugin host fails to load a provider plugin."""


class ProviderInstantiationError(RuntimeError, PluginMapperError):
    """Raised when the provider factory cannot create a provider."""


class MappingQueryError(RuntimeError, PluginMapperError):
    """Raised when a provider fails to answer a mapping query."""


class ConfigError(ValueError, PluginMapperError):
    """Raised when the mapper configuration file is missing or malformed."""
