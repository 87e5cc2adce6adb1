#! /bin/env python3
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer

from pluginmapper.config import MapperConfig, load_config
from pluginmapper.exceptions import PluginMapperError
from pluginmapper.internal_config import LOG_FORMAT, PLUGINMAPPER_VERSION
from pluginmapper.mapper import Mapper, PluginMapper, latest_resource_plugins
from pluginmapper.models import PluginKind
from pluginmapper.paths import resolve_config_path
from pluginmapper.provider import default_provider_factory
from pluginmapper.workspace import default_workspace

app: typer.Typer = typer.Typer(add_completion=False)
logger: logging.Logger = logging.getLogger(__name__)


def _configure_logging(log_level: str) -> None:
    _log_level = getattr(logging, log_level.upper(), None)
    if not isinstance(_log_level, int):
        raise typer.BadParameter(f"Invalid log level: {log_level!r}")
    logging.basicConfig(level=_log_level, format=LOG_FORMAT)


def _load_mapper_config(config_name: str) -> MapperConfig:
    config_path = resolve_config_path(config_name)
    if config_path is None:
        return MapperConfig()
    return load_config(config_path)


def build_mapper(config: MapperConfig) -> Mapper:
    return PluginMapper(
        default_workspace(),
        default_provider_factory(),
        config.conversion_key,
        config.mappings,
    )


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"pluginmapper {PLUGINMAPPER_VERSION}")
        raise typer.Exit()


@app.callback()
def callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """Resolve conversion mapping data from mapping files and installed plugins."""


@app.command()
def resolve(
    provider: str = typer.Argument(..., help="Provider to look up mapping data for."),
    key: str = typer.Option(
        "", "--key", "-k", help="Conversion key, e.g. 'terraform'."
    ),
    mapping: Optional[List[str]] = typer.Option(
        None,
        "--mapping",
        "-m",
        help="Mapping file, named after the provider it maps. Repeatable.",
    ),
    config_name: str = typer.Option(
        "", "--config", help="JSON5 configuration file."
    ),
    output: str = typer.Option(
        "", "--output", "-o", help="Write the mapping here instead of stdout."
    ),
    log_level: str = "info",
) -> None:
    """Print the mapping data for PROVIDER."""
    _configure_logging(log_level)

    try:
        config = _load_mapper_config(config_name).merged(
            conversion_key=key, mappings=mapping
        )
        if not config.conversion_key:
            logger.error("No conversion key given, use --key or 'conversionKey'")
            raise typer.Exit(code=1)

        mapper = build_mapper(config)
        data = mapper.get_mapping(provider)
    except PluginMapperError as e:
        logger.error(f"{e}")
        raise typer.Exit(code=1)

    if not data:
        logger.warning(
            f"No '{config.conversion_key}' mapping found for {provider}"
        )
        raise typer.Exit(code=1)

    if output:
        Path(output).write_bytes(data)
        logger.info(f"Wrote {len(data)} bytes of mapping data to {output}")
    else:
        typer.echo(data, nl=False)


@app.command()
def plugins(log_level: str = "info") -> None:
    """List installed plugins, marking the ones asked for mappings with '*'."""
    _configure_logging(log_level)

    try:
        installed = default_workspace().get_plugins()
    except Exception as e:
        logger.error(f"could not get plugins: {e}")
        raise typer.Exit(code=1)

    candidates = {
        (spec.name, spec.version) for spec in latest_resource_plugins(installed)
    }
    for info in sorted(installed, key=lambda item: (item.name, item.version)):
        marker = (
            " *"
            if info.kind == PluginKind.RESOURCE
            and (info.name, info.version) in candidates
            else ""
        )
        typer.echo(f"{info.name}\t{info.kind.value}\t{info.version}{marker}")


def main() -> None:
    app(prog_name="pluginmapper")


if __name__ == "__main__":
    main()
