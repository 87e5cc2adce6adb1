from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version


def _get_package_version(name: str) -> str:
    """Return the installed version of *name*, or ``"0"`` if not found."""
    try:
        return _pkg_version(name)
    except PackageNotFoundError:
        return "0"


PLUGINMAPPER_VERSION = _get_package_version("pluginmapper")

# tfbridge providers originally only answered to "tf", newer ones answer the
# same data for both keys.
TERRAFORM_CONVERSION_KEY = "terraform"
TF_ALIAS_KEY = "tf"

RESOURCE_ENTRY_POINT_GROUP = "pluginmapper.resource"
LANGUAGE_ENTRY_POINT_GROUP = "pluginmapper.language"

CONFIG_ENV_VAR = "PLUGINMAPPER_CONFIG"
DEFAULT_CONFIG_NAME = "pluginmapper.json"
HOME_CONFIG_DIR = ".pluginmapper"
HOME_CONFIG_NAME = "config.json"

LOG_FORMAT = "%(relativeCreated)d [%(levelname)s] %(message)s"
