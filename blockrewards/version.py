"""Version info for blockrewards."""

import os
from importlib.metadata import PackageNotFoundError, version

PACKAGE_NAME = "blockrewards"


def get_version() -> str:
    """Installed package version, or BLOCKREWARDS_VERSION when running from a checkout."""
    try:
        return version(PACKAGE_NAME)
    except PackageNotFoundError:
        return os.environ.get("BLOCKREWARDS_VERSION", "0.1.0")
