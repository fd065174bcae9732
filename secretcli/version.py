"""
Package version: installed metadata first, then the checkout's pyproject.toml.
"""
from importlib import metadata
from pathlib import Path
from typing import Optional

import tomli

DEFAULT_VERSION = "0.1.0"
PYPROJECT = Path(__file__).resolve().parent.parent / "pyproject.toml"


def _pyproject_version(path: Path) -> Optional[str]:
    try:
        with path.open("rb") as f:
            return tomli.load(f)["project"]["version"]
    except (OSError, KeyError, tomli.TOMLDecodeError):
        return None


def get_version(pyproject: Path = PYPROJECT) -> str:
    """Version of the installed distribution, or of a source checkout"""
    try:
        return metadata.version("secretcli")
    except metadata.PackageNotFoundError:
        return _pyproject_version(pyproject) or DEFAULT_VERSION


__version__ = get_version()
