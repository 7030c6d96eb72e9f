"""Version lookup for the unikit package."""

import tomllib
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as distribution_version
from pathlib import Path

DISTRIBUTION = "unikit"
UNKNOWN_VERSION = "0.0.0"

# src/unikit/_version.py -> project root
_PYPROJECT = Path(__file__).resolve().parents[2] / "pyproject.toml"


def _source_tree_version() -> str | None:
    if not _PYPROJECT.is_file():
        return None
    with open(_PYPROJECT, "rb") as f:
        project = tomllib.load(f).get("project", {})
    if project.get("name") != DISTRIBUTION:
        return None
    return project.get("version")


def get_version() -> str:
    """
    Return the unikit version.

    A source checkout reports the version in its pyproject.toml, so an
    editable install never shows stale metadata. Otherwise the installed
    distribution's metadata is used.
    """
    version = _source_tree_version()
    if version:
        return version
    try:
        return distribution_version(DISTRIBUTION)
    except PackageNotFoundError:
        return UNKNOWN_VERSION
