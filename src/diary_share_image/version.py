"""Version lookup for ``diary-share-image --version``."""

from __future__ import annotations

from functools import lru_cache
from importlib import metadata as importlib_metadata
from pathlib import Path

import tomlkit
from tomlkit.exceptions import TOMLKitError

from diary_share_image.logging_utils import logger

DISTRIBUTION_NAME = "diary-share-image"
UNKNOWN_VERSION = "0.0.0"


def _pyproject_version(pyproject_path: Path) -> str | None:
    """Read ``project.version`` from a pyproject file, if it has one."""
    try:
        doc = tomlkit.parse(pyproject_path.read_text(encoding="utf-8"))
    except (OSError, TOMLKitError) as exc:
        logger.warning("Error reading %s: %s", pyproject_path, exc)
        return None
    version = doc.unwrap().get("project", {}).get("version")
    if isinstance(version, str) and version.strip():
        return version.strip()
    return None


@lru_cache(maxsize=1)
def resolve_project_version() -> str:
    """
    Return the installed version, or the source checkout's version.

    A source checkout run with ``src`` on the path has no distribution
    metadata, so the nearest ``pyproject.toml`` above this file is used.
    """
    try:
        return importlib_metadata.version(DISTRIBUTION_NAME)
    except importlib_metadata.PackageNotFoundError:
        pass

    for parent in Path(__file__).resolve().parents:
        pyproject_path = parent / "pyproject.toml"
        if pyproject_path.is_file():
            return _pyproject_version(pyproject_path) or UNKNOWN_VERSION
    return UNKNOWN_VERSION
