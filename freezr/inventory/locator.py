# freezr/inventory/locator.py
"""
Registry lookup.

A registry governs its directory and everything below it. Lookups start
at a location hint and climb towards the filesystem root, stopping at the
first directory that holds a registry file.
"""

import logging
import os
from pathlib import Path
from typing import Iterator, Optional

from ..errors import MissingLocationError, RegistryNotFoundError
from .paths import absolute

logger = logging.getLogger(__name__)

REGISTRY_FILENAME = ".inventory.txt"


def _ancestors(location: Path) -> Iterator[Path]:
    yield location
    yield from location.parents


def search(location: Path | str, registry_filename: str = REGISTRY_FILENAME) -> Optional[Path]:
    """
    Walk up from ``location`` and return the first registry file found.

    ``location`` may be a file or a directory that does not exist yet;
    neither can hold a registry, so the walk simply moves on to the parent.
    """
    for directory in _ancestors(absolute(location)):
        candidate = directory / registry_filename
        if candidate.is_file():
            return candidate
    return None


def find_nested(location: Path | str, registry_filename: str = REGISTRY_FILENAME) -> Optional[Path]:
    """Return a registry file somewhere below ``location``, if there is one."""
    location = absolute(location)
    if not location.is_dir():
        return None
    for dirpath, _dirnames, filenames in os.walk(location):
        if registry_filename in filenames:
            return Path(dirpath) / registry_filename
    return None


def find(
    location_hint: Optional[Path | str] = None,
    default_location: Optional[Path | str] = None,
    registry_filename: str = REGISTRY_FILENAME,
) -> Path:
    """
    Locate the registry governing ``location_hint``.

    Args:
        location_hint: Where to start looking; falls back to ``default_location``
        default_location: Last known archive destination, if any
        registry_filename: Name of the registry file

    Returns:
        Absolute path to the registry file

    Raises:
        MissingLocationError: if neither location is given
        RegistryNotFoundError: if the walk reaches the root without a hit
    """
    location = location_hint if location_hint is not None else default_location
    if location is None:
        raise MissingLocationError("Please provide a location; no default location is available")

    registry_path = search(location, registry_filename)
    if registry_path is None:
        raise RegistryNotFoundError(f"No inventory found at or above {absolute(location)}")
    logger.debug(f"Using inventory {registry_path}")
    return registry_path


def exists(
    location_hint: Optional[Path | str] = None,
    default_location: Optional[Path | str] = None,
    registry_filename: str = REGISTRY_FILENAME,
) -> bool:
    """Like find(), but answers True/False and never raises."""
    location = location_hint if location_hint is not None else default_location
    if location is None:
        return False
    try:
        return search(location, registry_filename) is not None
    except OSError as e:
        logger.warning(f"Could not search for an inventory from {location}: {e}")
        return False
