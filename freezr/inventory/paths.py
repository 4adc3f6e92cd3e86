# freezr/inventory/paths.py
"""
Path resolution for inventory records.

Filenames are stored verbatim. Relative ones are anchored at the registry
location (the directory holding the registry file) only when read back.
"""

import os
from pathlib import Path


def is_absolute(path: Path | str) -> bool:
    return os.path.isabs(os.fspath(path))


def absolute(path: Path | str) -> Path:
    """Make ``path`` absolute against the working directory, keeping symlinks."""
    return Path(os.path.abspath(os.fspath(path)))


def resolve(filename: Path | str, registry_location: Path | str) -> Path:
    """
    Compute the absolute path a record points to.

    Args:
        filename: Stored filename, relative or absolute
        registry_location: Directory containing the registry file

    Returns:
        ``filename`` unchanged if absolute, else joined onto the location
    """
    if is_absolute(filename):
        return Path(filename)
    return absolute(registry_location) / filename


def path_exists(path: Path | str) -> bool:
    """True for an existing file or directory."""
    return os.path.exists(os.fspath(path))
