# freezr/errors.py
"""
Exception types raised by the inventory.

Each one also derives from the builtin a caller would reach for, so
``except FileNotFoundError`` keeps working around a missing registry.
"""


class InventoryError(Exception):
    """Base class for inventory failures."""


class MissingLocationError(InventoryError, ValueError):
    """No location was given and no default location is configured."""


class InvalidRecordError(InventoryError, ValueError):
    """A record (or a row read from disk) breaks the table format."""


class RegistryNotFoundError(InventoryError, FileNotFoundError):
    """No registry is reachable from the requested location."""


class RegistryExistsError(InventoryError, FileExistsError):
    """A registry already exists where a new one would be written."""
