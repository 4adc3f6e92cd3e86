# freezr - Reproducible analysis archiving with a tag-based artifact inventory
#
# Archived analysis runs leave their outputs scattered across timestamped
# result folders. The inventory records where the important ones are, keyed
# by short tags, so downstream scripts can look them up.
#
# Core concepts:
# - Registry: a tab-separated .inventory.txt governing its directory subtree
# - Record: tag, parent_tag, date_modified, filename, extra
# - Inventory: add/get/remove/show/check/transfer against a registry
# - InventoryConfig: settings plus the default (last archived) location

from .config import InventoryConfig, load_config
from .errors import (
    InventoryError,
    MissingLocationError,
    InvalidRecordError,
    RegistryNotFoundError,
    RegistryExistsError,
)
from .inventory import Inventory, Record, CheckResult, ArtifactKind

__all__ = [
    "Inventory",
    "Record",
    "CheckResult",
    "ArtifactKind",
    "InventoryConfig",
    "load_config",
    "InventoryError",
    "MissingLocationError",
    "InvalidRecordError",
    "RegistryNotFoundError",
    "RegistryExistsError",
]

__version__ = "0.1.0"
