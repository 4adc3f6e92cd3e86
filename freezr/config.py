# freezr/config.py
"""
Inventory configuration.

The configuration doubles as the explicit context object for inventory
calls: the "last known archive destination" written by the archiving
orchestrator lives here as ``default_location`` instead of in a global.
"""

import dataclasses
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

CONFIG_ENV_VAR = "FREEZR_CONFIG"
DESTINATION_ENV_VAR = "FREEZR_DESTINATION"
DEFAULT_CONFIG_FILE = "freezr.yaml"


@dataclass(frozen=True)
class InventoryConfig:
    """
    Settings shared by every inventory operation.

    Attributes:
        registry_filename: Name of the registry file inside its directory
        timestamp_format: strftime format for ``date_modified``
        transfer_dirname: Sub-directory written by ``transfer``
        saved_objects_dirname: Sub-directory written by ``save_and_add``
        default_location: Fallback location when a call gives none
    """
    registry_filename: str = ".inventory.txt"
    timestamp_format: str = "%Y_%b_%d|%H_%M_%S"
    transfer_dirname: str = "transferred_files"
    saved_objects_dirname: str = "saved_objects"
    default_location: Optional[Path] = None

    def __post_init__(self):
        if self.default_location is not None and not isinstance(self.default_location, Path):
            object.__setattr__(self, "default_location", Path(self.default_location))
        if not self.registry_filename or os.sep in self.registry_filename:
            raise ValueError(f"Invalid registry filename: {self.registry_filename!r}")

    def with_destination(self, destination: Path | str) -> "InventoryConfig":
        """Return a copy whose default location is ``destination``."""
        return dataclasses.replace(self, default_location=Path(destination))

    @classmethod
    def from_dict(cls, data: dict) -> "InventoryConfig":
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**data)


def load_config(path: Optional[str] = None) -> InventoryConfig:
    """Load configuration from a YAML file.

    Args:
        path: Optional path to config file. Falls back to the FREEZR_CONFIG
            env variable or 'freezr.yaml' in the current directory.

    The FREEZR_DESTINATION env variable, when set, overrides
    ``default_location``.
    """

    config_path = path or os.getenv(CONFIG_ENV_VAR, DEFAULT_CONFIG_FILE)
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {config_path} must contain a mapping")
        config = InventoryConfig.from_dict(data)
    else:
        config = InventoryConfig()

    destination = os.getenv(DESTINATION_ENV_VAR)
    if destination:
        config = config.with_destination(destination)
    return config
