# freezr/inventory/__init__.py
"""
freezr inventory.

A lightweight registry mapping short tags to files produced by archived
analysis runs, so later scripts can find upstream artifacts without
hard-coded paths. The registry is a tab-separated ``.inventory.txt`` file;
relative filenames are resolved against the directory that holds it.

Example:
    inv = Inventory()
    inv.make("/proj")
    inv.add("alpha", "data/out.csv", "/proj/results/run_1", extra="first pass")

    # Later, from anywhere below /proj:
    path = inv.get("alpha", "/proj/scripts")
"""

from .artifacts import ArtifactKind, infer_artifact_kind, save_artifact, load_artifact
from .inventory import Inventory, CheckResult, make_unique_tag
from .store import Record, REGISTRY_FILENAME

__all__ = [
    "Inventory",
    "CheckResult",
    "Record",
    "REGISTRY_FILENAME",
    "ArtifactKind",
    "infer_artifact_kind",
    "save_artifact",
    "load_artifact",
    "make_unique_tag",
]
