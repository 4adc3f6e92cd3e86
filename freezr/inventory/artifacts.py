# freezr/inventory/artifacts.py
"""
Saving in-memory values as inventory artifacts.

Only two kinds are supported, each with a fixed file format:

- TABULAR: a pandas DataFrame, written as tab-separated text
- BLOB: any other picklable value, written with pickle
"""

import logging
import pickle
from enum import Enum
from pathlib import Path
from typing import Any

import pandas as pd

logger = logging.getLogger(__name__)


class ArtifactKind(Enum):
    """Supported artifact kinds, valued by their file extension."""
    TABULAR = ".tsv"
    BLOB = ".pkl"

    @property
    def extension(self) -> str:
        return self.value

    @property
    def default_tag(self) -> str:
        return self.name.lower()


def infer_artifact_kind(value: Any) -> ArtifactKind:
    """Pick the artifact kind for ``value``: DataFrames are tabular, the rest blobs."""
    if isinstance(value, pd.DataFrame):
        return ArtifactKind.TABULAR
    return ArtifactKind.BLOB


def save_artifact(value: Any, path: Path | str, kind: ArtifactKind) -> Path:
    """
    Write ``value`` to ``path`` in the format of ``kind``.

    Args:
        value: Object to save
        path: Destination file; parent directories are created
        kind: How to serialize ``value``

    Returns:
        The path written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if kind is ArtifactKind.TABULAR:
        if not isinstance(value, pd.DataFrame):
            raise TypeError(f"TABULAR artifacts must be DataFrames, got {type(value).__name__}")
        value.to_csv(path, sep="\t", index=False)
    elif kind is ArtifactKind.BLOB:
        with open(path, "wb") as f:
            pickle.dump(value, f)
    else:
        raise ValueError(f"Unknown artifact kind: {kind}")

    logger.debug(f"Saved {kind.name} artifact to {path}")
    return path


def load_artifact(path: Path | str, kind: ArtifactKind) -> Any:
    """Read back a value written by save_artifact()."""
    if kind is ArtifactKind.TABULAR:
        return pd.read_csv(path, sep="\t")
    with open(path, "rb") as f:
        return pickle.load(f)
