# freezr/inventory/store.py
"""
Registry storage.

A registry is a tab-separated text table with a header naming the five
record fields and one line per record, in insertion order:

    tag<TAB>parent_tag<TAB>date_modified<TAB>filename<TAB>extra

There is no quoting or escaping. Fields are validated before every write
instead, so anything persisted parses back to the same records.
"""

import logging
import os
import stat
import tempfile
from dataclasses import astuple, dataclass, fields
from pathlib import Path
from typing import Iterable, List

from ..errors import InvalidRecordError, RegistryExistsError, RegistryNotFoundError
from . import locator
from .paths import absolute

logger = logging.getLogger(__name__)

DELIMITER = "\t"
REGISTRY_FILENAME = locator.REGISTRY_FILENAME
_FORBIDDEN = (DELIMITER, "\n", "\r")


@dataclass
class Record:
    """
    One row of a registry.

    Attributes:
        tag: Unique (per registry) short identifier
        parent_tag: Tag this artifact was derived from; never validated
        date_modified: Timestamp of the last add or overwrite
        filename: Artifact path, relative to the registry location or absolute
        extra: Free-text notes
    """
    tag: str
    parent_tag: str = ""
    date_modified: str = ""
    filename: str = ""
    extra: str = ""

    def validate(self) -> None:
        """Raise InvalidRecordError if this record cannot be written as a row."""
        if not self.tag:
            raise InvalidRecordError("Tag must be a non-empty string")
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, str):
                raise InvalidRecordError(f"Field '{f.name}' must be a string, got {type(value).__name__}")
            if any(ch in value for ch in _FORBIDDEN):
                raise InvalidRecordError(
                    f"Field '{f.name}' of tag '{self.tag}' may not contain tabs or line breaks: "
                    "inventories are tab-delimited"
                )
        if self.tag in (".", "..") or any(sep and sep in self.tag for sep in (os.sep, os.altsep)):
            raise InvalidRecordError(f"Tag '{self.tag}' may not be a path: tags name files in transfers")

    def to_row(self) -> str:
        return DELIMITER.join(astuple(self))

    @classmethod
    def from_row(cls, line: str) -> "Record":
        values = line.split(DELIMITER)
        if len(values) != len(FIELDS):
            raise InvalidRecordError(f"Expected {len(FIELDS)} fields, got {len(values)}")
        return cls(*values)


FIELDS = tuple(f.name for f in fields(Record))
HEADER = DELIMITER.join(FIELDS)


def load(registry_path: Path | str) -> List[Record]:
    """
    Read every record from a registry file.

    Raises:
        RegistryNotFoundError: if there is no file at ``registry_path``
        InvalidRecordError: if the header or a row is malformed
    """
    registry_path = Path(registry_path)
    if not registry_path.is_file():
        raise RegistryNotFoundError(f"There is no inventory at {registry_path}")

    with open(registry_path, encoding="utf-8", newline="") as f:
        lines = [line.rstrip("\r") for line in f.read().split("\n")]

    if not lines or lines[0] != HEADER:
        raise InvalidRecordError(f"{registry_path}: missing or unexpected header")

    records = []
    for line_no, line in enumerate(lines[1:], start=2):
        if not line:
            continue
        try:
            records.append(Record.from_row(line))
        except InvalidRecordError as e:
            raise InvalidRecordError(f"{registry_path}, line {line_no}: {e}") from e

    logger.debug(f"Loaded {len(records)} records from {registry_path}")
    return records


def _file_mode(registry_path: Path) -> int:
    """Mode for a rewritten registry: the current one, else what open() would give."""
    if registry_path.exists():
        return stat.S_IMODE(registry_path.stat().st_mode)
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def persist(registry_path: Path | str, records: Iterable[Record]) -> None:
    """
    Replace the registry file with ``records``.

    All records are validated first. The table is written to a temporary
    file beside the registry and renamed over it, so readers never see a
    half-written table.
    """
    registry_path = Path(registry_path)
    records = list(records)
    for record in records:
        record.validate()

    content = "".join(f"{line}\n" for line in [HEADER] + [r.to_row() for r in records])

    fd, tmp_name = tempfile.mkstemp(
        dir=registry_path.parent, prefix=f"{registry_path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        os.chmod(tmp_name, _file_mode(registry_path))
        os.replace(tmp_name, registry_path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise

    logger.debug(f"Wrote {len(records)} records to {registry_path}")


def create(location: Path | str, registry_filename: str = REGISTRY_FILENAME) -> Path:
    """
    Create an empty registry in ``location``.

    Makes ``location`` if needed. Refuses to create a registry that would
    overlap another one, whether that one lives in ``location``, an
    ancestor, or a sub-directory.

    Returns:
        Path to the new registry file
    """
    location = absolute(location)

    existing = locator.search(location, registry_filename)
    if existing is not None:
        raise RegistryExistsError(f"An inventory is already reachable from {location}: {existing}")

    nested = locator.find_nested(location, registry_filename)
    if nested is not None:
        raise RegistryExistsError(f"An inventory already exists below {location}: {nested}")

    location.mkdir(parents=True, exist_ok=True)
    registry_path = location / registry_filename
    persist(registry_path, [])
    logger.info(f"Created inventory at {registry_path}")
    return registry_path
