# freezr/inventory/inventory.py
"""
Inventory operations.

Every public method is a complete read-modify-write cycle against the
registry file: the table is re-read from disk, changed in memory and
written back whole. Nothing is cached between calls, so operations from
several Inventory objects (or processes taking turns) compose freely.
Concurrent writers are not coordinated; the last write wins.
"""

import dataclasses
import logging
import os
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional, Set

from ..config import InventoryConfig
from ..errors import InvalidRecordError, MissingLocationError, RegistryExistsError
from . import locator, store
from .artifacts import ArtifactKind, infer_artifact_kind, save_artifact
from .paths import absolute, path_exists, resolve
from .store import Record

logger = logging.getLogger(__name__)


def make_unique_tag(tag: str, taken: Set[str]) -> str:
    """Return ``tag`` or the first of ``tag.1``, ``tag.2``, ... not in ``taken``."""
    if tag not in taken:
        return tag
    n = 1
    while f"{tag}.{n}" in taken:
        n += 1
    return f"{tag}.{n}"


@dataclass
class CheckResult:
    """Outcome of checking one record in Inventory.check()."""
    tag: str
    exists: bool
    full_path: Path


class Inventory:
    """
    Tag-indexed registry of artifact paths.

    Example:
        inv = Inventory()
        inv.make("/proj")
        inv.add("alpha", "data/out.csv", "/proj", extra="first pass")
        inv.get("alpha", "/proj")   # Path("/proj/data/out.csv")

    Location hints may point anywhere inside a registry's directory tree;
    the governing registry is found by walking upwards. When a call omits
    the hint, ``config.default_location`` is used instead.
    """

    def __init__(self, config: Optional[InventoryConfig] = None):
        self.config = config or InventoryConfig()

    @property
    def registry_filename(self) -> str:
        return self.config.registry_filename

    def _location(self, location_hint: Optional[Path | str]) -> Path:
        location = location_hint if location_hint is not None else self.config.default_location
        if location is None:
            raise MissingLocationError("Please provide a location; no default location is available")
        return absolute(location)

    def _timestamp(self) -> str:
        return datetime.now().strftime(self.config.timestamp_format)

    @staticmethod
    def _require_tag(tag: str) -> None:
        if not isinstance(tag, str) or not tag:
            raise InvalidRecordError("Tag must be a non-empty string")

    def find(self, location_hint: Optional[Path | str] = None) -> Path:
        """Return the path of the registry file governing ``location_hint``."""
        return locator.find(self._location(location_hint), registry_filename=self.registry_filename)

    def exists(self, location_hint: Optional[Path | str] = None) -> bool:
        """Whether a registry is reachable from ``location_hint``. Never raises."""
        return locator.exists(
            location_hint,
            default_location=self.config.default_location,
            registry_filename=self.registry_filename,
        )

    def make(self, location: Optional[Path | str] = None) -> Path:
        """
        Create an empty registry at ``location``.

        Raises:
            RegistryExistsError: if a registry is already reachable from
                ``location`` or exists anywhere below it
        """
        return store.create(self._location(location), self.registry_filename)

    def show(self, location_hint: Optional[Path | str] = None, auto_create: bool = False) -> List[Record]:
        """
        Return every record of the registry, freshly read from disk.

        Args:
            location_hint: Where to look for the registry
            auto_create: Create an empty registry at the location if none is
                reachable, instead of raising RegistryNotFoundError
        """
        location = self._location(location_hint)
        registry_path = locator.search(location, self.registry_filename)
        if registry_path is None:
            if not auto_create:
                return store.load(location / self.registry_filename)
            logger.warning(f"There is no inventory at {location}. Making an empty one now.")
            registry_path = store.create(location, self.registry_filename)
        return store.load(registry_path)

    def tags(self, location_hint: Optional[Path | str] = None) -> List[str]:
        """Tags of the registry in insertion order."""
        return [record.tag for record in self.show(location_hint)]

    def add(
        self,
        tag: str,
        filename: Path | str,
        location_hint: Optional[Path | str] = None,
        extra: str = "",
        parent_tag: str = "",
        force: bool = False,
        auto_create: bool = False,
    ) -> str:
        """
        Add a record to the registry.

        Args:
            tag: Identifier for the record
            filename: Artifact path, relative to the registry location or absolute
            location_hint: Where to look for the registry
            extra: Free-text notes; may not contain tabs or line breaks
            parent_tag: Tag of the artifact this one derives from
            force: If the tag is taken, overwrite that record instead of
                adding a new record under a suffixed tag
            auto_create: Deprecated. Create the registry at the location if
                none is reachable

        Returns:
            The tag actually stored, which differs from ``tag`` when it was
            already taken and ``force`` is False
        """
        self._require_tag(tag)
        if filename is None:
            raise InvalidRecordError(f"No filename given for tag '{tag}'")
        filename = os.fspath(filename)
        if not filename:
            raise InvalidRecordError(f"Empty filename given for tag '{tag}'")
        record = Record(
            tag=tag,
            parent_tag=parent_tag,
            date_modified=self._timestamp(),
            filename=filename,
            extra=extra,
        )
        record.validate()

        location = self._location(location_hint)
        if auto_create and not locator.exists(location, registry_filename=self.registry_filename):
            logger.warning(
                "Creating an inventory from add() is deprecated; call Inventory.make() first. "
                f"Making one at {location}."
            )
            store.create(location, self.registry_filename)

        registry_path = locator.find(location, registry_filename=self.registry_filename)
        records = store.load(registry_path)

        full_path = resolve(filename, registry_path.parent)
        if not path_exists(full_path):
            logger.warning(f"The file you're adding, {full_path}, does not exist! Adding it anyway.")

        matches = [i for i, r in enumerate(records) if r.tag == tag]
        if matches and force:
            first = matches[0]
            logger.warning(f"Overwriting a row that currently says: {records[first].to_row()!r}")
            records[first] = record
            if len(matches) > 1:
                logger.warning(f"Dropping {len(matches) - 1} duplicate row(s) for tag '{tag}'")
                records = [r for i, r in enumerate(records) if r.tag != tag or i == first]
        elif matches:
            record.tag = make_unique_tag(tag, {r.tag for r in records})
            logger.warning(f"That tag is already taken. Using {record.tag} instead.")
            records.append(record)
        else:
            records.append(record)

        store.persist(registry_path, records)
        logger.debug(f"Added '{record.tag}' -> {filename} to {registry_path}")
        return record.tag

    def get(
        self,
        tag: str,
        location_hint: Optional[Path | str] = None,
        return_all_fields: bool = False,
    ) -> Optional[Path | Record]:
        """
        Look up a tag.

        Returns:
            The absolute path of the artifact, or the whole record (with the
            filename made absolute) if ``return_all_fields``. None, with a
            warning, if the tag is not present.
        """
        self._require_tag(tag)
        registry_path = self.find(location_hint)
        matches = [r for r in store.load(registry_path) if r.tag == tag]

        if not matches:
            logger.warning(f"Tag '{tag}' is not present in {registry_path}.")
            return None
        if len(matches) > 1:
            logger.warning(
                f"Duplicate tag '{tag}' detected in {registry_path}! This is not supposed to happen "
                "unless the inventory was edited by hand. Using the first match."
            )

        record = matches[0]
        full_path = resolve(record.filename, registry_path.parent)
        if return_all_fields:
            return dataclasses.replace(record, filename=str(full_path))
        return full_path

    def remove(self, tag: str, location_hint: Optional[Path | str] = None) -> int:
        """
        Remove every record with ``tag``.

        Returns:
            Number of records removed. An absent tag is warned about and
            leaves the file untouched.
        """
        self._require_tag(tag)
        registry_path = self.find(location_hint)
        records = store.load(registry_path)

        kept = [r for r in records if r.tag != tag]
        removed = len(records) - len(kept)
        if not removed:
            logger.warning(f"Tag '{tag}' not present in {registry_path}. No action taken.")
            return 0

        store.persist(registry_path, kept)
        logger.debug(f"Removed {removed} record(s) for '{tag}' from {registry_path}")
        return removed

    def check(self, location_hint: Optional[Path | str] = None) -> Optional[List[CheckResult]]:
        """
        Verify that every record points at an existing file or directory.

        Returns:
            One CheckResult per record, or None (with a warning) when no
            registry is reachable. The registry file is never modified.
        """
        location = self._location(location_hint)
        registry_path = locator.search(location, self.registry_filename)
        if registry_path is None:
            logger.warning(f"There is no inventory at {location}.")
            return None

        results = []
        for record in store.load(registry_path):
            full_path = resolve(record.filename, registry_path.parent)
            results.append(CheckResult(tag=record.tag, exists=path_exists(full_path), full_path=full_path))

        missing = [r.tag for r in results if not r.exists]
        if missing:
            logger.warning(f"Some of your inventory items cannot be found: {', '.join(missing)}")
        else:
            logger.info(f"All {len(results)} inventory items in {registry_path} are present.")
        return results

    def transfer(
        self,
        location_hint: Optional[Path | str],
        target_location: Path | str,
        overwrite: bool = False,
        verbose: bool = False,
    ) -> Path:
        """
        Copy every artifact of a registry to a new place with a new registry.

        Artifacts land in ``<target_location>/transferred_files/`` named
        ``<tag><extension>`` (directories just ``<tag>``), beside a registry
        listing them under those names. Copy failures are warned about and
        skipped; their records are still listed.

        Args:
            location_hint: Where to look for the source registry
            target_location: Directory to receive the transferred files
            overwrite: Proceed even if the destination registry exists
            verbose: Log each copied artifact at INFO level

        Returns:
            Path to the new registry file

        Raises:
            RegistryExistsError: if the destination registry exists and
                ``overwrite`` is False
            InvalidRecordError: if a hand-edited source record has a tag that
                cannot be used as a file name; nothing is copied
        """
        source_path = self.find(location_hint)
        transfer_dir = absolute(target_location) / self.config.transfer_dirname
        dest_registry = transfer_dir / self.registry_filename

        if dest_registry.exists():
            if not overwrite:
                raise RegistryExistsError(f"Destination inventory {dest_registry} already exists")
            logger.warning(f"Destination inventory {dest_registry} already exists; overwriting it.")

        self.check(source_path.parent)
        records = store.load(source_path)
        for record in records:
            record.validate()
        transfer_dir.mkdir(parents=True, exist_ok=True)
        log = logger.info if verbose else logger.debug

        transferred = []
        for record in records:
            source = resolve(record.filename, source_path.parent)
            new_name = record.tag if source.is_dir() else record.tag + source.suffix
            target = transfer_dir / new_name
            try:
                if source.is_dir():
                    shutil.copytree(source, target, dirs_exist_ok=True)
                else:
                    shutil.copy2(source, target)
                log(f"Transferred '{record.tag}': {source} -> {target}")
            except OSError as e:
                logger.warning(f"Could not transfer '{record.tag}' from {source}: {e}")
            transferred.append(dataclasses.replace(record, filename=new_name))

        store.persist(dest_registry, transferred)
        log(f"Wrote transferred inventory {dest_registry} ({len(transferred)} records)")
        return dest_registry

    def save_and_add(
        self,
        value: Any,
        tag: Optional[str] = None,
        location_hint: Optional[Path | str] = None,
        extra: str = "",
        parent_tag: str = "",
        kind: Optional[ArtifactKind] = None,
        force: bool = False,
    ) -> str:
        """
        Save ``value`` next to the registry and add it under ``tag``.

        The file goes to ``<registry location>/saved_objects/<tag><ext>``.

        Args:
            value: Object to save
            tag: Identifier; defaults to the artifact kind's name
            location_hint: Where to look for the registry
            extra: Free-text notes
            parent_tag: Tag of the artifact this one derives from
            kind: Serialization to use; inferred from ``value`` if omitted
            force: Overwrite an existing record (and file) with this tag

        Returns:
            The tag actually stored
        """
        kind = kind or infer_artifact_kind(value)
        tag = tag or kind.default_tag
        Record(tag=tag, parent_tag=parent_tag, extra=extra).validate()

        registry_path = self.find(location_hint)
        taken = {r.tag for r in store.load(registry_path)}
        if tag in taken and not force:
            unique = make_unique_tag(tag, taken)
            logger.warning(f"That tag is already taken. Using {unique} instead.")
            tag = unique

        filename = f"{self.config.saved_objects_dirname}/{tag}{kind.extension}"
        save_artifact(value, registry_path.parent / filename, kind)
        return self.add(
            tag,
            filename,
            registry_path.parent,
            extra=extra,
            parent_tag=parent_tag,
            force=force,
        )
