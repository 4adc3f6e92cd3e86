# tests/test_store.py
"""Tests for registry storage."""

import os
import stat
import tempfile
from pathlib import Path

import pytest

from freezr.errors import InvalidRecordError, RegistryExistsError, RegistryNotFoundError
from freezr.inventory import store
from freezr.inventory.store import HEADER, Record


@pytest.fixture
def temp_dir():
    """Create temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def registry_path(temp_dir):
    """Create an empty registry in the temporary directory."""
    return store.create(temp_dir)


@pytest.fixture
def umask_022():
    """Run with a 022 umask, restoring the previous one afterwards."""
    old = os.umask(0o022)
    yield
    os.umask(old)


def file_mode(path: Path) -> int:
    return stat.S_IMODE(path.stat().st_mode)


class TestRecord:
    """Test Record validation and row conversion."""

    def test_to_row(self):
        """Test a record becomes one tab-separated line."""
        record = Record("alpha", "", "2024_Jan_01|00_00_00", "data/out.csv", "first pass")
        assert record.to_row() == "alpha\t\t2024_Jan_01|00_00_00\tdata/out.csv\tfirst pass"

    def test_from_row_keeps_empty_fields(self):
        """Test empty fields survive parsing."""
        record = Record.from_row("alpha\t\tdate\tf.txt\t")
        assert record == Record("alpha", "", "date", "f.txt", "")

    def test_from_row_wrong_field_count(self):
        """Test rows without five fields are rejected."""
        with pytest.raises(InvalidRecordError):
            Record.from_row("alpha\tf.txt")

    def test_validate_rejects_empty_tag(self):
        """Test an empty tag is invalid."""
        with pytest.raises(InvalidRecordError):
            Record("").validate()

    @pytest.mark.parametrize("extra", ["a\tb", "a\nb", "a\rb"])
    def test_validate_rejects_delimiters(self, extra):
        """Test tabs and line breaks are invalid in a field."""
        with pytest.raises(InvalidRecordError):
            Record("alpha", extra=extra).validate()

    def test_validate_rejects_non_strings(self):
        """Test every field must be a string."""
        with pytest.raises(InvalidRecordError):
            Record("alpha", filename=None).validate()

    @pytest.mark.parametrize("tag", [".", "..", "a/b", "../escaped", "/abs/escaped"])
    def test_validate_rejects_path_tags(self, tag):
        """Test tags that would act as paths are invalid."""
        with pytest.raises(InvalidRecordError):
            Record(tag).validate()

    def test_validate_accepts_dotted_tags(self):
        """Test suffixed tags such as 'alpha.1' stay valid."""
        Record("alpha.1").validate()
        Record(".hidden").validate()


class TestStore:
    """Test create/load/persist."""

    def test_create_writes_header_only(self, registry_path):
        """Test a new registry holds just the header."""
        assert registry_path.name == ".inventory.txt"
        assert registry_path.read_text() == HEADER + "\n"
        assert store.load(registry_path) == []

    def test_create_makes_missing_directory(self, temp_dir):
        """Test create() makes the registry directory."""
        path = store.create(temp_dir / "new" / "project")
        assert path.is_file()

    def test_create_refuses_existing(self, temp_dir, registry_path):
        """Test a second registry in the same directory is refused."""
        with pytest.raises(RegistryExistsError):
            store.create(temp_dir)

    def test_create_refuses_inside_existing(self, temp_dir, registry_path):
        """Test a registry below an existing one is refused."""
        with pytest.raises(RegistryExistsError):
            store.create(temp_dir / "sub" / "dir")

    def test_create_refuses_above_existing(self, temp_dir):
        """Test a registry enclosing an existing one is refused."""
        store.create(temp_dir / "a" / "b")
        with pytest.raises(RegistryExistsError):
            store.create(temp_dir / "a")

    def test_persist_and_load_preserve_order(self, registry_path):
        """Test records load back in insertion order."""
        records = [
            Record("zeta", filename="z.txt"),
            Record("alpha", "zeta", "date", "/abs/a.txt", "notes with spaces"),
        ]
        store.persist(registry_path, records)
        assert store.load(registry_path) == records

    def test_persist_invalid_leaves_file_untouched(self, registry_path):
        """Test a rejected write keeps the previous table."""
        store.persist(registry_path, [Record("alpha", filename="a.txt")])
        before = registry_path.read_bytes()

        with pytest.raises(InvalidRecordError):
            store.persist(registry_path, [Record("beta", extra="a\tb")])

        assert registry_path.read_bytes() == before

    def test_persist_leaves_no_temp_files(self, temp_dir, registry_path):
        """Test the temporary file is renamed away."""
        store.persist(registry_path, [Record("alpha")])
        assert [p.name for p in temp_dir.iterdir()] == [".inventory.txt"]

    def test_new_registry_follows_umask(self, temp_dir, umask_022):
        """Test a new registry gets the usual 0644 mode, not a private one."""
        path = store.create(temp_dir / "proj")
        assert file_mode(path) == 0o644

        store.persist(path, [Record("alpha", filename="a.txt")])
        assert file_mode(path) == 0o644

    def test_persist_keeps_existing_mode(self, registry_path, umask_022):
        """Test rewriting a registry keeps its current permissions."""
        os.chmod(registry_path, 0o664)
        store.persist(registry_path, [Record("alpha", filename="a.txt")])
        assert file_mode(registry_path) == 0o664

    def test_load_missing(self, temp_dir):
        """Test loading an absent registry raises."""
        with pytest.raises(RegistryNotFoundError):
            store.load(temp_dir / ".inventory.txt")

    def test_load_bad_header(self, temp_dir):
        """Test an unexpected header is rejected."""
        path = temp_dir / ".inventory.txt"
        path.write_text("tag\tfilename\n")
        with pytest.raises(InvalidRecordError):
            store.load(path)

    def test_load_reports_malformed_line(self, temp_dir):
        """Test a malformed row is reported with its line number."""
        path = temp_dir / ".inventory.txt"
        path.write_text(HEADER + "\nalpha\t\tdate\ta.txt\t\nbroken\n")
        with pytest.raises(InvalidRecordError, match="line 3"):
            store.load(path)

    def test_load_accepts_crlf(self, temp_dir):
        """Test CRLF line endings are read."""
        path = temp_dir / ".inventory.txt"
        path.write_bytes((HEADER + "\r\nalpha\t\tdate\ta.txt\tx\r\n").encode())
        assert store.load(path) == [Record("alpha", "", "date", "a.txt", "x")]
