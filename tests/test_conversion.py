"""Tests for handing a file back and forth between Reader and Writer."""
import io
from itertools import count

import pytest
from constdb import Reader, Writer, CDBClosed, CDBIOError, cdb_hash
from constdb.core.layout import initial_slot

from conftest import ITEMS


def wrapping_key() -> bytes:
    """A key alone in its bucket whose second copy wraps to slot 0 of a 4-slot table."""
    for i in count():
        key = f"wrap{i}".encode()
        if initial_slot(cdb_hash(key), 4) == 3:
            return key


class TestReaderToWriter:
    """Test appending to an existing CDB."""

    def test_round_trip(self, sample_db):
        reader = Reader.open(sample_db, writable=True)
        writer = reader.as_writer()
        writer.put(b"hi", b"again")
        writer.put(b"new key", b"new value")
        reader = writer.as_reader()

        for key, value in ITEMS:
            assert reader.get_first(key) == value
        for i in range(128):
            assert reader.get(bytes([i])) == [bytes([i]), bytes([128 - i])]
        assert reader.get(b"25") == [b"a", b"b"]
        assert reader.get_from_pos(b"hi", 1) == b"again"
        assert reader.get_first(b"new key") == b"new value"
        assert len(reader) == 263
        reader.close()

    def test_round_trip_persists(self, sample_db):
        with Reader.open(sample_db, writable=True) as reader:
            with reader.as_writer() as writer:
                writer.put(b"25", b"c")
        with Reader.open(sample_db) as reader:
            assert reader.get(b"25") == [b"a", b"b", b"c"]
            assert len(reader) == 262
            assert list(reader)[-1] == (b"25", b"c")

    def test_reopen_without_changes_is_identical(self, sample_db):
        data = sample_db.read_bytes()
        with Reader.open(sample_db, writable=True) as reader:
            reader.as_writer().close()
        assert sample_db.read_bytes() == data

    def test_duplicate_order_survives_wrapped_slots(self):
        key = wrapping_key()
        writer = Writer(io.BytesIO())
        writer.put(key, b"first")
        writer.put(key, b"second")
        reader = writer.as_reader()
        assert reader.get(key) == [b"first", b"second"]

        writer = reader.as_writer()
        writer.put(b"other", b"value")
        reader = writer.as_reader()
        assert reader.get(key) == [b"first", b"second"]

    def test_empty_database(self):
        writer = Writer(io.BytesIO())
        writer = writer.as_reader().as_writer()
        writer.put(b"k", b"v")
        reader = writer.as_reader()
        assert list(reader) == [(b"k", b"v")]

    def test_reader_is_consumed(self):
        writer = Writer(io.BytesIO())
        writer.put(b"k", b"v")
        reader = writer.as_reader()
        reader.as_writer().finalize()
        with pytest.raises(CDBClosed):
            reader.get(b"k")
        with pytest.raises(CDBClosed):
            reader.as_writer()

    def test_read_only_file(self, sample_db):
        """A file opened read-only cannot be truncated; the reader survives."""
        with Reader.open(sample_db) as reader:
            with pytest.raises(CDBIOError):
                reader.as_writer()
            assert reader.get(b"25") == [b"a", b"b"]
            assert len(reader) == 261
