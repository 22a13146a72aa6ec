"""Read-only access to a constant database."""
import os
from itertools import chain
from typing import List, Tuple

from .codec import ensure_bytes, unpack_pair, unpack_pairs
from .errors import CDBClosed, CDBIOError, CDBTooSmall, CorruptDatabase, KeyNotInCDB
from .hashing import cdb_hash
from .iterator import ItemIterator
from .layout import HEADER_SIZE, NUM_BUCKETS, PAIR_SIZE, bucket_of, initial_slot
from ..utils.config import Config


class Reader:
    """
    Look up and iterate over the records of a CDB.

    The header is parsed once, at construction. A successful lookup costs
    two seeks: one into the bucket's hash table and one to the record.

    Example:
        with Reader.open('passwords.cdb') as cdb:
            cdb.get_first(b'letmein')   # first value, or KeyNotInCDB
            cdb.get(b'letmein')         # every value, in insertion order
            for key, value in cdb:
                ...
    """

    def __init__(self, file, validate: bool = None, owns_file: bool = False):
        """
        Args:
            file: seekable binary stream holding the database.
            validate: check stored lengths and positions before trusting them
                (defaults to Config.VALIDATE_LENGTHS).
            owns_file: close the stream when this reader is closed.
        """
        self.file = file
        self.validate = Config.VALIDATE_LENGTHS if validate is None else validate
        self._owns_file = owns_file

        try:
            self.size = file.seek(0, os.SEEK_END)
        except OSError as e:
            raise CDBIOError(f"Cannot seek in CDB: {e}") from e
        if self.size < HEADER_SIZE:
            raise CDBTooSmall(self.size)

        # Using (position, slot count) pairs, one per bucket.
        self.index: List[Tuple[int, int]] = unpack_pairs(self._read_at(0, HEADER_SIZE))
        if self.validate:
            self._check_index()

        self.table_start = min(position for position, _ in self.index)
        self.length = sum(nslots >> 1 for _, nslots in self.index)

    @classmethod
    def open(cls, path, writable: bool = False, validate: bool = None) -> 'Reader':
        """Open the CDB at path. Pass writable=True to allow as_writer()."""
        try:
            file = open(path, 'r+b' if writable else 'rb')
        except OSError as e:
            raise CDBIOError(f"Could not open {path}: {e}") from e
        try:
            return cls(file, validate=validate, owns_file=True)
        except Exception:
            file.close()
            raise

    def _check_index(self):
        """Every hash table must sit between the header and the end of file."""
        for bucket, (position, nslots) in enumerate(self.index):
            if position < HEADER_SIZE or position + nslots * PAIR_SIZE > self.size:
                raise CorruptDatabase(
                    f"Hash table {bucket} at {position} with {nslots} slots "
                    f"lies outside the file ({self.size} bytes)"
                )

    def _check_open(self):
        if self.file is None:
            raise CDBClosed("Reader is closed or was converted into a Writer")

    def _read_at(self, pos: int, size: int) -> bytes:
        try:
            self.file.seek(pos)
        except OSError as e:
            raise CDBIOError(f"Cannot seek to {pos}: {e}") from e
        return self._read_exact(size)

    def _read_exact(self, size: int) -> bytes:
        try:
            data = self.file.read(size)
        except OSError as e:
            raise CDBIOError(f"Cannot read {size} bytes: {e}") from e
        if len(data) != size:
            raise CorruptDatabase(f"Expected {size} bytes, file ended after {len(data)}")
        return data

    def _read_record_key(self, pos: int) -> Tuple[bytes, int]:
        """
        Read the key of the record at pos.

        Returns (key, data length) and leaves the file at the start of the data.
        """
        if self.validate and (pos < HEADER_SIZE or pos + PAIR_SIZE > self.table_start):
            raise CorruptDatabase(f"Record position {pos} is outside the records area")
        klen, dlen = unpack_pair(self._read_at(pos, PAIR_SIZE))
        if self.validate and pos + PAIR_SIZE + klen + dlen > self.table_start:
            raise CorruptDatabase(
                f"Record at {pos} (key {klen} bytes, data {dlen} bytes) "
                f"runs into the hash tables at {self.table_start}"
            )
        return self._read_exact(klen), dlen

    def _read_record(self, pos: int) -> Tuple[bytes, bytes, int]:
        """Read the record at pos. Returns (key, value, position of next record)."""
        self._check_open()
        key, dlen = self._read_record_key(pos)
        value = self._read_exact(dlen)
        return key, value, pos + PAIR_SIZE + len(key) + dlen

    def __len__(self) -> int:
        """How many (key, value) pairs are in this CDB."""
        return self.length

    def __contains__(self, key) -> bool:
        try:
            self.get_first(key)
        except KeyNotInCDB:
            return False
        return True

    def __iter__(self) -> ItemIterator:
        return self.iterate()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def iterate(self) -> ItemIterator:
        """Return a fresh cursor over (key, value) pairs, in storage order."""
        self._check_open()
        return ItemIterator(self)

    def keys(self) -> List[bytes]:
        """
        Return all keys in storage order.

        Duplicated keys appear once per record.
        """
        return [key for key, _ in self.iterate()]

    def get(self, key: bytes) -> List[bytes]:
        """Return all the values stored under key, in insertion order."""
        values = []
        occurrence = 0
        while True:
            try:
                values.append(self.get_from_pos(key, occurrence))
            except KeyNotInCDB:
                return values
            occurrence += 1

    def get_first(self, key: bytes) -> bytes:
        """Return the first value stored under key."""
        return self.get_from_pos(key, 0)

    def get_from_pos(self, key: bytes, occurrence: int) -> bytes:
        """
        Return the value of the occurrence-th record stored under key.

        Raises KeyNotInCDB when the key has fewer records.
        """
        self._check_open()
        key = ensure_bytes(key, 'key')
        if occurrence < 0:
            raise ValueError(f"occurrence must be >= 0, got {occurrence}")

        h = cdb_hash(key)
        start, nslots = self.index[bucket_of(h)]
        if occurrence >= nslots:
            raise KeyNotInCDB(key, occurrence)

        # Probe from the initial slot to the end of the table, then wrap.
        first = initial_slot(h, nslots)
        matches = 0
        for slot in chain(range(first, nslots), range(first)):
            rec_h, rec_pos = unpack_pair(self._read_at(start + slot * PAIR_SIZE, PAIR_SIZE))
            if rec_h == 0 or rec_pos == 0:
                break
            if rec_h != h:
                continue
            stored_key, dlen = self._read_record_key(rec_pos)
            if stored_key != key:
                continue
            if matches == occurrence:
                return self._read_exact(dlen)
            matches += 1
        raise KeyNotInCDB(key, occurrence)

    def as_writer(self):
        """
        Hand the underlying file over to a Writer to append more records.

        The hash tables are read back into memory and truncated off the file;
        the Writer lays them out again when finalized. The file must be
        writable and truncatable. This Reader is unusable afterwards.
        """
        from .writer import Writer

        self._check_open()
        table_start = max(self.table_start, HEADER_SIZE)
        try:
            self.file.seek(table_start)
            tables = self.file.read()
        except OSError as e:
            raise CDBIOError(f"Cannot read hash tables: {e}") from e
        if len(tables) % PAIR_SIZE:
            if self.validate:
                raise CorruptDatabase(f"Hash tables are {len(tables)} bytes, not a whole number of slots")
            tables = tables[:len(tables) - len(tables) % PAIR_SIZE]

        index = [[] for _ in range(NUM_BUCKETS)]
        for h, pos in unpack_pairs(tables):
            if pos:
                index[bucket_of(h)].append((h, pos))
        # Slot order is not insertion order once probing wraps; record
        # positions are.
        for entries in index:
            entries.sort(key=lambda entry: entry[1])

        try:
            self.file.truncate(table_start)
        except OSError as e:
            raise CDBIOError(f"Cannot truncate CDB to {table_start} bytes: {e}") from e

        file, owns_file = self.file, self._owns_file
        self.file = None
        return Writer.new_with_index(file, index, owns_file=owns_file)

    def close(self):
        """Close the reader, and the file if it was opened by Reader.open()."""
        if self.file is None:
            return
        if self._owns_file:
            self.file.close()
        self.file = None
