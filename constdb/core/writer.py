"""Build (or append to) a constant database."""
import io
import os
import sys
from typing import List, Tuple

from .codec import ensure_bytes, pack_pair
from .errors import CDBClosed, CDBIOError, CDBTooLarge, CDBTooSmall
from .hashing import cdb_hash
from .layout import (EMPTY_SLOT, HEADER_SIZE, MAX_OFFSET, NUM_BUCKETS, PAIR_SIZE,
                     bucket_of, initial_slot, slot_count)
from .reader import Reader
from ..utils.config import Config


class Writer:
    """
    Append records to a CDB, then lay out its hash tables.

    Records go to disk as they are put; their (hash, position) pairs are kept
    in memory, one list per bucket, because a bucket's table size is only
    known once every record is in. finalize() writes the 256 tables after
    the records and fills in the header.

    Example:
        with Writer.open('passwords.cdb') as cdb:
            cdb.put(b'letmein', b'10')
        # leaving the block finalizes the file
    """

    def __init__(self, file, index: List[List[Tuple[int, int]]] = None, owns_file: bool = False):
        """
        Args:
            file: seekable, writable binary stream.
            index: per-bucket (hash, position) lists to resume from. When
                omitted the stream is reset to an empty CDB.
            owns_file: close the stream when this writer is closed.
        """
        self.file = None
        self._owns_file = owns_file
        self.finalized = False

        try:
            if index is None:
                # Placeholder header, overwritten by finalize().
                file.seek(0)
                file.write(b'\0' * HEADER_SIZE)
                file.truncate()
                index = [[] for _ in range(NUM_BUCKETS)]
            self.end = file.seek(0, os.SEEK_END)
        except OSError as e:
            raise CDBIOError(f"Cannot prepare CDB for writing: {e}") from e

        if len(index) != NUM_BUCKETS:
            raise ValueError(f"index must have {NUM_BUCKETS} buckets, got {len(index)}")
        if self.end < HEADER_SIZE:
            raise CDBTooSmall(self.end)
        self.index = index
        self.file = file

    @classmethod
    def open(cls, path) -> 'Writer':
        """Create (or overwrite) the file at path and write a new CDB into it."""
        try:
            file = open(path, 'w+b')
        except OSError as e:
            raise CDBIOError(f"Could not open {path}: {e}") from e
        try:
            return cls(file, owns_file=True)
        except Exception:
            file.close()
            raise

    @classmethod
    def new_with_index(cls, file, index, owns_file: bool = False) -> 'Writer':
        """Resume writing a CDB whose hash tables were read back into index."""
        return cls(file, index=[list(entries) for entries in index], owns_file=owns_file)

    def _check_open(self):
        if self.file is None:
            raise CDBClosed("Writer is closed or was converted into a Reader")
        if self.finalized:
            raise CDBClosed("Writer is finalized, no more records can be added")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.close()
        elif self._owns_file and self.file is not None:
            # Leave the failed CDB unfinalized.
            self.file.close()
            self.file = None

    def __del__(self):
        """Warn when a writer is dropped with its hash tables unwritten."""
        try:
            if self.file is not None and not self.finalized:
                print("[Writer] Warning: CDB writer discarded without finalize(), "
                      "hash tables were not written", file=sys.stderr)
        except Exception:
            # Ignore errors during cleanup
            pass

    def put(self, key: bytes, value: bytes):
        """Append value under key. Repeated keys keep every value, in order."""
        self._check_open()
        key = ensure_bytes(key, 'key')
        value = ensure_bytes(value, 'value')

        pos = self.end
        end = pos + PAIR_SIZE + len(key) + len(value)
        if end > MAX_OFFSET:
            raise CDBTooLarge(f"Record at {pos} would end past the 4GB limit of a CDB")

        try:
            # A failed put or finalize may have left the stream past the records.
            self.file.seek(pos)
            self.file.write(pack_pair(len(key), len(value)))
            self.file.write(key)
            self.file.write(value)
        except OSError as e:
            raise CDBIOError(f"Cannot write record at {pos}: {e}") from e

        h = cdb_hash(key)
        self.index[bucket_of(h)].append((h, pos))
        self.end = end

    def _build_table(self, entries: List[Tuple[int, int]]) -> List[Tuple[int, int]]:
        """Place entries, in insertion order, into a linearly probed table."""
        nslots = slot_count(len(entries))
        table = [EMPTY_SLOT] * nslots
        for h, pos in entries:
            slot = initial_slot(h, nslots)
            while table[slot][1]:
                slot = (slot + 1) % nslots
            table[slot] = (h, pos)
        return table

    def finalize(self):
        """
        Write the hash tables after the records, then the header.

        Calling it again once it has succeeded does nothing.
        """
        if self.finalized:
            return
        if self.file is None:
            raise CDBClosed("Writer is closed or was converted into a Reader")

        directory = []
        pos = self.end
        try:
            self.file.seek(self.end)
            for entries in self.index:
                table = self._build_table(entries)
                if pos > MAX_OFFSET:
                    raise CDBTooLarge(f"Hash table at {pos} is past the 4GB limit of a CDB")
                directory.append((pos, len(table)))
                self.file.write(b''.join(pack_pair(h, p) for h, p in table))
                pos += len(table) * PAIR_SIZE
            # Drop leftovers of an earlier failed put or finalize.
            self.file.truncate()

            self.file.seek(0)
            self.file.write(b''.join(pack_pair(p, n) for p, n in directory))
            self.file.flush()
            if Config.FSYNC_ON_FINALIZE:
                self._fsync()
        except OSError as e:
            raise CDBIOError(f"Cannot write hash tables: {e}") from e

        self.finalized = True
        self.index = None

    def _fsync(self):
        try:
            fileno = self.file.fileno()
        except (AttributeError, io.UnsupportedOperation):
            # In-memory stream, nothing to sync
            return
        os.fsync(fileno)

    def as_reader(self) -> Reader:
        """
        Finalize and hand the underlying file over to a Reader.

        This Writer is unusable afterwards.
        """
        if self.file is None:
            raise CDBClosed("Writer was already converted into a Reader")
        self.finalize()
        file, owns_file = self.file, self._owns_file
        self.file = None
        return Reader(file, owns_file=owns_file)

    def close(self):
        """Finalize, and close the file if it was opened by Writer.open()."""
        if self.file is None:
            return
        self.finalize()
        if self._owns_file:
            self.file.close()
        self.file = None
