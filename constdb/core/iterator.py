"""Sequential cursor over the records of a CDB."""
from typing import Tuple

from .layout import HEADER_SIZE


class ItemIterator:
    """
    Iterate over (key, value) records in storage order.

    The cursor keeps its own position and seeks before every read, so it
    does not care where lookups on the same Reader leave the file.
    Iteration stops at table_start, where the hash tables begin.
    """

    def __init__(self, reader):
        self.reader = reader
        self.pos = HEADER_SIZE

    def __iter__(self):
        return self

    def __next__(self) -> Tuple[bytes, bytes]:
        if self.pos >= self.reader.table_start:
            raise StopIteration
        key, value, self.pos = self.reader._read_record(self.pos)
        return key, value

    def reset(self):
        """Rewind to the first record."""
        self.pos = HEADER_SIZE
