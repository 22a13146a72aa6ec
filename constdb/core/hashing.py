"""DJB hash function shared by the reader and the writer."""


def cdb_hash(data: bytes) -> int:
    """
    Hash a byte string the way cdb does.

    It is ``h = ((h << 5) + h) ^ c`` with a starting hash of 5381, truncated
    to 32 bits after every step.
    """
    h = 5381
    for c in data:
        h = (((h << 5) + h) ^ c) & 0xffffffff
    return h
