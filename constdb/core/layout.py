"""On-disk geometry of a constant database.

    +----------------+---------+-------+-------+-----+---------+
    | p0 p1 ... p255 | records | hash0 | hash1 | ... | hash255 |
    +----------------+---------+-------+-------+-----+---------+

The header holds 256 (position, slot count) pairs. Records are
(key length, data length, key, data). Each hash table slot is
(hash, record position); position 0 marks an empty slot.
"""

NUM_BUCKETS = 256
PAIR_SIZE = 8                           # two little-endian u32
HEADER_SIZE = NUM_BUCKETS * PAIR_SIZE   # 2048 bytes
MAX_OFFSET = 0xffffffff                 # positions are u32, so a CDB must fit in 4GB
EMPTY_SLOT = (0, 0)


def bucket_of(h: int) -> int:
    """Header entry (and hash table) a hash belongs to."""
    return h & 0xff


def initial_slot(h: int, nslots: int) -> int:
    """First slot probed for a hash in a table of nslots slots."""
    return (h >> 8) % nslots


def slot_count(nrecords: int) -> int:
    """Hash table size for a bucket holding nrecords (load factor 0.5)."""
    return nrecords << 1
