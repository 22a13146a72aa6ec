"""Little-endian 32-bit integer encoding used for every on-disk number."""
import struct
from typing import Tuple

_u32 = struct.Struct('<L')
_pair = struct.Struct('<LL')


def pack(value: int) -> bytes:
    """Encode an unsigned 32-bit integer as 4 little-endian bytes."""
    try:
        return _u32.pack(value)
    except struct.error:
        raise ValueError(f"{value} does not fit in an unsigned 32-bit integer") from None


def unpack(data: bytes) -> int:
    """Decode 4 little-endian bytes into an unsigned 32-bit integer."""
    return _u32.unpack(data)[0]


def pack_pair(first: int, second: int) -> bytes:
    """Encode a (u32, u32) pair: header entries, record headers and slots."""
    try:
        return _pair.pack(first, second)
    except struct.error:
        raise ValueError(f"({first}, {second}) does not fit in two unsigned 32-bit integers") from None


def unpack_pair(data: bytes) -> Tuple[int, int]:
    """Decode 8 little-endian bytes into a (u32, u32) pair."""
    return _pair.unpack(data)


def unpack_pairs(data: bytes):
    """Decode a run of (u32, u32) pairs, e.g. the header or a hash table."""
    return list(_pair.iter_unpack(data))


def ensure_bytes(data, what: str = 'value') -> bytes:
    """Accept bytes-like keys and values; reject text."""
    if isinstance(data, bytes):
        return data
    if isinstance(data, (bytearray, memoryview)):
        return bytes(data)
    raise TypeError(f"CDB {what}s must be bytes, not {type(data).__name__}")
