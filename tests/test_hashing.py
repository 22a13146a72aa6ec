"""Tests for the hash function, integer codec and layout helpers."""
import pytest
from constdb import cdb_hash, pack, unpack
from constdb.core.codec import ensure_bytes, pack_pair, unpack_pair, unpack_pairs
from constdb.core.layout import HEADER_SIZE, bucket_of, initial_slot, slot_count


class TestHash:
    """Test the DJB hash."""

    def test_known_good_djb_hash(self):
        assert cdb_hash(b"dave") == 2087378131

    def test_djb_correct_wrapping(self):
        assert cdb_hash(b"dave" * 5) == 3529598163

    def test_empty_input_is_seed(self):
        assert cdb_hash(b"") == 5381

    def test_single_byte(self):
        """((5381 << 5) + 5381) ^ ord('a')"""
        assert cdb_hash(b"a") == 177604

    def test_result_fits_in_32_bits(self):
        assert 0 <= cdb_hash(b"\xff" * 1000) <= 0xffffffff

    def test_accepts_bytearray_and_memoryview(self):
        assert cdb_hash(bytearray(b"dave")) == cdb_hash(memoryview(b"dave")) == 2087378131


class TestCodec:
    """Test little-endian u32 packing."""

    def test_pack_is_little_endian(self):
        assert pack(1) == b"\x01\x00\x00\x00"
        assert pack(0x01020304) == b"\x04\x03\x02\x01"

    def test_unpack_inverts_pack(self):
        for value in (0, 1, 2048, 0xdeadbeef, 0xffffffff):
            assert unpack(pack(value)) == value

    def test_pack_rejects_out_of_range(self):
        with pytest.raises(ValueError):
            pack(-1)
        with pytest.raises(ValueError):
            pack(2 ** 32)

    def test_pairs(self):
        assert pack_pair(2048, 2) == pack(2048) + pack(2)
        assert unpack_pair(pack_pair(7, 9)) == (7, 9)
        assert unpack_pairs(pack_pair(1, 2) + pack_pair(3, 4)) == [(1, 2), (3, 4)]

    def test_pack_pair_rejects_out_of_range(self):
        with pytest.raises(ValueError):
            pack_pair(1, 2 ** 32)

    def test_ensure_bytes(self):
        assert ensure_bytes(b"x") == b"x"
        assert ensure_bytes(bytearray(b"x")) == b"x"
        assert ensure_bytes(memoryview(b"x")) == b"x"
        with pytest.raises(TypeError):
            ensure_bytes("x", 'key')


class TestLayout:
    """Test layout geometry."""

    def test_header_size(self):
        assert HEADER_SIZE == 2048

    def test_bucket_is_low_byte(self):
        assert bucket_of(0x12345678) == 0x78

    def test_initial_slot_skips_bucket_byte(self):
        assert initial_slot(0x12345678, 10) == 0x123456 % 10

    def test_half_full_tables(self):
        assert slot_count(0) == 0
        assert slot_count(3) == 6
