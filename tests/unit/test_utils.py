"""Tests for hashing and encoding utilities."""

import pytest

from privpool.utils.encoding import bytes_to_hex, hex_to_bytes
from privpool.utils.hash import ZERO_HASH, is_zero_hash, normalize_hash32, sha256


class TestHexEncoding:
    """Test hex conversion helpers."""

    def test_bytes_to_hex(self):
        assert bytes_to_hex(b"hello") == "0x68656c6c6f"
        assert bytes_to_hex(b"") == "0x"

    def test_hex_to_bytes_with_and_without_prefix(self):
        assert hex_to_bytes("0x68656c6c6f") == b"hello"
        assert hex_to_bytes("0X68656C6C6F") == b"hello"
        assert hex_to_bytes("68656c6c6f") == b"hello"

    def test_hex_to_bytes_odd_length(self):
        with pytest.raises(ValueError):
            hex_to_bytes("0x123")

    def test_hex_to_bytes_invalid_characters(self):
        with pytest.raises(ValueError):
            hex_to_bytes("0xGGGG")


class TestHashHelpers:
    """Test hash helpers."""

    def test_sha256_accepts_str(self):
        assert sha256("abc") == sha256(b"abc")
        assert len(sha256(b"")) == 32

    def test_zero_hash(self):
        assert is_zero_hash(ZERO_HASH)
        assert is_zero_hash(b"\x00")
        assert not is_zero_hash(b"\x00" * 31 + b"\x01")

    def test_normalize_pads_left(self):
        assert normalize_hash32(b"\x01\x02") == b"\x00" * 30 + b"\x01\x02"
        full = bytes(range(1, 33))
        assert normalize_hash32(full) == full
        assert normalize_hash32(bytearray(b"\x05")) == b"\x00" * 31 + b"\x05"

    @pytest.mark.parametrize("value", [b"", b"\x00" * 8, b"\x01" * 33, "01", None])
    def test_normalize_rejects(self, value):
        with pytest.raises(ValueError):
            normalize_hash32(value)
