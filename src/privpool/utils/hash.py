"""Cryptographic hash utilities."""

import hashlib
from typing import Union

HASH_SIZE = 32
ZERO_HASH = b"\x00" * HASH_SIZE


def sha256(data: Union[bytes, str]) -> bytes:
    """
    Compute SHA-256 hash of data.

    Args:
        data: Bytes or string to hash

    Returns:
        bytes: 32-byte SHA-256 hash
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).digest()


def merkle_hash(left: bytes, right: bytes) -> bytes:
    """
    Combine two sibling hashes into their parent.

    Computes SHA-256(left || right). The order of the arguments matters:
    merkle_hash(a, b) != merkle_hash(b, a) for a != b.

    Args:
        left: Left child hash (32 bytes)
        right: Right child hash (32 bytes)

    Returns:
        bytes: Parent hash (32 bytes)

    Raises:
        ValueError: If either child is not a 32-byte value
    """
    if not isinstance(left, bytes) or len(left) != HASH_SIZE:
        raise ValueError("Left hash must be 32 bytes")
    if not isinstance(right, bytes) or len(right) != HASH_SIZE:
        raise ValueError("Right hash must be 32 bytes")

    return sha256(left + right)


def is_zero_hash(value: bytes) -> bool:
    """Return True if every byte of value is zero."""
    return not any(value)


def normalize_hash32(value: bytes) -> bytes:
    """
    Left-pad a 1..32 byte value to exactly 32 bytes.

    Args:
        value: Opaque value of at most 32 bytes

    Returns:
        bytes: The value padded with leading zero bytes

    Raises:
        ValueError: If the value is not bytes, is empty, longer than 32 bytes,
            or consists only of zero bytes
    """
    if not isinstance(value, (bytes, bytearray)):
        raise ValueError(f"Expected bytes, got {type(value).__name__}")
    if len(value) == 0:
        raise ValueError("Value must not be empty")
    if len(value) > HASH_SIZE:
        raise ValueError(f"Value must be at most {HASH_SIZE} bytes, got {len(value)}")
    if is_zero_hash(value):
        raise ValueError("Value must not be zero")
    return bytes(value).rjust(HASH_SIZE, b"\x00")
