"""Transaction hash normalization and keccak256 digest chaining.

A batch is committed to by hashing every transaction hash on its own,
concatenating those digests in input order and hashing the concatenation
once more. The resulting 32-byte digest is what the signer signs, so it binds
both the content and the order of the batch.
"""

from __future__ import annotations

import logging
import string
from typing import TYPE_CHECKING

from eth_hash.auto import keccak

from .errors import MalformedHashError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

logger = logging.getLogger(__name__)

DIGEST_SIZE = 32
TX_HASH_SIZE = 32

_HEX_DIGITS = frozenset(string.hexdigits)


def strip_hex_prefix(value: str) -> str:
    """Remove a single leading 0x or 0X prefix."""
    if value[:2] in ("0x", "0X"):
        return value[2:]
    return value


def keccak256(data: bytes) -> bytes:
    """Return the 32-byte Keccak-256 digest of data (pre-standard padding, not SHA3-256)."""
    return keccak(data)


def normalize_hash(hash_str: str, strict: bool = False) -> bytes:
    """Decode one transaction hash string into raw bytes.

    Args:
        hash_str: Hex string, optionally prefixed with 0x or 0X
        strict: Require exactly 32 bytes (64 hex characters after the prefix)

    Returns:
        The decoded bytes

    Raises:
        MalformedHashError: If the string is not even-length hex, or not 32 bytes in strict mode

    """
    if not isinstance(hash_str, str):
        raise MalformedHashError(f"Hash must be a string, got {type(hash_str).__name__}")

    body = strip_hex_prefix(hash_str)
    if len(body) % 2 != 0:
        raise MalformedHashError(f"Hash has odd hex length {len(body)}: {hash_str!r}")
    # bytes.fromhex tolerates whitespace, which is not valid in a hash
    if not _HEX_DIGITS.issuperset(body):
        raise MalformedHashError(f"Hash contains non-hex characters: {hash_str!r}")

    raw = bytes.fromhex(body)
    if strict and len(raw) != TX_HASH_SIZE:
        raise MalformedHashError(
            f"Hash must be {TX_HASH_SIZE} bytes in strict mode, got {len(raw)}"
        )
    return raw


def combine_digests(raw_hashes: Iterable[bytes]) -> bytes:
    """Chain raw transaction hashes into a single 32-byte digest.

    keccak256(keccak256(h0) || keccak256(h1) || ... || keccak256(hn-1))

    An empty batch hashes the empty byte string. A batch of one is still
    hashed twice.
    """
    concatenated = b"".join(keccak256(raw) for raw in raw_hashes)
    return keccak256(concatenated)


def batch_digest(hashes: Sequence[str], strict: bool = False) -> bytes:
    """Normalize every hash string in order and return the combined digest.

    Raises:
        MalformedHashError: With index set to the position of the first bad hash

    """
    raw_hashes = []
    for index, hash_str in enumerate(hashes):
        try:
            raw_hashes.append(normalize_hash(hash_str, strict=strict))
        except MalformedHashError as e:
            raise MalformedHashError(f"Transaction hash {index}: {e}", index=index) from e

    digest = combine_digests(raw_hashes)
    logger.debug(f"Combined {len(raw_hashes)} transaction hashes into 0x{digest.hex()[:16]}...")
    return digest
