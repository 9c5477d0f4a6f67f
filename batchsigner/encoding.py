"""Canonical serialization of recoverable signatures.

Layout is fixed: R (32 bytes) || S (32 bytes) || recovery_id (1 byte),
rendered as 0x-prefixed lower-case hex.
"""

from __future__ import annotations

from .errors import InvalidSignatureError
from .hashing import strip_hex_prefix
from .models import RecoverableSignature
from .types import SignatureHex

COMPONENT_SIZE = 32
SIGNATURE_SIZE = 2 * COMPONENT_SIZE + 1
SIGNATURE_HEX_LENGTH = 2 + 2 * SIGNATURE_SIZE
MAX_RECOVERY_ID = 3


def to_prefixed_hex(data: bytes) -> str:
    """Render bytes as 0x-prefixed lower-case hex."""
    return f"0x{data.hex()}"


def encode_signature(r: bytes, s: bytes, recovery_id: int) -> SignatureHex:
    """Serialize a signature to its 132-character hex form.

    Args:
        r: 32-byte R component
        s: 32-byte S component
        recovery_id: Recovery identifier, 0..3

    Returns:
        "0x" followed by 130 lower-case hex characters

    Raises:
        ValueError: If a component has the wrong size or recovery_id is out of range

    """
    if len(r) != COMPONENT_SIZE:
        raise ValueError(f"R must be {COMPONENT_SIZE} bytes, got {len(r)}")
    if len(s) != COMPONENT_SIZE:
        raise ValueError(f"S must be {COMPONENT_SIZE} bytes, got {len(s)}")
    if not 0 <= recovery_id <= MAX_RECOVERY_ID:
        raise ValueError(f"recovery_id must be between 0 and {MAX_RECOVERY_ID}, got {recovery_id}")

    return SignatureHex(to_prefixed_hex(r + s + bytes([recovery_id])))


def decode_signature(signature_hex: str) -> RecoverableSignature:
    """Parse a 0x-prefixed 65-byte signature back into its components.

    Raises:
        InvalidSignatureError: If the string is not a well-formed 65-byte signature

    """
    body = strip_hex_prefix(signature_hex)
    if len(body) != 2 * SIGNATURE_SIZE:
        raise InvalidSignatureError(
            f"Signature must be {SIGNATURE_SIZE} bytes ({2 * SIGNATURE_SIZE} hex chars), "
            f"got {len(body)} hex chars"
        )
    try:
        raw = bytes.fromhex(body)
    except ValueError as e:
        raise InvalidSignatureError(f"Signature is not valid hex: {e}") from e
    if len(raw) != SIGNATURE_SIZE:
        raise InvalidSignatureError("Signature contains whitespace")

    recovery_id = raw[-1]
    if recovery_id > MAX_RECOVERY_ID:
        raise InvalidSignatureError(
            f"recovery_id must be between 0 and {MAX_RECOVERY_ID}, got {recovery_id}"
        )
    return RecoverableSignature(
        r=raw[:COMPONENT_SIZE],
        s=raw[COMPONENT_SIZE : 2 * COMPONENT_SIZE],
        recovery_id=recovery_id,
    )
