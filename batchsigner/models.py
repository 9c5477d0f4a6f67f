"""Data classes for batchsigner.

This module contains dataclasses and structured types used across the codebase.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .types import DigestHex, SignatureHex


@dataclass(frozen=True, slots=True)
class RecoverableSignature:
    """A secp256k1 ECDSA signature with its recovery identifier.

    Attributes:
        r: The 32-byte big-endian R component
        s: The 32-byte big-endian S component (low-S normalized)
        recovery_id: Which candidate public key recovers from (digest, r, s), 0..3

    """

    r: bytes
    s: bytes
    recovery_id: int

    def to_bytes(self) -> bytes:
        """Return the 65-byte R || S || recovery_id serialization."""
        return self.r + self.s + bytes([self.recovery_id])

    def to_hex(self) -> SignatureHex:
        """Return the 0x-prefixed hex rendering (132 characters)."""
        from .encoding import encode_signature

        return encode_signature(self.r, self.s, self.recovery_id)


@dataclass(slots=True)
class PrivateKeyMaterial:
    """A secp256k1 secret scalar held in a mutable buffer.

    The buffer can be zeroed with clear() once the key is no longer needed,
    which keeps the secret out of memory for as short a time as possible.
    Construct through batchsigner.keys.validate_private_key or parse_private_key
    so that the scalar range is checked.

    Attributes:
        secret: The 32-byte scalar (read-only property, copies the buffer)

    """

    _secret: bytearray = field(repr=False)

    @property
    def secret(self) -> bytes:
        """Return the scalar bytes for immediate use."""
        if self.is_cleared:
            raise ValueError("private key material has been cleared")
        return bytes(self._secret)

    @property
    def is_cleared(self) -> bool:
        """Whether clear() has already wiped the buffer."""
        return not any(self._secret)

    def clear(self) -> None:
        """Clear the key from memory by zeroing out the bytearray."""
        for i in range(len(self._secret)):
            self._secret[i] = 0


@dataclass(frozen=True, slots=True)
class SignedBatch:
    """Result of signing one ordered batch of transaction hashes.

    Attributes:
        digest: The 32-byte combined keccak256 digest that was signed
        signature: The recoverable signature over digest
        count: Number of transaction hashes in the batch

    """

    digest: bytes
    signature: RecoverableSignature
    count: int

    @property
    def digest_hex(self) -> DigestHex:
        return DigestHex(f"0x{self.digest.hex()}")

    @property
    def signature_hex(self) -> SignatureHex:
        return self.signature.to_hex()
