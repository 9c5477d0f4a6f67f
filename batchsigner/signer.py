"""Recoverable secp256k1 signing of transaction hash batches."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from coincurve import PrivateKey, PublicKey

from .encoding import COMPONENT_SIZE
from .errors import (
    BatchSignerError,
    InvalidDigestError,
    InvalidPrivateKeyError,
    InvalidSignatureError,
    MalformedHashError,
)
from .hashing import DIGEST_SIZE, batch_digest, keccak256
from .keys import check_private_key, parse_private_key, validate_private_key
from .metrics import (
    BATCH_SIGNING_DURATION_SECONDS,
    BATCH_SIGNING_ERRORS_TOTAL,
    BATCH_SIGNING_REQUESTS_TOTAL,
    BATCH_SIZE,
)
from .models import PrivateKeyMaterial, RecoverableSignature, SignedBatch
from .types import AddressHex, SignatureHex

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


def _as_key_material(private_key: bytes | PrivateKeyMaterial) -> PrivateKeyMaterial:
    if isinstance(private_key, PrivateKeyMaterial):
        if private_key.is_cleared:
            raise InvalidPrivateKeyError("Private key material has been cleared")
        check_private_key(private_key.secret)
        return private_key
    return validate_private_key(private_key)


def sign_digest(
    digest: bytes,
    private_key: bytes | PrivateKeyMaterial,
) -> RecoverableSignature:
    """Sign a 32-byte digest with ECDSA over secp256k1 in recoverable form.

    The digest is signed as-is, without hashing it again. Nonces come from
    libsecp256k1's RFC 6979 generator, so the same digest and key always give
    the same signature. S is always in the lower half of the curve order.

    Args:
        digest: The 32-byte message digest
        private_key: A 32-byte scalar or PrivateKeyMaterial holding one

    Returns:
        The (r, s, recovery_id) signature

    Raises:
        InvalidDigestError: If digest is not exactly 32 bytes
        InvalidPrivateKeyError: If the key is not a valid non-zero scalar below the curve order

    """
    if len(digest) != DIGEST_SIZE:
        raise InvalidDigestError(f"Digest must be {DIGEST_SIZE} bytes, got {len(digest)}")

    key = _as_key_material(private_key)
    raw = PrivateKey(key.secret).sign_recoverable(digest, hasher=None)

    return RecoverableSignature(
        r=raw[:COMPONENT_SIZE],
        s=raw[COMPONENT_SIZE : 2 * COMPONENT_SIZE],
        recovery_id=raw[2 * COMPONENT_SIZE],
    )


def recover_public_key(digest: bytes, signature: RecoverableSignature) -> bytes:
    """Recover the signer's uncompressed 65-byte public key.

    Raises:
        InvalidDigestError: If digest is not exactly 32 bytes
        InvalidSignatureError: If no public key recovers from the signature

    """
    if len(digest) != DIGEST_SIZE:
        raise InvalidDigestError(f"Digest must be {DIGEST_SIZE} bytes, got {len(digest)}")

    try:
        public_key = PublicKey.from_signature_and_message(
            signature.to_bytes(), digest, hasher=None
        )
    except ValueError as e:
        raise InvalidSignatureError(f"Public key recovery failed: {e}") from e
    return public_key.format(compressed=False)


def public_key_for(private_key: bytes | PrivateKeyMaterial) -> bytes:
    """Return the uncompressed 65-byte public key for a private key."""
    key = _as_key_material(private_key)
    return PrivateKey(key.secret).public_key.format(compressed=False)


def address_for(public_key: bytes) -> AddressHex:
    """Return the 20-byte account address of an uncompressed public key.

    The address is the last 20 bytes of keccak256 over the 64-byte X || Y body.
    """
    if len(public_key) != 65 or public_key[0] != 0x04:
        raise ValueError("Expected a 65-byte uncompressed public key")
    return AddressHex(f"0x{keccak256(public_key[1:])[-20:].hex()}")


def generate_batch_signature(
    txn_hashes: Sequence[str],
    private_key_hex: str,
    strict: bool = False,
) -> SignatureHex:
    """Sign an ordered batch of transaction hashes.

    Args:
        txn_hashes: Transaction hashes as hex strings, usually 0x-prefixed
        private_key_hex: The signer's 32-byte secret key as hex
        strict: Reject hashes that are not exactly 32 bytes

    Returns:
        The 0x-prefixed 65-byte R || S || recovery_id signature

    Raises:
        MalformedHashError: If a hash is not even-length hex
        InvalidPrivateKeyError: If the key is not a valid secp256k1 scalar

    """
    digest = batch_digest(txn_hashes, strict=strict)
    key = parse_private_key(private_key_hex)
    try:
        return sign_digest(digest, key).to_hex()
    finally:
        key.clear()


class BatchSigner:
    """Signs transaction hash batches with one long-lived key."""

    def __init__(self, private_key: PrivateKeyMaterial, strict: bool = False) -> None:
        self._key = private_key
        self._strict = strict
        self._public_key = public_key_for(private_key)
        self._address = address_for(self._public_key)
        self._logger = logging.getLogger(__name__)

    @property
    def public_key(self) -> bytes:
        return self._public_key

    @property
    def address(self) -> AddressHex:
        return self._address

    @property
    def strict(self) -> bool:
        return self._strict

    def digest_batch(self, hashes: Sequence[str]) -> bytes:
        """Return the combined digest a batch would be signed over."""
        return batch_digest(hashes, strict=self._strict)

    def sign_batch(self, hashes: Sequence[str]) -> SignedBatch:
        """
        Sign an ordered batch of transaction hashes.

        Args:
            hashes: Transaction hash hex strings in attestation order

        Returns:
            The combined digest, its signature and the batch size

        Raises:
            MalformedHashError: If a hash string is malformed
            BatchSignerError: If signing fails
        """
        BATCH_SIGNING_REQUESTS_TOTAL.inc()
        start_time = time.perf_counter()

        try:
            digest = self.digest_batch(hashes)
        except MalformedHashError:
            BATCH_SIGNING_ERRORS_TOTAL.labels(error_type="malformed_hash").inc()
            raise

        try:
            signature = sign_digest(digest, self._key)
        except BatchSignerError:
            BATCH_SIGNING_ERRORS_TOTAL.labels(error_type="signing_failed").inc()
            raise
        except ValueError as e:
            # coincurve rejected the input
            BATCH_SIGNING_ERRORS_TOTAL.labels(error_type="signing_failed").inc()
            raise BatchSignerError(f"Signing failed: {e}") from e

        BATCH_SIGNING_DURATION_SECONDS.observe(time.perf_counter() - start_time)
        BATCH_SIZE.observe(len(hashes))
        self._logger.debug(
            f"Signed batch of {len(hashes)} hashes, digest 0x{digest.hex()[:16]}..."
        )
        return SignedBatch(digest=digest, signature=signature, count=len(hashes))

    def recover(self, hashes: Sequence[str], signature: RecoverableSignature) -> bytes:
        """Recover the public key that signed a batch."""
        return recover_public_key(self.digest_batch(hashes), signature)

    def close(self) -> None:
        """Zero the private key; the signer cannot sign afterwards."""
        self._key.clear()
        self._logger.debug("Private key material cleared")
