"""Loading and validating the signer's secp256k1 private key."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from .errors import InvalidPrivateKeyError
from .hashing import strip_hex_prefix
from .models import PrivateKeyMaterial

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from .config import Config

logger = logging.getLogger(__name__)

PRIVATE_KEY_SIZE = 32

# Order of the secp256k1 base point; valid secret scalars are 1..n-1
SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

PRIVATE_KEY_ENV_VAR = "BATCHSIGNER_PRIVATE_KEY"


def check_private_key(secret: bytes | bytearray) -> None:
    """Check that secret is a usable secp256k1 scalar.

    Raises:
        InvalidPrivateKeyError: If the length is wrong or the scalar is 0 or >= n

    """
    if len(secret) != PRIVATE_KEY_SIZE:
        raise InvalidPrivateKeyError(
            f"Private key must be {PRIVATE_KEY_SIZE} bytes, got {len(secret)}"
        )
    scalar = int.from_bytes(secret, "big")
    if scalar == 0:
        raise InvalidPrivateKeyError("Private key scalar must not be zero")
    if scalar >= SECP256K1_ORDER:
        raise InvalidPrivateKeyError("Private key scalar must be less than the secp256k1 order")


def validate_private_key(secret: bytes | bytearray) -> PrivateKeyMaterial:
    """Check that secret is a usable secp256k1 scalar and wrap it.

    Args:
        secret: 32 big-endian bytes

    Returns:
        PrivateKeyMaterial holding a private copy of the bytes

    Raises:
        InvalidPrivateKeyError: If the length is wrong or the scalar is 0 or >= n

    """
    check_private_key(secret)
    return PrivateKeyMaterial(bytearray(secret))


def parse_private_key(text: str) -> PrivateKeyMaterial:
    """Parse a hex private key, with or without a 0x prefix.

    Surrounding whitespace is ignored so that key files ending in a newline work.

    Raises:
        InvalidPrivateKeyError: If the text is not 64 hex characters or not a valid scalar

    """
    if not isinstance(text, str):
        raise InvalidPrivateKeyError(f"Private key must be a string, got {type(text).__name__}")

    body = strip_hex_prefix(text.strip())
    if len(body) != 2 * PRIVATE_KEY_SIZE:
        raise InvalidPrivateKeyError(
            f"Private key must be {2 * PRIVATE_KEY_SIZE} hex characters, got {len(body)}"
        )
    try:
        secret = bytearray.fromhex(body)
    except ValueError:
        # the offending text is key material, keep it out of the message
        raise InvalidPrivateKeyError("Private key is not valid hex") from None

    try:
        return validate_private_key(secret)
    finally:
        for i in range(len(secret)):
            secret[i] = 0


def load_private_key_file(path: Path) -> PrivateKeyMaterial:
    """Load a hex private key from a text file."""
    try:
        text = path.read_text()
    except FileNotFoundError:
        raise InvalidPrivateKeyError(f"Private key file not found: {path}") from None
    except OSError as e:
        raise InvalidPrivateKeyError(f"Could not read private key file {path}: {e}") from e

    key = parse_private_key(text)
    logger.info(f"Loaded private key from {path}")
    return key


def load_private_key(
    config: Config,
    environ: Mapping[str, str] | None = None,
) -> PrivateKeyMaterial:
    """Resolve the signer key from configuration.

    The key file from the configuration wins; otherwise the hex key is read
    from the BATCHSIGNER_PRIVATE_KEY environment variable.

    Raises:
        InvalidPrivateKeyError: If no key is configured or the key is invalid

    """
    if config.private_key_file is not None:
        return load_private_key_file(config.private_key_file)

    env = os.environ if environ is None else environ
    key_hex = env.get(PRIVATE_KEY_ENV_VAR)
    if key_hex:
        logger.info(f"Loaded private key from ${PRIVATE_KEY_ENV_VAR}")
        return parse_private_key(key_hex)

    raise InvalidPrivateKeyError(
        f"No private key configured: pass --private-key-file or set {PRIVATE_KEY_ENV_VAR}"
    )
