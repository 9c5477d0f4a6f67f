"""Base types, structs and validation helpers for handlers."""

from __future__ import annotations

import logging
from typing import TypeVar

import msgspec
from litestar.exceptions import ValidationException

logger = logging.getLogger(__name__)

T = TypeVar("T")


# Request/Response structs


class BatchRequest(msgspec.Struct, frozen=True):
    """Request struct carrying an ordered batch of transaction hashes."""

    hashes: list[str]


class RecoverRequest(msgspec.Struct, frozen=True):
    """Request struct for recovering the signer of a batch signature."""

    hashes: list[str]
    signature: str


class HealthResponse(msgspec.Struct):
    """Health check response."""

    status: str
    address: str


class PublicKeyResponse(msgspec.Struct):
    """The signer's public identity."""

    public_key: str
    address: str


class DigestResponse(msgspec.Struct):
    """Combined digest of a batch, without signing it."""

    digest: str
    count: int


class SignResponse(msgspec.Struct):
    """Response for batch signing operations.

    Directly serializable by msgspec.
    """

    signature: str
    digest: str
    count: int


class RecoverResponse(msgspec.Struct):
    """Public key recovered from a batch signature."""

    public_key: str
    address: str
    matches: bool


batch_request_decoder = msgspec.json.Decoder(BatchRequest)
recover_request_decoder = msgspec.json.Decoder(RecoverRequest)


# Validation helpers


def decode_body(body: bytes, decoder: msgspec.json.Decoder[T]) -> T:
    """Decode and validate a JSON request body.

    Args:
        body: Raw request body
        decoder: Typed msgspec decoder for the expected struct

    Returns:
        The decoded struct

    Raises:
        ValidationException: If the body is not valid JSON or has the wrong shape

    """
    try:
        return decoder.decode(body)
    except (msgspec.ValidationError, msgspec.DecodeError) as e:
        raise ValidationException(detail=f"Validation error: {e}") from e
