"""Exception types raised by batchsigner.

Every failure in the signing pipeline is terminal for the call that raised it.
Callers (the CLI and the HTTP handlers) decide how to present it.
"""


class BatchSignerError(Exception):
    """Base class for all batchsigner errors."""


class MalformedHashError(BatchSignerError):
    """A transaction hash string is not valid even-length hex."""

    def __init__(self, message: str, index: int | None = None) -> None:
        super().__init__(message)
        self.index = index


class InvalidPrivateKeyError(BatchSignerError):
    """Private key bytes do not form a valid secp256k1 scalar."""


class InvalidDigestError(BatchSignerError):
    """The digest handed to the signer is not exactly 32 bytes."""


class InvalidSignatureError(BatchSignerError):
    """A serialized signature could not be decoded or recovered."""
