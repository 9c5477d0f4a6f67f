"""batchsigner - recoverable secp256k1 signatures over ordered transaction hash batches."""

__version__ = "0.1.0"

from .encoding import decode_signature, encode_signature  # noqa: E402
from .errors import (  # noqa: E402
    BatchSignerError,
    InvalidDigestError,
    InvalidPrivateKeyError,
    InvalidSignatureError,
    MalformedHashError,
)
from .hashing import batch_digest, combine_digests, keccak256, normalize_hash  # noqa: E402
from .models import PrivateKeyMaterial, RecoverableSignature, SignedBatch  # noqa: E402
from .signer import (  # noqa: E402
    BatchSigner,
    generate_batch_signature,
    recover_public_key,
    sign_digest,
)

__all__ = [
    "BatchSigner",
    "BatchSignerError",
    "InvalidDigestError",
    "InvalidPrivateKeyError",
    "InvalidSignatureError",
    "MalformedHashError",
    "PrivateKeyMaterial",
    "RecoverableSignature",
    "SignedBatch",
    "__version__",
    "batch_digest",
    "combine_digests",
    "decode_signature",
    "encode_signature",
    "generate_batch_signature",
    "keccak256",
    "normalize_hash",
    "recover_public_key",
    "sign_digest",
]
