"""Batch signing API endpoints."""

from __future__ import annotations

import asyncio
import logging

from litestar import Controller, Request, Response, get, post
from litestar.exceptions import HTTPException, ValidationException
from litestar.status_codes import HTTP_200_OK, HTTP_500_INTERNAL_SERVER_ERROR

from batchsigner.encoding import decode_signature, to_prefixed_hex
from batchsigner.errors import BatchSignerError, InvalidSignatureError, MalformedHashError
from batchsigner.signer import BatchSigner, address_for  # noqa: TC001

from .base import (
    DigestResponse,
    PublicKeyResponse,
    RecoverResponse,
    SignResponse,
    batch_request_decoder,
    decode_body,
    recover_request_decoder,
)

logger = logging.getLogger(__name__)


class BatchSigningController(Controller):  # type: ignore[misc]
    """Batch signing API endpoints."""

    path = "/api/v1/batch"

    @get("/publicKey")  # type: ignore[untyped-decorator]
    async def public_key(self, signer: BatchSigner) -> PublicKeyResponse:
        """GET /api/v1/batch/publicKey - The signer's public key and address."""
        return PublicKeyResponse(
            public_key=to_prefixed_hex(signer.public_key),
            address=signer.address,
        )

    @post("/digest", status_code=HTTP_200_OK)  # type: ignore[untyped-decorator]
    async def digest(self, request: Request, signer: BatchSigner) -> DigestResponse:
        """POST /api/v1/batch/digest - Combined digest of a batch, unsigned."""
        batch = decode_body(await request.body(), batch_request_decoder)
        try:
            digest = signer.digest_batch(batch.hashes)
        except MalformedHashError as e:
            raise ValidationException(detail=str(e)) from e
        return DigestResponse(digest=to_prefixed_hex(digest), count=len(batch.hashes))

    @post("/sign", status_code=HTTP_200_OK)  # type: ignore[untyped-decorator]
    async def sign(
        self,
        request: Request,
        signer: BatchSigner,
    ) -> Response | SignResponse:
        """POST /api/v1/batch/sign - Sign an ordered batch of transaction hashes."""
        batch = decode_body(await request.body(), batch_request_decoder)

        try:
            signed = await asyncio.to_thread(signer.sign_batch, batch.hashes)
        except MalformedHashError as e:
            raise ValidationException(detail=str(e)) from e
        except BatchSignerError as e:
            logger.exception("Signing error")
            raise HTTPException(
                status_code=HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Signing failed: {e}",
            ) from e

        accept_header = request.headers.get("Accept", "")
        if accept_header == "text/plain":
            return Response(
                content=signed.signature_hex,
                status_code=HTTP_200_OK,
                media_type="text/plain",
            )

        return SignResponse(
            signature=signed.signature_hex,
            digest=signed.digest_hex,
            count=signed.count,
        )

    @post("/recover", status_code=HTTP_200_OK)  # type: ignore[untyped-decorator]
    async def recover(self, request: Request, signer: BatchSigner) -> RecoverResponse:
        """POST /api/v1/batch/recover - Recover the key that signed a batch."""
        body = decode_body(await request.body(), recover_request_decoder)

        try:
            signature = decode_signature(body.signature)
            public_key = signer.recover(body.hashes, signature)
        except (MalformedHashError, InvalidSignatureError) as e:
            raise ValidationException(detail=str(e)) from e

        return RecoverResponse(
            public_key=to_prefixed_hex(public_key),
            address=address_for(public_key),
            matches=public_key == signer.public_key,
        )
