"""Health check endpoints."""

from __future__ import annotations

from litestar import Controller, get

from batchsigner.signer import BatchSigner  # noqa: TC001

from .base import HealthResponse


class HealthController(Controller):  # type: ignore[misc]
    """Health check endpoints."""

    path = "/"

    @get("/health")  # type: ignore[untyped-decorator]
    async def health(self, signer: BatchSigner) -> HealthResponse:
        """Health check endpoint, reporting which signer is loaded."""
        return HealthResponse(status="healthy", address=signer.address)
