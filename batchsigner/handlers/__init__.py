"""HTTP route handlers for the batch signing API with Litestar.

This package provides controller modules for different API endpoints:
- health: Health check endpoints
- signing: Batch signing, digest and recovery endpoints
"""

from litestar import Router

from .health import HealthController
from .signing import BatchSigningController


def get_routers() -> list[Router]:
    """Get all routers for the application."""
    return [
        Router(path="/", route_handlers=[HealthController]),
        Router(path="/", route_handlers=[BatchSigningController]),
    ]


__all__ = [
    "BatchSigningController",
    "HealthController",
    "get_routers",
]
