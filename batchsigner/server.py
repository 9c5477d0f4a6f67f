"""Litestar server setup with Granian ASGI server."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from granian import Granian
from granian.constants import Interfaces
from litestar import Litestar
from litestar.datastructures import State  # noqa: TC002
from litestar.di import Provide

from .handlers import get_routers
from .keys import load_private_key
from .metrics import WORKERS_ENV_VAR
from .metrics_middleware import metrics_middleware
from .signer import BatchSigner

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from .config import Config

logger = logging.getLogger(__name__)


# Dependency providers for Litestar DI


def provide_signer(state: State) -> BatchSigner:
    """Provide BatchSigner from application state.

    This dependency provider allows handlers to receive the signer
    via dependency injection instead of accessing request.app.state directly.
    """
    result: BatchSigner = state["signer"]
    return result


def create_app(
    config: Config | None = None,
    signer: BatchSigner | None = None,
) -> Litestar:
    """Create and configure the Litestar application.

    When no signer is passed, one is built from the key the configuration
    points at, and its key material is cleared on shutdown.

    Raises:
        ValueError: If neither a config nor a signer is provided
        InvalidPrivateKeyError: If the configured key cannot be loaded

    """
    owns_signer = signer is None
    if signer is None:
        if config is None:
            raise ValueError("create_app needs a config or a signer")
        signer = BatchSigner(load_private_key(config), strict=config.strict_hashes)

    @asynccontextmanager
    async def lifespan(_app: Litestar) -> AsyncGenerator[None]:
        """Lifespan context manager for startup/shutdown."""
        logger.info(f"Starting batchsigner server for signer {signer.address}")
        yield
        if owns_signer:
            signer.close()
        logger.info("Stopping batchsigner server")

    return Litestar(
        route_handlers=get_routers(),
        lifespan=[lifespan],
        middleware=[metrics_middleware],
        debug=False,
        state=State({"signer": signer}),
        dependencies={
            "signer": Provide(provide_signer, sync_to_thread=False),
        },
    )


def run_server(config: Config) -> None:
    """Run the Litestar server with Granian."""
    logger.info(f"Starting batchsigner on {config.host}:{config.port}")

    # Workers load the key themselves; check it here so a bad key fails before they spawn
    load_private_key(config).clear()

    # Workers read this before importing metrics to pick multi-process mode
    os.environ[WORKERS_ENV_VAR] = str(config.workers)
    if config.workers > 1:
        from .metrics import setup_multiproc_dir

        multiproc_dir = setup_multiproc_dir()
        logger.info(
            f"Enabled Prometheus multi-process metrics mode "
            f"({config.workers} workers, dir={multiproc_dir})"
        )

    from . import asgi
    from .metrics import MetricsServer, cleanup_multiproc_dir

    asgi.store_config_in_env(config)

    server = Granian(
        target="batchsigner.asgi:app",
        address=config.host,
        port=config.port,
        interface=Interfaces.ASGI,
        workers=config.workers,
        log_level=config.log_level.lower(),
    )

    cleanup_multiproc_dir()

    metrics_server: MetricsServer | None = None
    if config.metrics_enabled:
        metrics_server = MetricsServer(host=config.metrics_host, port=config.metrics_port)
        metrics_server.start()

    try:
        server.serve()
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    finally:
        if metrics_server is not None:
            metrics_server.stop()
