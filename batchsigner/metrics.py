"""Prometheus metrics for batchsigner with standalone HTTP server.

This module defines and exposes all Prometheus metrics used by batchsigner.
Metrics are served on a separate port using prometheus_client's built-in HTTP server.

Multi-process support:
When the HTTP service runs with multiple Granian workers, each process has its
own memory space. prometheus_client aggregates them through files in
PROMETHEUS_MULTIPROC_DIR, which setup_multiproc_dir() prepares.
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import TYPE_CHECKING

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    Info,
    start_http_server,
)
from prometheus_client.multiprocess import MultiProcessCollector

from . import __version__

if TYPE_CHECKING:
    from http.server import ThreadingHTTPServer
    from wsgiref.simple_server import WSGIServer

logger = logging.getLogger(__name__)

WORKERS_ENV_VAR = "BATCHSIGNER_WORKERS"


def setup_multiproc_dir() -> Path | None:
    """Set up the Prometheus multi-process directory if more than one worker runs.

    Returns:
        Path to the multi-process directory, or None in single-process mode.
    """
    if "PROMETHEUS_MULTIPROC_DIR" in os.environ:
        multiproc_dir = Path(os.environ["PROMETHEUS_MULTIPROC_DIR"])
        logger.debug(f"Using existing PROMETHEUS_MULTIPROC_DIR: {multiproc_dir}")
        return multiproc_dir

    workers = int(os.environ.get(WORKERS_ENV_VAR, "1"))
    if workers <= 1:
        logger.debug("Single worker mode, no multi-process metrics needed")
        return None

    multiproc_dir = Path(tempfile.gettempdir()) / "batchsigner_metrics"
    multiproc_dir.mkdir(parents=True, exist_ok=True)
    os.environ["PROMETHEUS_MULTIPROC_DIR"] = str(multiproc_dir)

    logger.info(
        f"Multi-process mode detected ({workers} workers). "
        f"Using PROMETHEUS_MULTIPROC_DIR: {multiproc_dir}"
    )
    return multiproc_dir


def cleanup_multiproc_dir() -> None:
    """Remove metrics files left over from a previous run."""
    if "PROMETHEUS_MULTIPROC_DIR" not in os.environ:
        return
    multiproc_dir = Path(os.environ["PROMETHEUS_MULTIPROC_DIR"])
    if not multiproc_dir.exists():
        return

    for file_path in multiproc_dir.glob("*.db"):
        try:
            file_path.unlink()
            logger.debug(f"Cleaned up stale metrics file: {file_path}")
        except OSError as e:
            logger.warning(f"Could not remove stale metrics file {file_path}: {e}")


_MULTIPROC_DIR = setup_multiproc_dir()

REGISTRY = CollectorRegistry()
if _MULTIPROC_DIR is not None:
    # Aggregates the per-worker files instead of this process's own values
    MultiProcessCollector(REGISTRY, path=str(_MULTIPROC_DIR))  # type: ignore[no-untyped-call]
    logger.debug("Using MultiProcessCollector for multi-process metrics")


# Application info
APP_INFO = Info(
    "batchsigner_build_info",
    "Build information about batchsigner",
    registry=REGISTRY,
)
APP_INFO.info({"version": __version__, "name": "batchsigner"})

# Signing metrics
BATCH_SIGNING_REQUESTS_TOTAL = Counter(
    "batch_signing_requests_total",
    "Total number of batch signing requests",
    registry=REGISTRY,
)

BATCH_SIGNING_DURATION_SECONDS = Histogram(
    "batch_signing_duration_seconds",
    "Time spent hashing and signing a batch",
    buckets=[0.0001, 0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
    registry=REGISTRY,
)

BATCH_SIGNING_ERRORS_TOTAL = Counter(
    "batch_signing_errors_total",
    "Total number of batch signing errors",
    ["error_type"],
    registry=REGISTRY,
)

BATCH_SIZE = Histogram(
    "batch_size",
    "Number of transaction hashes per signed batch",
    buckets=[0, 1, 2, 5, 10, 25, 50, 100, 250, 500, 1000],
    registry=REGISTRY,
)

# HTTP metrics
HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status"],
    registry=REGISTRY,
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "http_request_duration_seconds",
    "Time spent processing HTTP requests",
    ["method", "endpoint"],
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
    registry=REGISTRY,
)


def get_serving_registry() -> CollectorRegistry:
    """Return the registry a metrics endpoint should expose.

    The main process of a multi-worker server imports this module before the
    multi-process directory exists, so it aggregates the worker files through
    a fresh collector instead of its own REGISTRY.
    """
    multiproc_dir = os.environ.get("PROMETHEUS_MULTIPROC_DIR")
    if multiproc_dir is None or _MULTIPROC_DIR is not None:
        return REGISTRY
    registry = CollectorRegistry()
    MultiProcessCollector(registry, path=multiproc_dir)  # type: ignore[no-untyped-call]
    return registry


class MetricsServer:
    """Standalone Prometheus metrics HTTP server using prometheus_client.start_http_server.

    This runs the metrics endpoint on a separate port from the main API,
    allowing metrics to be scraped independently.
    """

    def __init__(self, host: str = "127.0.0.1", port: int = 8081) -> None:
        self._host = host
        self._port = port
        self._httpd: WSGIServer | ThreadingHTTPServer | None = None
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        """Start the metrics HTTP server.

        start_http_server() serves from its own daemon thread and returns
        immediately.
        """
        server, thread = start_http_server(
            port=self._port,
            addr=self._host,
            registry=get_serving_registry(),
        )
        self._httpd = server
        self._thread = thread
        logger.info(
            f"Metrics server started at http://{self._host}:{self._port}/metrics",
        )

    def stop(self) -> None:
        """Stop the metrics server."""
        if self._httpd is not None:
            try:
                self._httpd.shutdown()
                self._httpd.server_close()
            except OSError:
                logger.exception("Error stopping metrics server")
            finally:
                self._httpd = None

        if self._thread is not None:
            self._thread.join(timeout=2)
            self._thread = None

        logger.info("Metrics server stopped")
