"""ASGI entry point for Granian multi-worker support.

This module provides the ASGI application for Granian.
Configuration is loaded from environment variables set by the main process,
or from BATCHSIGNER_* variables when the app is launched by Granian directly.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

import msgspec

from .config import Config, config_from_env
from .server import create_app

if TYPE_CHECKING:
    from collections.abc import Callable

    from litestar import Litestar
    from litestar.types import LifeSpanScope, Scope

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "BATCHSIGNER_CONFIG"


def load_config_from_env() -> Config:
    """Load configuration stored by the main process, or from BATCHSIGNER_* variables."""
    config_json = os.environ.get(CONFIG_ENV_VAR)
    if not config_json:
        return config_from_env()

    config_dict = json.loads(config_json)
    if config_dict.get("private_key_file"):
        config_dict["private_key_file"] = Path(config_dict["private_key_file"])
    try:
        return msgspec.convert(config_dict, Config)
    except msgspec.ValidationError as e:
        raise ValueError(f"Configuration validation error: {e}") from e


def store_config_in_env(config: Config) -> None:
    """Store configuration in environment variable for worker processes.

    Only the key file path is stored; a key given through
    BATCHSIGNER_PRIVATE_KEY reaches workers through the inherited environment.
    """
    config_dict = {
        "host": config.host,
        "port": config.port,
        "workers": config.workers,
        "log_level": config.log_level,
        "metrics_enabled": config.metrics_enabled,
        "metrics_host": config.metrics_host,
        "metrics_port": config.metrics_port,
        "private_key_file": str(config.private_key_file) if config.private_key_file else None,
        "strict_hashes": config.strict_hashes,
    }
    os.environ[CONFIG_ENV_VAR] = json.dumps(config_dict)


# Global app instance (created once per worker)
_app_instance: Litestar | None = None


def get_app() -> Litestar:
    """Get or create the Litestar app instance."""
    global _app_instance
    if _app_instance is None:
        config = load_config_from_env()

        logging.basicConfig(
            level=getattr(logging, config.normalized_log_level),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

        _app_instance = create_app(config)

    return _app_instance


# ASGI application callable
# Granian calls this with (scope, receive, send)
async def app(
    scope: Scope | LifeSpanScope,
    receive: Callable[..., Any],
    send: Callable[..., Any],
) -> None:
    """ASGI application entry point."""
    litestar_app = get_app()
    await litestar_app(scope, receive, send)
