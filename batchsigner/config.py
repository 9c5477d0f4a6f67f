"""Configuration management using msgspec Struct."""

from __future__ import annotations

import argparse
import os
from collections.abc import Mapping, Sequence
from pathlib import Path

import msgspec

from . import __version__

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Config(msgspec.Struct, frozen=True):
    """Application configuration using msgspec Struct."""

    # HTTP server settings
    host: str = "127.0.0.1"
    port: int = 8080
    workers: int = 1

    # Logging
    log_level: str = "INFO"

    # Metrics settings
    metrics_enabled: bool = False
    metrics_host: str = "127.0.0.1"
    metrics_port: int = 8081

    # Signing settings
    private_key_file: Path | None = None
    strict_hashes: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        # msgspec handles basic type validation, but we need custom validation
        if self.port < 1 or self.port > 65535:
            raise ValueError(f"port must be between 1 and 65535, got {self.port}")

        if self.metrics_port < 1 or self.metrics_port > 65535:
            raise ValueError(f"metrics_port must be between 1 and 65535, got {self.metrics_port}")

        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {set(LOG_LEVELS)}, got {self.log_level}")

        if self.private_key_file is not None:
            if not self.private_key_file.exists():
                raise ValueError(f"private_key_file does not exist: {self.private_key_file}")
            if not self.private_key_file.is_file():
                raise ValueError(f"private_key_file must be a file: {self.private_key_file}")

    @property
    def normalized_log_level(self) -> str:
        """Return normalized uppercase log level."""
        return self.log_level.upper()


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser with its sign and serve subcommands."""
    parser = argparse.ArgumentParser(
        prog="batchsigner",
        description="batchsigner - recoverable secp256k1 signatures over transaction hash batches",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    # Options shared by both subcommands
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        type=str.upper,
        default="INFO",
        help="Logging level",
    )
    common.add_argument(
        "--private-key-file",
        type=Path,
        default=None,
        help="Path to a file holding the hex private key "
        "(falls back to the BATCHSIGNER_PRIVATE_KEY environment variable)",
    )
    common.add_argument(
        "--strict",
        dest="strict_hashes",
        action="store_true",
        default=False,
        help="Reject transaction hashes that are not exactly 32 bytes",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    sign_parser = subparsers.add_parser(
        "sign",
        parents=[common],
        help="Sign a batch of transaction hashes and print the signature",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    sign_parser.add_argument(
        "hashes",
        nargs="*",
        metavar="HASH",
        help="Transaction hashes in attestation order (0x-prefixed hex)",
    )
    sign_parser.add_argument(
        "--show-digest",
        action="store_true",
        default=False,
        help="Also print the combined digest that was signed",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        parents=[common],
        help="Run the HTTP signing service",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    serve_parser.add_argument("--host", default="127.0.0.1", help="HTTP server host")
    serve_parser.add_argument("-p", "--port", type=int, default=8080, help="HTTP server port")
    serve_parser.add_argument("--workers", type=int, default=1, help="Number of Granian workers")
    serve_parser.add_argument(
        "--metrics-enabled",
        action="store_true",
        default=False,
        help="Enable the Prometheus metrics endpoint",
    )
    serve_parser.add_argument("--metrics-host", default="127.0.0.1", help="Host for metrics server")
    serve_parser.add_argument(
        "--metrics-port", type=int, default=8081, help="Port for metrics server"
    )

    return parser


def get_config(argv: Sequence[str] | None = None) -> tuple[argparse.Namespace, Config]:
    """Parse command line arguments and return them with the configuration.

    Raises:
        ValueError: If the resulting configuration is invalid

    """
    args = build_parser().parse_args(argv)

    config_dict: dict[str, object] = {
        "log_level": args.log_level,
        "private_key_file": args.private_key_file,
        "strict_hashes": args.strict_hashes,
    }
    if args.command == "serve":
        config_dict.update(
            {
                "host": args.host,
                "port": args.port,
                "workers": args.workers,
                "metrics_enabled": args.metrics_enabled,
                "metrics_host": args.metrics_host,
                "metrics_port": args.metrics_port,
            }
        )

    return args, _convert(config_dict)


def config_from_env(environ: Mapping[str, str] | None = None) -> Config:
    """Load configuration from BATCHSIGNER_* environment variables."""
    env = os.environ if environ is None else environ
    config_dict: dict[str, object] = {
        "host": env.get("BATCHSIGNER_HOST", "0.0.0.0"),
        "port": int(env.get("BATCHSIGNER_PORT", "8080")),
        "workers": int(env.get("BATCHSIGNER_WORKERS", "1")),
        "log_level": env.get("BATCHSIGNER_LOG_LEVEL", "INFO"),
        "metrics_enabled": _env_flag(env.get("BATCHSIGNER_METRICS_ENABLED")),
        "metrics_host": env.get("BATCHSIGNER_METRICS_HOST", "127.0.0.1"),
        "metrics_port": int(env.get("BATCHSIGNER_METRICS_PORT", "8081")),
        "private_key_file": (
            Path(env["BATCHSIGNER_PRIVATE_KEY_FILE"])
            if env.get("BATCHSIGNER_PRIVATE_KEY_FILE")
            else None
        ),
        "strict_hashes": _env_flag(env.get("BATCHSIGNER_STRICT_HASHES")),
    }
    return _convert(config_dict)


def _env_flag(value: str | None) -> bool:
    return value is not None and value.strip().lower() in {"1", "true", "yes", "on"}


def _convert(config_dict: dict[str, object]) -> Config:
    try:
        return msgspec.convert(config_dict, Config)
    except msgspec.ValidationError as e:
        raise ValueError(f"Configuration validation error: {e}") from e
