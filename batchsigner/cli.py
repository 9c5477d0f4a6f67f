"""CLI entry point for batchsigner."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from .config import Config, get_config
from .errors import BatchSignerError
from .keys import load_private_key
from .signer import BatchSigner

logger = logging.getLogger(__name__)


def setup_logging(log_level: str) -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def run_sign(args: argparse.Namespace, config: Config) -> int:
    """Sign the hashes given on the command line and print the signature."""
    signer = BatchSigner(load_private_key(config), strict=config.strict_hashes)
    try:
        signed = signer.sign_batch(args.hashes)
    finally:
        signer.close()

    logger.info(f"Signed {signed.count} transaction hashes as {signer.address}")
    if args.show_digest:
        print(f"Digest: {signed.digest_hex}")
    print(signed.signature_hex)
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    """Main entry point."""
    try:
        args, config = get_config(argv)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(config.normalized_log_level)

    if args.command == "sign":
        try:
            sys.exit(run_sign(args, config))
        except BatchSignerError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

    from .server import run_server

    try:
        run_server(config)
    except BatchSignerError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nShutting down...")
        sys.exit(0)
    except Exception:
        logger.exception("Server error")
        sys.exit(1)


if __name__ == "__main__":
    main()
