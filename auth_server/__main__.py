"""
Auth Server Entry Point

Allows running the server directly via `python -m auth_server`.
Reads configuration from the environment, configures logging and serves
HTTP until interrupted.
"""

import asyncio
import logging
import sys

from .core.auth_service import AuthService
from .core.config import AuthConfig
from .core.constants import DEV_JWT_SECRET, LOG_FORMAT
from .transport.http_transport import HTTPTransport


def setup_logging(level: str):
    """Configure logging to stderr"""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


async def main():
    """Main entry point"""
    try:
        config = AuthConfig.from_env()
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(2)

    setup_logging(config.log_level)
    logger = logging.getLogger("main")

    if config.jwt_secret == DEV_JWT_SECRET:
        logger.warning("JWT_SECRET not set, using development secret")

    transport = None
    try:
        service = AuthService.from_config(config)
        transport = HTTPTransport(service, config)

        logger.info("Starting Auth Server...")
        await transport.start()
        await asyncio.Event().wait()

    except Exception as e:
        logger.critical(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)
    finally:
        if transport is not None:
            await transport.stop()


def run():
    """Console script entry point"""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    run()
