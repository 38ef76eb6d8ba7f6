"""
gRPC server entry point.

    python -m src.service.server        # or the ``ccxt-rpc`` console script

Listens on ``host:port`` from the service config (``PORT`` / ``HOST`` env
override) and shuts down gracefully on SIGINT / SIGTERM.
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from typing import Optional

import grpc

from src.core.config import ServiceConfig, load_config
from src.core.errors import ConfigError
from src.service.ccxt_service import CcxtService
from src.service.messages import pb_grpc
from src.utils.logger import setup_logger


def build_server(config: ServiceConfig) -> tuple[grpc.aio.Server, int]:
    """Create an aio server with ``CcxtService`` registered and bind it.

    Returns the server (not yet started) and the port actually bound, which
    differs from ``config.port`` when that is 0.
    """
    server = grpc.aio.server()
    pb_grpc.add_CcxtServiceServicer_to_server(CcxtService(config), server)
    try:
        port = server.add_insecure_port(config.address)
    except RuntimeError as e:
        raise ConfigError(f"Failed to bind {config.address}: {e}") from e
    if port == 0:
        raise ConfigError(f"Failed to bind {config.address}")
    return server, port


async def serve(config: ServiceConfig, logger: Optional[logging.Logger] = None) -> None:
    logger = logger or logging.getLogger(__name__)

    server, port = build_server(config)
    await server.start()
    logger.info(
        f"ccxt-rpc gRPC server listening on {config.host}:{port} "
        f"({len(config.exchanges)} exchanges registered)"
    )

    loop = asyncio.get_running_loop()
    stopping: list[asyncio.Task] = []

    def shutdown(sig: signal.Signals) -> None:
        if stopping:
            return
        logger.info(f"Received {sig.name}, shutting down gRPC server...")
        stopping.append(asyncio.ensure_future(server.stop(config.grace_period_sec)))

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, shutdown, sig)
        except NotImplementedError:
            # Windows event loops have no signal handlers; Ctrl+C still
            # surfaces as KeyboardInterrupt in main().
            pass

    await server.wait_for_termination()
    logger.info("gRPC server stopped.")


def main() -> int:
    try:
        config = load_config()
    except ConfigError as e:
        logging.basicConfig()
        logging.getLogger(__name__).error(str(e))
        return 1

    logger = setup_logger("src", config.log_path, level=config.log_level)
    logger.info("========== ccxt-rpc starting ==========")

    try:
        asyncio.run(serve(config, logger))
    except ConfigError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Server stopped by user.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
