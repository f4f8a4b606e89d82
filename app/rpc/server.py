"""
Users manager entrypoint: gRPC server over PostgreSQL storage. Run from project root:

  python -m app.rpc.server

Stops gracefully on SIGINT/SIGTERM.
"""

import logging
import signal
import sys
import threading
from concurrent import futures

import grpc

from app.core.config import Settings, get_settings
from app.core.database import SessionLocal, check_db_connected, engine, run_migrations
from app.core.logger import setup_logging
from app.rpc.users import register
from app.services.users import UsersService
from app.storage.users_psql import UsersPsqlStorage

logger = logging.getLogger(__name__)


def build_server(
    service: UsersService, address: str, max_workers: int
) -> tuple[grpc.Server, int]:
    """Create (not start) a server with the users servicer bound to ``address``; returns the bound port."""
    server = grpc.server(futures.ThreadPoolExecutor(max_workers=max_workers))
    register(server, service)
    port = server.add_insecure_port(address)
    return server, port


def serve(settings: Settings) -> None:
    """Run migrations if enabled, start the server and block until a stop signal."""
    with SessionLocal() as db:
        if not check_db_connected(db):
            raise RuntimeError("database is not reachable")
    if settings.RUN_MIGRATIONS_ON_STARTUP:
        run_migrations()

    service = UsersService(UsersPsqlStorage(SessionLocal))
    server, port = build_server(
        service,
        f"[::]:{settings.USERS_MANAGER_PORT}",
        settings.USERS_MANAGER_MAX_WORKERS,
    )

    stop = threading.Event()

    def _handle_signal(signum: int, _frame: object) -> None:
        logger.info("Received signal %s, shutting down", signum)
        stop.set()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    server.start()
    logger.info(
        "Users manager listening on port %s (env=%s, workers=%s)",
        port,
        settings.APP_ENV,
        settings.USERS_MANAGER_MAX_WORKERS,
    )
    try:
        stop.wait()
    finally:
        server.stop(settings.USERS_MANAGER_GRACE_SEC).wait()
        engine.dispose()
        logger.info("Users manager stopped")


def main() -> int:
    settings = get_settings()
    setup_logging(settings.APP_ENV, settings.LOG_LEVEL)
    try:
        serve(settings)
        return 0
    except Exception as e:
        logger.exception("Users manager failed: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
