"""
The message keeper server.

Launched from the command line; creates the naming registry, exports the
message keeper object and binds it in the registry under the configured
name. The database engine is created once and shared by every call.
"""

import logging
import sys
import threading
from typing import List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from message_keeper.config import settings
from message_keeper.logging_utils import setup_logging
from message_keeper.metrics import start_metrics_server
from message_keeper.registry import create_registry
from message_keeper.rpc import create_keeper_server
from message_keeper.schemas import SERVER_USAGE, ServerArgs
from message_keeper.service import MessageKeeper
from message_keeper.storage import check_db_health, init_db

logger = logging.getLogger(__name__)


class MessageKeeperServer:
    """
    Owns the registry server and the keeper server.

    The keeper listens on ``bind_address`` but is advertised in the registry
    under ``host``, which must be reachable by clients.
    """

    def __init__(
        self,
        registry_port: int,
        host: str,
        server_port: int,
        keeper: Optional[MessageKeeper] = None,
        bind_address: str = "0.0.0.0",
    ):
        self.host = host
        self.keeper = keeper or MessageKeeper()
        logger.info(f"Creating registry on port: {registry_port}")
        self.registry_server = create_registry(registry_port, bind_address)
        try:
            self.keeper_server = create_keeper_server(bind_address, server_port, self.keeper)
        except OSError:
            self.registry_server.server_close()
            raise
        self._stopped = threading.Event()

    @property
    def registry_port(self) -> int:
        return self.registry_server.port

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.keeper_server.port}/"

    def start(self, binding_name: str = settings.BINDING_NAME) -> None:
        self.registry_server.serve_in_background()
        self.keeper_server.serve_in_background()
        logger.info(f"Binding server object on: {self.host}:{self.keeper_server.port}")
        self.registry_server.registry.rebind(binding_name, self.url)
        for name in self.bound_names():
            logger.info(f"Bound object: {name}")

    def bound_names(self) -> List[str]:
        return self.registry_server.registry.list()

    def wait(self) -> None:
        self._stopped.wait()

    def stop(self) -> None:
        self.keeper_server.stop()
        self.registry_server.stop()
        self._stopped.set()


def main(argv: Optional[Sequence[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    try:
        args = ServerArgs.from_argv(argv)
    except ValueError:
        print(SERVER_USAGE)
        return 255

    setup_logging(settings.LOG_LEVEL)
    try:
        init_db()
    except SQLAlchemyError as e:
        logger.error(f"Could not initialize database: {e}")
        return 1
    if not check_db_health():
        logger.error("Database not reachable or schema not applied")
        return 1

    if settings.METRICS_PORT:
        start_metrics_server(settings.METRICS_PORT)

    server = MessageKeeperServer(args.registry_port, args.server_host, args.server_port)
    server.start()
    try:
        server.wait()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        server.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
