"""
Naming service: a directory mapping names to remote object URLs.

The server process runs one of these next to the objects it exports; clients
locate it by host and port and look objects up by name.
"""

import logging
import threading
from typing import Dict, List

from message_keeper.exceptions import AlreadyBoundError, NotBoundError
from message_keeper.rpc import MessageKeeperProxy, RemoteProxy, RPCServer

logger = logging.getLogger(__name__)


class NamingRegistry:
    """In-memory name to URL directory."""

    def __init__(self):
        self._bindings: Dict[str, str] = {}
        self._lock = threading.Lock()

    def bind(self, name: str, url: str) -> bool:
        with self._lock:
            if name in self._bindings:
                raise AlreadyBoundError(name)
            self._bindings[name] = url
        logger.info(f"Bound {name} to {url}")
        return True

    def rebind(self, name: str, url: str) -> bool:
        with self._lock:
            self._bindings[name] = url
        logger.info(f"Rebound {name} to {url}")
        return True

    def unbind(self, name: str) -> bool:
        with self._lock:
            if self._bindings.pop(name, None) is None:
                raise NotBoundError(name)
        logger.info(f"Unbound {name}")
        return True

    def lookup(self, name: str) -> str:
        with self._lock:
            try:
                return self._bindings[name]
            except KeyError:
                raise NotBoundError(name) from None

    def list(self) -> List[str]:
        with self._lock:
            return sorted(self._bindings)


def create_registry(port: int, host: str = "0.0.0.0", registry: NamingRegistry = None) -> RPCServer:
    """
    Build an RPC server exporting a naming registry on host:port.

    The caller starts it (serve_in_background or serve_forever).
    """
    registry = registry or NamingRegistry()
    server = RPCServer(host, port)
    for name in ("bind", "rebind", "unbind", "lookup", "list"):
        server.register_function(getattr(registry, name), name)
    server.registry = registry
    return server


class RegistryProxy(RemoteProxy):
    """Remote handle for a naming registry."""

    def bind(self, name: str, url: str) -> None:
        self._call("bind", name, url)

    def rebind(self, name: str, url: str) -> None:
        self._call("rebind", name, url)

    def unbind(self, name: str) -> None:
        self._call("unbind", name)

    def lookup(self, name: str) -> str:
        return self._call("lookup", name)

    def list(self) -> List[str]:
        return self._call("list")

    def lookup_keeper(self, name: str) -> MessageKeeperProxy:
        """Resolve ``name`` and return a handle for the keeper bound there."""
        return MessageKeeperProxy(self.lookup(name))


def locate_registry(host: str, port: int) -> RegistryProxy:
    return RegistryProxy(f"http://{host}:{port}/")
