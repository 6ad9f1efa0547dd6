"""
RPC runtime glue on top of the standard library's XML-RPC.

Server side: a threading XML-RPC server whose dispatcher logs, times and
counts every call and turns errors into faults with fixed codes.

Client side: proxies that turn faults and transport failures back into the
exceptions raised on the server.
"""

import logging
import threading
import time
import xmlrpc.client
from socketserver import ThreadingMixIn
from typing import Any, List
from xmlrpc.server import SimpleXMLRPCRequestHandler, SimpleXMLRPCServer

from message_keeper.exceptions import AlreadyBoundError, NotBoundError, RemoteError
from message_keeper.logging_utils import call_context, log_call
from message_keeper.metrics import record_rpc_call

logger = logging.getLogger(__name__)

# Fault codes
REMOTE_FAILURE = 1
NOT_BOUND = 2
ALREADY_BOUND = 3
UNKNOWN_METHOD = 4


class RequestHandler(SimpleXMLRPCRequestHandler):
    rpc_paths = ("/", "/RPC2")

    def log_message(self, format, *args):
        # http.server writes to stderr otherwise
        logger.debug(format % args)


class RPCServer(ThreadingMixIn, SimpleXMLRPCServer):
    """
    XML-RPC server that handles each request on its own thread.

    Calls run concurrently as far as the runtime dispatches them; nothing
    here serializes access to the registered objects.
    """

    daemon_threads = True

    def __init__(self, host: str, port: int):
        super().__init__(
            (host, port),
            requestHandler=RequestHandler,
            logRequests=False,
            allow_none=True,
        )
        self._thread = None

    @property
    def port(self) -> int:
        return self.server_address[1]

    def serve_in_background(self) -> threading.Thread:
        """Run serve_forever on a daemon thread and return the thread."""
        self._thread = threading.Thread(
            target=self.serve_forever,
            name=f"rpc-server-{self.port}",
            daemon=True,
        )
        self._thread.start()
        return self._thread

    def stop(self) -> None:
        if self._thread is not None:
            self.shutdown()
            self._thread.join()
            self._thread = None
        self.server_close()

    def _dispatch(self, method, params):
        func = self.funcs.get(method)
        label = method if func is not None else "unknown"
        outcome = "ok"
        start_time = time.perf_counter()

        with call_context():
            try:
                if func is None:
                    outcome = "unknown_method"
                    raise xmlrpc.client.Fault(UNKNOWN_METHOD, f'method "{method}" is not supported')
                return func(*params)
            except RemoteError as e:
                outcome = "remote_error"
                raise xmlrpc.client.Fault(REMOTE_FAILURE, str(e)) from e
            except NotBoundError as e:
                outcome = "not_bound"
                raise xmlrpc.client.Fault(NOT_BOUND, e.name) from e
            except AlreadyBoundError as e:
                outcome = "already_bound"
                raise xmlrpc.client.Fault(ALREADY_BOUND, e.name) from e
            except xmlrpc.client.Fault:
                raise
            except Exception as e:
                outcome = "error"
                logger.exception(f"Unexpected error in {method}")
                raise xmlrpc.client.Fault(REMOTE_FAILURE, f"Unexpected server error: {e}") from e
            finally:
                latency_seconds = time.perf_counter() - start_time
                log_call(label, outcome, round(latency_seconds * 1000, 2))
                record_rpc_call(label, outcome, latency_seconds)


def fault_to_error(fault: xmlrpc.client.Fault) -> Exception:
    """Map a fault received from an RPCServer to the exception it stands for."""
    if fault.faultCode == NOT_BOUND:
        return NotBoundError(fault.faultString)
    if fault.faultCode == ALREADY_BOUND:
        return AlreadyBoundError(fault.faultString)
    return RemoteError(fault.faultString, fault)


class RemoteProxy:
    """Client-side handle for an object served by an RPCServer."""

    def __init__(self, url: str):
        self.url = url
        self._proxy = xmlrpc.client.ServerProxy(url, allow_none=True)

    def _call(self, method: str, *args: Any) -> Any:
        try:
            return getattr(self._proxy, method)(*args)
        except xmlrpc.client.Fault as e:
            raise fault_to_error(e) from e
        except (OSError, xmlrpc.client.ProtocolError) as e:
            raise RemoteError(f"Could not call {method} on {self.url}", e) from e

    def close(self) -> None:
        self._proxy("close")()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.url}>"


def encode_text(value: str) -> xmlrpc.client.Binary:
    """Wrap text as UTF-8 bytes so characters XML 1.0 forbids survive the trip."""
    return xmlrpc.client.Binary(value.encode("utf-8"))


def decode_text(value: Any) -> Any:
    """
    Undo encode_text. Plain strings from other XML-RPC callers pass through,
    as does anything else, for the keeper to reject.
    """
    if not isinstance(value, xmlrpc.client.Binary):
        return value
    try:
        return value.data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise RemoteError("Text is not valid UTF-8", e) from e


class MessageKeeperProxy(RemoteProxy):
    """Remote handle for a MessageKeeper."""

    def save_message(self, message: str) -> int:
        return self._call("save_message", encode_text(message))

    def find_messages(self, substring: str) -> List[str]:
        return [decode_text(m) for m in self._call("find_messages", encode_text(substring))]


def create_keeper_server(host: str, port: int, keeper) -> RPCServer:
    """
    Serve ``keeper``'s two operations on host:port.

    Message text travels as UTF-8 Binary in both directions.
    """
    def save_message(message):
        return keeper.save_message(decode_text(message))

    def find_messages(substring):
        return [encode_text(m) for m in keeper.find_messages(decode_text(substring))]

    server = RPCServer(host, port)
    server.register_function(save_message, "save_message")
    server.register_function(find_messages, "find_messages")
    return server
