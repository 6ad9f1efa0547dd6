import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Iterator, Optional

from pythonjsonlogger import jsonlogger


# Context variable to store call_id for the RPC call being dispatched
call_id_ctx: ContextVar[Optional[str]] = ContextVar("call_id", default=None)


def get_call_id() -> Optional[str]:
    """Get the current call ID from context."""
    return call_id_ctx.get()


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter to ensure ISO-8601 timestamps and call_id."""

    def add_fields(self, log_record, record, message_dict):
        super(CustomJsonFormatter, self).add_fields(log_record, record, message_dict)
        if not log_record.get('ts'):
            now = datetime.now(timezone.utc)
            log_record['ts'] = now.strftime('%Y-%m-%dT%H:%M:%S.%f')[:-3] + 'Z'
        log_record['level'] = record.levelname

        if 'call_id' not in log_record:
            call_id = call_id_ctx.get()
            if call_id:
                log_record['call_id'] = call_id


def setup_logging(log_level: str = "INFO"):
    """
    Setup structured JSON logging for the process.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logger = logging.getLogger()
    logger.setLevel(log_level.upper())

    # Remove existing handlers
    logger.handlers = []

    json_handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        '%(ts)s %(level)s %(name)s %(message)s'
    )
    json_handler.setFormatter(formatter)
    logger.addHandler(json_handler)

    return logger


@contextmanager
def call_context() -> Iterator[str]:
    """
    Tag every log record emitted inside the block with a fresh call_id.
    """
    call_id = str(uuid.uuid4())
    token = call_id_ctx.set(call_id)
    try:
        yield call_id
    finally:
        call_id_ctx.reset(token)


def log_call(method: str, outcome: str, latency_ms: float) -> None:
    """
    Log a dispatched RPC call in structured form.

    Args:
        method: Remote method name
        outcome: Dispatch outcome (ok, remote_error, not_bound, ...)
        latency_ms: Call processing time in milliseconds
    """
    log_data = {
        "method": method,
        "outcome": outcome,
        "latency_ms": latency_ms,
    }
    logger = logging.getLogger("message_keeper.calls")
    if outcome == "error":
        logger.error("Call completed", extra=log_data)
    elif outcome != "ok":
        logger.warning("Call completed", extra=log_data)
    else:
        logger.info("Call completed", extra=log_data)
