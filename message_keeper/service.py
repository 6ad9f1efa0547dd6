"""
The message keeper remote object.

Exposes the two operations the server publishes over RPC. Every call opens
its own session from the process-wide engine and closes it afterwards; any
data-access failure reaches the caller as a RemoteError.
"""

import logging
from typing import Callable, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from message_keeper import storage
from message_keeper.exceptions import RemoteError
from message_keeper.metrics import record_message_saved

logger = logging.getLogger(__name__)


class MessageKeeper:
    """Saves messages and finds them by substring."""

    def __init__(self, session_factory: Callable[[], Session] = storage.SessionLocal):
        self._session_factory = session_factory

    def save_message(self, message: str) -> int:
        if not isinstance(message, str):
            raise RemoteError(f"message must be a string, got {type(message).__name__}")
        try:
            with self._session_factory() as db:
                message_id = storage.save_message(db, message)
        except SQLAlchemyError as e:
            logger.error(f"Could not insert message: {e}")
            raise RemoteError("Could not insert message", e) from e
        record_message_saved()
        return message_id

    def find_messages(self, substring: str) -> List[str]:
        if not isinstance(substring, str):
            raise RemoteError(f"substring must be a string, got {type(substring).__name__}")
        try:
            with self._session_factory() as db:
                return storage.find_messages(db, substring)
        except SQLAlchemyError as e:
            logger.error(f"Could not find messages: {e}")
            raise RemoteError("Could not find messages", e) from e
