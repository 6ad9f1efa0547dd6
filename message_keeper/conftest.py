"""
Pytest configuration and shared fixtures.

Tests run against an in-memory SQLite database. The environment is set here,
before any module reads the settings.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "DEBUG")

import pytest

# Clear settings cache before any other imports so the test env vars are used
from message_keeper.config import get_settings
get_settings.cache_clear()

from message_keeper.server import MessageKeeperServer
from message_keeper.service import MessageKeeper
from message_keeper.storage import Base, SessionLocal, engine, init_db


@pytest.fixture(scope="function")
def db_engine():
    """Fresh messages table for each test."""
    init_db(engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(db_engine):
    with SessionLocal() as db:
        yield db


@pytest.fixture
def keeper(db_engine):
    return MessageKeeper()


@pytest.fixture
def running_server(keeper):
    """Registry and keeper served on ephemeral local ports."""
    server = MessageKeeperServer(0, "127.0.0.1", 0, keeper=keeper, bind_address="127.0.0.1")
    server.start()
    yield server
    server.stop()
