import logging
from typing import List

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from sqlalchemy.pool import StaticPool

from message_keeper.config import settings

logger = logging.getLogger(__name__)


def create_db_engine(url: str) -> Engine:
    """
    Create a SQLAlchemy engine for the given URL.

    SQLite connections are shared with the RPC server's worker threads, so
    check_same_thread is turned off. An in-memory SQLite database only
    exists for as long as its connection, so it is pinned to one connection.
    """
    kwargs = {"echo": False}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


# The engine lives for the whole process
engine = create_db_engine(settings.DATABASE_URL)

# Create SessionLocal class for creating database sessions
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for SQLAlchemy models
Base = declarative_base()


def init_db(bind: Engine = engine) -> None:
    """
    Initialize the database by creating the messages table if it is missing.
    Called during server startup.
    """
    logger.debug(f"Initializing database with URL: {bind.url}")
    try:
        # Import models to register them with Base.metadata
        from message_keeper.models import Message  # noqa: F401

        Base.metadata.create_all(bind=bind)
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise


def check_db_health(bind: Engine = engine) -> bool:
    """
    Check if the database is reachable and schema is applied.

    Returns:
        True if DB is healthy and schema exists, False otherwise.
    """
    logger.debug("Checking database health...")
    try:
        with bind.connect() as conn:
            conn.execute(text("SELECT 1"))
            if not inspect(conn).has_table("messages"):
                logger.error("Database schema not applied: 'messages' table not found")
                return False
        logger.debug("Database health check passed")
        return True
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return False


# =============================================================================
# Message Repository Functions
# =============================================================================

def save_message(db: Session, text: str) -> int:
    """
    Insert a message and return the identifier the store generated for it.

    Args:
        db: Database session
        text: Message body

    Returns:
        The new row's id

    Raises:
        SQLAlchemyError: the insert failed; the session is rolled back first.
    """
    from message_keeper.models import Message

    logger.debug(f"Inserting message of {len(text)} characters")

    message = Message(message=text)
    try:
        db.add(message)
        db.flush()
        message_id = message.id
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info(f"Message stored with id={message_id}")
    return message_id


def find_messages(db: Session, substring: str) -> List[str]:
    """
    Return the bodies of all stored messages containing ``substring``.

    The substring goes into a LIKE pattern as-is, so ``%`` and ``_`` act as
    wildcards. Case sensitivity is whatever the dialect's LIKE does.

    Args:
        db: Database session
        substring: Text to search for

    Returns:
        Message bodies ordered by id
    """
    from message_keeper.models import Message

    logger.debug(f"Searching messages containing: {substring}")

    rows = (
        db.query(Message.message)
        .filter(Message.message.like(f"%{substring}%"))
        .order_by(Message.id.asc())
        .all()
    )
    result = [row.message for row in rows]
    logger.info(f"Found {len(result)} messages containing: {substring}")
    return result
