"""
SQLAlchemy ORM models for database tables.

This module contains database table definitions using SQLAlchemy.
For the command line argument schemas, see schemas.py.
"""

from sqlalchemy import CheckConstraint, Column, Integer, String

from message_keeper.storage import Base

MAX_MESSAGE_LENGTH = 500


class Message(Base):
    """
    SQLAlchemy model for stored messages.

    Table: messages
    Primary Key: id (generated by the store)
    """
    __tablename__ = "messages"
    __table_args__ = (
        # SQLite does not enforce VARCHAR lengths on its own. Elsewhere
        # length() may count bytes, so String(500) is left to do it.
        CheckConstraint(
            f"length(message) <= {MAX_MESSAGE_LENGTH}",
            name="ck_messages_message_length",
        ).ddl_if(dialect="sqlite"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    message = Column(String(MAX_MESSAGE_LENGTH), nullable=False)
