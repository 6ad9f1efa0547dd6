"""
Tests for the message repository functions.

Tests cover:
- Inserting messages and the generated ids
- Substring search semantics
- Store-enforced length limit
- Database health check
"""

import pytest
from sqlalchemy.dialects import mysql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.schema import CreateTable

from message_keeper.models import MAX_MESSAGE_LENGTH, Message
from message_keeper.storage import (
    Base,
    check_db_health,
    create_db_engine,
    find_messages,
    save_message,
)


class TestSaveMessage:
    """Test inserting messages."""

    def test_returns_generated_id(self, db_session):
        """The first message in an empty table gets a positive id."""
        message_id = save_message(db_session, "Hello world")

        assert isinstance(message_id, int)
        assert message_id > 0

    def test_row_is_persisted(self, db_session):
        message_id = save_message(db_session, "Hello world")

        stored = db_session.get(Message, message_id)
        assert stored is not None
        assert stored.message == "Hello world"

    def test_ids_strictly_increase(self, db_session):
        """Sequential saves return strictly increasing ids."""
        ids = [save_message(db_session, f"message {i}") for i in range(5)]

        assert ids == sorted(ids)
        assert len(set(ids)) == 5

    def test_message_at_length_limit(self, db_session):
        text = "x" * MAX_MESSAGE_LENGTH

        message_id = save_message(db_session, text)

        assert db_session.get(Message, message_id).message == text

    def test_message_over_length_limit_fails(self, db_session):
        """The CHECK constraint rejects over-long messages."""
        with pytest.raises(IntegrityError):
            save_message(db_session, "x" * (MAX_MESSAGE_LENGTH + 1))

    def test_session_usable_after_failure(self, db_session):
        """A failed insert is rolled back and the session keeps working."""
        with pytest.raises(IntegrityError):
            save_message(db_session, "x" * (MAX_MESSAGE_LENGTH + 1))

        save_message(db_session, "after failure")

        assert find_messages(db_session, "") == ["after failure"]

    def test_multibyte_message_at_length_limit(self, db_session):
        """The limit counts characters, not UTF-8 bytes."""
        text = "\u00e9" * MAX_MESSAGE_LENGTH

        message_id = save_message(db_session, text)

        assert db_session.get(Message, message_id).message == text

    def test_multibyte_message_over_length_limit_fails(self, db_session):
        with pytest.raises(IntegrityError):
            save_message(db_session, "\u00e9" * (MAX_MESSAGE_LENGTH + 1))


class TestMessagesTableDDL:
    """The length CHECK is only emitted where VARCHAR does not enforce it."""

    def test_check_on_sqlite(self):
        ddl = str(CreateTable(Message.__table__).compile(dialect=sqlite.dialect()))

        assert "CHECK" in ddl

    def test_no_check_on_mysql(self):
        ddl = str(CreateTable(Message.__table__).compile(dialect=mysql.dialect()))

        assert "CHECK" not in ddl
        assert "VARCHAR(500)" in ddl


class TestFindMessages:
    """Test substring search."""

    @pytest.fixture
    def seeded_session(self, db_session):
        for text in ["Hello world", "How are you?", "Goodbye", "Hello there"]:
            save_message(db_session, text)
        return db_session

    def test_empty_table(self, db_session):
        assert find_messages(db_session, "anything") == []

    def test_substring_match(self, seeded_session):
        assert find_messages(seeded_session, "Hello") == ["Hello world", "Hello there"]

    def test_match_inside_message(self, seeded_session):
        assert find_messages(seeded_session, "odby") == ["Goodbye"]

    def test_no_match(self, seeded_session):
        assert find_messages(seeded_session, "zzz") == []

    def test_empty_substring_matches_everything(self, seeded_session):
        assert len(find_messages(seeded_session, "")) == 4

    def test_results_ordered_by_id(self, seeded_session):
        assert find_messages(seeded_session, "o") == [
            "Hello world",
            "How are you?",
            "Goodbye",
            "Hello there",
        ]

    def test_sqlite_like_is_case_insensitive(self, seeded_session):
        """SQLite's LIKE ignores ASCII case."""
        assert find_messages(seeded_session, "hello") == ["Hello world", "Hello there"]

    def test_wildcards_are_not_escaped(self, seeded_session):
        """'%' and '_' keep their LIKE meaning."""
        assert find_messages(seeded_session, "H_w") == ["How are you?"]
        assert find_messages(seeded_session, "Hello%there") == ["Hello there"]


class TestDatabaseHealth:
    """Test the health check."""

    def test_healthy(self, db_engine):
        assert check_db_health(db_engine) is True

    def test_schema_missing(self):
        bare_engine = create_db_engine("sqlite://")
        try:
            assert check_db_health(bare_engine) is False
        finally:
            bare_engine.dispose()

    def test_schema_applied_on_new_engine(self):
        fresh_engine = create_db_engine("sqlite://")
        try:
            Base.metadata.create_all(bind=fresh_engine)
            assert check_db_health(fresh_engine) is True
        finally:
            fresh_engine.dispose()
