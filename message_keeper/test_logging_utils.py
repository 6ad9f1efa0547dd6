"""
Tests for structured logging.
"""

import io
import json
import logging

import pytest

from message_keeper.logging_utils import CustomJsonFormatter, call_context, get_call_id


@pytest.fixture
def json_logger():
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(CustomJsonFormatter('%(ts)s %(level)s %(name)s %(message)s'))
    logger = logging.getLogger("message_keeper.tests.json")
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    yield logger, stream
    logger.removeHandler(handler)


def read_records(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines()]


class TestJsonFormatter:

    def test_required_fields(self, json_logger):
        logger, stream = json_logger

        logger.info("hello")

        (record,) = read_records(stream)
        assert record["message"] == "hello"
        assert record["level"] == "INFO"
        assert record["name"] == "message_keeper.tests.json"
        assert record["ts"].endswith("Z")
        assert "call_id" not in record

    def test_call_id_inside_call_context(self, json_logger):
        logger, stream = json_logger

        with call_context() as call_id:
            logger.info("inside")
        logger.info("outside")

        inside, outside = read_records(stream)
        assert inside["call_id"] == call_id
        assert "call_id" not in outside

    def test_extra_fields(self, json_logger):
        logger, stream = json_logger

        logger.info("Call completed", extra={"method": "save_message", "outcome": "ok"})

        (record,) = read_records(stream)
        assert record["method"] == "save_message"
        assert record["outcome"] == "ok"


class TestCallContext:

    def test_resets_after_block(self):
        assert get_call_id() is None
        with call_context() as call_id:
            assert get_call_id() == call_id
        assert get_call_id() is None

    def test_fresh_id_per_call(self):
        with call_context() as first:
            pass
        with call_context() as second:
            pass
        assert first != second
