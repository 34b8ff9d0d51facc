"""Tests for the companion logging helpers."""

import io
import logging

import pytest

from companion.utils.logging import get_logger, log_error, log_operation, setup_logging


@pytest.fixture
def stream():
    buffer = io.StringIO()
    handler = setup_logging(level="DEBUG", stream=buffer)
    yield buffer
    logging.getLogger("companion").removeHandler(handler)


def test_get_logger_prefixes_namespace():
    assert get_logger("event_bus").name == "companion.event_bus"
    assert get_logger("companion.event_bus") is get_logger("event_bus")
    assert get_logger("companion").name == "companion"


def test_setup_logging_replaces_handler(stream):
    again = io.StringIO()
    handler = setup_logging(level="WARNING", stream=again)

    root = logging.getLogger("companion")
    assert root.handlers == [handler]
    assert root.level == logging.WARNING

    get_logger("store").info("hidden")
    get_logger("store").warning("shown")
    assert stream.getvalue() == ""
    assert "WARNING  [store] shown" in again.getvalue()


def test_log_operation_formats_details(stream):
    log_operation(get_logger("service"), "Updated character", {"id": "c1", "fields": "level"})
    assert "INFO     [service] Updated character: id=c1, fields=level" in stream.getvalue()


def test_log_error_includes_context_and_traceback(stream):
    try:
        raise KeyError("c9")
    except KeyError as exc:
        log_error(get_logger("service"), "delete_character", exc, {"character_id": "c9"})

    output = stream.getvalue()
    assert "FAILED delete_character: KeyError: 'c9' | Context: character_id=c9" in output
    assert "Traceback" in output
