"""Unit tests for structured logging utilities in ``observability``.

Validates the null handler, trace binding, and event construction behaviour
promised to downstream consumers.
"""

from __future__ import annotations

import logging

import pytest

from lib_config_aggregator import bind_trace_id, get_logger
from lib_config_aggregator.observability import TRACE_ID, log_debug, log_info, make_event


def test_null_handler_present() -> None:
    """Package logger should always include a NullHandler to avoid surprises."""

    logger = get_logger()
    assert any(isinstance(handler, logging.NullHandler) for handler in logger.handlers)


def test_trace_id_in_log(caplog: pytest.LogCaptureFixture) -> None:
    """Structured logs should include the bound trace identifier and contextual fields."""

    caplog.set_level(logging.INFO, logger="lib_config_aggregator")
    bind_trace_id("trace-123")
    log_info("configuration_resolved", key=None, source=None, keys=2)
    bind_trace_id(None)
    record = caplog.records[-1]
    assert getattr(record, "context") == {"trace_id": "trace-123", "key": None, "source": None, "keys": 2}


def test_disabled_level_emits_nothing(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="lib_config_aggregator")
    log_debug("cache_hit", key="k", source="ManualSource")
    assert not [record for record in caplog.records if record.getMessage() == "cache_hit"]


def test_bind_trace_id_clears_context() -> None:
    """Clearing the trace ID should reset the context variable to None."""

    bind_trace_id("trace-temp")
    bind_trace_id(None)
    assert TRACE_ID.get() is None


def test_make_event_merges_optional_payload() -> None:
    """make_event should merge optional metadata without mutating base keys."""

    event = make_event("db.host", "EnvSource", {"priority": 3})
    assert event == {"key": "db.host", "source": "EnvSource", "priority": 3}
    assert make_event(None, None) == {"key": None, "source": None}
