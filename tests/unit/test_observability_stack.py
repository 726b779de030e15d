"""Logging helpers, stage timing and correlation ids."""

from __future__ import annotations

import json
import logging

import pytest

from dompetku.observability.logging import (
    CorrelationIdFilter,
    configure_logging,
    log_fallback,
    mask_user_id,
)
from dompetku.observability.middleware import (
    correlation_scope,
    get_correlation_id,
    new_correlation_id,
)
from dompetku.observability.timing import timed


class TestLogFallback:
    def test_records_component_and_reason(self, caplog):
        logger = logging.getLogger("test.fallback")
        with caplog.at_level(logging.INFO):
            log_fallback(logger, "sentiment", reason="no_label", elapsed_ms=1.5)

        record = caplog.records[-1]
        assert record.getMessage() == "fallback_applied"
        assert record.levelno == logging.INFO
        assert record.fallback_used is True
        assert record.component == "sentiment"
        assert record.reason == "no_label"
        assert record.elapsed_ms == 1.5

    def test_reason_is_optional(self, caplog):
        with caplog.at_level(logging.INFO):
            log_fallback(logging.getLogger("test.fallback"), "normalizer")
        assert not hasattr(caplog.records[-1], "reason")


class TestMaskUserId:
    def test_truncates(self):
        assert mask_user_id("6281234567890") == "628123..."

    def test_empty(self):
        assert mask_user_id("") is None
        assert mask_user_id(None) is None


class TestTimed:
    def test_records_elapsed_time(self, caplog):
        timings: dict[str, float] = {}
        with caplog.at_level(logging.INFO):
            with timed("lexicon", timings=timings) as timer:
                sum(range(100))

        assert timings["lexicon"] == timer.elapsed_ms >= 0
        record = caplog.records[-1]
        assert record.getMessage() == "component_latency"
        assert record.component == "lexicon"
        assert record.levelno == logging.INFO

    def test_slow_stage_warns(self, caplog):
        with caplog.at_level(logging.INFO):
            with timed("dialogue", slow_ms=-1):
                pass
        assert caplog.records[-1].levelno == logging.WARNING

    def test_records_even_when_stage_fails(self):
        timings: dict[str, float] = {}
        with pytest.raises(RuntimeError):
            with timed("normalizer", timings=timings):
                raise RuntimeError("boom")
        assert "normalizer" in timings


class TestCorrelationIds:
    def test_scope_binds_and_restores(self):
        assert get_correlation_id() == ""
        with correlation_scope("msg-123") as correlation_id:
            assert correlation_id == "msg-123"
            assert get_correlation_id() == "msg-123"
            with correlation_scope("other") as inner:
                assert inner == "msg-123"
        assert get_correlation_id() == ""

    def test_unsafe_candidate_is_replaced(self):
        generated = new_correlation_id("bad id\nwith newline")
        assert generated != "bad id\nwith newline"
        assert len(generated) == 36

    def test_filter_adds_correlation_id(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        with correlation_scope("abc"):
            assert CorrelationIdFilter().filter(record) is True
        assert record.correlation_id == "abc"


def test_configure_logging_emits_json_with_static_fields(capsys):
    configure_logging("INFO", "dompetku", "test")
    with correlation_scope("corr-1"):
        logging.getLogger("dompetku.test").info("session_saved", extra={"state": "INITIAL"})

    line = capsys.readouterr().err.strip().splitlines()[-1]
    payload = json.loads(line)
    assert payload["message"] == "session_saved"
    assert payload["service"] == "dompetku"
    assert payload["environment"] == "test"
    assert payload["correlation_id"] == "corr-1"
    assert payload["level"] == "INFO"
    assert payload["state"] == "INITIAL"
