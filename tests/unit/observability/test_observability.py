"""Unit tests for logging, tracing and metrics helpers."""

import logging

import orjson
import pytest

from cognishelf_search.config import Settings
from cognishelf_search.observability.context import get_trace_context, index_context, trace_context
from cognishelf_search.observability.logging import JsonFormatter, configure_logging, configure_logging_from_settings
from cognishelf_search.observability.metrics import (
    SEARCH_COUNT,
    get_metrics,
    get_metrics_content_type,
    track_latency,
)
from cognishelf_search.observability.tracing import create_span, init_tracing


@pytest.fixture
def reset_trace_context():
    token = trace_context.set(None)
    yield
    trace_context.reset(token)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(message="hello %s", args=("world",), name="cognishelf_search.search.inverted_index", **extra):
    record = logging.LogRecord(name, logging.INFO, __file__, 10, message, args, None)
    record.__dict__.update(extra)
    return record


@pytest.mark.unit
@pytest.mark.usefixtures("reset_trace_context")
class TestJsonFormatter:
    def test_core_fields_and_trace_ids(self):
        trace_context.set({"trace_id": "a" * 32, "span_id": "b" * 16})

        entry = orjson.loads(JsonFormatter().format(_record()))

        assert entry["message"] == "hello world"
        assert entry["level"] == "INFO"
        assert entry["logger"] == "cognishelf_search.search.inverted_index"
        assert entry["trace_id"] == "a" * 32
        assert entry["span_id"] == "b" * 16
        assert "index" not in entry

    def test_index_context_tags_records_and_restores(self):
        trace_context.set({"trace_id": "a" * 32, "span_id": "b" * 16})

        with index_context("templates"):
            entry = orjson.loads(JsonFormatter().format(_record()))

        assert entry["index"] == "templates"
        assert entry["trace_id"] == "a" * 32
        assert "index" not in get_trace_context()
        assert get_trace_context()["trace_id"] == "a" * 32

    def test_extra_fields_are_included_and_redacted(self):
        entry = orjson.loads(JsonFormatter().format(_record(query="会議", token="secret-value", tokens={"b", "a"})))

        assert entry["query"] == "会議"
        assert entry["token"] == "[REDACTED]"
        assert entry["tokens"] == ["a", "b"]

    def test_long_messages_truncated(self):
        entry = orjson.loads(JsonFormatter().format(_record(message="x" * 3000, args=())))
        assert len(entry["message"]) == JsonFormatter.MAX_MESSAGE_LEN + 3

    def test_trace_ids_generated_when_missing(self):
        ctx = get_trace_context()
        assert len(ctx["trace_id"]) == 32
        assert len(ctx["span_id"]) == 16


@pytest.mark.unit
class TestConfigureLogging:
    def test_installs_single_json_handler(self, restore_root_logger):
        configure_logging("debug", json_output=True, logger_levels={"cognishelf_search.search": "warning"})

        root = restore_root_logger
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
        assert logging.getLogger("cognishelf_search.search").level == logging.WARNING
        logging.getLogger("cognishelf_search.search").setLevel(logging.NOTSET)

    def test_plain_text_output(self, restore_root_logger):
        configure_logging("bogus", json_output=False)

        root = restore_root_logger
        assert root.level == logging.INFO
        assert not isinstance(root.handlers[0].formatter, JsonFormatter)

    def test_from_settings(self, restore_root_logger, monkeypatch):
        monkeypatch.setenv("COGNISHELF_LOG_LEVEL", "warning")
        monkeypatch.setenv("COGNISHELF_LOG_JSON", "false")

        configure_logging_from_settings(Settings())

        root = restore_root_logger
        assert root.level == logging.WARNING
        assert not isinstance(root.handlers[0].formatter, JsonFormatter)


@pytest.mark.unit
@pytest.mark.usefixtures("reset_trace_context")
class TestTracing:
    def test_span_id_published_to_log_context(self):
        init_tracing("cognishelf-search-test")

        with create_span("cognishelf.test", attributes={"index.name": "templates"}) as span:
            ctx = span.get_span_context()
            if ctx.is_valid:
                assert get_trace_context()["span_id"] == format(ctx.span_id, "016x")

    def test_exceptions_propagate(self):
        with pytest.raises(RuntimeError, match="boom"), create_span("cognishelf.failing"):
            raise RuntimeError("boom")


class _RecordingHistogram:
    def __init__(self):
        self.observations = []

    def labels(self, **labels):
        histogram = self

        class _Bound:
            def observe(self, value):
                histogram.observations.append((labels, value))

        return _Bound()


@pytest.mark.unit
class TestMetrics:
    def test_track_latency_observes_once(self):
        histogram = _RecordingHistogram()

        with track_latency(histogram, mode="simple"):
            pass

        assert len(histogram.observations) == 1
        labels, value = histogram.observations[0]
        assert labels == {"mode": "simple"}
        assert value >= 0

    def test_track_latency_observes_on_error(self):
        histogram = _RecordingHistogram()

        with pytest.raises(KeyError), track_latency(histogram, mode="fulltext"):
            raise KeyError("missing")

        assert len(histogram.observations) == 1

    def test_prometheus_exposition(self):
        SEARCH_COUNT.labels(mode="simple", status="ok").inc()

        payload = get_metrics()

        assert b"cognishelf_searches_total" in payload
        assert get_metrics_content_type().startswith("text/plain")
