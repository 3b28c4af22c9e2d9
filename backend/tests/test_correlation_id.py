# tests/test_correlation_id.py
"""
Tests for correlation ID middleware, context management and log records.
"""

import json
import logging

from portfolio_ledger.utils.context import get_correlation_id, set_correlation_id, clear_correlation_id
from portfolio_ledger.utils.logging import CorrelationIdFilter, JsonFormatter, NO_CORRELATION_ID


def _record(message: str = "hello") -> logging.LogRecord:
    return logging.LogRecord("portfolio_ledger.test", logging.INFO, __file__, 1, message, None, None)


class TestCorrelationIdContext:
    """Tests for correlation ID context functions."""

    def test_get_returns_none_when_not_set(self):
        clear_correlation_id()
        assert get_correlation_id() is None

    def test_set_and_get_correlation_id(self):
        set_correlation_id("test-correlation-123")
        assert get_correlation_id() == "test-correlation-123"
        clear_correlation_id()

    def test_clear_correlation_id(self):
        set_correlation_id("test-correlation-456")
        clear_correlation_id()
        assert get_correlation_id() is None


class TestLogRecords:
    """Correlation ID on log records."""

    def test_filter_uses_placeholder_outside_request(self):
        clear_correlation_id()
        record = _record()

        assert CorrelationIdFilter().filter(record) is True
        assert record.correlation_id == NO_CORRELATION_ID

    def test_json_formatter_includes_correlation_id(self):
        set_correlation_id("trace-789")
        record = _record("Recorded IN 10")
        CorrelationIdFilter().filter(record)

        entry = json.loads(JsonFormatter().format(record))

        assert entry["correlation_id"] == "trace-789"
        assert entry["message"] == "Recorded IN 10"
        assert entry["level"] == "INFO"
        clear_correlation_id()


class TestCorrelationIdMiddleware:
    """Tests for correlation ID middleware."""

    def test_generates_correlation_id_when_not_provided(self, client):
        response = client.get("/health/live")

        assert response.status_code == 200
        correlation_id = response.headers["X-Correlation-ID"]
        assert len(correlation_id) == 36  # UUID length
        assert correlation_id.count("-") == 4

    def test_uses_provided_correlation_id(self, client):
        response = client.get("/health/live", headers={"X-Correlation-ID": "my-custom-trace-id-123"})
        assert response.headers["X-Correlation-ID"] == "my-custom-trace-id-123"

    def test_uses_request_id_header_as_fallback(self, client):
        response = client.get("/health/live", headers={"X-Request-ID": "my-request-id-456"})
        assert response.headers["X-Correlation-ID"] == "my-request-id-456"

    def test_prefers_correlation_id_over_request_id(self, client):
        response = client.get(
            "/health/live",
            headers={"X-Correlation-ID": "correlation-123", "X-Request-ID": "request-456"},
        )
        assert response.headers["X-Correlation-ID"] == "correlation-123"

    def test_present_on_error_responses(self, client):
        response = client.get("/assets/999")

        assert response.status_code == 404
        assert "X-Correlation-ID" in response.headers

    def test_different_requests_get_different_ids(self, client):
        id1 = client.get("/health/live").headers["X-Correlation-ID"]
        id2 = client.get("/health/live").headers["X-Correlation-ID"]

        assert id1 != id2
