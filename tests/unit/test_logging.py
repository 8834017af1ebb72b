"""
Unit Tests - Logging Context
"""
import structlog

from pos_analytics.config.logging import (
    add_service_context,
    bind_request_context,
    clear_request_context,
)


class TestServiceContext:
    """Tests for the service context processor"""

    def test_stamps_service_and_environment(self):
        processor = add_service_context("pos-analytics", "testing")

        event = processor(None, "info", {"event": "Report generated"})

        assert event["service"] == "pos-analytics"
        assert event["environment"] == "testing"
        assert event["tenant_id"] is None

    def test_keeps_bound_tenant(self):
        processor = add_service_context("pos-analytics", "testing")

        event = processor(None, "info", {"event": "Report generated", "tenant_id": "store-1"})

        assert event["tenant_id"] == "store-1"


class TestRequestContext:
    """Tests for request-scoped log context"""

    def test_bound_ids_reach_events(self):
        bind_request_context("req-1", "store-1")
        try:
            event = structlog.contextvars.merge_contextvars(None, "info", {"event": "x"})
        finally:
            clear_request_context()

        assert event["request_id"] == "req-1"
        assert event["tenant_id"] == "store-1"

    def test_clear_leaves_other_context(self):
        structlog.contextvars.bind_contextvars(job="seed")
        bind_request_context("req-1", "store-1")

        clear_request_context()

        try:
            assert structlog.contextvars.get_contextvars() == {"job": "seed"}
        finally:
            structlog.contextvars.clear_contextvars()
