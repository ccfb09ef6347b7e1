"""Tests for domain events and event handling."""
from __future__ import annotations

import logging
from datetime import datetime
from unittest.mock import Mock

from handshake.application.event_handlers import AuditLogHandler, DegradedPathHandler, register_event_handlers
from handshake.domain.events import DomainEvent, DomainEventPublisher, SearchCompleted, event_publisher


def make_event(**overrides) -> SearchCompleted:
    fields = dict(
        event_id="",
        timestamp=None,
        aggregate_id="1:2",
        source_id="1",
        target_id="2",
        success=True,
        degree=2,
        error_kind=None,
        nodes_explored=4,
        cache_hit=False,
    )
    fields.update(overrides)
    return SearchCompleted(**fields)


class TestDomainEvent:
    """Test base domain event functionality."""

    def test_domain_event_with_custom_values(self):
        """Test domain event creation with custom values."""
        timestamp = datetime(2024, 1, 1, 12, 0, 0)
        event = DomainEvent(event_id="custom-id", timestamp=timestamp, aggregate_id="1:2")

        assert event.event_id == "custom-id"
        assert event.timestamp == timestamp
        assert event.aggregate_id == "1:2"

    def test_defaults_are_filled_in(self):
        """Empty id and timestamp get generated values."""
        event = make_event()

        assert event.event_id
        assert isinstance(event.timestamp, datetime)
        assert event.dropped_ids == 0


class TestDomainEventPublisher:
    """Test domain event publisher functionality."""

    def test_publisher_is_singleton(self):
        assert DomainEventPublisher() is event_publisher

    def test_publish_event_with_handler(self):
        handler = Mock()
        event_publisher.subscribe(SearchCompleted, handler)

        event = make_event()
        event_publisher.publish(event)

        handler.assert_called_once_with(event)

    def test_publish_different_event_types(self):
        """Handlers only receive the event type they subscribed to."""
        handler = Mock()
        event_publisher.subscribe(SearchCompleted, handler)

        event_publisher.publish(DomainEvent(event_id="x", timestamp=datetime.now(), aggregate_id="a"))

        handler.assert_not_called()

    def test_failing_handler_does_not_stop_others(self):
        failing = Mock(side_effect=RuntimeError("handler broke"))
        healthy = Mock()
        event_publisher.subscribe(SearchCompleted, failing)
        event_publisher.subscribe(SearchCompleted, healthy)

        event_publisher.publish(make_event())

        healthy.assert_called_once()


class TestEventHandlers:
    """Test the registered search handlers."""

    def test_audit_log(self, caplog):
        with caplog.at_level(logging.INFO, logger="handshake.application.event_handlers"):
            AuditLogHandler().handle_search_completed(make_event(success=False, degree=None, error_kind="no-path-within-depth"))

        assert "[AUDIT]" in caplog.text
        assert "no-path-within-depth" in caplog.text

    def test_degraded_path_only_warns_when_ids_dropped(self, caplog):
        handler = DegradedPathHandler()
        with caplog.at_level(logging.WARNING, logger="handshake.application.event_handlers"):
            handler.handle_search_completed(make_event())
            assert "[DEGRADED]" not in caplog.text

            handler.handle_search_completed(make_event(dropped_ids=2))
            assert "[DEGRADED]" in caplog.text

    def test_register_event_handlers(self, caplog):
        register_event_handlers()
        register_event_handlers()

        with caplog.at_level(logging.INFO, logger="handshake.application.event_handlers"):
            event_publisher.publish(make_event())

        assert caplog.text.count("[AUDIT]") == 1
