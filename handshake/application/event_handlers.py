"""Event handlers for domain events."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from handshake.domain.events import SearchCompleted

logger = logging.getLogger(__name__)


class AuditLogHandler:
    """Logs every completed search for the audit trail."""

    def handle_search_completed(self, event: SearchCompleted) -> None:
        if event.success:
            outcome = f"degree {event.degree}"
        else:
            outcome = f"failed ({event.error_kind})"
        source = "cache" if event.cache_hit else f"{event.nodes_explored} nodes explored"
        logger.info(f"[AUDIT] Search {event.source_id} -> {event.target_id}: {outcome}, {source}")


class DegradedPathHandler:
    """Flags chains that came back with members missing."""

    def handle_search_completed(self, event: SearchCompleted) -> None:
        if event.dropped_ids:
            logger.warning(
                f"[DEGRADED] Search {event.source_id} -> {event.target_id} dropped "
                f"{event.dropped_ids} path members without a profile"
            )


def register_event_handlers():
    """Register all event handlers with the publisher."""
    from handshake.domain.events import event_publisher, SearchCompleted

    audit = AuditLogHandler()
    degraded = DegradedPathHandler()

    event_publisher.clear_subscribers()
    event_publisher.subscribe(SearchCompleted, audit.handle_search_completed)
    event_publisher.subscribe(SearchCompleted, degraded.handle_search_completed)
