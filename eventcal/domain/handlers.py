"""Domain event handlers, wired up at application startup."""

from __future__ import annotations

import logging

from eventcal.domain.bus import EventBus
from eventcal.domain.events import (
    EventsCreated,
    EventsDeleted,
    EventsUpdated,
    NotificationDue,
    OverlapAccepted,
)
from eventcal.domain.models import Notification
from eventcal.repos.memory import EventRepository, NotificationRepository

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Wires domain-event handlers to the bus with access to the repositories."""

    def __init__(
        self,
        bus: EventBus,
        event_repo: EventRepository,
        notification_repo: NotificationRepository,
    ) -> None:
        self.bus = bus
        self.event_repo = event_repo
        self.notification_repo = notification_repo
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(EventsCreated, self.on_events_created)
        self.bus.subscribe(EventsUpdated, self.on_events_updated)
        self.bus.subscribe(EventsDeleted, self.on_events_deleted)
        self.bus.subscribe(OverlapAccepted, self.on_overlap_accepted)
        self.bus.subscribe(NotificationDue, self.on_notification_due)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_events_created(self, event: EventsCreated) -> None:
        if event.group_id:
            logger.info(
                "Created series %s with %d instances", event.group_id, len(event.event_ids)
            )
        else:
            logger.info("Created event %s", ", ".join(event.event_ids))

    def on_events_updated(self, event: EventsUpdated) -> None:
        # A rescheduled event gets a fresh reminder.
        for event_id in event.event_ids:
            self.notification_repo.forget(event_id)
        logger.info("Updated %d event(s)", len(event.event_ids))

    def on_events_deleted(self, event: EventsDeleted) -> None:
        for event_id in event.event_ids:
            self.notification_repo.purge(event_id)
        logger.info("Deleted %d event(s)", len(event.event_ids))

    def on_overlap_accepted(self, event: OverlapAccepted) -> None:
        logger.warning(
            "Saved %s despite overlapping %s",
            ", ".join(event.event_ids),
            ", ".join(event.conflicting_event_ids),
        )

    def on_notification_due(self, event: NotificationDue) -> None:
        if self.event_repo.get(event.event_id) is None:
            return
        if self.notification_repo.is_notified(event.event_id):
            return

        self.notification_repo.record(
            Notification(
                event_id=event.event_id,
                message=event.message,
                fired_at=event.fired_at,
            )
        )
        logger.info("Notification fired for %s: %s", event.event_id, event.message)
