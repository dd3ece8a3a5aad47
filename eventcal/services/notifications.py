"""Service for deciding which events are due a reminder."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Collection, Iterable

from eventcal.domain.models import Event


def get_upcoming_events(
    events: Iterable[Event],
    now: datetime,
    notified_ids: Collection[str],
) -> list[Event]:
    """Return events whose reminder window contains *now*.

    An event is due when it has a reminder (``notification_time > 0``), has
    not been notified yet, starts after *now*, and starts no more than
    ``notification_time`` minutes after *now*. *now* is a naive local time.
    """
    due: list[Event] = []
    for event in events:
        if event.notification_time <= 0 or event.id in notified_ids:
            continue
        until_start = event.start_datetime - now
        if timedelta(0) < until_start <= timedelta(minutes=event.notification_time):
            due.append(event)
    return sorted(due, key=lambda e: (e.start_datetime, e.id))


def create_notification_message(event: Event) -> str:
    return f"{event.notification_time}분 후 {event.title} 일정이 시작됩니다."
