"""Domain events emitted when the calendar changes."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class EventsCreated(BaseModel):
    """Fired after one event, or a whole series, is stored."""

    event_ids: list[str]
    group_id: str | None = None


class EventsUpdated(BaseModel):
    """Fired when stored events change date, time or content."""

    event_ids: list[str]


class EventsDeleted(BaseModel):
    event_ids: list[str]


class OverlapAccepted(BaseModel):
    """Fired when the user saves despite a reported overlap."""

    event_ids: list[str]
    conflicting_event_ids: list[str]


class NotificationDue(BaseModel):
    """Fired when an event's reminder window is reached (via /tick)."""

    event_id: str
    message: str
    fired_at: datetime
