"""In-memory repositories for events and notifications."""

from __future__ import annotations

from datetime import date, time, timedelta
from typing import Iterable

from eventcal.domain.models import (
    Category,
    Event,
    EventForm,
    Notification,
    RepeatInfo,
    RepeatType,
)


class EventRepository:
    """Dict-backed store for Event instances, keyed by id.

    Keeps a ``series id -> instance ids`` index so whole-series edits and
    deletes do not scan the store.
    """

    def __init__(self) -> None:
        self._store: dict[str, Event] = {}
        self._groups: dict[str, list[str]] = {}

    def add(self, form: EventForm) -> Event:
        """Persist *form* under a newly assigned id and return the stored event."""
        event = Event(**form.form_fields())
        self._store[event.id] = event
        self._index(event)
        return event

    def add_many(self, forms: Iterable[EventForm]) -> list[Event]:
        return [self.add(form) for form in forms]

    def get(self, event_id: str) -> Event | None:
        return self._store.get(event_id)

    def list_all(self) -> list[Event]:
        return list(self._store.values())

    def list_group(self, group_id: str) -> list[Event]:
        """Return all instances of a recurring series, date-ascending."""
        events = [self._store[eid] for eid in self._groups.get(group_id, [])]
        return sorted(events, key=lambda e: (e.date, e.id))

    def update(self, event: Event) -> Event:
        previous = self._store.get(event.id)
        if previous is not None:
            self._unindex(previous)
        self._store[event.id] = event
        self._index(event)
        return event

    def delete(self, event_id: str) -> None:
        event = self._store.pop(event_id, None)
        if event is not None:
            self._unindex(event)

    def delete_group(self, group_id: str) -> list[str]:
        """Delete every instance of a series; return the removed ids."""
        removed = self._groups.pop(group_id, [])
        for eid in removed:
            self._store.pop(eid, None)
        return removed

    def replace_group(self, group_id: str, forms: Iterable[EventForm]) -> list[Event]:
        """Swap a whole series for freshly expanded instances in one step."""
        self.delete_group(group_id)
        return self.add_many(forms)

    def clear(self) -> None:
        self._store.clear()
        self._groups.clear()

    def _index(self, event: Event) -> None:
        if event.repeat.id:
            self._groups.setdefault(event.repeat.id, []).append(event.id)

    def _unindex(self, event: Event) -> None:
        group_id = event.repeat.id
        if not group_id or group_id not in self._groups:
            return
        members = [eid for eid in self._groups[group_id] if eid != event.id]
        if members:
            self._groups[group_id] = members
        else:
            del self._groups[group_id]


class NotificationRepository:
    """Record of fired reminders; an event is notified at most once."""

    def __init__(self) -> None:
        self._notified: set[str] = set()
        self._history: list[Notification] = []

    def record(self, notification: Notification) -> None:
        self._notified.add(notification.event_id)
        self._history.append(notification)

    def list_history(self) -> list[Notification]:
        return list(self._history)

    def is_notified(self, event_id: str) -> bool:
        return event_id in self._notified

    def notified_ids(self) -> set[str]:
        return set(self._notified)

    def forget(self, event_id: str) -> None:
        self._notified.discard(event_id)

    def purge(self, event_id: str) -> None:
        """Forget *event_id* and drop its entries from the history."""
        self.forget(event_id)
        self._history = [n for n in self._history if n.event_id != event_id]

    def clear(self) -> None:
        self._notified.clear()
        self._history.clear()


# ---------------------------------------------------------------------------
# Seed data – a few events useful for trying out the calendar views
# ---------------------------------------------------------------------------


def _seed_events(repo: EventRepository) -> None:
    today = date.today()

    repo.add(
        EventForm(
            title="팀 회의",
            date=today,
            start_time=time(10, 0),
            end_time=time(11, 0),
            description="주간 팀 미팅",
            location="회의실 A",
            category=Category.WORK,
            notification_time=10,
        )
    )
    repo.add(
        EventForm(
            title="점심 약속",
            date=today + timedelta(days=1),
            start_time=time(12, 30),
            end_time=time(13, 30),
            location="회사 근처 식당",
            category=Category.PERSONAL,
            notification_time=60,
        )
    )
    # Weekly series, three instances sharing one group id
    group_id = "seed-weekly-exercise"
    for week in range(3):
        repo.add(
            EventForm(
                title="헬스",
                date=today + timedelta(weeks=week),
                start_time=time(19, 0),
                end_time=time(20, 0),
                location="강남 헬스장",
                category=Category.PERSONAL,
                repeat=RepeatInfo(
                    type=RepeatType.WEEKLY,
                    interval=1,
                    end_date=today + timedelta(weeks=2),
                    id=group_id,
                ),
            )
        )


def create_event_repository(seed: bool = True) -> EventRepository:
    """Return an EventRepository, optionally pre-loaded with sample data."""
    repo = EventRepository()
    if seed:
        _seed_events(repo)
    return repo
