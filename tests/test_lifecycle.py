"""Tests for the event bus lifecycle: handlers and notification bookkeeping."""

from __future__ import annotations

import logging
from datetime import date, datetime, time

import pytest

from eventcal.domain.bus import EventBus
from eventcal.domain.events import (
    EventsCreated,
    EventsDeleted,
    EventsUpdated,
    NotificationDue,
    OverlapAccepted,
)
from eventcal.domain.handlers import HandlerRegistry
from eventcal.domain.models import EventForm
from eventcal.repos.memory import EventRepository, NotificationRepository

_NOW = datetime(2025, 10, 1, 9, 55)


@pytest.fixture()
def env():
    """Fresh bus + repos + registry for each test."""
    bus = EventBus()
    event_repo = EventRepository()
    notification_repo = NotificationRepository()
    registry = HandlerRegistry(
        bus=bus,
        event_repo=event_repo,
        notification_repo=notification_repo,
    )

    class Env:
        pass

    e = Env()
    e.bus = bus
    e.event_repo = event_repo
    e.notification_repo = notification_repo
    e.registry = registry
    return e


def _store_event(env, **overrides):
    defaults = dict(
        title="회의",
        date=date(2025, 10, 1),
        start_time=time(10, 0),
        end_time=time(11, 0),
        notification_time=10,
    )
    defaults.update(overrides)
    return env.event_repo.add(EventForm(**defaults))


def _due(event) -> NotificationDue:
    return NotificationDue(
        event_id=event.id,
        message="10분 후 회의 일정이 시작됩니다.",
        fired_at=_NOW,
    )


# ---------------------------------------------------------------------------
# Bus
# ---------------------------------------------------------------------------


def test_bus_calls_handlers_in_registration_order():
    bus = EventBus()
    calls: list[str] = []
    bus.subscribe(EventsDeleted, lambda e: calls.append("first"))
    bus.subscribe(EventsDeleted, lambda e: calls.append("second"))

    bus.publish(EventsDeleted(event_ids=["x"]))
    bus.publish(EventsUpdated(event_ids=["x"]))

    assert calls == ["first", "second"]


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


def test_notification_due_is_recorded_once(env):
    event = _store_event(env)

    env.bus.publish(_due(event))
    env.bus.publish(_due(event))

    history = env.notification_repo.list_history()
    assert len(history) == 1
    assert history[0].event_id == event.id
    assert history[0].fired_at == _NOW
    assert env.notification_repo.is_notified(event.id)


def test_notification_for_unknown_event_is_ignored(env):
    env.bus.publish(
        NotificationDue(event_id="missing", message="...", fired_at=_NOW)
    )
    assert env.notification_repo.list_history() == []


def test_update_resets_notified_flag(env):
    event = _store_event(env)
    env.bus.publish(_due(event))

    env.bus.publish(EventsUpdated(event_ids=[event.id]))

    assert not env.notification_repo.is_notified(event.id)
    assert len(env.notification_repo.list_history()) == 1


def test_delete_drops_flag_and_history(env):
    event = _store_event(env)
    other = _store_event(env, title="점심")
    env.bus.publish(_due(event))
    env.bus.publish(_due(other))

    env.bus.publish(EventsDeleted(event_ids=[event.id]))

    assert env.notification_repo.notified_ids() == {other.id}
    assert [n.event_id for n in env.notification_repo.list_history()] == [other.id]


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def test_series_creation_is_logged(env, caplog):
    with caplog.at_level(logging.INFO, logger="eventcal.domain.handlers"):
        env.bus.publish(EventsCreated(event_ids=["a", "b", "c"], group_id="series-1"))
    assert "Created series series-1 with 3 instances" in caplog.text


def test_accepted_overlap_is_logged_as_warning(env, caplog):
    with caplog.at_level(logging.WARNING, logger="eventcal.domain.handlers"):
        env.bus.publish(OverlapAccepted(event_ids=["new"], conflicting_event_ids=["old"]))
    assert any(r.levelno == logging.WARNING for r in caplog.records)
    assert "despite overlapping old" in caplog.text
