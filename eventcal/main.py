"""FastAPI application: entry point for the calendar event service."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Sequence

from fastapi import FastAPI, HTTPException, Query, Response

from eventcal.config import get_settings
from eventcal.domain.bus import EventBus
from eventcal.domain.errors import CalendarError
from eventcal.domain.events import (
    EventsCreated,
    EventsDeleted,
    EventsUpdated,
    NotificationDue,
    OverlapAccepted,
)
from eventcal.domain.handlers import HandlerRegistry
from eventcal.domain.models import (
    CalendarView,
    ConflictReport,
    DayCell,
    EditScope,
    Event,
    EventCreateRequest,
    EventForm,
    EventUpdateRequest,
    MonthView,
    MoveEventRequest,
    Notification,
    RepeatInfo,
    WeekView,
)
from eventcal.logging_config import configure_logging
from eventcal.repos.memory import NotificationRepository, create_event_repository
from eventcal.services.conflicts import find_batch_conflicts, find_overlapping_events
from eventcal.services.dates import (
    WEEK_DAYS,
    format_month,
    format_week,
    get_events_for_date,
    get_events_for_day,
    get_week_dates,
    get_weeks_at_month,
)
from eventcal.services.editing import apply_series_edit, apply_single_edit, move_event
from eventcal.services.notifications import create_notification_message, get_upcoming_events
from eventcal.services.recurrence import expand_recurrence
from eventcal.services.search import filter_events_by_view, get_filtered_events

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Event Calendar Service")

# ── Singletons (created at import time for simplicity) ────────────────
event_bus = EventBus()
event_repo = create_event_repository(seed=settings.seed_events)
notification_repo = NotificationRepository()

handler_registry = HandlerRegistry(
    bus=event_bus,
    event_repo=event_repo,
    notification_repo=notification_repo,
)

OVERLAP_MESSAGE = "다음 일정과 겹칩니다. 계속 진행하시겠습니까?"


# ── Helpers ───────────────────────────────────────────────────────────


def _get_or_404(event_id: str) -> Event:
    event = event_repo.get(event_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


def _bad_request(exc: CalendarError) -> HTTPException:
    logger.warning("Rejected calendar input: %s", exc)
    return HTTPException(status_code=400, detail=str(exc))


def _expand(form: EventForm) -> list[EventForm]:
    """Turn a submitted form into the instance(s) it stands for."""
    if not form.repeat.is_recurring:
        return [form.model_copy(update={"repeat": RepeatInfo()})]
    try:
        return expand_recurrence(
            form,
            horizon=settings.recurrence_horizon,
            max_occurrences=settings.max_occurrences,
        )
    except CalendarError as exc:
        raise _bad_request(exc) from exc


def _check_overlap(conflicts: Sequence[EventForm], allow_overlap: bool) -> None:
    """Block the save with a 409 unless the user chose to continue anyway."""
    if conflicts and not allow_overlap:
        report = ConflictReport(message=OVERLAP_MESSAGE, conflicts=list(conflicts))
        raise HTTPException(status_code=409, detail=report.model_dump(mode="json"))


def _publish_accepted_overlap(saved: Sequence[Event], conflicts: Sequence[EventForm]) -> None:
    if not conflicts:
        return
    event_bus.publish(
        OverlapAccepted(
            event_ids=[e.id for e in saved],
            conflicting_event_ids=[c.id for c in conflicts if isinstance(c, Event)],
        )
    )


def _day_cell(value: date, day_events: Sequence[Event], holidays: dict[str, str]) -> DayCell:
    return DayCell(
        day=value.day,
        date=value,
        holiday=holidays.get(value.isoformat()),
        events=sorted(day_events, key=lambda e: (e.start_time, e.id)),
    )


# ── Routes ────────────────────────────────────────────────────────────


@app.get("/api/events", response_model=list[Event])
def list_events(
    q: str | None = None,
    view: CalendarView | None = None,
    current_date: date | None = None,
) -> list[Event]:
    """Return stored events, optionally searched and narrowed to a week/month.

    A ``current_date`` without a ``view`` narrows to its month; a ``view``
    without a ``current_date`` uses today.
    """
    if current_date is not None and view is None:
        view = CalendarView.MONTH
    if view is not None and current_date is None:
        current_date = date.today()
    return get_filtered_events(event_repo.list_all(), q, current_date, view)


@app.get("/api/events/{event_id}", response_model=Event)
def get_event(event_id: str) -> Event:
    """Return a single event by id."""
    return _get_or_404(event_id)


@app.post("/api/events", response_model=list[Event], status_code=201)
def create_event(payload: EventCreateRequest) -> list[Event]:
    """Create one event, or every instance of a repeating event.

    Overlaps with stored events (or between the new instances) are answered
    with 409 and the conflicting events, unless ``allow_overlap`` is set.
    """
    instances = _expand(payload.to_form())
    conflicts = find_batch_conflicts(instances, event_repo.list_all())
    _check_overlap(conflicts, payload.allow_overlap)

    created = event_repo.add_many(instances)
    event_bus.publish(
        EventsCreated(
            event_ids=[e.id for e in created],
            group_id=created[0].repeat.id,
        )
    )
    _publish_accepted_overlap(created, conflicts)
    return created


@app.put("/api/events/{event_id}", response_model=list[Event])
def update_event(
    event_id: str,
    payload: EventUpdateRequest,
    scope: EditScope = EditScope.SINGLE,
) -> list[Event]:
    """Update one instance, or (``scope=series``) its whole repeating series.

    Returns every event that now stands where the edited one was.
    """
    existing = _get_or_404(event_id)
    form = payload.to_form()

    if scope == EditScope.SERIES and existing.repeat.id:
        return _update_series(existing, form, payload.allow_overlap)

    if not existing.repeat.is_recurring and form.repeat.is_recurring:
        # A one-off event turned into a series.
        instances = _expand(form)
        conflicts = find_batch_conflicts(
            instances, event_repo.list_all(), exclude_ids=[existing.id]
        )
        _check_overlap(conflicts, payload.allow_overlap)
        event_repo.delete(existing.id)
        created = event_repo.add_many(instances)
        event_bus.publish(EventsDeleted(event_ids=[existing.id]))
        event_bus.publish(
            EventsCreated(event_ids=[e.id for e in created], group_id=created[0].repeat.id)
        )
        _publish_accepted_overlap(created, conflicts)
        return created

    if existing.repeat.is_recurring:
        updated = apply_single_edit(existing, form)
    else:
        updated = Event(id=existing.id, **_expand(form)[0].form_fields())

    conflicts = find_overlapping_events(updated, event_repo.list_all())
    _check_overlap(conflicts, payload.allow_overlap)
    event_repo.update(updated)
    event_bus.publish(EventsUpdated(event_ids=[updated.id]))
    _publish_accepted_overlap([updated], conflicts)
    return [updated]


def _update_series(existing: Event, form: EventForm, allow_overlap: bool) -> list[Event]:
    group_id = existing.repeat.id
    series = event_repo.list_group(group_id)
    try:
        instances = apply_series_edit(
            series,
            existing,
            form,
            horizon=settings.recurrence_horizon,
            max_occurrences=settings.max_occurrences,
        )
    except CalendarError as exc:
        raise _bad_request(exc) from exc

    old_ids = [e.id for e in series]
    conflicts = find_batch_conflicts(instances, event_repo.list_all(), exclude_ids=old_ids)
    _check_overlap(conflicts, allow_overlap)

    replaced = event_repo.replace_group(group_id, instances)
    event_bus.publish(EventsDeleted(event_ids=old_ids))
    event_bus.publish(
        EventsCreated(event_ids=[e.id for e in replaced], group_id=replaced[0].repeat.id)
    )
    _publish_accepted_overlap(replaced, conflicts)
    return replaced


@app.delete("/api/events/{event_id}", status_code=204)
def delete_event(event_id: str, scope: EditScope = EditScope.SINGLE) -> Response:
    """Delete one instance, or (``scope=series``) every instance of its series."""
    existing = _get_or_404(event_id)
    if scope == EditScope.SERIES and existing.repeat.id:
        removed = event_repo.delete_group(existing.repeat.id)
    else:
        event_repo.delete(existing.id)
        removed = [existing.id]
    event_bus.publish(EventsDeleted(event_ids=removed))
    return Response(status_code=204)


@app.post("/api/events/{event_id}/move", response_model=Event)
def move_event_to_date(event_id: str, body: MoveEventRequest) -> Event:
    """Move a one-off event to another date, keeping its times (drag and drop)."""
    existing = _get_or_404(event_id)
    try:
        moved = move_event(existing, body.date)
    except CalendarError as exc:
        raise _bad_request(exc) from exc
    if moved.date == existing.date:
        return existing

    conflicts = find_overlapping_events(moved, event_repo.list_all())
    _check_overlap(conflicts, body.allow_overlap)
    event_repo.update(moved)
    event_bus.publish(EventsUpdated(event_ids=[moved.id]))
    _publish_accepted_overlap([moved], conflicts)
    return moved


@app.get("/api/calendar/month", response_model=MonthView)
def month_view(target: date | None = Query(default=None, alias="date")) -> MonthView:
    """Return the month grid (Sunday-first weeks) with events bucketed per day."""
    current = target or date.today()
    events = filter_events_by_view(event_repo.list_all(), current, CalendarView.MONTH)
    weeks = [
        [
            _day_cell(
                current.replace(day=day), get_events_for_day(events, day), settings.holidays
            )
            if day is not None
            else DayCell()
            for day in week
        ]
        for week in get_weeks_at_month(current)
    ]
    return MonthView(title=format_month(current), week_days=WEEK_DAYS, weeks=weeks)


@app.get("/api/calendar/week", response_model=WeekView)
def week_view(target: date | None = Query(default=None, alias="date")) -> WeekView:
    """Return the seven days of the week containing ``date`` with their events."""
    current = target or date.today()
    events = filter_events_by_view(event_repo.list_all(), current, CalendarView.WEEK)
    days = [
        _day_cell(value, get_events_for_date(events, value), settings.holidays)
        for value in get_week_dates(current)
    ]
    return WeekView(title=format_week(current), week_days=WEEK_DAYS, days=days)


@app.get("/api/notifications", response_model=list[Notification])
def list_notifications() -> list[Notification]:
    """Return every notification fired so far."""
    return notification_repo.list_history()


@app.post("/tick")
def tick(now: datetime | None = None) -> dict:
    """Advance simulated time and fire any due notifications.

    Pass *now* as a query param to control the clock. Aware values are
    converted to naive local time; defaults to ``datetime.now()``.
    """
    current_time = now or datetime.now()
    if current_time.tzinfo is not None:
        current_time = current_time.astimezone().replace(tzinfo=None)

    due = get_upcoming_events(
        event_repo.list_all(), current_time, notification_repo.notified_ids()
    )
    fired: list[str] = []
    for event in due:
        message = create_notification_message(event)
        event_bus.publish(
            NotificationDue(event_id=event.id, message=message, fired_at=current_time)
        )
        fired.append(message)

    return {"time": current_time.isoformat(), "notifications": fired}
