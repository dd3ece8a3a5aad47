"""Service for searching events and narrowing them to the visible view."""

from __future__ import annotations

from datetime import date
from typing import Iterable

from eventcal.domain.models import CalendarView, Event
from eventcal.services.dates import get_days_in_month, get_week_dates, is_date_in_range


def search_events(events: Iterable[Event], term: str | None) -> list[Event]:
    """Return events whose title, description or location contains *term*.

    Matching is case-insensitive and ignores surrounding whitespace in *term*;
    a blank term matches everything.
    """
    needle = (term or "").strip().lower()
    if not needle:
        return list(events)
    return [
        event
        for event in events
        if needle in event.title.lower()
        or needle in event.description.lower()
        or needle in event.location.lower()
    ]


def filter_events_by_view(
    events: Iterable[Event], current_date: date, view: CalendarView
) -> list[Event]:
    """Keep the events inside the week or month that contains *current_date*."""
    if view == CalendarView.WEEK:
        week = get_week_dates(current_date)
        start, end = week[0], week[-1]
    else:
        start = current_date.replace(day=1)
        end = current_date.replace(
            day=get_days_in_month(current_date.year, current_date.month)
        )
    return [event for event in events if is_date_in_range(event.date, start, end)]


def get_filtered_events(
    events: Iterable[Event],
    term: str | None,
    current_date: date | None = None,
    view: CalendarView | None = None,
) -> list[Event]:
    """Search, then (if a view is given) narrow to it; ordered by date and time."""
    matched = search_events(events, term)
    if current_date is not None and view is not None:
        matched = filter_events_by_view(matched, current_date, view)
    return sorted(matched, key=lambda e: (e.date, e.start_time, e.id))
