"""Timezone-naive calendar helpers used by the month and week views."""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import Iterable, TypeVar

from eventcal.domain.models import EventForm

E = TypeVar("E", bound=EventForm)

# Column order of both views; weeks start on Sunday.
WEEK_DAYS = ["일", "월", "화", "수", "목", "금", "토"]

_SUNDAY_FIRST = calendar.Calendar(firstweekday=calendar.SUNDAY)


def format_date(value: date, day: int | None = None) -> str:
    """Return ``YYYY-MM-DD`` for *value*, or for *day* of *value*'s month."""
    if day is not None:
        value = value.replace(day=day)
    return value.strftime("%Y-%m-%d")


def get_days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def get_weeks_at_month(value: date) -> list[list[int | None]]:
    """Return the Sunday-first week rows of *value*'s month.

    Every row has seven columns; days outside the month are ``None``.
    """
    return [
        [day or None for day in week]
        for week in _SUNDAY_FIRST.monthdayscalendar(value.year, value.month)
    ]


def get_week_start(value: date) -> date:
    # date.weekday() is Monday=0, so Sunday maps to 6
    return value - timedelta(days=(value.weekday() + 1) % 7)


def get_week_dates(value: date) -> list[date]:
    """Return the seven dates (Sunday..Saturday) of the week containing *value*."""
    start = get_week_start(value)
    return [start + timedelta(days=offset) for offset in range(7)]


def get_events_for_day(events: Iterable[E], day: int) -> list[E]:
    """Return events whose day-of-month is *day*.

    Callers pass events already narrowed to the displayed month.
    """
    return [event for event in events if event.date.day == day]


def get_events_for_date(events: Iterable[E], value: date) -> list[E]:
    return [event for event in events if event.date == value]


def format_month(value: date) -> str:
    return f"{value.year}년 {value.month}월"


def format_week(value: date) -> str:
    """Return a label like ``2025년 11월 3주``.

    A week belongs to the month its Thursday falls in, so the first days of
    a month can be labelled as the last week of the previous month.
    """
    thursday = get_week_start(value) + timedelta(days=4)
    week_number = (thursday.day - 1) // 7 + 1
    return f"{thursday.year}년 {thursday.month}월 {week_number}주"


def is_date_in_range(value: date, start: date, end: date) -> bool:
    return start <= value <= end
