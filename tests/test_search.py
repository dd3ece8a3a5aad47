"""Tests for event search and view filtering."""

from __future__ import annotations

from datetime import date, time

import pytest

from eventcal.domain.models import CalendarView, Event
from eventcal.services.search import (
    filter_events_by_view,
    get_filtered_events,
    search_events,
)


@pytest.fixture()
def events() -> list[Event]:
    return [
        Event(
            id="1",
            title="팀 회의",
            date=date(2025, 11, 20),
            start_time=time(10, 0),
            end_time=time(11, 0),
            description="주간 팀 미팅",
            location="회의실 A",
        ),
        Event(
            id="2",
            title="점심 약속",
            date=date(2025, 11, 18),
            start_time=time(12, 30),
            end_time=time(13, 30),
            location="회사 근처 식당",
        ),
        Event(
            id="3",
            title="Team Sync",
            date=date(2025, 11, 28),
            start_time=time(9, 0),
            end_time=time(9, 30),
            description="weekly TEAM status",
        ),
        Event(
            id="4",
            title="분기 보고",
            date=date(2025, 12, 2),
            start_time=time(15, 0),
            end_time=time(16, 0),
        ),
    ]


def _ids(events: list[Event]) -> list[str]:
    return [e.id for e in events]


def test_search_matches_title_description_and_location(events):
    assert _ids(search_events(events, "회의")) == ["1"]
    assert _ids(search_events(events, "식당")) == ["2"]
    assert _ids(search_events(events, "status")) == ["3"]


@pytest.mark.parametrize("term", ["team", "TEAM", "TeAm"])
def test_search_is_case_insensitive(events, term):
    assert _ids(search_events(events, term)) == ["3"]


def test_search_trims_whitespace(events):
    assert _ids(search_events(events, "  팀 회의  ")) == ["1"]


@pytest.mark.parametrize("term", [None, "", "   "])
def test_blank_search_returns_everything(events, term):
    assert _ids(search_events(events, term)) == ["1", "2", "3", "4"]


def test_search_without_match_is_empty(events):
    assert search_events(events, "존재하지않는일정") == []


def test_week_view_keeps_only_the_containing_week(events):
    # 2025-11-20 falls in the week 2025-11-16 .. 2025-11-22
    filtered = filter_events_by_view(events, date(2025, 11, 20), CalendarView.WEEK)
    assert sorted(_ids(filtered)) == ["1", "2"]


def test_month_view_keeps_only_the_containing_month(events):
    filtered = filter_events_by_view(events, date(2025, 11, 1), CalendarView.MONTH)
    assert sorted(_ids(filtered)) == ["1", "2", "3"]


def test_filtered_events_are_sorted_by_date_and_time(events):
    result = get_filtered_events(events, "", date(2025, 11, 5), CalendarView.MONTH)
    assert _ids(result) == ["2", "1", "3"]


def test_filtered_events_combine_search_and_view(events):
    result = get_filtered_events(events, "team", date(2025, 11, 20), CalendarView.WEEK)
    assert result == []
    result = get_filtered_events(events, "team", date(2025, 11, 20), CalendarView.MONTH)
    assert _ids(result) == ["3"]


def test_filtered_events_without_view_only_search(events):
    assert _ids(get_filtered_events(events, "보고")) == ["4"]
