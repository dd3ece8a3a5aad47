"""Errors raised by the calendar domain services."""

from __future__ import annotations


class CalendarError(ValueError):
    """Base class for rejected calendar input."""


class InvalidRepeatRuleError(CalendarError):
    """The repeat rule cannot be expanded (bad interval, type or end date)."""


class EventNotMovableError(CalendarError):
    """Raised when moving an instance that belongs to a recurring series."""
