"""Domain models for the calendar service."""

from __future__ import annotations

import datetime as dt
import uuid
from enum import StrEnum

from pydantic import (
    BaseModel,
    Field,
    SerializeAsAny,
    computed_field,
    field_validator,
    model_validator,
)


class Category(StrEnum):
    WORK = "업무"
    PERSONAL = "개인"
    FAMILY = "가족"
    OTHER = "기타"


class RepeatType(StrEnum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class EditScope(StrEnum):
    SINGLE = "single"
    SERIES = "series"


class CalendarView(StrEnum):
    WEEK = "week"
    MONTH = "month"


# Reminder offsets (minutes before start) offered by the event form.
NOTIFICATION_OPTIONS: dict[int, str] = {
    1: "1분 전",
    10: "10분 전",
    60: "1시간 전",
    120: "2시간 전",
    1440: "1일 전",
}


def new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class RepeatInfo(BaseModel):
    type: RepeatType = RepeatType.NONE
    interval: int = Field(default=0, ge=0)
    end_date: dt.date | None = None
    id: str | None = None

    @property
    def is_recurring(self) -> bool:
        return self.type != RepeatType.NONE


_REPEAT_UNITS = {
    RepeatType.DAILY: "일",
    RepeatType.WEEKLY: "주",
    RepeatType.MONTHLY: "월",
    RepeatType.YEARLY: "년",
}


def describe_repeat(repeat: RepeatInfo) -> str:
    """Return the short label shown next to repeating events, e.g. ``2주마다 반복``."""
    if not repeat.is_recurring:
        return ""
    label = f"{repeat.interval}{_REPEAT_UNITS[repeat.type]}마다 반복"
    if repeat.end_date is not None:
        label += f" (종료: {repeat.end_date.isoformat()})"
    return label


class EventForm(BaseModel):
    """Everything that describes an event except its persisted id."""

    title: str = Field(min_length=1)
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    description: str = ""
    location: str = ""
    category: Category = Category.OTHER
    repeat: RepeatInfo = Field(default_factory=RepeatInfo)
    notification_time: int = Field(default=0, ge=0)

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("title must not be blank")
        return value

    @field_validator("notification_time")
    @classmethod
    def _offered_reminder(cls, value: int) -> int:
        if value != 0 and value not in NOTIFICATION_OPTIONS:
            offered = ", ".join(str(minutes) for minutes in NOTIFICATION_OPTIONS)
            raise ValueError(f"notification_time must be 0 or one of {offered}")
        return value

    @model_validator(mode="after")
    def _end_after_start(self) -> EventForm:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self

    @property
    def start_datetime(self) -> dt.datetime:
        return dt.datetime.combine(self.date, self.start_time)

    def form_fields(self) -> dict:
        """Return the form's fields, dropping anything a subclass adds."""
        return self.model_dump(include=set(EventForm.model_fields))


class Event(EventForm):
    id: str = Field(default_factory=new_id)

    @computed_field
    @property
    def repeat_label(self) -> str:
        return describe_repeat(self.repeat)


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class EventCreateRequest(EventForm):
    allow_overlap: bool = False

    def to_form(self) -> EventForm:
        return EventForm(**self.form_fields())


class EventUpdateRequest(EventCreateRequest):
    pass


class MoveEventRequest(BaseModel):
    date: dt.date
    allow_overlap: bool = False


class ConflictReport(BaseModel):
    message: str
    # Stored events carry their id; new, unsaved instances do not.
    conflicts: list[SerializeAsAny[EventForm]] = Field(default_factory=list)


class Notification(BaseModel):
    event_id: str
    message: str
    fired_at: dt.datetime


class DayCell(BaseModel):
    day: int | None = None
    date: dt.date | None = None
    holiday: str | None = None
    events: list[Event] = Field(default_factory=list)


class MonthView(BaseModel):
    title: str
    week_days: list[str]
    weeks: list[list[DayCell]]


class WeekView(BaseModel):
    title: str
    week_days: list[str]
    days: list[DayCell]
