"""Service for editing single instances, whole series, and moving events."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Sequence

from eventcal.domain.errors import EventNotMovableError, InvalidRepeatRuleError
from eventcal.domain.models import Event, EventForm, RepeatInfo
from eventcal.services.recurrence import DEFAULT_HORIZON, MAX_OCCURRENCES, expand_recurrence

logger = logging.getLogger(__name__)


def apply_single_edit(event: Event, form: EventForm) -> Event:
    """Apply *form* to *event* alone ("this instance only").

    The edited instance keeps its id but is detached from its series: its
    repeat rule is reset to a non-recurring one.
    """
    fields = form.form_fields()
    fields["repeat"] = RepeatInfo()
    return Event(id=event.id, **fields)


def apply_series_edit(
    series: Sequence[Event],
    edited: Event,
    form: EventForm,
    *,
    horizon: timedelta = DEFAULT_HORIZON,
    max_occurrences: int = MAX_OCCURRENCES,
) -> list[EventForm]:
    """Return the instances that replace *series* after editing it as a whole.

    *edited* is the instance the user opened; a date change on it shifts the
    series anchor (its earliest instance) by the same amount. The series keeps
    its group id. If *form* no longer repeats, the series collapses into one
    event on the form's date.
    """
    if not series:
        raise InvalidRepeatRuleError("series has no instances")

    if not form.repeat.is_recurring:
        fields = form.form_fields()
        fields["repeat"] = RepeatInfo()
        return [EventForm(**fields)]

    shift = form.date - edited.date
    anchor_date = min(event.date for event in series) + shift
    group_id = edited.repeat.id or series[0].repeat.id
    anchor = form.model_copy(update={"date": anchor_date})
    instances = expand_recurrence(
        anchor,
        group_id=group_id,
        horizon=horizon,
        max_occurrences=max_occurrences,
    )
    logger.info(
        "Series %s re-expanded: %d instances replaced by %d",
        group_id,
        len(series),
        len(instances),
    )
    return instances


def move_event(event: Event, target_date: date) -> Event:
    """Move *event* to *target_date*, keeping its times (drag and drop)."""
    if event.repeat.is_recurring:
        raise EventNotMovableError(
            f"event {event.id} belongs to a repeating series and cannot be moved"
        )
    return event.model_copy(update={"date": target_date})
