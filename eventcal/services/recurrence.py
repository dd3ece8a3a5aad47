"""Service for expanding a repeating event into its dated instances."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta

from dateutil.rrule import DAILY, MONTHLY, WEEKLY, YEARLY, rrule

from eventcal.domain.errors import InvalidRepeatRuleError
from eventcal.domain.models import EventForm, RepeatInfo, RepeatType, new_id

logger = logging.getLogger(__name__)

# Bounds for series without an end date.
DEFAULT_HORIZON = timedelta(days=365)
MAX_OCCURRENCES = 500

_FREQ_MAP = {
    RepeatType.DAILY: DAILY,
    RepeatType.WEEKLY: WEEKLY,
    RepeatType.MONTHLY: MONTHLY,
    RepeatType.YEARLY: YEARLY,
}


def validate_repeat_rule(repeat: RepeatInfo, anchor_date: date) -> None:
    """Raise ``InvalidRepeatRuleError`` if *repeat* cannot be expanded from *anchor_date*."""
    if repeat.type not in _FREQ_MAP:
        raise InvalidRepeatRuleError(f"repeat type {repeat.type!r} does not recur")
    if repeat.interval <= 0:
        raise InvalidRepeatRuleError("repeat interval must be a positive integer")
    if repeat.end_date is not None and repeat.end_date < anchor_date:
        raise InvalidRepeatRuleError(
            f"repeat end date {repeat.end_date} is before the event date {anchor_date}"
        )


def _horizon_end(start: date, horizon: timedelta) -> date:
    try:
        return start + horizon
    except OverflowError:
        return date.max


def expand_recurrence(
    anchor: EventForm,
    *,
    group_id: str | None = None,
    horizon: timedelta = DEFAULT_HORIZON,
    max_occurrences: int = MAX_OCCURRENCES,
) -> list[EventForm]:
    """Expand *anchor*'s repeat rule into date-ascending instances.

    The first instance falls on the anchor's own date. Every instance copies
    the anchor's fields and shares one series id (*group_id*, or a new one).
    Monthly and yearly rules skip months/years that lack the anchor's day
    number instead of clamping to the month end, which is how
    ``dateutil.rrule`` treats a ``DTSTART`` on the 29th-31st.

    Without an end date the series stops at ``anchor.date + horizon`` (or
    ``date.max``, whichever comes first); in every case at most
    *max_occurrences* instances are produced.
    """
    repeat = anchor.repeat
    validate_repeat_rule(repeat, anchor.date)

    until_date = repeat.end_date or _horizon_end(anchor.date, horizon)
    rule = rrule(
        _FREQ_MAP[repeat.type],
        dtstart=datetime.combine(anchor.date, datetime.min.time()),
        interval=repeat.interval,
        until=datetime.combine(until_date, datetime.min.time()),
    )

    series_repeat = repeat.model_copy(update={"id": group_id or new_id()})
    instances: list[EventForm] = []
    for occurrence in rule:
        if len(instances) >= max_occurrences:
            logger.info(
                "Series %s truncated at %d occurrences", series_repeat.id, max_occurrences
            )
            break
        instances.append(
            anchor.model_copy(
                update={"date": occurrence.date(), "repeat": series_repeat.model_copy()}
            )
        )

    logger.debug(
        "Expanded %s rule (interval=%d) from %s into %d instances",
        repeat.type,
        repeat.interval,
        anchor.date,
        len(instances),
    )
    return instances
