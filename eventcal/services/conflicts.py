"""Service for detecting overlapping events on the same calendar date."""

from __future__ import annotations

from typing import Iterable, Sequence

from eventcal.domain.models import Event, EventForm


def is_overlapping(a: EventForm, b: EventForm) -> bool:
    """Return True if *a* and *b* share wall-clock time on the same date.

    Intervals are half-open: an event ending at 10:00 and another starting
    at 10:00 do NOT overlap.
    """
    return (
        a.date == b.date
        and a.start_time < b.end_time
        and b.start_time < a.end_time
    )


def _own_id(event: EventForm) -> str | None:
    return event.id if isinstance(event, Event) else None


def find_overlapping_events(
    candidate: EventForm,
    existing_events: Iterable[Event],
    *,
    exclude_ids: Iterable[str] = (),
) -> list[Event]:
    """Return existing events that overlap *candidate*, sorted by id.

    The candidate's own id (when it is a stored event being edited) and any
    *exclude_ids* are skipped, so an edit never conflicts with the stored copy
    of itself.
    """
    skip = set(exclude_ids)
    own_id = _own_id(candidate)
    if own_id is not None:
        skip.add(own_id)
    conflicts = [
        event
        for event in existing_events
        if event.id not in skip and is_overlapping(candidate, event)
    ]
    return sorted(conflicts, key=lambda e: e.id)


def find_batch_conflicts(
    candidates: Sequence[EventForm],
    existing_events: Iterable[Event],
    *,
    exclude_ids: Iterable[str] = (),
) -> list[EventForm]:
    """Return everything that conflicts with a batch of new instances.

    Each candidate is checked against *existing_events* and against the other
    candidates of the same batch. Stored conflicts come first (sorted by id),
    followed by the batch members that collide with each other, in batch
    order. Each conflicting event appears once.
    """
    existing = list(existing_events)
    skip = set(exclude_ids)
    skip.update(eid for eid in map(_own_id, candidates) if eid is not None)

    stored: dict[str, Event] = {}
    for candidate in candidates:
        for event in find_overlapping_events(candidate, existing, exclude_ids=skip):
            stored[event.id] = event

    in_batch: list[EventForm] = []
    for i, candidate in enumerate(candidates):
        if any(
            is_overlapping(candidate, other)
            for j, other in enumerate(candidates)
            if i != j
        ):
            in_batch.append(candidate)

    return [stored[eid] for eid in sorted(stored)] + in_batch
