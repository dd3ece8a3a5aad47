"""Tests for the in-memory event repository and its series index."""

from __future__ import annotations

from datetime import date, time

from eventcal.domain.models import Event, EventForm, RepeatInfo, RepeatType
from eventcal.repos.memory import EventRepository, create_event_repository
from eventcal.services.editing import apply_single_edit
from eventcal.services.recurrence import expand_recurrence


def _form(day: date = date(2025, 11, 10), **overrides) -> EventForm:
    fields = dict(title="일정", date=day, start_time=time(9, 0), end_time=time(10, 0))
    fields.update(overrides)
    return EventForm(**fields)


def _series(repo: EventRepository, title: str = "반복") -> list[Event]:
    form = _form(
        title=title,
        repeat=RepeatInfo(type=RepeatType.WEEKLY, interval=1, end_date=date(2025, 11, 30)),
    )
    return repo.add_many(expand_recurrence(form))


def test_add_assigns_distinct_ids():
    repo = EventRepository()
    first = repo.add(_form())
    second = repo.add(_form())
    assert first.id != second.id
    assert repo.get(first.id) == first
    assert len(repo.list_all()) == 2


def test_adding_a_stored_event_assigns_a_new_id():
    repo = EventRepository()
    first = repo.add(_form())
    copy = repo.add(first)
    assert copy.id != first.id


def test_list_group_returns_series_in_date_order():
    repo = EventRepository()
    created = _series(repo)
    group_id = created[0].repeat.id

    group = repo.list_group(group_id)
    assert [e.id for e in group] == [e.id for e in created]
    assert repo.list_group("missing") == []


def test_detaching_an_instance_removes_it_from_its_group():
    repo = EventRepository()
    created = _series(repo)
    group_id = created[0].repeat.id

    repo.update(apply_single_edit(created[1], _form(created[1].date, title="단일")))

    assert [e.id for e in repo.list_group(group_id)] == [created[0].id, created[2].id]
    assert repo.get(created[1].id).title == "단일"


def test_delete_group_only_touches_that_series():
    repo = EventRepository()
    first = _series(repo, "A")
    second = _series(repo, "B")
    single = repo.add(_form())

    removed = repo.delete_group(first[0].repeat.id)

    assert sorted(removed) == sorted(e.id for e in first)
    remaining = {e.id for e in repo.list_all()}
    assert remaining == {e.id for e in second} | {single.id}


def test_delete_single_instance_updates_index():
    repo = EventRepository()
    created = _series(repo)
    repo.delete(created[0].id)
    assert len(repo.list_group(created[0].repeat.id)) == 2
    assert repo.get(created[0].id) is None


def test_replace_group_swaps_instances():
    repo = EventRepository()
    created = _series(repo)
    group_id = created[0].repeat.id
    renamed = [
        form.model_copy(update={"title": "새 제목"})
        for form in expand_recurrence(created[0], group_id=group_id)
    ]

    replaced = repo.replace_group(group_id, renamed)

    assert len(repo.list_all()) == 3
    assert {e.title for e in repo.list_group(group_id)} == {"새 제목"}
    assert not {e.id for e in replaced} & {e.id for e in created}


def test_seeded_repository_has_a_series():
    repo = create_event_repository()
    assert len(repo.list_group("seed-weekly-exercise")) == 3
    assert create_event_repository(seed=False).list_all() == []
