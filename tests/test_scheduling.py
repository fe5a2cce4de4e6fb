# tests/test_scheduling.py

from __future__ import annotations

from taskdeck.tasks.scheduling import SchedulingIndex, windows_overlap
from taskdeck.tasks.task_models import Task

from .helpers import at, timed


def test_overlapping_windows_conflict() -> None:
    a = timed("a", at(10), 60, id=1)
    b = timed("b", at(10, 30), 60, id=2)
    assert windows_overlap(a, b)
    assert windows_overlap(b, a)


def test_adjacent_windows_do_not_conflict() -> None:
    a = timed("a", at(10), 60, id=1)
    b = timed("b", at(11), 60, id=2)
    assert not windows_overlap(a, b)


def test_zero_duration_never_conflicts() -> None:
    a = timed("a", at(10), 60, id=1)
    z = timed("z", at(10, 30), 0, id=2)
    assert not windows_overlap(a, z)
    assert not windows_overlap(z, timed("z2", at(10, 30), 0, id=3))


def test_index_overlaps_excluding_self() -> None:
    index = SchedulingIndex()
    a = timed("a", at(10), 60, id=1)
    index.admit(a)

    moved = timed("a", at(10, 30), 60, id=1)
    assert index.overlaps(moved)
    assert not index.overlaps(moved, excluding_id=1)


def test_unscheduled_items_are_ignored() -> None:
    index = SchedulingIndex()
    index.admit(Task("floating", id=1))
    index.admit(Task("start only", id=2, start_time=at(10)))
    assert len(index) == 0
    assert not index.overlaps(Task("x", id=3))
    assert index.prioritized() == []


def test_prioritized_orders_by_start_then_id() -> None:
    index = SchedulingIndex()
    index.admit(timed("late", at(15), 30, id=1))
    index.admit(timed("zero b", at(9), 0, id=4))
    index.admit(timed("zero a", at(9), 0, id=3))
    index.admit(timed("early", at(8), 30, id=2))

    assert [t.id for t in index.prioritized()] == [2, 3, 4, 1]


def test_release_and_readmit() -> None:
    index = SchedulingIndex()
    a = timed("a", at(10), 60, id=1)
    index.admit(a)
    index.release(a)
    assert 1 not in index
    assert not index.overlaps(timed("b", at(10), 60, id=2))

    index.release(99)  # unknown id is a no-op
    index.admit(a)
    index.admit(timed("a", at(12), 60, id=1))  # re-admit replaces the old window
    assert [t.start_time for t in index.prioritized()] == [at(12)]


def test_find_conflict_returns_copy_of_earliest() -> None:
    index = SchedulingIndex()
    index.admit(timed("b", at(11), 60, id=2))
    index.admit(timed("a", at(10), 60, id=1))

    conflict = index.find_conflict(timed("wide", at(9), 240, id=3))
    assert conflict is not None
    assert conflict.id == 1

    conflict.title = "mutated"
    assert index.prioritized()[0].title == "a"
