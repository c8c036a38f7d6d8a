"""Conflict detection: half-open overlap, persistence and resolution."""
import random
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from conftest import at, make_calendar, make_event
from huddle.core.errors import NotFound, Unauthorized
from huddle.models import Conflict
from huddle.services import conflict_service, event_service


def span(event_id, start, end):
    return SimpleNamespace(id=event_id, start_time=start, end_time=end)


# ===== find_overlaps =====


def test_back_to_back_events_do_not_conflict():
    events = [span(1, at(10), at(11)), span(2, at(11), at(12))]
    assert conflict_service.find_overlaps(events) == []


def test_partial_overlap_is_reported_once():
    events = [span(2, at(10, 30), at(11, 30)), span(1, at(10), at(11))]
    assert conflict_service.find_overlaps(events) == [(1, 2)]


def test_containment_and_chains():
    events = [
        span(1, at(9), at(17)),
        span(2, at(10), at(11)),
        span(3, at(10, 30), at(12)),
        span(4, at(17), at(18)),
    ]
    assert conflict_service.find_overlaps(events) == [(1, 2), (1, 3), (2, 3)]


def test_zero_length_event_inside_another_overlaps():
    events = [span(1, at(9), at(11)), span(2, at(10), at(10))]
    assert conflict_service.find_overlaps(events) == [(1, 2)]


def test_sweep_matches_pairwise_check():
    rng = random.Random(7)
    base = datetime(2025, 3, 1)
    events = []
    for event_id in range(1, 60):
        start = base + timedelta(minutes=15 * rng.randint(0, 40))
        events.append(span(event_id, start, start + timedelta(minutes=15 * rng.randint(0, 8))))

    expected = sorted(
        (a.id, b.id)
        for a in events for b in events
        if a.id < b.id and conflict_service.overlaps(a, b)
    )
    assert conflict_service.find_overlaps(events) == expected


# ===== detect / resolve =====


def test_detect_persists_unresolved_overlap(db_session, alice):
    calendar = make_calendar(db_session, alice)
    a = make_event(db_session, calendar, at(10), at(11), "A")
    b = make_event(db_session, calendar, at(10, 30), at(11, 30), "B")

    created = conflict_service.detect_conflicts(db_session, alice.id)

    assert len(created) == 1
    conflict = created[0]
    assert (conflict.event1_id, conflict.event2_id) == (a.id, b.id)
    assert conflict.conflict_type == "overlap"
    assert conflict.is_resolved is False


def test_detect_ignores_adjacent_events(db_session, alice):
    calendar = make_calendar(db_session, alice)
    make_event(db_session, calendar, at(10), at(11), "A")
    make_event(db_session, calendar, at(11), at(12), "B")

    assert conflict_service.detect_conflicts(db_session, alice.id) == []
    assert conflict_service.unresolved_conflicts(db_session, alice.id) == []


def test_detect_is_idempotent(db_session, alice):
    calendar = make_calendar(db_session, alice)
    make_event(db_session, calendar, at(10), at(11), "A")
    make_event(db_session, calendar, at(10, 30), at(11, 30), "B")

    conflict_service.detect_conflicts(db_session, alice.id)
    assert conflict_service.detect_conflicts(db_session, alice.id) == []
    assert db_session.query(Conflict).count() == 1


def test_detect_spans_all_calendars_of_user(db_session, alice):
    work = make_calendar(db_session, alice, "Work")
    home = make_calendar(db_session, alice, "Home")
    make_event(db_session, work, at(10), at(11), "Standup")
    make_event(db_session, home, at(10, 45), at(12), "Dentist")

    assert len(conflict_service.detect_conflicts(db_session, alice.id)) == 1


def test_resolved_conflict_stays_resolved_after_rerun(db_session, alice):
    calendar = make_calendar(db_session, alice)
    make_event(db_session, calendar, at(10), at(11), "A")
    make_event(db_session, calendar, at(10, 30), at(11, 30), "B")
    conflict = conflict_service.detect_conflicts(db_session, alice.id)[0]

    conflict_service.resolve_conflict(db_session, conflict.id, alice.id)
    conflict_service.detect_conflicts(db_session, alice.id)

    unresolved_ids = [c.id for c in conflict_service.unresolved_conflicts(db_session, alice.id)]
    assert conflict.id not in unresolved_ids
    assert [c.id for c in conflict_service.list_conflicts(db_session, alice.id)] == [conflict.id]


def test_conflicts_are_scoped_to_owner(db_session, alice, bob):
    alice_cal = make_calendar(db_session, alice)
    bob_cal = make_calendar(db_session, bob)
    make_event(db_session, alice_cal, at(10), at(11), "A")
    make_event(db_session, bob_cal, at(10), at(11), "B")

    assert conflict_service.detect_conflicts(db_session, alice.id) == []

    make_event(db_session, bob_cal, at(10, 15), at(10, 45), "C")
    conflict = conflict_service.detect_conflicts(db_session, bob.id)[0]
    assert conflict_service.unresolved_conflicts(db_session, alice.id) == []
    with pytest.raises(Unauthorized):
        conflict_service.resolve_conflict(db_session, conflict.id, alice.id)


def test_resolve_unknown_conflict(db_session, alice):
    with pytest.raises(NotFound):
        conflict_service.resolve_conflict(db_session, 999, alice.id)


def test_deleting_event_removes_its_conflicts(db_session, alice):
    calendar = make_calendar(db_session, alice)
    a = make_event(db_session, calendar, at(10), at(11), "A")
    make_event(db_session, calendar, at(10, 30), at(11, 30), "B")
    conflict_service.detect_conflicts(db_session, alice.id)

    event_service.delete_event(db_session, alice.id, a.id)

    assert db_session.query(Conflict).count() == 0
    assert len(event_service.events_for_user(db_session, alice.id)) == 1
