import logging
from typing import Iterable, List, Set, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from huddle.core.errors import NotFound, Unauthorized
from huddle.models.calendar import Calendar, CalendarConnection, Conflict, Event
from huddle.services import event_service


# Half-open intervals: back-to-back events do not conflict
def overlaps(a, b) -> bool:
    return a.start_time < b.end_time and b.start_time < a.end_time


def find_overlaps(events: Iterable) -> List[Tuple[int, int]]:
    """Return every overlapping pair as ``(lower_id, higher_id)``, sorted.

    Sweep over events ordered by start time, keeping only events that are
    still running at the current start.
    """
    ordered = sorted(events, key=lambda e: (e.start_time, e.id))
    active = []
    pairs: Set[Tuple[int, int]] = set()
    for event in ordered:
        active = [other for other in active if other.end_time > event.start_time]
        for other in active:
            if overlaps(event, other):
                pairs.add((min(event.id, other.id), max(event.id, other.id)))
        active.append(event)
    return sorted(pairs)


def detect_conflicts(db: Session, user_id: str) -> List[Conflict]:
    """Persist an overlap conflict for every new overlapping pair; returns the new rows.

    Only ever inserts, so a resolved conflict stays resolved.
    """
    events = event_service.events_for_user(db, user_id)
    pairs = find_overlaps(events)
    if not pairs:
        return []

    event_ids = [e.id for e in events]
    known = {
        (row.event1_id, row.event2_id)
        for row in db.query(Conflict.event1_id, Conflict.event2_id).filter(
            Conflict.conflict_type == "overlap",
            Conflict.event1_id.in_(event_ids),
        )
    }
    created = [
        Conflict(event1_id=e1, event2_id=e2, conflict_type="overlap", is_resolved=False)
        for e1, e2 in pairs if (e1, e2) not in known
    ]
    if not created:
        return []

    db.add_all(created)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent pass already stored some of these pairs
        db.rollback()
        logging.info(f"Conflict detection for {user_id} raced with another pass")
        return []
    logging.info(f"⚠️ Detected {len(created)} new conflicts for {user_id}")
    return created


def _user_conflicts(db: Session, user_id: str):
    return db.query(Conflict).join(
        Event, Conflict.event1_id == Event.id
    ).join(
        Calendar, Event.calendar_id == Calendar.id
    ).join(
        CalendarConnection, Calendar.connection_id == CalendarConnection.id
    ).filter(CalendarConnection.user_id == user_id)


def list_conflicts(db: Session, user_id: str) -> List[Conflict]:
    return _user_conflicts(db, user_id).order_by(Conflict.id).all()


def unresolved_conflicts(db: Session, user_id: str) -> List[Conflict]:
    return _user_conflicts(db, user_id).filter(Conflict.is_resolved.is_(False)).order_by(Conflict.id).all()


def resolve_conflict(db: Session, conflict_id: int, user_id: str = None) -> Conflict:
    conflict = db.query(Conflict).filter(Conflict.id == conflict_id).first()
    if conflict is None:
        raise NotFound(f"Conflict {conflict_id} not found")
    if user_id is not None:
        owned = _user_conflicts(db, user_id).filter(Conflict.id == conflict_id).first()
        if owned is None:
            raise Unauthorized("Conflict belongs to another user")
    if not conflict.is_resolved:
        conflict.is_resolved = True
        db.commit()
        db.refresh(conflict)
    return conflict
