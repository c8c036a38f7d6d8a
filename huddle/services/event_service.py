import logging
import uuid
from datetime import datetime
from typing import List

from sqlalchemy.orm import Session

from huddle.core.errors import NotFound, Unauthorized
from huddle.models.calendar import CalendarConnection, Calendar, Event, Conflict
from huddle.models.user import User


def _user_events(db: Session, user_id: str):
    return db.query(Event).join(
        Calendar, Event.calendar_id == Calendar.id
    ).join(
        CalendarConnection, Calendar.connection_id == CalendarConnection.id
    ).filter(CalendarConnection.user_id == user_id)


def events_for_user(db: Session, user_id: str) -> List[Event]:
    return _user_events(db, user_id).order_by(Event.start_time, Event.id).all()


def events_in_range(db: Session, user_id: str, start: datetime, end: datetime) -> List[Event]:
    return _user_events(db, user_id).filter(
        Event.start_time >= start,
        Event.end_time <= end,
    ).order_by(Event.start_time, Event.id).all()


def list_calendars(db: Session, user_id: str) -> List[Calendar]:
    return db.query(Calendar).join(
        CalendarConnection, Calendar.connection_id == CalendarConnection.id
    ).filter(CalendarConnection.user_id == user_id).all()


def create_calendar(db: Session, user: User, name: str, color: str = "#3b82f6") -> Calendar:
    """Create a manually managed calendar, reusing the user's manual connection."""
    connection = db.query(CalendarConnection).filter(
        CalendarConnection.user_id == user.id,
        CalendarConnection.provider == "manual",
    ).first()
    if connection is None:
        connection = CalendarConnection(user_id=user.id, provider="manual", email=user.email)
        db.add(connection)
        db.flush()
    calendar = Calendar(
        connection_id=connection.id,
        external_id=uuid.uuid4().hex,
        name=name,
        color=color,
    )
    db.add(calendar)
    db.commit()
    db.refresh(calendar)
    return calendar


def owner_of_calendar(db: Session, calendar_id: int) -> str:
    row = db.query(CalendarConnection.user_id).join(
        Calendar, Calendar.connection_id == CalendarConnection.id
    ).filter(Calendar.id == calendar_id).first()
    if row is None:
        raise NotFound(f"Calendar {calendar_id} not found")
    return row.user_id


def create_event(db: Session, user_id: str, calendar_id: int, title: str, start_time: datetime,
                 end_time: datetime, is_all_day: bool = False, description: str = None,
                 location: str = None, external_id: str = None) -> Event:
    if owner_of_calendar(db, calendar_id) != user_id:
        raise Unauthorized("Calendar belongs to another user")
    event = Event(
        calendar_id=calendar_id,
        external_id=external_id or uuid.uuid4().hex,
        title=title,
        description=description,
        start_time=start_time,
        end_time=end_time,
        is_all_day=is_all_day,
        location=location,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


def delete_event(db: Session, user_id: str, event_id: int) -> None:
    event = db.query(Event).filter(Event.id == event_id).first()
    if event is None:
        raise NotFound(f"Event {event_id} not found")
    if owner_of_calendar(db, event.calendar_id) != user_id:
        raise Unauthorized("Event belongs to another user")
    removed = db.query(Conflict).filter(
        (Conflict.event1_id == event_id) | (Conflict.event2_id == event_id)
    ).delete(synchronize_session=False)
    db.delete(event)
    db.commit()
    logging.info(f"Event {event_id} deleted with {removed} conflicts")
