from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from huddle.core.db import get_db
from huddle.core.errors import HuddleError, to_http
from huddle.auth.utils import get_current_user
from huddle.models.user import User
from huddle.schemas.calendar import CalendarCreate, CalendarOut, EventCreate, EventOut, ConflictOut
from huddle.schemas.common import to_utc_naive
from huddle.services import conflict_service, event_service

router = APIRouter()


# ---------------------------------------------------------
#                 CALENDARS & EVENTS
# ---------------------------------------------------------
@router.get("/calendars", response_model=List[CalendarOut])
def list_calendars(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return event_service.list_calendars(db, current_user.id)


@router.post("/calendars", response_model=CalendarOut, status_code=status.HTTP_201_CREATED)
def create_calendar(
    data: CalendarCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return event_service.create_calendar(db, current_user, data.name, data.color)


@router.get("/events", response_model=List[EventOut])
def list_events(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    # Reading events refreshes the user's conflicts
    conflict_service.detect_conflicts(db, current_user.id)
    return event_service.events_for_user(db, current_user.id)


@router.get("/events/range", response_model=List[EventOut])
def list_events_in_range(
    start_date: datetime = Query(...),
    end_date: datetime = Query(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    if end_date < start_date:
        raise HTTPException(status_code=400, detail="end_date must not be before start_date")
    return event_service.events_in_range(
        db, current_user.id, to_utc_naive(start_date), to_utc_naive(end_date)
    )


@router.post("/events", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(
    data: EventCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        return event_service.create_event(
            db,
            current_user.id,
            calendar_id=data.calendar_id,
            title=data.title,
            start_time=data.start_time,
            end_time=data.end_time,
            is_all_day=data.is_all_day,
            description=data.description,
            location=data.location,
            external_id=data.external_id,
        )
    except HuddleError as e:
        raise to_http(e)


@router.delete("/events/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        event_service.delete_event(db, current_user.id, event_id)
    except HuddleError as e:
        raise to_http(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------
#                 CONFLICTS
# ---------------------------------------------------------
@router.get("/conflicts", response_model=List[ConflictOut])
def list_conflicts(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return conflict_service.list_conflicts(db, current_user.id)


@router.get("/conflicts/unresolved", response_model=List[ConflictOut])
def list_unresolved_conflicts(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return conflict_service.unresolved_conflicts(db, current_user.id)


@router.post("/conflicts/detect", response_model=List[ConflictOut])
def detect_conflicts(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return conflict_service.detect_conflicts(db, current_user.id)


@router.post("/conflicts/{conflict_id}/resolve", status_code=status.HTTP_204_NO_CONTENT)
def resolve_conflict(
    conflict_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        conflict_service.resolve_conflict(db, conflict_id, current_user.id)
    except HuddleError as e:
        raise to_http(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
