import logging
from typing import List

from fastapi import APIRouter, Depends, BackgroundTasks, Body, Query, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

# --- Local Imports ---
from huddle.core.db import get_db
from huddle.core.errors import HuddleError, to_http
from huddle.auth.utils import get_current_user
from huddle.models.user import User
from huddle.schemas.meeting import (
    MeetingCreate,
    MeetingUpdate,
    MeetingOut,
    ParticipantOut,
    RespondRequest,
    ResponseOut,
    AggregateOut,
    BackgroundImage,
    TagCreate,
    TagOut,
    MeetingTagCreate,
    MeetingTagOut,
)
from huddle.services import meeting_service, response_service, tag_service
from huddle.services.media_service import MediaStore, get_media_store
from huddle.scheduler.reminder import schedule_reminder, cancel_reminder
from huddle.email.utils import send_invitation_emails

# ---------------------------------------------------------
#                 ROUTER SETUP
# ---------------------------------------------------------
router = APIRouter()


# ---------------------------------------------------------
#                 LISTINGS
# ---------------------------------------------------------
@router.get("/meetings", response_model=List[MeetingOut])
def list_my_meetings(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return meeting_service.list_for_user(db, current_user.id)


@router.get("/meetings/open", response_model=List[MeetingOut])
def list_open_meetings(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return meeting_service.list_open(db)


@router.get("/meetings/responses", response_model=List[ResponseOut])
def list_my_responses(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    # Degrades to an empty list so the meetings view still renders
    try:
        return response_service.responses_for_user(db, current_user.id)
    except SQLAlchemyError as e:
        logging.error(f"❌ Error fetching meeting responses for {current_user.id}: {e}")
        db.rollback()
        return []


@router.get("/meetings/search", response_model=List[MeetingOut])
def search_tagged_meetings(
    tag_ids: List[int] = Query(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        return tag_service.search_tagged_meetings(db, current_user.id, tag_ids)
    except HuddleError as e:
        raise to_http(e)


# ---------------------------------------------------------
#                 SUGGEST MEETING
# ---------------------------------------------------------
@router.post("/meetings", response_model=MeetingOut, status_code=status.HTTP_201_CREATED)
def create_meeting(
    data: MeetingCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    media: MediaStore = Depends(get_media_store),
):
    try:
        meeting = meeting_service.create_meeting(
            db,
            author_id=current_user.id,
            title=data.title,
            proposed_date_time=data.proposed_date_time,
            description=data.description,
            location=data.location,
            duration_minutes=data.duration_minutes,
            requires_all_accept=data.requires_all_accept,
            is_private=data.is_private,
            group_id=data.group_id,
            participant_ids=data.participant_ids,
            image=data.image,
            media=media,
        )
    except HuddleError as e:
        raise to_http(e)

    # Send invitations + Reminder
    invitees = [
        row.email for row in db.query(User.email).filter(
            User.id.in_(data.participant_ids), User.id != current_user.id
        )
    ] if data.participant_ids else []
    if invitees:
        background_tasks.add_task(
            send_invitation_emails,
            recipients=invitees,
            organizer=current_user.display_name,
            meeting_id=meeting.id,
            title=meeting.title,
            description=meeting.description,
            start_dt=meeting.proposed_date_time,
            location=meeting.location,
        )
    schedule_reminder(meeting.id, meeting.proposed_date_time)
    return meeting


# ---------------------------------------------------------
#                 SINGLE MEETING
# ---------------------------------------------------------
@router.get("/meetings/{meeting_id}", response_model=MeetingOut)
def get_meeting(
    meeting_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        return meeting_service.get_meeting(db, meeting_id)
    except HuddleError as e:
        raise to_http(e)


@router.put("/meetings/{meeting_id}", response_model=MeetingOut)
def update_meeting(
    meeting_id: int,
    data: MeetingUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        meeting = meeting_service.update_meeting(
            db, meeting_id, current_user.id, data.model_dump(exclude_unset=True)
        )
    except HuddleError as e:
        raise to_http(e)
    schedule_reminder(meeting.id, meeting.proposed_date_time)
    return meeting


@router.delete("/meetings/{meeting_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_meeting(
    meeting_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    media: MediaStore = Depends(get_media_store),
):
    try:
        meeting_service.delete_meeting(db, meeting_id, current_user.id, media=media)
    except HuddleError as e:
        raise to_http(e)
    cancel_reminder(meeting_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/meetings/{meeting_id}/cancel", response_model=MeetingOut)
def cancel_meeting(
    meeting_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        meeting = meeting_service.cancel_meeting(db, meeting_id, current_user.id)
    except HuddleError as e:
        raise to_http(e)
    cancel_reminder(meeting_id)
    return meeting


@router.post("/meetings/{meeting_id}/settle", response_model=MeetingOut)
def settle_meeting_status(
    meeting_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        return response_service.settle_status(db, meeting_id, current_user.id)
    except HuddleError as e:
        raise to_http(e)


@router.post("/meetings/{meeting_id}/background", response_model=MeetingOut)
def upload_background(
    meeting_id: int,
    data: BackgroundImage,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    media: MediaStore = Depends(get_media_store),
):
    try:
        return meeting_service.replace_background(db, meeting_id, current_user.id, data.image, media)
    except HuddleError as e:
        raise to_http(e)


# ---------------------------------------------------------
#                 PARTICIPANTS
# ---------------------------------------------------------
@router.post("/meetings/{meeting_id}/join")
def join_meeting(
    meeting_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        meeting_service.join_meeting(db, meeting_id, current_user.id)
    except HuddleError as e:
        raise to_http(e)
    return {"msg": "Joined meeting successfully"}


@router.post("/meetings/{meeting_id}/leave")
def leave_meeting(
    meeting_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        meeting_service.leave_meeting(db, meeting_id, current_user.id)
    except HuddleError as e:
        raise to_http(e)
    return {"msg": "Left meeting successfully"}


@router.get("/meetings/{meeting_id}/participants", response_model=List[ParticipantOut])
def list_participants(
    meeting_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        return meeting_service.list_participants(db, meeting_id)
    except HuddleError as e:
        raise to_http(e)


@router.post("/meetings/{meeting_id}/participants")
def invite_participants(
    meeting_id: int,
    user_ids: List[str] = Body(..., embed=True),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        added = meeting_service.invite_participants(db, meeting_id, current_user.id, user_ids)
    except HuddleError as e:
        raise to_http(e)
    return {"msg": "Participants invited", "added": added}


# ---------------------------------------------------------
#                 RESPONSES
# ---------------------------------------------------------
@router.post("/meetings/{meeting_id}/respond", response_model=ResponseOut, status_code=status.HTTP_201_CREATED)
def respond_to_meeting(
    meeting_id: int,
    data: RespondRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        return response_service.respond(
            db,
            meeting_id,
            current_user.id,
            data.response_type,
            note=data.note,
            counter_date_time=data.counter_date_time,
            counter_location=data.counter_location,
        )
    except HuddleError as e:
        raise to_http(e)


@router.get("/meetings/{meeting_id}/responses", response_model=List[ResponseOut])
def list_responses(
    meeting_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        return response_service.list_responses(db, meeting_id)
    except HuddleError as e:
        raise to_http(e)


@router.get("/meetings/{meeting_id}/aggregate", response_model=AggregateOut)
def get_aggregate(
    meeting_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        result = response_service.aggregate(db, meeting_id)
    except HuddleError as e:
        raise to_http(e)
    return AggregateOut(
        meeting_id=result.meeting_id,
        count_accepted=result.count_accepted,
        count_rejected=result.count_rejected,
        count_counter=result.count_counter,
        responded=result.responded,
        participant_count=result.participant_count,
        all_accepted=result.all_accepted,
        requires_all_accept=result.requires_all_accept,
        summary=result.summary,
    )


# ---------------------------------------------------------
#                 TAGS
# ---------------------------------------------------------
@router.post("/tags", response_model=TagOut, status_code=status.HTTP_201_CREATED)
def create_tag(
    data: TagCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        return tag_service.create_tag(db, current_user.id, data.name, data.color)
    except HuddleError as e:
        raise to_http(e)


@router.get("/tags", response_model=List[TagOut])
def list_tags(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return tag_service.list_tags(db, current_user.id)


@router.get("/meetings/{meeting_id}/tags", response_model=List[MeetingTagOut])
def list_meeting_tags(
    meeting_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        return tag_service.list_meeting_tags(db, meeting_id)
    except HuddleError as e:
        raise to_http(e)


@router.post("/meetings/{meeting_id}/tags", response_model=MeetingTagOut, status_code=status.HTTP_201_CREATED)
def add_meeting_tag(
    meeting_id: int,
    data: MeetingTagCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        return tag_service.add_meeting_tag(db, meeting_id, data.tag_id, current_user.id)
    except HuddleError as e:
        raise to_http(e)


@router.delete("/meetings/{meeting_id}/tags/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_meeting_tag(
    meeting_id: int,
    tag_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        tag_service.remove_meeting_tag(db, meeting_id, tag_id, current_user.id)
    except HuddleError as e:
        raise to_http(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
