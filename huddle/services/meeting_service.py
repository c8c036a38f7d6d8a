import logging
import threading
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from huddle.core.config import (
    MAX_SUGGESTIONS_PER_AUTHOR,
    MAX_TITLE_LENGTH,
    DEFAULT_DURATION_MINUTES,
    OPEN_MEETING_PARTICIPANT_CAP,
)
from huddle.core.errors import HuddleError, NotFound, QuotaExceeded, Unauthorized, ValidationFailed, DependencyFailure
from huddle.models.meeting import MeetingSuggestion, MeetingParticipant, MeetingResponse, MeetingTag
from huddle.models.user import User
from huddle.services import group_service

UPDATABLE_FIELDS = ("title", "description", "location", "proposed_date_time", "duration_minutes", "is_private")
REQUIRED_FIELDS = ("title", "proposed_date_time", "duration_minutes", "is_private")

# Serializes quota check + insert per author within this process.
# Across worker processes the quota stays advisory.
_AUTHOR_LOCKS = [threading.Lock() for _ in range(64)]


def _author_lock(author_id: str) -> threading.Lock:
    return _AUTHOR_LOCKS[hash(author_id) % len(_AUTHOR_LOCKS)]


def ensure_users_exist(db: Session, user_ids: Iterable[str]) -> None:
    wanted = set(user_ids)
    if not wanted:
        return
    found = {row.id for row in db.query(User.id).filter(User.id.in_(wanted))}
    missing = sorted(wanted - found)
    if missing:
        raise NotFound(f"Unknown users: {', '.join(missing)}")


def bound_title(title: Optional[str]) -> str:
    title = (title or "").strip()
    if not title:
        raise ValidationFailed("Title is required")
    return title[:MAX_TITLE_LENGTH]


def get_meeting(db: Session, meeting_id: int) -> MeetingSuggestion:
    meeting = db.query(MeetingSuggestion).filter(MeetingSuggestion.id == meeting_id).first()
    if meeting is None:
        raise NotFound(f"Meeting {meeting_id} not found")
    return meeting


def get_authored_meeting(db: Session, meeting_id: int, caller_id: str) -> MeetingSuggestion:
    meeting = get_meeting(db, meeting_id)
    if meeting.author_id != caller_id:
        raise Unauthorized("Only the author can modify this meeting")
    return meeting


def count_authored(db: Session, author_id: str) -> int:
    return db.query(func.count(MeetingSuggestion.id)).filter(
        MeetingSuggestion.author_id == author_id
    ).scalar()


def create_meeting(
    db: Session,
    author_id: str,
    title: str,
    proposed_date_time: datetime,
    description: str = None,
    location: str = None,
    duration_minutes: int = DEFAULT_DURATION_MINUTES,
    requires_all_accept: bool = False,
    is_private: bool = False,
    group_id: int = None,
    participant_ids: Iterable[str] = (),
    image: str = None,
    media=None,
) -> MeetingSuggestion:
    if proposed_date_time is None:
        raise ValidationFailed("proposed_date_time is required")
    title = bound_title(title)
    participant_ids = list(participant_ids or ())
    ensure_users_exist(db, participant_ids)

    with _author_lock(author_id):
        if count_authored(db, author_id) >= MAX_SUGGESTIONS_PER_AUTHOR:
            raise QuotaExceeded(f"You can only create up to {MAX_SUGGESTIONS_PER_AUTHOR} meetings")
        if group_id is not None:
            group_service.get_group(db, group_id)

        meeting = MeetingSuggestion(
            author_id=author_id,
            group_id=group_id,
            title=title,
            description=description,
            proposed_date_time=proposed_date_time,
            location=location,
            duration_minutes=duration_minutes or DEFAULT_DURATION_MINUTES,
            requires_all_accept=requires_all_accept,
            is_private=is_private,
            status="accepted",
        )
        db.add(meeting)
        db.flush()

        roster = dict.fromkeys([author_id, *participant_ids])
        for user_id in roster:
            db.add(MeetingParticipant(meeting_id=meeting.id, user_id=user_id))
        db.flush()

        if image:
            if media is None:
                db.rollback()
                raise DependencyFailure("No media store configured")
            try:
                meeting.background_image_url = media.upload_image(image, "meetings")
            except HuddleError:
                # Nothing is committed yet: the suggestion and its roster go away together
                db.rollback()
                logging.error(f"❌ Meeting creation by {author_id} rolled back after image upload failure")
                raise

        db.commit()
    db.refresh(meeting)
    logging.info(f"📅 Meeting {meeting.id} created by {author_id} with {len(roster)} participants")
    return meeting


def update_meeting(db: Session, meeting_id: int, caller_id: str, fields: dict) -> MeetingSuggestion:
    meeting = get_authored_meeting(db, meeting_id, caller_id)
    changes = {}
    for key, value in fields.items():
        if key not in UPDATABLE_FIELDS:
            raise ValidationFailed(f"Field '{key}' cannot be updated")
        if value is None and key in REQUIRED_FIELDS:
            raise ValidationFailed(f"Field '{key}' cannot be empty")
        changes[key] = bound_title(value) if key == "title" else value
    for key, value in changes.items():
        setattr(meeting, key, value)
    db.commit()
    db.refresh(meeting)
    return meeting


def set_status(db: Session, meeting: MeetingSuggestion, status: str) -> MeetingSuggestion:
    if meeting.status != status:
        logging.info(f"Meeting {meeting.id} status {meeting.status} -> {status}")
        meeting.status = status
        db.commit()
        db.refresh(meeting)
    return meeting


def cancel_meeting(db: Session, meeting_id: int, caller_id: str) -> MeetingSuggestion:
    meeting = get_authored_meeting(db, meeting_id, caller_id)
    return set_status(db, meeting, "cancelled")


def replace_background(db: Session, meeting_id: int, caller_id: str, image: str, media) -> MeetingSuggestion:
    meeting = get_authored_meeting(db, meeting_id, caller_id)
    new_url = media.upload_image(image, "meetings")
    old_url = meeting.background_image_url
    meeting.background_image_url = new_url
    db.commit()
    db.refresh(meeting)
    if old_url:
        release_image(media, old_url)
    return meeting


def release_image(media, url: str) -> None:
    try:
        media.delete_image(url)
    except DependencyFailure as e:
        logging.warning(f"⚠️ Could not release image {url}: {e}")


def delete_meeting(db: Session, meeting_id: int, caller_id: str, media=None) -> None:
    meeting = get_authored_meeting(db, meeting_id, caller_id)
    if meeting.background_image_url and media is not None:
        release_image(media, meeting.background_image_url)

    # Children before parent
    db.query(MeetingParticipant).filter(MeetingParticipant.meeting_id == meeting_id).delete(synchronize_session=False)
    db.query(MeetingResponse).filter(MeetingResponse.meeting_id == meeting_id).delete(synchronize_session=False)
    db.query(MeetingTag).filter(MeetingTag.meeting_id == meeting_id).delete(synchronize_session=False)
    db.delete(meeting)
    db.commit()
    logging.info(f"🧹 Meeting {meeting_id} deleted by {caller_id}")


# ---------------------------------------------------------
#                 PARTICIPANT ROSTER
# ---------------------------------------------------------
def is_participant(db: Session, meeting_id: int, user_id: str) -> bool:
    return db.query(MeetingParticipant.id).filter(
        MeetingParticipant.meeting_id == meeting_id,
        MeetingParticipant.user_id == user_id,
    ).first() is not None


def _add_participant(db: Session, meeting_id: int, user_id: str) -> bool:
    """Insert-if-absent. Returns True when a row was created."""
    if is_participant(db, meeting_id, user_id):
        return False
    db.add(MeetingParticipant(meeting_id=meeting_id, user_id=user_id))
    try:
        db.commit()
    except IntegrityError:
        # A concurrent join inserted the same row first
        db.rollback()
        return False
    return True


def join_meeting(db: Session, meeting_id: int, user_id: str) -> None:
    meeting = get_meeting(db, meeting_id)
    if meeting.is_private and meeting.author_id != user_id and not is_participant(db, meeting_id, user_id):
        in_group = meeting.group_id is not None and group_service.is_member(db, meeting.group_id, user_id)
        if not in_group:
            raise Unauthorized("Private meeting: ask the author for an invitation")
    if _add_participant(db, meeting_id, user_id):
        logging.info(f"👤 {user_id} joined meeting {meeting_id}")


def invite_participants(db: Session, meeting_id: int, caller_id: str, user_ids: Iterable[str]) -> List[str]:
    get_authored_meeting(db, meeting_id, caller_id)
    user_ids = list(dict.fromkeys(user_ids))
    ensure_users_exist(db, user_ids)
    return [user_id for user_id in user_ids if _add_participant(db, meeting_id, user_id)]


def leave_meeting(db: Session, meeting_id: int, user_id: str) -> None:
    get_meeting(db, meeting_id)
    db.query(MeetingParticipant).filter(
        MeetingParticipant.meeting_id == meeting_id,
        MeetingParticipant.user_id == user_id,
    ).delete(synchronize_session=False)
    db.commit()


def list_participants(db: Session, meeting_id: int) -> List[MeetingParticipant]:
    get_meeting(db, meeting_id)
    return db.query(MeetingParticipant).filter(
        MeetingParticipant.meeting_id == meeting_id
    ).order_by(MeetingParticipant.joined_at, MeetingParticipant.id).all()


# ---------------------------------------------------------
#                 QUERIES
# ---------------------------------------------------------
def _newest_first(meetings: Iterable[MeetingSuggestion]) -> List[MeetingSuggestion]:
    return sorted(meetings, key=lambda m: (m.created_at, m.id), reverse=True)


def list_for_user(db: Session, user_id: str) -> List[MeetingSuggestion]:
    """Meetings of the user's groups, meetings they authored and meetings they were invited to."""
    found: Dict[int, MeetingSuggestion] = {}

    group_ids = group_service.group_ids_for_user(db, user_id)
    if group_ids:
        for meeting in db.query(MeetingSuggestion).filter(MeetingSuggestion.group_id.in_(group_ids)):
            found[meeting.id] = meeting

    for meeting in db.query(MeetingSuggestion).filter(MeetingSuggestion.author_id == user_id):
        found[meeting.id] = meeting

    invited = db.query(MeetingSuggestion).join(
        MeetingParticipant, MeetingParticipant.meeting_id == MeetingSuggestion.id
    ).filter(MeetingParticipant.user_id == user_id)
    for meeting in invited:
        found[meeting.id] = meeting

    return _newest_first(found.values())


def list_group_meetings(db: Session, group_id: int) -> List[MeetingSuggestion]:
    group_service.get_group(db, group_id)
    meetings = db.query(MeetingSuggestion).filter(MeetingSuggestion.group_id == group_id).all()
    return _newest_first(meetings)


def participant_counts(db: Session) -> Dict[int, int]:
    rows = db.query(
        MeetingParticipant.meeting_id, func.count(MeetingParticipant.id)
    ).group_by(MeetingParticipant.meeting_id).all()
    return {meeting_id: count for meeting_id, count in rows}


def list_open(db: Session) -> List[MeetingSuggestion]:
    counts = participant_counts(db)
    meetings = db.query(MeetingSuggestion).all()
    return _newest_first(
        m for m in meetings if counts.get(m.id, 0) < OPEN_MEETING_PARTICIPANT_CAP
    )
