from typing import Iterable, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from huddle.core.errors import NotFound, Unauthorized, ValidationFailed
from huddle.models.meeting import Tag, MeetingTag, MeetingSuggestion
from huddle.services import meeting_service


def create_tag(db: Session, user_id: str, name: str, color: str = "#6366f1") -> Tag:
    tag = Tag(user_id=user_id, name=name.strip(), color=color)
    db.add(tag)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationFailed(f"Tag '{name}' already exists")
    db.refresh(tag)
    return tag


def list_tags(db: Session, user_id: str) -> List[Tag]:
    return db.query(Tag).filter(Tag.user_id == user_id).order_by(Tag.name).all()


def _own_tag(db: Session, tag_id: int, user_id: str) -> Tag:
    tag = db.query(Tag).filter(Tag.id == tag_id).first()
    if tag is None:
        raise NotFound(f"Tag {tag_id} not found")
    if tag.user_id != user_id:
        raise Unauthorized("Tag belongs to another user")
    return tag


def add_meeting_tag(db: Session, meeting_id: int, tag_id: int, user_id: str) -> MeetingTag:
    meeting_service.get_meeting(db, meeting_id)
    _own_tag(db, tag_id, user_id)
    existing = db.query(MeetingTag).filter(
        MeetingTag.meeting_id == meeting_id, MeetingTag.tag_id == tag_id
    ).first()
    if existing:
        return existing
    link = MeetingTag(meeting_id=meeting_id, tag_id=tag_id, added_by_user_id=user_id)
    db.add(link)
    db.commit()
    db.refresh(link)
    return link


def list_meeting_tags(db: Session, meeting_id: int) -> List[MeetingTag]:
    meeting_service.get_meeting(db, meeting_id)
    return db.query(MeetingTag).filter(MeetingTag.meeting_id == meeting_id).all()


def remove_meeting_tag(db: Session, meeting_id: int, tag_id: int, user_id: str) -> None:
    _own_tag(db, tag_id, user_id)
    db.query(MeetingTag).filter(
        MeetingTag.meeting_id == meeting_id, MeetingTag.tag_id == tag_id
    ).delete(synchronize_session=False)
    db.commit()


def search_tagged_meetings(db: Session, user_id: str, tag_ids: Iterable[int]) -> List[MeetingSuggestion]:
    tag_ids = list(tag_ids)
    if not tag_ids:
        raise ValidationFailed("Tag IDs are required")
    meetings = db.query(MeetingSuggestion).join(
        MeetingTag, MeetingTag.meeting_id == MeetingSuggestion.id
    ).join(Tag, Tag.id == MeetingTag.tag_id).filter(
        Tag.user_id == user_id, Tag.id.in_(tag_ids)
    ).distinct().all()
    return sorted(meetings, key=lambda m: (m.created_at, m.id), reverse=True)
