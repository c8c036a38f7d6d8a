import logging
from typing import List

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from huddle.core.errors import NotFound, QuotaExceeded
from huddle.models.group import Group, GroupMember


def get_group(db: Session, group_id: int) -> Group:
    group = db.query(Group).filter(Group.id == group_id).first()
    if group is None:
        raise NotFound(f"Group {group_id} not found")
    return group


def is_member(db: Session, group_id: int, user_id: str) -> bool:
    return db.query(GroupMember.id).filter(
        GroupMember.group_id == group_id,
        GroupMember.user_id == user_id,
    ).first() is not None


def group_ids_for_user(db: Session, user_id: str) -> List[int]:
    rows = db.query(GroupMember.group_id).filter(GroupMember.user_id == user_id).all()
    return [row.group_id for row in rows]


def create_group(db: Session, owner_id: str, name: str, description: str = None,
                 is_private: bool = False, member_limit: int = None) -> Group:
    group = Group(
        name=name,
        description=description,
        owner_id=owner_id,
        is_private=is_private,
    )
    if member_limit is not None:
        group.member_limit = member_limit
    db.add(group)
    db.flush()
    db.add(GroupMember(group_id=group.id, user_id=owner_id, role="admin"))
    db.commit()
    db.refresh(group)
    logging.info(f"Group {group.id} created by {owner_id}")
    return group


def member_count(db: Session, group_id: int) -> int:
    return db.query(func.count(GroupMember.id)).filter(GroupMember.group_id == group_id).scalar()


def join_group(db: Session, group_id: int, user_id: str) -> None:
    group = get_group(db, group_id)
    if is_member(db, group_id, user_id):
        return
    if member_count(db, group_id) >= group.member_limit:
        raise QuotaExceeded(f"Group {group_id} is full")
    db.add(GroupMember(group_id=group_id, user_id=user_id))
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent join of the same user
        db.rollback()


def leave_group(db: Session, group_id: int, user_id: str) -> None:
    get_group(db, group_id)
    db.query(GroupMember).filter(
        GroupMember.group_id == group_id,
        GroupMember.user_id == user_id,
    ).delete(synchronize_session=False)
    db.commit()


def list_members(db: Session, group_id: int) -> List[GroupMember]:
    get_group(db, group_id)
    return db.query(GroupMember).filter(GroupMember.group_id == group_id).order_by(GroupMember.joined_at).all()
