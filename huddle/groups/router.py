from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from huddle.core.db import get_db
from huddle.core.errors import HuddleError, to_http
from huddle.auth.utils import get_current_user
from huddle.models.user import User
from huddle.schemas.group import GroupCreate, GroupOut, GroupMemberOut
from huddle.schemas.meeting import MeetingOut
from huddle.services import group_service, meeting_service

router = APIRouter()


@router.post("/groups", response_model=GroupOut, status_code=status.HTTP_201_CREATED)
def create_group(
    data: GroupCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return group_service.create_group(
        db,
        owner_id=current_user.id,
        name=data.name,
        description=data.description,
        is_private=data.is_private,
        member_limit=data.member_limit,
    )


@router.post("/groups/{group_id}/join")
def join_group(
    group_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        group_service.join_group(db, group_id, current_user.id)
    except HuddleError as e:
        raise to_http(e)
    return {"msg": "Joined group successfully"}


@router.post("/groups/{group_id}/leave")
def leave_group(
    group_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        group_service.leave_group(db, group_id, current_user.id)
    except HuddleError as e:
        raise to_http(e)
    return {"msg": "Left group successfully"}


@router.get("/groups/{group_id}/members", response_model=List[GroupMemberOut])
def list_members(
    group_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        return group_service.list_members(db, group_id)
    except HuddleError as e:
        raise to_http(e)


@router.get("/groups/{group_id}/meetings", response_model=List[MeetingOut])
def list_group_meetings(
    group_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        return meeting_service.list_group_meetings(db, group_id)
    except HuddleError as e:
        raise to_http(e)
