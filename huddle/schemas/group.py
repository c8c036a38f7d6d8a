from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

from huddle.core.config import DEFAULT_GROUP_MEMBER_LIMIT


class GroupCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    is_private: bool = False
    member_limit: int = Field(DEFAULT_GROUP_MEMBER_LIMIT, gt=0)


class GroupOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str]
    owner_id: str
    is_private: bool
    member_limit: int
    created_at: datetime


class GroupMemberOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    role: str
    joined_at: datetime
