from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Literal, Optional
from datetime import datetime

from huddle.core.config import DEFAULT_DURATION_MINUTES
from huddle.schemas.common import to_utc_naive

ResponseType = Literal["accepted", "rejected", "counter"]


class MeetingCreate(BaseModel):
    title: str
    description: Optional[str] = None
    proposed_date_time: datetime
    location: Optional[str] = None
    duration_minutes: int = Field(DEFAULT_DURATION_MINUTES, gt=0)
    requires_all_accept: bool = False
    is_private: bool = False
    group_id: Optional[int] = None
    participant_ids: List[str] = []
    image: Optional[str] = None  # base64 data URL

    @field_validator("proposed_date_time")
    @classmethod
    def normalize_instant(cls, value):
        return to_utc_naive(value)


class MeetingUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    proposed_date_time: Optional[datetime] = None
    duration_minutes: Optional[int] = Field(None, gt=0)
    is_private: Optional[bool] = None

    @field_validator("proposed_date_time")
    @classmethod
    def normalize_instant(cls, value):
        return to_utc_naive(value)


class BackgroundImage(BaseModel):
    image: str


class MeetingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    author_id: str
    group_id: Optional[int]
    title: str
    description: Optional[str]
    proposed_date_time: datetime
    location: Optional[str]
    duration_minutes: int
    requires_all_accept: bool
    status: str
    is_private: bool
    background_image_url: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime]


class ParticipantOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    meeting_id: int
    user_id: str
    joined_at: datetime


class RespondRequest(BaseModel):
    response_type: ResponseType
    note: Optional[str] = None
    counter_date_time: Optional[datetime] = None
    counter_location: Optional[str] = None

    @field_validator("counter_date_time")
    @classmethod
    def normalize_instant(cls, value):
        return to_utc_naive(value)


class ResponseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    meeting_id: int
    user_id: str
    response_type: str
    note: Optional[str]
    counter_date_time: Optional[datetime]
    counter_location: Optional[str]
    created_at: datetime


class AggregateOut(BaseModel):
    meeting_id: int
    count_accepted: int
    count_rejected: int
    count_counter: int
    responded: int
    participant_count: int
    all_accepted: bool
    requires_all_accept: bool
    summary: str


class TagCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    color: str = "#6366f1"


class TagOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    color: str


class MeetingTagCreate(BaseModel):
    tag_id: int


class MeetingTagOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    meeting_id: int
    tag_id: int
    added_by_user_id: str
    added_at: datetime
