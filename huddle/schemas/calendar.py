from pydantic import BaseModel, ConfigDict, model_validator, field_validator
from typing import Optional
from datetime import datetime

from huddle.schemas.common import to_utc_naive


class CalendarCreate(BaseModel):
    name: str
    color: str = "#3b82f6"


class CalendarOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    connection_id: int
    name: str
    color: str
    is_visible: bool


class EventCreate(BaseModel):
    calendar_id: int
    title: str
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    is_all_day: bool = False
    location: Optional[str] = None
    external_id: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_instant(cls, value):
        return to_utc_naive(value)

    @model_validator(mode="after")
    def check_order(self):
        if self.end_time < self.start_time:
            raise ValueError("end_time must not be before start_time")
        return self


class EventOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    calendar_id: int
    external_id: str
    title: str
    description: Optional[str]
    start_time: datetime
    end_time: datetime
    is_all_day: bool
    location: Optional[str]


class ConflictOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event1_id: int
    event2_id: int
    conflict_type: str
    is_resolved: bool
    created_at: datetime
