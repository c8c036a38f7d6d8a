from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean, Text, UniqueConstraint
from sqlalchemy.orm import relationship
import datetime
from huddle.models.user import Base
from huddle.core.config import DEFAULT_DURATION_MINUTES


MEETING_STATUSES = ("pending", "accepted", "rejected", "cancelled")
RESPONSE_TYPES = ("accepted", "rejected", "counter")


class MeetingSuggestion(Base):
    __tablename__ = "meeting_suggestions"
    id = Column(Integer, primary_key=True, index=True)
    author_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    group_id = Column(Integer, ForeignKey("groups.id"), nullable=True, index=True)
    title = Column(String(16), nullable=False)
    description = Column(Text, nullable=True)
    proposed_date_time = Column(DateTime, nullable=False)
    location = Column(String(255), nullable=True)
    duration_minutes = Column(Integer, default=DEFAULT_DURATION_MINUTES, nullable=False)
    requires_all_accept = Column(Boolean, default=False, nullable=False)
    status = Column(String(20), default="accepted", nullable=False)
    is_private = Column(Boolean, default=False, nullable=False)
    background_image_url = Column(String(512), nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    author = relationship("User", back_populates="meetings")
    group = relationship("Group", back_populates="meetings")
    participants = relationship("MeetingParticipant", back_populates="meeting")
    responses = relationship("MeetingResponse", back_populates="meeting")
    tags = relationship("MeetingTag", back_populates="meeting")


class MeetingParticipant(Base):
    __tablename__ = "meeting_participants"
    __table_args__ = (UniqueConstraint("meeting_id", "user_id", name="uq_meeting_participant"),)
    id = Column(Integer, primary_key=True)
    meeting_id = Column(Integer, ForeignKey("meeting_suggestions.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    joined_at = Column(DateTime, default=datetime.datetime.utcnow)

    meeting = relationship("MeetingSuggestion", back_populates="participants")
    user = relationship("User")


class MeetingResponse(Base):
    __tablename__ = "meeting_responses"
    id = Column(Integer, primary_key=True)
    meeting_id = Column(Integer, ForeignKey("meeting_suggestions.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    response_type = Column(String(20), nullable=False)  # 'accepted', 'rejected', 'counter'
    note = Column(Text, nullable=True)
    counter_date_time = Column(DateTime, nullable=True)
    counter_location = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    meeting = relationship("MeetingSuggestion", back_populates="responses")


class Tag(Base):
    __tablename__ = "tags"
    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_user_tag"),)
    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    color = Column(String(7), default="#6366f1", nullable=False)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)


class MeetingTag(Base):
    __tablename__ = "meeting_tags"
    __table_args__ = (UniqueConstraint("meeting_id", "tag_id", name="uq_meeting_tag"),)
    id = Column(Integer, primary_key=True)
    meeting_id = Column(Integer, ForeignKey("meeting_suggestions.id"), nullable=False, index=True)
    tag_id = Column(Integer, ForeignKey("tags.id"), nullable=False)
    added_by_user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    added_at = Column(DateTime, default=datetime.datetime.utcnow)

    meeting = relationship("MeetingSuggestion", back_populates="tags")
    tag = relationship("Tag")
