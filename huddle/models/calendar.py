from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean, Text, UniqueConstraint
from sqlalchemy.orm import relationship
import datetime
from huddle.models.user import Base


CONFLICT_TYPES = ("overlap", "duplicate")


class CalendarConnection(Base):
    __tablename__ = "calendar_connections"
    id = Column(Integer, primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    provider = Column(String(50), default="manual", nullable=False)
    email = Column(String(255), nullable=False)
    is_connected = Column(Boolean, default=True)
    last_sync = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    user = relationship("User", back_populates="calendar_connections")
    calendars = relationship("Calendar", back_populates="connection")


class Calendar(Base):
    __tablename__ = "calendars"
    id = Column(Integer, primary_key=True)
    connection_id = Column(Integer, ForeignKey("calendar_connections.id"), nullable=False, index=True)
    external_id = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    color = Column(String(7), default="#3b82f6", nullable=False)
    is_visible = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    connection = relationship("CalendarConnection", back_populates="calendars")
    events = relationship("Event", back_populates="calendar")


class Event(Base):
    __tablename__ = "events"
    id = Column(Integer, primary_key=True)
    calendar_id = Column(Integer, ForeignKey("calendars.id"), nullable=False, index=True)
    external_id = Column(String(255), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    is_all_day = Column(Boolean, default=False)
    location = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    calendar = relationship("Calendar", back_populates="events")


class Conflict(Base):
    __tablename__ = "conflicts"
    __table_args__ = (
        UniqueConstraint("event1_id", "event2_id", "conflict_type", name="uq_conflict_pair"),
    )
    id = Column(Integer, primary_key=True)
    event1_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    event2_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    conflict_type = Column(String(20), nullable=False)  # 'overlap', 'duplicate'
    is_resolved = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
