import uuid
import datetime
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def new_user_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = 'users'
    id = Column(String(36), primary_key=True, default=new_user_id)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    meetings = relationship('MeetingSuggestion', back_populates='author')
    calendar_connections = relationship('CalendarConnection', back_populates='user')

    @property
    def display_name(self) -> str:
        name = " ".join(part for part in (self.first_name, self.last_name) if part)
        return name or self.email
