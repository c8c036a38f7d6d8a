"""Shared fixtures: in-memory database, users, auth headers and a fake media store."""
from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from huddle.auth.utils import create_access_token
from huddle.core.db import get_db
from huddle.core.errors import DependencyFailure
from huddle.main import app
from huddle.models import Base, User, CalendarConnection, Calendar, Event
from huddle.services.media_service import get_media_store


class FakeMediaStore:
    def __init__(self):
        self.fail_upload = False
        self.fail_delete = False
        self.uploaded = []
        self.deleted = []

    def upload_image(self, payload, folder):
        if self.fail_upload:
            raise DependencyFailure("Failed to upload image")
        url = f"http://media.test/huddle-media/{folder}/{len(self.uploaded)}.png"
        self.uploaded.append(url)
        return url

    def delete_image(self, url):
        if self.fail_delete:
            raise DependencyFailure("Failed to delete image")
        self.deleted.append(url)


# ===== Database =====


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def threaded_session_factory(tmp_path):
    # File-backed so every session gets its own connection
    engine = create_engine(
        f"sqlite:///{tmp_path / 'huddle.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def media():
    return FakeMediaStore()


@pytest.fixture
def client(session_factory, media):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_media_store] = lambda: media
    yield TestClient(app)
    app.dependency_overrides.clear()


# ===== Users =====


def make_user(db, email, first_name=None):
    user = User(email=email, hashed_password="not-a-real-hash", first_name=first_name)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def alice(db_session):
    return make_user(db_session, "alice@example.com", "Alice")


@pytest.fixture
def bob(db_session):
    return make_user(db_session, "bob@example.com", "Bob")


@pytest.fixture
def carol(db_session):
    return make_user(db_session, "carol@example.com", "Carol")


def auth_headers(user):
    token = create_access_token({"sub": user.id})
    return {"Authorization": f"Bearer {token}"}


# ===== Calendar data =====


def make_calendar(db, user, name="Work"):
    connection = CalendarConnection(user_id=user.id, provider="manual", email=user.email)
    db.add(connection)
    db.flush()
    calendar = Calendar(connection_id=connection.id, external_id=f"{user.id}-{name}", name=name)
    db.add(calendar)
    db.commit()
    db.refresh(calendar)
    return calendar


def make_event(db, calendar, start, end, title="Event"):
    event = Event(
        calendar_id=calendar.id,
        external_id=f"{calendar.id}-{title}-{start.isoformat()}",
        title=title,
        start_time=start,
        end_time=end,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


def at(hour, minute=0, day=1):
    return datetime(2025, 3, day, hour, minute)
