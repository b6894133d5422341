import os

# Must be set before the application modules are imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ICAL_SYNC_ENABLED", "false")
os.environ.setdefault("DB_LOG_SLOW_QUERIES", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from factories import FakeFeedClient
from rentals.auth import get_current_user
from rentals.database import Base, build_engine, get_db
from rentals.domain.ical.router import get_feed_client
from rentals.main import app
from rentals.models import Channel, User


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def user(db):
    user = User(firebase_uid="owner-1", email="owner@example.com", full_name="Owner")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def other_user(db):
    user = User(firebase_uid="owner-2", email="other@example.com")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def channels(db, user):
    rows = [
        Channel(user_id=user.id, name="Airbnb", commission_rate=3),
        Channel(user_id=user.id, name="Booking.com", commission_rate=15),
        Channel(user_id=user.id, name="Direct", commission_rate=0),
    ]
    db.add_all(rows)
    db.commit()
    return rows


@pytest.fixture
def client(db, user):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = lambda: user
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def fake_feeds():
    """URL -> events (or exception) served to the sync endpoint instead of the network"""
    feeds = {}
    app.dependency_overrides[get_feed_client] = lambda: FakeFeedClient(feeds)
    yield feeds
    app.dependency_overrides.pop(get_feed_client, None)
