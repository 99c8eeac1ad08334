from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from webforms.api import deps
from webforms.core.config import settings as base_settings
from webforms.core.errors import MailTransportError
from webforms.db.base import Base
from webforms.db import models  # noqa: F401
from webforms.main import app
from webforms.services.subscribers import SubscriberStore


class FakeTransport:
    """Records every message; fails for recipients listed in ``fail_for``."""

    def __init__(self, fail_for=()):
        self.sent = []
        self.fail_for = set(fail_for)

    def send(self, message):
        if message.to in self.fail_for:
            raise MailTransportError(f"refused {message.to}")
        self.sent.append(message)


class FakeClock:
    def __init__(self, start):
        self.now = start

    def advance(self, seconds):
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture
def now():
    return datetime(2026, 2, 14, 15, 4, 5, tzinfo=timezone.utc)


@pytest.fixture
def clock(now):
    return FakeClock(now)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def make_settings():
    def _make(**overrides):
        return base_settings.model_copy(update=overrides)
    return _make


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autoflush=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def subscriber_store(db_session):
    return SubscriberStore(db_session)


@pytest.fixture
def app_settings(make_settings):
    return make_settings(
        NEWSLETTER_ADMIN_NOTIFICATION=True,
        NEWSLETTER_SEND_CONFIRMATION=True,
        NEWSLETTER_USE_DATABASE=False,
        NEWSLETTER_DOUBLE_OPTIN=False,
        SUBMISSION_LOG_DIR=None,
    )


@pytest.fixture
def client(app_settings, transport, clock):
    app.dependency_overrides[deps.get_settings] = lambda: app_settings
    app.dependency_overrides[deps.get_transport] = lambda: transport
    app.dependency_overrides[deps.get_clock] = lambda: clock.now
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def contact_form():
    return {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "subject": "Project enquiry",
        "message": "We would like to discuss a new analytics project.",
        "phone": "+44 20 7946 0958",
        "company": "Analytical Engines Ltd",
        "website": "",
    }
