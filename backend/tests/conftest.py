"""Shared fixtures: in-memory database, seeded provider, API client."""

import os

os.environ.setdefault("AGENDA_DATABASE_URL", "sqlite://")
os.environ.setdefault("AGENDA_EVENTS_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from agenda.config import settings
from agenda.database import build_engine, get_db, init_db
from agenda.main import create_app
from agenda.models import AvailabilityRules, ProviderSettings, SessionCredits
from agenda.routers.internal import require_internal_caller
from agenda.services.locks import LocalProviderLocks
from agenda.services.slots.config import BookingConfig

PROVIDER_ID = 1
CLIENT_ID = 100
OTHER_CLIENT_ID = 101
PROVIDER_TZ = "America/Sao_Paulo"


@pytest.fixture(autouse=True)
def no_events(monkeypatch):
    """Never talk to Redis from tests."""
    monkeypatch.setattr(settings, "events_enabled", False)


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    init_db(bind=engine)
    yield engine
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
def config():
    return BookingConfig(
        candidate_step_minutes=10,
        min_schedule_lead_hours=24,
        horizon_days=45,
        booking_timeout_seconds=5.0,
    )


@pytest.fixture
def locks():
    return LocalProviderLocks()


@pytest.fixture
def provider(db):
    """Provider 1 in São Paulo (UTC-3), 50 min sessions, 24h cancel window."""
    obj = ProviderSettings(
        provider_id=PROVIDER_ID,
        timezone=PROVIDER_TZ,
        session_duration_video_min=50,
        session_duration_chat_min=50,
        min_cancel_hours=24,
    )
    db.add(obj)
    db.commit()
    return obj


@pytest.fixture
def add_rule(db):
    """Factory: add one availability rule for the provider."""
    def _add(weekday, start_time, end_time, session_type="video", provider_id=PROVIDER_ID):
        rule = AvailabilityRules(
            provider_id=provider_id,
            weekday=weekday,
            start_time=start_time,
            end_time=end_time,
            session_type=session_type,
            is_active=True,
        )
        db.add(rule)
        db.commit()
        return rule
    return _add


@pytest.fixture
def grant_credits(db):
    """Factory: set a client's credit line to `total` purchased sessions."""
    def _grant(client_id, total, session_type="video", provider_id=PROVIDER_ID, used=0):
        line = SessionCredits(
            client_id=client_id,
            provider_id=provider_id,
            session_type=session_type,
            total=total,
            used=used,
        )
        db.add(line)
        db.commit()
        return line
    return _grant


@pytest.fixture
def app(session_factory):
    app = create_app(with_lifespan=False)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[require_internal_caller] = lambda: None
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


def identity_headers(user_id, role="client"):
    return {"X-User-ID": str(user_id), "X-User-Role": role}
