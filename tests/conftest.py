from __future__ import annotations

import os

# Must be set before glassworks.config is imported.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["GOOGLE_CLIENT_ID"] = "test-client.apps.googleusercontent.com"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime, timedelta, timezone

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import glassworks.model  # noqa: F401
from glassworks.auth.admission import AdmissionPolicy, SessionAdmissionController
from glassworks.auth.dependencies import get_admission_controller, get_identity_store
from glassworks.auth.password import hash_password
from glassworks.db.session import get_session
from glassworks.main import app
from glassworks.model.account import Account, SubscriptionStatus, SubscriptionTier
from glassworks.services.identity_store import IdentityStore


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def store(session):
    return IdentityStore(session)


@pytest.fixture
def clock():
    return FakeClock(datetime.now(timezone.utc).replace(microsecond=0))


@pytest.fixture
def controller(store, clock):
    return SessionAdmissionController(store, policy=AdmissionPolicy(), clock=clock)


@pytest.fixture
def make_account(store, clock):
    def _make(email: str = "owner@example.com", password: str | None = "secret123", **fields) -> Account:
        fields.setdefault("full_name", "Glass Owner")
        fields.setdefault("subscription_tier", SubscriptionTier.TRIAL)
        fields.setdefault("subscription_status", SubscriptionStatus.TRIAL)
        fields.setdefault("subscription_start_date", clock())
        fields.setdefault("subscription_end_date", clock() + timedelta(days=14))
        return store.add(
            Account(
                email=email,
                password_hash=hash_password(password) if password else None,
                **fields,
            )
        )

    return _make


@pytest.fixture
def client(engine, clock):
    def _get_session():
        with Session(engine) as session:
            yield session

    def _get_admission_controller(store: IdentityStore = Depends(get_identity_store)):
        return SessionAdmissionController(store, policy=AdmissionPolicy(), clock=clock)

    app.dependency_overrides[get_session] = _get_session
    app.dependency_overrides[get_admission_controller] = _get_admission_controller
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    def _register(email: str = "owner@example.com", password: str = "secret123", **fields):
        body = {"email": email, "password": password, "full_name": "Glass Owner", **fields}
        r = client.post("/auth/register", json=body)
        assert r.status_code == 201, r.text
        return r.json()

    return _register


@pytest.fixture
def login(client):
    def _login(email: str = "owner@example.com", password: str = "secret123", **fields):
        return client.post("/auth/login", json={"email": email, "password": password, **fields})

    return _login


@pytest.fixture
def auth_headers(register, login):
    """Registered and logged-in account; returns the bearer headers."""
    register()
    r = login(device_id="laptop-1")
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}
