"""Shared fixtures: a fresh in-memory SQLite database per test."""

import os

# must be set before atelier.utils.settings is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from atelier.api import create_app
from atelier.data.database import build_engine, get_db, init_db
from atelier.domain.actor import Actor
from atelier.domain.enums import UserRole
from tests.fakes import FakeNotifier, make_user


@pytest.fixture
def engine():
    eng = build_engine("sqlite://")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=True, expire_on_commit=False, future=True)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def customer(db):
    user = make_user(db, email="ana@example.com")
    return Actor(user.id, UserRole.CUSTOMER)


@pytest.fixture
def admin(db):
    user = make_user(db, email="admin@example.com", role=UserRole.ADMIN)
    return Actor(user.id, UserRole.ADMIN)


@pytest.fixture
def client(session_factory):
    app = create_app()

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c
