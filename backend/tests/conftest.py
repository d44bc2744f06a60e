"""
Shared fixtures.

``store`` runs a test once per storage backend (in-memory and SQLite), so
the engine is checked against both implementations of the same contract.
"""
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.core.security import create_access_token, hash_password
from app.db.init_db import init_db
from app.db.session import make_engine, session_scope
from app.main import app
from app.storage import MemoryStore, SqlStore, get_store

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def sql_store():
    engine = make_engine("sqlite://")
    init_db(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    with session_scope(factory) as db:
        yield SqlStore(db)
    engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def store(request):
    return request.getfixturevalue(f"{request.param}_store")


def make_user(store, username="alpha", balance="25000", is_admin=False, password="secret123"):
    return store.create_user(
        username=username,
        password_hash=hash_password(password),
        team_name=f"Team {username}",
        balance=Decimal(balance),
        is_admin=is_admin,
    )


def make_player(store, username="ShadowSniper", owner_id=None, **extra):
    fields = dict(
        username=username,
        real_name="Alex Chen",
        specialty="FPS Expert",
        level=87,
        accuracy=94,
        reaction_time=89,
        strategy=78,
        win_rate=68,
        experience=5,
        rating=4.5,
        owner_id=owner_id,
        is_released=owner_id is None,
    )
    fields.update(extra)
    return store.create_player(**fields)


@pytest.fixture
def client(memory_store):
    app.dependency_overrides[get_store] = lambda: memory_store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def auth_headers(user) -> dict:
    token = create_access_token({"sub": str(user.id), "is_admin": user.is_admin})
    return {"Authorization": f"Bearer {token}"}
