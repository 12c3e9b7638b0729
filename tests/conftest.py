"""Shared fixtures for the relnet test suite."""
import os
import tempfile
from pathlib import Path

# Set env vars BEFORE any relnet imports
os.environ.setdefault("COOKIE_SECRET", "test-secret-key-for-testing")
os.environ.setdefault("DB_PATH", str(Path(tempfile.mkdtemp()) / "graph_data"))

import pytest
import kuzu
from fastapi.testclient import TestClient

from relnet.db import _init_schema, get_conn
from relnet import auth, crud


auth.COOKIE_SECRET = os.environ["COOKIE_SECRET"]


# ── Database fixtures ──

@pytest.fixture
def db_path(tmp_path):
    """Temp directory for a fresh KuzuDB."""
    return tmp_path / "test_db"


@pytest.fixture
def db(db_path):
    database = kuzu.Database(str(db_path))
    _init_schema(database)
    yield database
    database.close()


@pytest.fixture
def conn(db):
    c = kuzu.Connection(db)
    yield c
    c.close()


# ── Users ──

@pytest.fixture
def user_alice(conn):
    return auth.create_user(conn, "alice@example.com", "Alice", "password123")


@pytest.fixture
def user_bob(conn):
    return auth.create_user(conn, "bob@example.com", "Bob", "password456")


# ── Relationship types (Alice's) ──

@pytest.fixture
def types(conn, user_alice):
    uid = user_alice["id"]
    return {
        "friend": crud.create_relationship_type(conn, uid, "FRIEND", "Friend", "#3B82F6"),
        "colleague": crud.create_relationship_type(conn, uid, "COLLEAGUE", "Colleague", "#10B981"),
        "acquaintance": crud.create_relationship_type(conn, uid, "ACQUAINTANCE", "Acquaintance", "#14B8A6"),
        "other": crud.create_relationship_type(conn, uid, "OTHER", "Other"),
    }


@pytest.fixture
def star(conn, user_alice, types):
    """Pat knows you (friend) and Quinn (colleague); Quinn knows you (acquaintance)."""
    uid = user_alice["id"]
    pat = crud.create_person(conn, uid, "Pat", surname="Lee",
                             relationship_to_user_id=types["friend"]["id"])
    quinn = crud.create_person(conn, uid, "Quinn",
                               relationship_to_user_id=types["acquaintance"]["id"])
    crud.create_relationship(conn, pat["id"], quinn["id"], types["colleague"]["id"])
    return {"pat": pat, "quinn": quinn, "user": user_alice}


@pytest.fixture
def pair(conn, user_alice, types):
    """Ann and Ben only know each other; neither knows you directly."""
    uid = user_alice["id"]
    ann = crud.create_person(conn, uid, "Ann")
    ben = crud.create_person(conn, uid, "Ben", nickname="Benny")
    crud.create_relationship(conn, ann["id"], ben["id"], types["friend"]["id"])
    crud.create_relationship(conn, ben["id"], ann["id"], types["friend"]["id"])
    return {"ann": ann, "ben": ben}


# ── FastAPI app fixtures ──

@pytest.fixture
def app_with_db(db):
    """FastAPI app with dependency override pointing at test DB."""
    from relnet.main import app

    def override_get_conn():
        c = kuzu.Connection(db)
        try:
            yield c
        finally:
            pass

    app.dependency_overrides[get_conn] = override_get_conn
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app_with_db):
    """Unauthenticated TestClient."""
    return TestClient(app_with_db, raise_server_exceptions=False)


def _client_for(app, user):
    token = auth.create_session_token(user["id"])
    return TestClient(app, raise_server_exceptions=False, cookies={"session": token})


@pytest.fixture
def auth_client(app_with_db, user_alice):
    """TestClient signed in as Alice."""
    return _client_for(app_with_db, user_alice)


@pytest.fixture
def bob_client(app_with_db, user_bob):
    return _client_for(app_with_db, user_bob)
