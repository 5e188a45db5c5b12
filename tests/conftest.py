import os

# must be set before the database module builds its engine
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
import requests
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models  # noqa: F401  registers the tables
from context_manager.context import context_set_db_session_rollback
from database.db import DBBase, get_db
from main import app
from shipping_partner.kurasi import kurasi_config


engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autoflush=False, bind=engine, expire_on_commit=False)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
        if context_set_db_session_rollback.get():
            db.rollback()
        else:
            db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@pytest.fixture(autouse=True)
def no_env_token(monkeypatch):
    monkeypatch.setattr(kurasi_config, "KURASI_TOKEN", "")
    monkeypatch.setattr(kurasi_config, "KURASI_CLIENT_CODE", "")


@pytest.fixture()
def client():
    DBBase.metadata.create_all(bind=engine)
    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        DBBase.metadata.drop_all(bind=engine)


@pytest.fixture()
def kurasi_api(monkeypatch):
    """
    Routes outgoing Kurasi calls by path suffix.

    Register answers in `routes`; every call is recorded in `calls`.
    """
    routes = {}
    calls = []

    def answer(method, url, json=None, headers=None):
        calls.append({"method": method, "url": url, "json": json, "headers": headers})
        for suffix, response in routes.items():
            if url.endswith(suffix):
                return response(json) if callable(response) else response
        raise AssertionError(f"unexpected Kurasi call {method} {url}")

    monkeypatch.setattr(
        requests,
        "request",
        lambda method, url, json=None, headers=None, timeout=None: answer(
            method, url, json, headers
        ),
    )
    monkeypatch.setattr(
        requests,
        "post",
        lambda url, json=None, headers=None, timeout=None: answer("POST", url, json, headers),
    )
    monkeypatch.setattr(
        requests,
        "get",
        lambda url, headers=None, timeout=None: answer("GET", url, None, headers),
    )
    return {"routes": routes, "calls": calls}


@pytest.fixture()
def anyio_backend():
    return "asyncio"
