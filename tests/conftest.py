"""Shared fixtures: a fresh SQLite file and app per test."""

from typing import Any, Dict, Optional

import pytest
from fastapi.testclient import TestClient

from store_ratings.api.server import create_app
from store_ratings.config import Config
from store_ratings.db import connect, init_db


ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "Admin@1234"

USER_NAME = "Alexandra Catherine Smith"
STORE_NAME = "Downtown Coffee Roasters Shop"
GOOD_PASSWORD = "Abcdef1!"


@pytest.fixture
def cfg(tmp_path) -> Config:
    return Config(
        DB_DSN=str(tmp_path / "test.sqlite"),
        AUTH_JWT_SECRET="test-secret-0123456789abcdef012345",
        AUTH_TOKEN_EXPIRE_MINUTES=60,
        AUTH_BOOTSTRAP_ADMIN_NAME="Platform Administrator",
        AUTH_BOOTSTRAP_ADMIN_EMAIL=ADMIN_EMAIL,
        AUTH_BOOTSTRAP_ADMIN_PASSWORD=ADMIN_PASSWORD,
        CORS_ALLOW_ORIGINS="",
    )


@pytest.fixture
def conn(cfg):
    init_db(cfg.DB_DSN)
    with connect(cfg.DB_DSN) as c:
        yield c


@pytest.fixture
def client(cfg):
    # Entering the context runs the lifespan (schema + admin bootstrap).
    with TestClient(create_app(cfg)) as c:
        yield c


def auth_headers(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def register(
    client: TestClient,
    *,
    email: str,
    name: str = USER_NAME,
    password: str = GOOD_PASSWORD,
    role: Optional[str] = None,
    address: Optional[str] = "12 Main Street",
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"name": name, "email": email, "password": password, "address": address}
    if role is not None:
        body["role"] = role
    r = client.post("/register", json=body)
    assert r.status_code == 201, r.text
    return r.json()


@pytest.fixture
def admin_token(client) -> str:
    r = client.post("/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert r.status_code == 200, r.text
    return r.json()["token"]


@pytest.fixture
def user_token(client) -> str:
    return register(client, email="shopper@example.com")["token"]


@pytest.fixture
def store_account(client) -> Dict[str, Any]:
    return register(client, email="owner@coffee.com", name=STORE_NAME, role="store")
