from __future__ import annotations

import dataclasses
import itertools
import re
import sys
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

# Make the marketplace package importable when running the tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from marketplace.app import create_app  # noqa: E402
from marketplace.core import config as core_config  # noqa: E402
from marketplace.db import models  # noqa: E402
from marketplace.db import session as db_session  # noqa: E402
from marketplace.repositories.sql_repository import SQLRepository  # noqa: E402
from marketplace.services.image_host import ImageKitClient  # noqa: E402
from marketplace.services.revocation import RevocationList  # noqa: E402

UPLOAD_URL = "https://upload.imagekit.test/api/v1/files/upload"
_FILE_NAME = re.compile(rb'name="file"; filename="([^"]*)"')


class FakeRedis:
    """In-memory stand-in for the few redis.Redis calls the revocation list makes."""

    def __init__(self):
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.closed = False

    def set(self, key, value, ex=None):
        self.store[key] = value
        if ex is not None:
            self.ttls[key] = ex
        return True

    def get(self, key):
        return self.store.get(key)

    def close(self):
        self.closed = True


class ImageKitStub:
    """httpx handler answering like the ImageKit upload endpoint; the URL echoes the uploaded file name."""

    def __init__(self, status_code: int = 200):
        self.status_code = status_code
        self.requests: list[httpx.Request] = []
        self._ids = itertools.count(1)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"message": "upload rejected"})
        n = next(self._ids)
        match = _FILE_NAME.search(request.read())
        name = match.group(1).decode() if match else f"product-{n}.jpg"
        return httpx.Response(
            200,
            json={
                "url": f"https://ik.imagekit.io/test/{name}",
                "thumbnailUrl": f"https://ik.imagekit.io/test/tr:w-200/{name}",
                "fileId": f"file_{n}",
            },
        )


@pytest.fixture()
def db_env(tmp_path, monkeypatch):
    """Point the app at a temporary SQLite file and reset settings/engine caches."""
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    monkeypatch.setenv("JWT_SECRET", "test_jwt_secret")
    monkeypatch.delenv("REDIS_URL", raising=False)
    monkeypatch.delenv("PRODUCTS_ALLOW_SELLER_FIELD", raising=False)
    monkeypatch.delenv("AUTH_ENFORCE_REVOCATION", raising=False)
    core_config.get_settings.cache_clear()
    db_session.dispose_engine()

    engine = db_session.get_engine()
    models.Base.metadata.drop_all(bind=engine)
    models.Base.metadata.create_all(bind=engine)

    yield db_file

    models.Base.metadata.drop_all(bind=db_session.get_engine())
    db_session.dispose_engine()
    core_config.get_settings.cache_clear()


@pytest.fixture()
def repo(db_env):
    return SQLRepository()


@pytest.fixture()
def fake_redis():
    return FakeRedis()


@pytest.fixture()
def imagekit():
    return ImageKitStub()


@pytest.fixture()
def build_client(db_env, fake_redis, imagekit):
    """Factory for a TestClient over a fresh app; keyword args override Settings fields."""
    clients = []

    def _build(repository=None, **overrides) -> TestClient:
        settings = dataclasses.replace(core_config.get_settings(), **overrides)
        image_host = ImageKitClient(
            private_key="test_private_key",
            upload_url=UPLOAD_URL,
            transport=httpx.MockTransport(imagekit),
        )
        app = create_app(
            settings=settings,
            repository=repository,
            revocation=RevocationList(fake_redis),
            image_host=image_host,
        )
        client = TestClient(app, base_url="https://testserver")
        client.__enter__()
        clients.append(client)
        return client

    yield _build

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture()
def client(build_client):
    return build_client()


def account_payload(**overrides) -> dict:
    payload = {
        "username": "meuser",
        "email": "me@example.com",
        "password": "password123",
        "fullName": {"firstName": "Me", "lastName": "User"},
        "phone": "1234567890",
    }
    payload.update(overrides)
    return payload


def login_token(client: TestClient, username: str, password: str = "password123") -> str:
    response = client.post("/api/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200
    token = response.cookies.get("token")
    assert token
    client.cookies.clear()
    return token


@pytest.fixture()
def seller_headers(client, repo):
    response = client.post(
        "/api/auth/register",
        json=account_payload(username="seller1", email="seller1@example.com"),
    )
    assert response.status_code == 201
    repo.set_user_role(response.json()["user"]["id"], "seller")
    token = login_token(client, "seller1")
    return {"Authorization": f"Bearer {token}"}
