"""Shared test fixtures."""

from typing import Callable, Iterator

import pytest
from fastapi.testclient import TestClient

from foodmanager import storage
from foodmanager.auth import TOKEN_COOKIE_NAME
from foodmanager.config import Settings, get_settings
from foodmanager.main import app


@pytest.fixture
def settings(tmp_path, monkeypatch) -> Iterator[Settings]:
    monkeypatch.setenv("FOODMANAGER_DATABASE_PATH", str(tmp_path / "foods.db"))
    monkeypatch.setenv("FOODMANAGER_ENVIRONMENT", "development")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def db(settings: Settings) -> Settings:
    storage.init_db()
    return settings


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_client(client: TestClient, settings: Settings) -> TestClient:
    response = client.post(
        "/api/auth/login",
        json={"email": settings.admin_email, "password": settings.admin_password},
    )
    assert response.cookies.get(TOKEN_COOKIE_NAME) == settings.auth_token
    return client


@pytest.fixture
def food_payload() -> Callable[..., dict]:
    def _build(**overrides: object) -> dict:
        payload = {
            "name": "Nasi Goreng",
            "ingredients": "rice, egg",
            "description": "fried rice",
            "type": "uph",
        }
        payload.update(overrides)
        return payload

    return _build
