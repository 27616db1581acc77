from __future__ import annotations

from datetime import datetime

import pytest

from src.campus_attendance.campus_attendance.main import create_app

from tests.fakes import build_fake_container


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 3, 5, 9, 15, 0)


@pytest.fixture
def container():
    return build_fake_container()


@pytest.fixture
def app(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_header(container):
    def _header(user) -> dict:
        return {"Authorization": f"Bearer {container.token_service.issue(user)}"}

    return _header
