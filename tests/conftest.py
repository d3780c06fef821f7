from __future__ import annotations

from datetime import datetime, timezone

import pytest

from time_tracking.common.clock import ManualClock
from time_tracking.container import build_container
from time_tracking.main import create_app
from time_tracking.users.directory import InMemoryUserDirectory
from time_tracking.users.model import UserSummary


@pytest.fixture
def clock():
    return ManualClock(datetime(2026, 2, 2, 8, 0, tzinfo=timezone.utc))


@pytest.fixture
def users():
    return InMemoryUserDirectory(
        [
            UserSummary(user_id="u1", full_name="Alice Nowak", username="alice", email="alice@example.com"),
            UserSummary(user_id="u2", full_name="Bob Kowalski", username="bob", email="bob@example.com"),
            UserSummary(user_id="u3", full_name="Carol Smith", username="carol", email=None),
        ]
    )


@pytest.fixture
def container(clock, users):
    return build_container(storage_backend="memory", clock=clock, users=users)


@pytest.fixture
def app(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container=container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    def _login(user_id: str, role: str = "staff") -> None:
        with client.session_transaction() as sess:
            sess["user_id"] = user_id
            sess["role"] = role

    return _login
