from __future__ import annotations

from datetime import datetime
from types import SimpleNamespace

import pytest

from workhub.chat.broadcaster import Broadcaster
from workhub.container import wire
from workhub.core.enums import Role
from workhub.main import create_app

from fakes import InlineJobRunner, fake_repositories

SETTINGS = SimpleNamespace(
    WORKDAY_START="09:00",
    LATE_GRACE_MINUTES=5,
    STANDARD_WORK_HOURS=8.0,
    HALF_DAY_HOURS=4.0,
    PAID_LEAVE_DAYS=15,
    SICK_LEAVE_DAYS=5,
)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 2, 8, 55, 0)


@pytest.fixture
def repos():
    return fake_repositories()


@pytest.fixture
def jobs():
    return InlineJobRunner()


@pytest.fixture
def container(repos, jobs):
    return wire(repos, settings=SETTINGS, jobs=jobs, broadcaster=Broadcaster(queue_size=10))


@pytest.fixture
def admin(repos):
    return repos.users.add("Alice Admin", "alice@example.com", role=Role.ADMIN, department="hr")


@pytest.fixture
def member(repos):
    return repos.users.add("Bob Member", "bob@example.com", department="dev")


@pytest.fixture
def outsider(repos):
    return repos.users.add("Carol Outsider", "carol@example.com", department="sales")


@pytest.fixture
def app(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container=container)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    def _login(user, password="secret123"):
        resp = client.post("/api/auth/login", json={"email": user.email, "password": password})
        assert resp.status_code == 200, resp.get_json()
        return resp

    return _login
