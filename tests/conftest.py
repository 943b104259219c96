from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from gametasks.app import create_app


@pytest.fixture()
def app(tmp_path: Path):
    """App isolado por teste, com SQLite em arquivo temporario e sem Redis."""
    application = create_app(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        redis_url=None,
    )
    yield application
    application.state.engine.dispose()


@pytest.fixture()
def db(app):
    session = app.state.session_factory()
    yield session
    session.close()


@pytest.fixture()
def make_client(app):
    """Cada cliente tem seu proprio cookie jar, ou seja, seu proprio navegador."""
    clients = []

    def _make() -> TestClient:
        client = TestClient(app)
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()


@pytest.fixture()
def client(make_client) -> TestClient:
    return make_client()


@pytest.fixture()
def register():
    def _register(client: TestClient, username: str, password: str = "secret1") -> dict:
        response = client.post(
            "/api/register", json={"username": username, "password": password}
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _register


@pytest.fixture()
def task_payload():
    def _payload(**overrides) -> dict:
        payload = {
            "title": "Finals",
            "eventType": "Tournament",
            "gameType": "FPS",
            "startDate": "2024-01-01T10:00",
            "endDate": "2024-01-01T12:00",
        }
        payload.update(overrides)
        return payload

    return _payload
