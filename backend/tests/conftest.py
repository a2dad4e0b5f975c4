"""
Pytest fixtures: a fresh app over in-memory SQLite for every test
"""
import pytest
from fastapi.testclient import TestClient
from event_manager.core.config import Settings
from event_manager.main import create_app
from event_manager.services.notification_service import EmailProvider

TRUSTED_ORIGIN = "http://localhost:5173"
PASSWORD = "secret-password"


class RecordingEmailProvider(EmailProvider):
    """Keeps sent messages in memory instead of delivering them"""

    def __init__(self):
        self.sent = []

    def send(self, message) -> bool:
        self.sent.append(message)
        return True


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite://",
        SECRET_KEY="test-secret-key",
        TRUSTED_DOMAINS=TRUSTED_ORIGIN,
        CORS_ORIGINS=TRUSTED_ORIGIN,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def email_provider(app):
    provider = RecordingEmailProvider()
    app.state.email_provider = provider
    return provider


@pytest.fixture
def client(app, email_provider):
    # Entering the context runs the lifespan, which creates the tables
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db_session(client, app):
    session = app.state.database.SessionLocal()
    try:
        yield session
    finally:
        session.close()


def register(client, email, name="Test User", password=PASSWORD):
    return client.post(
        "/auth/register",
        json={"email": email, "name": name, "password": password},
    )


def login(client, email, password=PASSWORD, headers=None):
    return client.post(
        "/auth/login",
        json={"email": email, "password": password},
        headers=headers,
    )


def auth_headers(client, email, name="Test User"):
    """Register (if needed) and log in, returning Authorization + trusted Origin headers"""
    register(client, email, name)
    response = login(client, email)
    assert response.status_code == 200, response.text
    return {
        "Authorization": f"Bearer {response.json()['token']}",
        "Origin": TRUSTED_ORIGIN,
    }


@pytest.fixture
def alice(client):
    headers = auth_headers(client, "alice@mail.com", "Alice")
    user_id = client.get("/auth/me", headers=headers).json()["id"]
    return {"id": user_id, "headers": headers}


@pytest.fixture
def bob(client):
    headers = auth_headers(client, "bob@mail.com", "Bob")
    user_id = client.get("/auth/me", headers=headers).json()["id"]
    return {"id": user_id, "headers": headers}


def create_event(client, owner, title="Rock festival", date="2024-06-20", description=None):
    payload = {"title": title, "date": date}
    if description is not None:
        payload["description"] = description
    response = client.post("/events", json=payload, headers=owner["headers"])
    assert response.status_code == 201, response.text
    return response.json()
