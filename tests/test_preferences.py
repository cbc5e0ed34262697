import pytest
from fastapi.testclient import TestClient

from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.main import app
from backend.app.models.user import User
from backend.app.services.preferences import formatting_context_for


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def register_and_login(client: TestClient, email: str, password: str) -> str:
    client.post("/auth/register", json={"email": email, "password": password})
    resp = client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200
    return resp.json()["access_token"]


def test_get_preferences_default_creates_record():
    client = TestClient(app)
    token = register_and_login(client, "prefs1@example.com", "secret")
    resp = client.get("/preferences/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["default_currency"] == "USD"
    assert data["date_format"] == "MM/DD/YYYY"
    assert data["locale"] == "en_US"


def test_partial_update():
    client = TestClient(app)
    token = register_and_login(client, "prefs2@example.com", "secret")
    resp = client.put(
        "/preferences/me",
        json={"default_currency": "eur", "date_format": "YYYY-MM-DD"},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["default_currency"] == "EUR"
    assert data["date_format"] == "YYYY-MM-DD"
    assert data["locale"] == "en_US"


def test_invalid_values_are_rejected():
    client = TestClient(app)
    token = register_and_login(client, "prefs3@example.com", "secret")
    resp = client.put(
        "/preferences/me",
        json={"default_currency": "ABC", "date_format": "YY/MM"},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert resp.status_code == 400
    locs = [error["loc"] for error in resp.json()["errors"]]
    assert ["default_currency"] in locs
    assert ["date_format"] in locs


def test_stored_preferences_drive_formatting_context():
    client = TestClient(app)
    token = register_and_login(client, "prefs4@example.com", "secret")
    client.put(
        "/preferences/me",
        json={"default_currency": "GBP", "date_format": "DD/MM/YYYY", "locale": "en_GB"},
        headers={"Authorization": f"Bearer {token}"},
    )
    with SessionLocal() as db:
        user = db.query(User).filter(User.email == "prefs4@example.com").first()
        context = formatting_context_for(db, user)
    assert context.default_currency == "GBP"
    assert context.date_format == "DD/MM/YYYY"
    assert context.locale == "en_GB"
