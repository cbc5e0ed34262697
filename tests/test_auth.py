import pytest
from fastapi.testclient import TestClient

from backend.app.core.security import create_access_token, verify_password
from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.main import app
from backend.app.models.user import User


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def register(client: TestClient, email: str, **extra):
    return client.post("/auth/register", json={"email": email, "password": "secret", **extra})


def bearer(client: TestClient, email: str) -> dict:
    token = client.post("/auth/login", json={"email": email, "password": "secret"}).json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


def test_registration_returns_account_without_secrets():
    client = TestClient(app)
    response = register(client, "owner@example.com", first_name="Ada", last_name="Lovelace")
    assert response.status_code == 200
    data = response.json()
    assert data["email"] == "owner@example.com"
    assert (data["first_name"], data["last_name"]) == ("Ada", "Lovelace")
    assert "password" not in data and "hashed_password" not in data


def test_registration_stores_a_bcrypt_hash():
    register(TestClient(app), "persist@example.com")
    with SessionLocal() as db:
        user = db.query(User).filter(User.email == "persist@example.com").one()
        assert user.hashed_password != "secret"
        assert verify_password("secret", user.hashed_password)


def test_duplicate_email_is_rejected():
    client = TestClient(app)
    assert register(client, "dup@example.com").status_code == 200
    second = register(client, "dup@example.com")
    assert second.status_code == 400
    assert second.json()["detail"] == "Email already registered"


def test_me_resolves_the_bearer_identity():
    client = TestClient(app)
    user_id = register(client, "me@example.com").json()["id"]
    response = client.get("/auth/me", headers=bearer(client, "me@example.com"))
    assert response.status_code == 200
    assert response.json()["id"] == user_id


def test_malformed_token_is_unauthorized():
    response = TestClient(app).get("/auth/me", headers={"Authorization": "Bearer invalid"})
    assert response.status_code == 401


def test_expired_token_is_unauthorized():
    client = TestClient(app)
    user_id = register(client, "expired@example.com").json()["id"]
    token = create_access_token(user_id=user_id, expires_minutes=-1)
    response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_token_for_deleted_account_is_unauthorized():
    client = TestClient(app)
    token = create_access_token(user_id=9999)
    response = client.get("/businesses", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
