import os

# Must be set before expense_tracker.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from expense_tracker.core.provisioning import ensure_admin
from expense_tracker.database import engine, init_db
from expense_tracker.main import app


@pytest.fixture(autouse=True)
def reset_db():
    init_db()
    yield
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db_session():
    with Session(engine) as session:
        yield session


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register(client):
    """Register a user through the API and return ``(token, user)``."""

    def _register(name="Alice", email="alice@example.com", password="secret123", **extra):
        response = client.post(
            "/api/auth/register",
            json={"name": name, "email": email, "password": password, **extra},
        )
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        return data["token"], data["user"]

    return _register


@pytest.fixture
def user_token(register):
    token, _ = register()
    return token


@pytest.fixture
def admin_token(client):
    with Session(engine) as session:
        ensure_admin(session, "System Administrator", "admin@example.com", "admin-pass")
    response = client.post(
        "/api/auth/login",
        json={"email": "admin@example.com", "password": "admin-pass"},
    )
    assert response.status_code == 200, response.text
    return response.json()["data"]["token"]


@pytest.fixture
def create_expense(client):
    """Create an entry through the API for ``token`` and return its JSON."""

    def _create(token, **fields):
        body = {"description": "Coffee", "amount": 4.0, "type": "expense"}
        body.update(fields)
        response = client.post("/api/expenses", json=body, headers=auth_headers(token))
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create
