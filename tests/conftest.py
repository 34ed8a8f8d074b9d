"""
Test configuration for the hospital records backend.
"""
import os

# Settings are read once at import time, so the environment comes first
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from hospital_api.database import Base, get_db, enable_sqlite_foreign_keys
from hospital_api.main import app
from hospital_api.auth.models import User, UserRole
from hospital_api.core.security import get_password_hasher, get_token_service

# Test database URL
TEST_DATABASE_URL = "sqlite://"

# Create test database engine
engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_foreign_keys(engine)

# Create test session factory
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD = "secret-pass"


def patient_payload(email="a@x.com", full_name="A B", **details):
    """Build a valid patient registration body."""
    user_details = {
        "age": 30,
        "gender": "Male",
        "height_cm": 170,
        "weight_kg": 70,
        "phone": "1234567890",
        "address": "1 Main St",
    }
    user_details.update(details)
    return {
        "email": email,
        "password": PASSWORD,
        "fullName": full_name,
        "role": 0,
        "user_details": user_details,
    }


def provider_payload(email="doc@x.com", full_name="Dr Who"):
    """Build a valid provider registration body."""
    return {
        "email": email,
        "password": PASSWORD,
        "fullName": full_name,
        "role": 1,
    }


@pytest.fixture(scope="function")
def db():
    """
    Create a fresh database for each test.
    """
    # Create tables
    Base.metadata.create_all(bind=engine)

    # Create session
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

    # Drop tables after test
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """
    Create a test client with a test database session.
    """
    def override_get_db():
        try:
            yield db
        finally:
            pass

    # Override the get_db dependency
    app.dependency_overrides[get_db] = override_get_db

    # Create test client
    with TestClient(app) as client:
        yield client

    # Remove dependency override
    app.dependency_overrides = {}


@pytest.fixture
def hasher():
    return get_password_hasher()


@pytest.fixture
def token_service():
    return get_token_service()


@pytest.fixture
def register(client):
    """Register a user through the API and return the created user payload."""
    def _register(payload):
        response = client.post("/api/auth/register", json=payload)
        assert response.status_code == 200, response.text
        return response.json()["data"]
    return _register


@pytest.fixture
def login(client):
    """Log in through the API and return the bearer token."""
    def _login(email, password=PASSWORD):
        response = client.post("/api/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        return response.json()["data"]["token"]
    return _login


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


class UnreachableStoreSession:
    """Session stand-in whose every query fails as if the database were down."""
    def _fail(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    execute = _fail
    query = _fail

    def rollback(self):
        pass


@pytest.fixture
def unreachable_store(client):
    """Route every request to a session that cannot reach the database."""
    app.dependency_overrides[get_db] = lambda: UnreachableStoreSession()


@pytest.fixture
def patient(register, login):
    """A registered patient with a token."""
    data = register(patient_payload())
    token = login("a@x.com")
    return {"id": data["user"]["id"], "email": "a@x.com", "token": token, "headers": auth_header(token)}


@pytest.fixture
def provider(register, login):
    """A registered provider with a token."""
    data = register(provider_payload())
    token = login("doc@x.com")
    return {"id": data["user"]["id"], "email": "doc@x.com", "token": token, "headers": auth_header(token)}


@pytest.fixture
def bare_patient_user(db, hasher):
    """A PATIENT user inserted directly, without a details row."""
    user = User(email="bare@x.com", password_hash=hasher.hash(PASSWORD), role=UserRole.PATIENT)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
