"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules.
"""

import pytest
from datetime import datetime, timezone, timedelta
import jwt  # PyJWT

from modules.auth import InMemoryAuthBackend, Session
from modules.records import InMemoryDocumentStore
from shared.config import Settings, get_settings
from shared.models import Identity


# Test JWT secret (only for testing)
TEST_JWT_SECRET = "test-secret-key-for-testing-only"

# Fixed "now" used by time-dependent tests
NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def create_test_token(
    user_id: str = "test-user-123",
    email: str = "test@example.com",
    expired: bool = False,
    display_name: str | None = None,
    secret: str = TEST_JWT_SECRET,
) -> str:
    """
    Create a Supabase-style access token.

    Args:
        user_id: User ID to include in the token
        email: Email to include in the token
        expired: If True, creates an expired token
        display_name: Stored under user_metadata when given
        secret: Signing secret
    """
    now = datetime.now(timezone.utc)
    exp = now - timedelta(hours=1) if expired else now + timedelta(hours=1)

    payload = {
        "sub": user_id,
        "email": email,
        "aud": "authenticated",
        "role": "authenticated",
        "exp": int(exp.timestamp()),
        "iat": int(now.timestamp()),
        "user_metadata": {"display_name": display_name} if display_name else {},
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def project_row(
    user_id: str = "test-user-123",
    title: str = "Website",
    client: str = "Acme",
    deadline: str = "2024-07-01",
    payment: str = "1000",
    status: str = "ongoing",
    created_at: str = "2024-06-01T10:00:00+00:00",
    **extra,
) -> dict:
    """A project row as the remote store returns it."""
    row = {
        "user_id": user_id,
        "title": title,
        "client": client,
        "deadline": deadline,
        "payment": payment,
        "status": status,
        "created_at": created_at,
        "updated_at": created_at,
    }
    row.update(extra)
    return row


def client_row(
    user_id: str = "test-user-123",
    name: str = "Acme",
    email: str = "billing@acme.test",
    created_at: str = "2024-06-01T10:00:00+00:00",
    **extra,
) -> dict:
    row = {
        "user_id": user_id,
        "name": name,
        "email": email,
        "phone": "",
        "created_at": created_at,
        "updated_at": created_at,
    }
    row.update(extra)
    return row


def payment_row(
    user_id: str = "test-user-123",
    project_id: str = "project-1",
    amount: str = "250",
    status: str = "pending",
    due_date: str = "2024-06-10",
    created_at: str = "2024-06-01T10:00:00+00:00",
    **extra,
) -> dict:
    row = {
        "user_id": user_id,
        "project_id": project_id,
        "amount": amount,
        "status": status,
        "due_date": due_date,
        "created_at": created_at,
        "updated_at": created_at,
    }
    row.update(extra)
    return row


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Reset cached settings before and after each test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    """Settings with defaults only, ignoring any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def test_user_id() -> str:
    """Provide a consistent test user ID."""
    return "test-user-123"


@pytest.fixture
def identity(test_user_id: str) -> Identity:
    return Identity(id=test_user_id, email="test@example.com", display_name="Test User")


@pytest.fixture
def other_identity() -> Identity:
    return Identity(id="other-user-456", email="other@example.com")


@pytest.fixture
def auth_backend() -> InMemoryAuthBackend:
    backend = InMemoryAuthBackend()
    backend.add_account("test@example.com", "secret", display_name="Test User")
    return backend


@pytest.fixture
def session(auth_backend: InMemoryAuthBackend, settings: Settings) -> Session:
    return Session(auth_backend, settings)


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()
