"""Shared test fixtures."""

import os


# Must be set before forum_api reads its settings
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("COMMENTS_SEED_DEMO", "false")

from collections.abc import Callable, Iterator  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from forum_api.auth.permissions import UserRole  # noqa: E402
from forum_api.auth.schemas import ForumUser  # noqa: E402
from forum_api.auth.security import create_access_token  # noqa: E402
from forum_api.comments.service import CommentService  # noqa: E402
from forum_api.comments.store import CommentStore  # noqa: E402
from forum_api.main import create_app  # noqa: E402


@pytest.fixture
def client() -> Iterator[TestClient]:
    """Test client with a fresh application (and a fresh comment store)."""
    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture
def store() -> CommentStore:
    """Isolated comment store."""
    return CommentStore()


@pytest.fixture
def comment_service(store: CommentStore) -> CommentService:
    """CommentService over the isolated store."""
    return CommentService(store)


@pytest.fixture
def alice() -> ForumUser:
    return ForumUser(id="user_alice", name="Alice Martins", email="alice@example.com")


@pytest.fixture
def bob() -> ForumUser:
    return ForumUser(id="user_bob", name="Bob", email="bob@example.com")


@pytest.fixture
def admin() -> ForumUser:
    return ForumUser(
        id="user_admin", name="Admin", email="admin@example.com", role=UserRole.ADMIN
    )


@pytest.fixture
def auth_headers() -> Callable[[ForumUser], dict[str, str]]:
    """Build Authorization headers carrying a token for the given user."""

    def _headers(user: ForumUser) -> dict[str, str]:
        token = create_access_token(
            {
                "sub": user.id,
                "name": user.name,
                "email": user.email,
                "role": user.role.value,
                "avatar": user.avatar,
            }
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers
