"""Shared fixtures: a throwaway SQLite database and authenticated clients."""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

TEST_DB_PATH = Path(tempfile.gettempdir()) / "notistream_test.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["APP_TIMEZONE"] = "UTC"
os.environ["LOG_LEVEL"] = "DEBUG"

from notistream.config import get_settings  # noqa: E402

get_settings.cache_clear()

from notistream.infrastructure.database import (  # noqa: E402
    Base,
    SessionLocal,
    engine,
    initialize_database,
)
from notistream.infrastructure.security import create_access_token  # noqa: E402
from notistream.infrastructure.store import NotificationStore  # noqa: E402


@pytest.fixture(autouse=True)
def reset_database():
    """Ensure every test starts from an empty notification table."""

    Base.metadata.drop_all(bind=engine)
    initialize_database()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session():
    with SessionLocal() as session:
        yield session


@pytest.fixture()
def store() -> NotificationStore:
    return NotificationStore(SessionLocal)


@pytest.fixture()
def auth_headers():
    """Return a factory of ``Authorization`` headers for a principal id."""

    def _headers(principal_id: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(principal_id)}"}

    return _headers


@pytest.fixture()
def client():
    from fastapi.testclient import TestClient

    from main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture()
def add_notification(store: NotificationStore):
    """Insert a notification created ``seconds_ago`` seconds before now."""

    from datetime import timedelta

    from notistream.domain.entities import Notification, NotificationType
    from notistream.utils import now_in_app_timezone

    def _add(
        recipient_id: str,
        *,
        seconds_ago: float = 0,
        is_read: bool = False,
        title: str = "New Quote from Acme",
        type: NotificationType = NotificationType.QUOTE_SUBMITTED,
    ) -> Notification:
        return store.create(
            Notification(
                id=None,
                recipient_id=recipient_id,
                type=type,
                title=title,
                message="Review and respond promptly.",
                is_read=is_read,
                created_at=now_in_app_timezone() - timedelta(seconds=seconds_ago),
            )
        )

    return _add
