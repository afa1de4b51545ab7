from __future__ import annotations

import os
import tempfile
from pathlib import Path

_TMP = Path(tempfile.mkdtemp(prefix="jobtrack-tests-"))
os.environ["APP_ENV"] = "test"
os.environ["DATA_DIR"] = str(_TMP)
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP / 'test.db'}"
os.environ["RESUME_DIR"] = str(_TMP / "resumes")
os.environ["SECRET_KEY"] = "test-secret-key-long-enough-for-hs256-signing"
os.environ["GOOGLE_CLIENT_ID"] = "client-id"
os.environ["GOOGLE_CLIENT_SECRET"] = "client-secret"
os.environ["FRONTEND_URL"] = "http://frontend.test"

import pytest
from fastapi.testclient import TestClient

from jobtrack.api.app import create_app
from jobtrack.auth.tokens import create_access_token
from jobtrack.core.board import BoardService
from jobtrack.db.base import Base
from jobtrack.db.session import SessionLocal, engine


@pytest.fixture(autouse=True)
def reset_db() -> None:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app())


@pytest.fixture
def board_user() -> dict:
    """A user with the default board columns, plus a bearer header for the API."""
    with SessionLocal() as db:
        service = BoardService(db)
        user = service.repo.create_user(name="Dana", email="dana@example.com")
        service.ensure_board(user.id)
        columns = {column.title: column.id for column in service.repo.list_columns(user.id)}
        user_id = user.id

    token = create_access_token(user_id)
    return {
        "id": user_id,
        "columns": columns,
        "headers": {"Authorization": f"Bearer {token}"},
    }
