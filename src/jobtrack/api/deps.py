from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from jobtrack.auth.tokens import InvalidTokenError, decode_access_token
from jobtrack.db.models import User
from jobtrack.db.repositories import Repository
from jobtrack.db.session import get_db_session


def get_db() -> Generator[Session, None, None]:
    yield from get_db_session()


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    header = request.headers.get("Authorization", "")
    token = header[len("Bearer "):] if header.startswith("Bearer ") else ""
    if not token:
        raise HTTPException(status_code=401, detail="No token provided")

    try:
        payload = decode_access_token(token)
    except InvalidTokenError as exc:
        raise HTTPException(status_code=401, detail="Invalid token") from exc

    user = Repository(db).get_user(payload.user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return user
