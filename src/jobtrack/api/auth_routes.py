from __future__ import annotations

import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from jobtrack.api.deps import get_current_user, get_db
from jobtrack.api.schemas import SuccessResponse, UserResponse
from jobtrack.auth import google
from jobtrack.auth.tokens import create_access_token
from jobtrack.config import get_settings
from jobtrack.core.board import BoardService
from jobtrack.db.models import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _login_error(message: str) -> RedirectResponse:
    settings = get_settings()
    query = urlencode({"error": "auth_failed", "message": message})
    return RedirectResponse(url=f"{settings.frontend_url}/login?{query}", status_code=302)


@router.get("/google")
def google_login() -> RedirectResponse:
    try:
        url = google.build_authorize_url()
    except google.OAuthError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return RedirectResponse(url=url, status_code=302)


@router.get("/google/callback")
def google_callback(code: str = "", error: str = "", db: Session = Depends(get_db)) -> RedirectResponse:
    if error or not code:
        logger.warning("Google OAuth callback without code (error=%s)", error or "missing code")
        return _login_error(error or "Authentication failed")

    try:
        profile = google.exchange_code(code)
    except google.OAuthError as exc:
        return _login_error(str(exc))

    service = BoardService(db)
    user, created = service.repo.upsert_google_user(profile)
    if created:
        service.ensure_board(user.id)
        logger.info("Created user %s from Google sign-in", user.id)

    token = create_access_token(user.id)
    settings = get_settings()
    query = urlencode({"token": token})
    return RedirectResponse(url=f"{settings.frontend_url}/auth/callback?{query}", status_code=302)


@router.get("/me", response_model=UserResponse)
def me(user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(user)


@router.post("/logout", response_model=SuccessResponse)
def logout(user: User = Depends(get_current_user)) -> SuccessResponse:
    return SuccessResponse(message="Logged out successfully")
