from __future__ import annotations

import logging
from urllib.parse import urlencode

import requests

from jobtrack.config import Settings, get_settings
from jobtrack.types import GoogleProfile

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"


class OAuthError(Exception):
    pass


def build_authorize_url(state: str = "", settings: Settings | None = None) -> str:
    settings = settings or get_settings()
    if not settings.google_oauth_enabled:
        raise OAuthError("Google OAuth is not configured")
    params = {
        "client_id": settings.google_client_id,
        "redirect_uri": settings.google_callback_url,
        "response_type": "code",
        "scope": "openid email profile",
        "access_type": "online",
        "prompt": "select_account",
    }
    if state:
        params["state"] = state
    return f"{AUTHORIZE_URL}?{urlencode(params)}"


def exchange_code(code: str, settings: Settings | None = None) -> GoogleProfile:
    """Trade an authorization code for the signed-in Google profile."""
    settings = settings or get_settings()
    if not settings.google_oauth_enabled:
        raise OAuthError("Google OAuth is not configured")

    try:
        token_response = requests.post(
            TOKEN_URL,
            data={
                "code": code,
                "client_id": settings.google_client_id,
                "client_secret": settings.google_client_secret,
                "redirect_uri": settings.google_callback_url,
                "grant_type": "authorization_code",
            },
            timeout=settings.google_timeout_sec,
        )
        token_response.raise_for_status()
        access_token = token_response.json()["access_token"]

        info_response = requests.get(
            USERINFO_URL,
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=settings.google_timeout_sec,
        )
        info_response.raise_for_status()
        info = info_response.json()
    except (requests.RequestException, KeyError, ValueError) as exc:
        logger.warning("Google code exchange failed: %s", exc)
        raise OAuthError("Authentication failed") from exc

    if not info.get("sub") or not info.get("email"):
        raise OAuthError("No user data received")

    return GoogleProfile(
        google_id=str(info["sub"]),
        email=info["email"],
        name=info.get("name", ""),
        avatar=info.get("picture", ""),
    )
