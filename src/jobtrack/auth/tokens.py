from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt

from jobtrack.config import Settings, get_settings
from jobtrack.types import TokenPayload


class InvalidTokenError(Exception):
    pass


def create_access_token(user_id: int, settings: Settings | None = None) -> str:
    settings = settings or get_settings()
    issued = datetime.now(UTC)
    claims = {
        "sub": str(user_id),
        "iat": issued,
        "exp": issued + timedelta(minutes=settings.access_token_ttl_min),
    }
    return jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings | None = None) -> TokenPayload:
    settings = settings or get_settings()
    try:
        claims = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
        return TokenPayload(
            user_id=int(claims["sub"]),
            expires_at=datetime.fromtimestamp(claims["exp"], tz=UTC),
        )
    except (jwt.PyJWTError, ValueError) as exc:
        raise InvalidTokenError(str(exc)) from exc
