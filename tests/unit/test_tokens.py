import pytest

from jobtrack.auth.tokens import InvalidTokenError, create_access_token, decode_access_token
from jobtrack.config import Settings


def test_token_identifies_user() -> None:
    settings = Settings(secret_key="unit-test-secret-with-enough-length-000")
    payload = decode_access_token(create_access_token(7, settings), settings)
    assert payload.user_id == 7


def test_expired_token_is_rejected() -> None:
    settings = Settings(secret_key="unit-test-secret-with-enough-length-000", access_token_ttl_min=-1)
    token = create_access_token(7, settings)
    with pytest.raises(InvalidTokenError):
        decode_access_token(token, settings)


def test_token_signed_with_other_secret_is_rejected() -> None:
    token = create_access_token(7, Settings(secret_key="first-secret-key-long-enough-for-hs256"))
    with pytest.raises(InvalidTokenError):
        decode_access_token(token, Settings(secret_key="other-secret-key-long-enough-for-hs256"))
