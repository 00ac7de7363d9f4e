"""Helpers to issue and verify principal access tokens."""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from notistream.config import get_settings

ALGORITHM = "HS256"


def create_access_token(principal_id: str, expires_delta: timedelta | None = None) -> str:
    """Sign a token whose ``sub`` claim is ``principal_id``.

    Tokens are normally minted by the identity provider; this helper exists for
    service-to-service calls and tests that share the same secret.
    """

    settings = get_settings()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=30))
    return jwt.encode(
        {"sub": principal_id, "exp": expire}, settings.secret_key, algorithm=ALGORITHM
    )


def decode_access_token(token: str) -> dict:
    settings = get_settings()
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError as exc:
        raise ValueError("Could not validate credentials") from exc
