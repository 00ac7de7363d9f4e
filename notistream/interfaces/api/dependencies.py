"""FastAPI dependency utilities."""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from notistream.infrastructure.database import SessionLocal
from notistream.infrastructure.notifications import StreamRegistry, stream_registry
from notistream.infrastructure.security import decode_access_token
from notistream.infrastructure.store import NotificationStore

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token", auto_error=False)


def resolve_principal(token: str | None) -> str:
    """Return the principal id carried by ``token``."""

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        payload = decode_access_token(token)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc

    principal_id = payload.get("sub")
    if not isinstance(principal_id, str) or not principal_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return principal_id


def get_current_principal(token: str | None = Depends(oauth2_scheme)) -> str:
    """Return the authenticated principal id for the request."""

    return resolve_principal(token)


def get_notification_store() -> NotificationStore:
    return NotificationStore(SessionLocal)


def get_stream_registry() -> StreamRegistry:
    return stream_registry
