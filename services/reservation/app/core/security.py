"""Bearer token checks for routes that act on behalf of a user."""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from app.core.config import settings

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_token(token: str) -> dict:
    """Decode a token signed with the shared auth secret."""

    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as exc:
        raise _unauthorized("Could not validate credentials") from exc


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> dict:
    """Return the decoded JWT payload or fail with HTTP 401."""

    if credentials is None or (credentials.scheme or "").lower() != "bearer":
        raise _unauthorized("Not authenticated")
    return decode_token(credentials.credentials)


def get_current_owner_id(payload: dict = Depends(get_current_user)) -> int:
    """Return the user id carried in the token subject."""

    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError) as exc:
        raise _unauthorized("Token subject is not a valid user id") from exc


__all__ = ["decode_token", "get_current_owner_id", "get_current_user"]
