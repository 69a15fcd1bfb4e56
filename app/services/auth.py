from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Request
from jose import JWTError, jwt

from app.core import config
from app.core.errors import ForbiddenError
from app.models.sql import User
from app.services.store import RecordStore


def create_session_token(
    open_id: str,
    name: Optional[str] = None,
    email: Optional[str] = None,
    login_method: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES
        )
    to_encode = {
        "sub": open_id,
        "name": name,
        "email": email,
        "login_method": login_method,
        "exp": expire,
    }
    return jwt.encode(to_encode, config.JWT_SECRET_KEY, algorithm=config.ALGORITHM)


def decode_session_token(token: str) -> dict:
    try:
        claims = jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.ALGORITHM])
    except JWTError as e:
        raise ForbiddenError("Invalid session") from e
    if not claims.get("sub"):
        raise ForbiddenError("Invalid session")
    return claims


def session_token_from_request(request: Request) -> Optional[str]:
    token = request.cookies.get(config.COOKIE_NAME)
    if token:
        return token
    header = request.headers.get("Authorization", "")
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials
    return None


def authenticate(request: Request, store: RecordStore) -> User:
    """Resolves the session on the request to a user, refreshing its record."""
    token = session_token_from_request(request)
    if not token:
        raise ForbiddenError("Authentication required")
    claims = decode_session_token(token)
    return store.upsert_user(
        open_id=claims["sub"],
        name=claims.get("name"),
        email=claims.get("email"),
        login_method=claims.get("login_method"),
        owner_open_id=config.OWNER_OPEN_ID,
    )
