"""Password hashing, bearer tokens and the current-user dependency.

Every owned resource in InvoiceFlow is scoped by the identity resolved here.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from backend.app.core.settings import get_settings
from backend.app.models.user import User

LOGGER = structlog.get_logger(__name__)

TOKEN_ALGORITHM = "HS256"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=True)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user_id: int, expires_minutes: Optional[int] = None) -> str:
    settings = get_settings()
    if expires_minutes is None:
        expires_minutes = settings.access_token_expire_minutes
    issued = datetime.now(timezone.utc)
    claims = {"sub": str(user_id), "iat": issued, "exp": issued + timedelta(minutes=expires_minutes)}
    return jwt.encode(claims, settings.secret_key, algorithm=TOKEN_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Return the token claims; expired or malformed tokens raise ``ValueError``."""
    try:
        return jwt.decode(token, get_settings().secret_key, algorithms=[TOKEN_ALGORITHM])
    except jwt.ExpiredSignatureError as exc:
        raise ValueError("Expired token") from exc
    except jwt.InvalidTokenError as exc:
        raise ValueError("Invalid token") from exc


def _session():
    # db.session pulls in the engine; import lazily so models can import this module.
    from backend.app.db.session import get_db

    yield from get_db()


def _unauthorized(reason: str) -> HTTPException:
    LOGGER.info("auth_rejected", reason=reason)
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(_session),
) -> User:
    try:
        claims = decode_access_token(credentials.credentials)
        user_id = int(claims.get("sub"))
    except ValueError as exc:
        raise _unauthorized(str(exc))
    except TypeError:
        raise _unauthorized("missing subject")
    user = db.get(User, user_id)
    if user is None or not user.is_active:
        raise _unauthorized("unknown or inactive user")
    return user
