"""Bearer-token login and the current-account lookup."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backend.app.core.security import create_access_token, get_current_user, verify_password
from backend.app.core.settings import get_settings
from backend.app.db.session import get_db
from backend.app.models.user import User
from backend.app.schemas.user import LoginRequest, TokenRead, UserRead

LOGGER = structlog.get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _reject(reason: str, email: str, detail: str = "Invalid credentials"):
    LOGGER.info("login_rejected", reason=reason, email=email)
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


@router.post("/login", response_model=TokenRead)
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    account = db.query(User).filter(User.email == credentials.email).first()
    # Accounts without a stored hash cannot authenticate.
    if account is None or not account.hashed_password:
        _reject("unknown_account", credentials.email)
    if not account.is_active:
        _reject("inactive", credentials.email, detail="User is inactive")
    if not verify_password(credentials.password, account.hashed_password):
        _reject("bad_password", credentials.email)

    minutes = get_settings().access_token_expire_minutes
    LOGGER.info("login_succeeded", user_id=account.id)
    return {
        "access_token": create_access_token(user_id=account.id, expires_minutes=minutes),
        "token_type": "bearer",
        "expires_in": minutes * 60,
    }


@router.get("/me", response_model=UserRead)
def read_me(current_user: User = Depends(get_current_user)):
    return current_user
