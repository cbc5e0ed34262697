"""User preferences endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.core.security import get_current_user
from backend.app.db.session import get_db
from backend.app.models.user import User
from backend.app.schemas.user_preferences import UserPreferencesRead, UserPreferencesUpdate
from backend.app.services.preferences import get_or_create_preferences, update_preferences

router = APIRouter(prefix="/preferences", tags=["preferences"])


@router.get("/me", response_model=UserPreferencesRead)
async def get_my_preferences(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return get_or_create_preferences(db, current_user)


@router.put("/me", response_model=UserPreferencesRead)
async def update_my_preferences(
    update: UserPreferencesUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return update_preferences(db, current_user, update)
