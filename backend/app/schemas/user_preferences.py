"""User preferences schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class UserPreferencesBase(BaseModel):
    default_currency: str = "USD"
    date_format: str = "MM/DD/YYYY"
    locale: str = "en_US"


class UserPreferencesUpdate(BaseModel):
    default_currency: Optional[str] = None
    date_format: Optional[str] = None
    locale: Optional[str] = None


class UserPreferencesRead(UserPreferencesBase):
    id: int
    user_id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
