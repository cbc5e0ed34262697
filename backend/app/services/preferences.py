"""Per-user formatting preferences."""

from sqlalchemy.orm import Session

from backend.app.core.errors import InvoiceValidationError
from backend.app.crud.base import commit_or_raise
from backend.app.models.user import User
from backend.app.models.user_preferences import UserPreferences
from backend.app.schemas.user_preferences import UserPreferencesUpdate
from backend.app.services.formatting import (
    CURRENCIES,
    DATE_FORMATS,
    FormattingContext,
    build_formatting_context,
)

SUPPORTED_CURRENCY_CODES = {currency["code"] for currency in CURRENCIES}


def get_or_create_preferences(db: Session, user: User) -> UserPreferences:
    prefs = db.query(UserPreferences).filter(UserPreferences.user_id == user.id).first()
    if prefs:
        return prefs
    context = build_formatting_context()
    prefs = UserPreferences(
        user_id=user.id,
        default_currency=context.default_currency,
        date_format=context.date_format,
        locale=context.locale,
    )
    db.add(prefs)
    commit_or_raise(db, "preferences_create", user_id=user.id)
    db.refresh(prefs)
    return prefs


def update_preferences(db: Session, user: User, update: UserPreferencesUpdate) -> UserPreferences:
    prefs = get_or_create_preferences(db, user)
    data = update.model_dump(exclude_unset=True, exclude_none=True)
    errors = []
    if "default_currency" in data:
        data["default_currency"] = data["default_currency"].upper()
        if data["default_currency"] not in SUPPORTED_CURRENCY_CODES:
            errors.append({"loc": ["default_currency"], "msg": "Unsupported currency"})
    if "date_format" in data and data["date_format"] not in DATE_FORMATS:
        errors.append({"loc": ["date_format"], "msg": f"Date format must be one of: {', '.join(DATE_FORMATS)}"})
    if errors:
        raise InvoiceValidationError(errors=errors)
    for field, value in data.items():
        setattr(prefs, field, value)
    commit_or_raise(db, "preferences_update", user_id=user.id)
    db.refresh(prefs)
    return prefs


def formatting_context_for(db: Session, user: User) -> FormattingContext:
    prefs = db.query(UserPreferences).filter(UserPreferences.user_id == user.id).first()
    return build_formatting_context(prefs)
