import os

import structlog
from sqlalchemy.orm import Session

from backend.app.core.security import get_password_hash
from backend.app.core.settings import get_settings
from backend.app.models.user import User
from backend.app.services.invoice_templates import seed_system_templates

LOGGER = structlog.get_logger(__name__)

DEFAULT_DEV_PASSWORD = "Secret123!"
DEFAULT_DEV_EMAIL = "owner@invoiceflow.test"


def ensure_default_dev_owner(db: Session) -> None:
    """
    Create a local development login when running in the development environment.
    Skips execution when running under pytest to avoid altering test expectations.
    """
    if os.getenv("PYTEST_CURRENT_TEST") or get_settings().environment != "development":
        return
    if db.query(User).filter(User.email == DEFAULT_DEV_EMAIL).first():
        return
    db.add(
        User(
            email=DEFAULT_DEV_EMAIL,
            hashed_password=get_password_hash(DEFAULT_DEV_PASSWORD),
            first_name="Demo",
            last_name="Owner",
            is_active=True,
        )
    )
    db.commit()
    LOGGER.info("dev_owner_created", email=DEFAULT_DEV_EMAIL)


def seed_startup_data(db: Session) -> None:
    seed_system_templates(db)
    ensure_default_dev_owner(db)
