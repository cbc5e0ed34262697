"""Application settings for InvoiceFlow."""

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "InvoiceFlow"
    api_version: str = "1.0.0"
    environment: str = "development"
    secret_key: str = Field(default="CHANGE_ME", alias="SECRET_KEY")
    access_token_expire_minutes: int = Field(default=30, alias="ACCESS_TOKEN_EXPIRE_MINUTES")
    database_url: str = Field(default="sqlite:///./invoiceflow.db", alias="DATABASE_URL")
    cors_origins: List[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    default_currency: str = "USD"
    default_locale: str = "en_US"
    default_date_format: str = "MM/DD/YYYY"
    document_footer: str = "Generated by InvoiceFlow"
    max_logo_bytes: int = 5 * 1024 * 1024

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Return a singleton Settings instance."""
    return Settings()
