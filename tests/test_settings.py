from backend.app.core.settings import Settings, get_settings


def test_settings_defaults():
    settings = get_settings()
    assert settings.app_name == "InvoiceFlow"
    assert settings.default_currency == "USD"
    assert settings.document_footer == "Generated by InvoiceFlow"
    assert isinstance(settings.secret_key, str) and settings.secret_key
    assert isinstance(settings.database_url, str) and settings.database_url


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///./other.db")
    monkeypatch.setenv("DEFAULT_CURRENCY", "EUR")
    settings = Settings()
    assert settings.database_url == "sqlite:///./other.db"
    assert settings.default_currency == "EUR"
