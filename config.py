"""
config.py — Konfiguracja aplikacji przez zmienne środowiskowe.
Wszystkie zmienne mają prefiks CONTENTWIRE_.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Logging
    log_level: str = "INFO"

    # Dekodowanie
    default_locale: str = "en-US"         # gdy klient nie poda listy locale
    strict_content_types: bool = False    # nieznany content type → błąd zamiast Entry

    # App
    app_title: str = "Contentwire"
    app_version: str = "0.1.0"

    model_config = SettingsConfigDict(env_prefix="CONTENTWIRE_", env_file=".env", extra="ignore")
