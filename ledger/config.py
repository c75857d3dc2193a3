"""Configuration management for the ledger store."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables (LEDGER_*)."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # MongoDB
    mongo_host: str = "localhost"
    mongo_port: int = 27017
    mongo_database: str = "expenses"
    mongo_username: Optional[str] = None
    mongo_password: Optional[str] = None
    mongo_auth_source: Optional[str] = None

    # Store behaviour
    connect_on_init: bool = True

    # Logging
    log_level: str = "INFO"


settings = Settings()
