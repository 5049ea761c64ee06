# warehouse_manager/config/settings.py
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
import os


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # App Info
    app_name: str = "Warehouse Manager API"
    version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./warehouse_manager.db")

    # Transfers
    lock_timeout_seconds: float = 5.0
    transfer_storage_location: str = "TBD"

    # Activity feed
    activity_log_limit: int = 5

    # Server
    host: str = "0.0.0.0"
    port: int = int(os.getenv("PORT", 8080))
    cors_origins: List[str] = ["*"]

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def lock_timeout_ms(self) -> int:
        """Lock timeout in the unit PostgreSQL's ``lock_timeout`` expects"""
        return int(self.lock_timeout_seconds * 1000)


settings = Settings()
