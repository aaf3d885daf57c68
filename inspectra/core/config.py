from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    # App
    app_name: str = "Inspectra"
    debug: bool = False

    # CORS
    cors_origins: str = "http://localhost:3000"

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # Storage: "sql" or "memory"
    store_backend: str = "sql"
    database_url: str = "sqlite:///./inspectra.db"
    database_echo: bool = False

    # Logging
    log_level: str = "INFO"
    log_dir: str = "./logs"
    log_to_file: bool = False

    # Seed data loaded at startup, if set
    seed_file: Optional[str] = None

    # Health thresholds
    disk_warning_percent: int = 85
    memory_warning_percent: int = 85

    # Links placed in notifications
    dashboard_url: str = "http://localhost:3000"

    model_config = SettingsConfigDict(
        env_prefix="INSPECTRA_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"  # Allow extra env vars without raising validation errors
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
