"""
CitizenWatch - Configuration Management
Centralized configuration using pydantic-settings.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "CitizenWatch"
    app_version: str = "0.1.0"
    app_env: str = "development"
    log_level: str = "INFO"

    # Database (PostgreSQL + PostGIS)
    database_url: Optional[str] = None
    db_echo: bool = False
    db_pool_size: int = 5

    # Backends: "memory" | "postgis" and "local" | "gcs"
    report_store_backend: str = "memory"
    blob_store_backend: str = "local"

    # Local photo storage
    local_upload_dir: str = "uploads"
    upload_url_path: str = "/uploads"
    upload_tmp_dir: Optional[str] = None

    # Firebase / Google Cloud Storage
    firebase_credentials_path: Optional[str] = None
    firebase_storage_bucket: Optional[str] = None

    # Submission rules
    max_photo_bytes: int = 5 * 1024 * 1024
    enforce_region: bool = True
    recent_window_days: int = 30

    # Reverse geocoding (OpenStreetMap Nominatim)
    reverse_geocoding_enabled: bool = False
    nominatim_url: str = "https://nominatim.openstreetmap.org/reverse"
    nominatim_user_agent: str = "citizenwatch/0.1"
    geocoding_timeout_seconds: float = 3.0

    # API Settings
    cors_origins: str = "*"
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    @property
    def cors_origin_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
