"""Global configuration for the COR Pathways form converter."""

from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "COR Pathways Form Converter"
    app_version: str = "0.1.0"
    debug: bool = True
    log_level: str = "INFO"
    log_dir: Path = Path("./logs")

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_prefix: str = "/api/v1"

    # Storage
    database_path: Path = Path("./data/cor_pathways.db")
    upload_dir: Path = Path("./uploads")
    max_upload_size: int = 10485760  # 10MB
    allowed_extensions: List[str] = ["pdf"]

    # Security
    cors_origins: List[str] = ["http://localhost:3000"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Ensure directories exist
        self.upload_dir.mkdir(exist_ok=True, parents=True)
        self.database_path.parent.mkdir(exist_ok=True, parents=True)


@lru_cache()
def get_settings() -> Settings:
    """Get the cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
