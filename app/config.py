"""Application configuration."""
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_env: str = "development"
    database_url: str
    cors_origins: list[str] = ["*"]

    # Logging
    log_level: str = "INFO"
    log_file: str = "app.log"

    # Redis (Celery broker/backend and progress pub/sub)
    redis_url: str = "redis://localhost:6379/0"

    # Uploaded workbooks are kept here until the import task picks them up
    upload_dir: str = "/tmp/coach-imports"
    max_upload_bytes: int = 50 * 1024 * 1024
    download_timeout: float = 60.0

    # Import tuning
    import_batch_size: int = 50
    import_group_size: int = 20
    error_log_limit: int = 1000
    error_response_limit: int = 100

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
