"""Application settings loaded from environment variables."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """ReelRating settings from environment variables."""

    database_url: str = "postgresql://localhost/reelrating"
    """SQLAlchemy URL of the rating/tag store"""

    sql_echo: bool = False

    auth_service_url: str = "http://localhost:9080"
    """Base URL of the session -> JWT auth service"""

    auth_timeout_seconds: float = 10.0

    jwt_verification_key: Optional[str] = None
    """Key used to verify tokens issued by the auth service"""

    jwt_algorithm: str = "RS256"

    default_tag_privacy: str = "public"
    """Privacy applied to tags created implicitly by a vote"""

    log_level: str = "INFO"

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_prefix = "REELRATING_"
        case_sensitive = False


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings."""
    return Settings()


settings = get_settings()
