"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets and deployment identities come from environment variables
    - get_settings() is cached (lru_cache) — single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
    - Empty ops_channel_identity disables dispute escalation delivery (logged instead);
      empty master_admin_identity means nobody can delete accounts
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://porthub:porthub@db:5432/porthub"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres gives postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Job board
    jobs_page_size: int = 10
    job_number_attempts: int = 20
    feedback_timeout_seconds: float = 60.0

    # Privileged identities
    ops_channel_identity: str = ""
    master_admin_identity: str = ""

    # Notification relay
    notification_relay_url: str = "http://localhost:8081"
    notification_timeout_seconds: float = 10.0

    # External profile verification
    profile_url_template: str = "https://robertsspaceindustries.com/citizens/{handle}"
    verification_timeout_seconds: float = 12.0
    verification_user_agent: str = "PortHubBot/1.0"

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
