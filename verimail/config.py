"""Application Configuration - environment-driven settings via pydantic-settings.

Invariants:
    - Service settings come from environment variables; SMTP credentials and
      signing secrets live in the config store, never here
    - get_settings() is cached (lru_cache): single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Config store key names are settings so a mesh can namespace them per deployment
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://verimail:verimail@db:5432/verimail"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres hands out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Config store keys
    email_config_key: str = "EMAIL_CONFIG"
    email_template_config_prefix: str = "EMAIL_CONFIG_TEMPLATE_"
    email_verification_config_key: str = "EMAIL_VERIFICATION_CONFIG"

    # Mail transport
    smtp_timeout_seconds: float = 30.0

    # Tokens
    jwt_algorithm: str = "HS256"

    # API
    creator_header: str = "X-Creator"
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
