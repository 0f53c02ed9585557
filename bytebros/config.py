"""Runtime configuration, read from environment variables (and ``.env``).

Variable names are the upper-cased field names: ``DATABASE_URL``,
``JWT_SECRET``, ``TOKEN_TTL_SECONDS``, ``ALLOWED_ORIGINS`` (comma separated),
``EMAIL_CONFLICT_POLICY``, ``POOL_TIMEOUT`` and ``LOG_LEVEL``.
"""
from typing import List, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = "sqlite:///./bytebros.db"
    jwt_secret: str = "dev-secret"
    token_ttl_seconds: int = 60 * 60 * 24  # 1 day
    allowed_origins: str = (
        "https://sprightly-lollipop-a86be1.netlify.app,"
        "http://localhost:8081,"
        "http://127.0.0.1:5500"
    )
    # 'generic' hides whether a registration failed because the e-mail is taken
    email_conflict_policy: Literal["generic", "explicit"] = "generic"
    # seconds to wait for a pooled connection (ignored for SQLite)
    pool_timeout: float = 10.0
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("email_conflict_policy", mode="before")
    @classmethod
    def lowercase_policy(cls, v):
        return v.lower() if isinstance(v, str) else v

    @field_validator("log_level")
    @classmethod
    def uppercase_level(cls, v: str) -> str:
        return v.upper()

    @field_validator("token_ttl_seconds")
    @classmethod
    def ttl_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("token_ttl_seconds must be greater than 0")
        return v

    def get_allowed_origins_list(self) -> List[str]:
        """Parse comma-separated origins into a list."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]
