"""Collectra settings.

Values come from COLLECTRA_* environment variables or a local .env file and
are validated once, when get_settings() is first called.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the API server, the CLI and the scoring rules."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="COLLECTRA_",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Collectra"
    app_version: str = "0.1.0"
    environment: Literal["development", "production", "testing"] = "development"
    debug: bool = False
    api_prefix: str = "/api/v1"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1

    # Storage. Pool options are ignored for SQLite.
    database_url: str = "sqlite+aiosqlite:///./collectra_data/collectra.db"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 3600
    db_echo: bool = False

    # Browser clients (the operations console)
    cors_origins: list[str] = Field(default=["http://localhost:5173"])
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = Field(default=["GET", "POST", "PUT", "PATCH", "DELETE"])
    cors_allow_headers: list[str] = Field(default=["*"])

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    # Completion scores until real quality and punctuality rules exist
    default_quality_score: int = Field(
        default=90,
        description="Quality score assigned by the constant scoring strategy",
    )
    default_punctuality_score: int = Field(
        default=100,
        description="Punctuality score assigned by the constant scoring strategy",
    )

    session_number_prefix: str = "CS"
    id_strategy: Literal["uuid", "sequential"] = "uuid"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Accept a comma-separated string as well as a JSON list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("default_quality_score", "default_punctuality_score")
    @classmethod
    def validate_score_range(cls, v: int) -> int:
        if not 0 <= v <= 100:
            raise ValueError("Score must be between 0 and 100")
        return v

    @field_validator("session_number_prefix")
    @classmethod
    def validate_session_number_prefix(cls, v: str) -> str:
        if not v.isalpha() or not v.isupper() or not 1 <= len(v) <= 4:
            raise ValueError("Session number prefix must be 1-4 uppercase letters")
        return v

    @model_validator(mode="after")
    def validate_sqlite_workers(self) -> "Settings":
        """A SQLite file cannot be shared by several server processes."""
        if self.workers > 1 and self.is_sqlite:
            raise ValueError(
                "SQLite does not support multiple worker processes. "
                "Use PostgreSQL or set COLLECTRA_WORKERS=1."
            )
        return self

    @model_validator(mode="after")
    def validate_id_strategy(self) -> "Settings":
        """Sequential IDs restart at 1 with every process and collide with stored rows."""
        if self.id_strategy == "sequential" and self.environment != "testing":
            raise ValueError("The sequential ID strategy is only allowed when COLLECTRA_ENVIRONMENT=testing.")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def sqlite_path(self) -> Path | None:
        """File behind a SQLite URL, or None for in-memory and other databases."""
        if not self.is_sqlite or ":memory:" in self.database_url:
            return None
        return Path(self.database_url.split(":///", 1)[-1])


@lru_cache
def get_settings() -> Settings:
    """Settings for this process, parsed once."""
    return Settings()
