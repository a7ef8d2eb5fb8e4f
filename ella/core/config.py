"""Application settings and configuration helpers."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import AnyHttpUrl, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strongly-typed configuration sourced from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    app_name: str = Field(
        default="Ella Booking Assistant", description="Human-readable service name."
    )
    business_name: str = Field(
        default="Sparkleville", description="Brand used in assistant replies."
    )
    environment: str = Field(default="local", description="Deployment environment identifier.")
    log_level: str = Field(default="INFO", description="Application log level.")

    sqlite_path: Path = Field(
        default=Path("db/transcripts.db"),
        description="Transcript DB path.",
    )

    typing_delay_min_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="Lower bound of the simulated typing delay before each reply.",
    )
    typing_delay_max_seconds: float = Field(
        default=2.0,
        ge=0.0,
        description="Upper bound of the simulated typing delay before each reply.",
    )

    specific_date_placeholder: str = Field(
        default="December 10, 2025",
        description="Date recorded when the user picks the 'specific date' quick reply.",
    )

    frontend_origin: AnyHttpUrl | None = Field(
        default=None,
        description="Allowed frontend origin (CORS). If omitted, defaults to localhost dev server.",
    )
    additional_origins: List[AnyHttpUrl] = Field(
        default_factory=list,
        description="Additional allowed CORS origins for multi-client deployments.",
    )

    @model_validator(mode="after")
    def _check_typing_delay(self) -> "Settings":
        if self.typing_delay_max_seconds < self.typing_delay_min_seconds:
            raise ValueError("typing_delay_max_seconds must be >= typing_delay_min_seconds")
        return self

    @property
    def cors_origins(self) -> list[str]:
        """Return the full list of allowed CORS origins."""

        origins: list[str] = []

        if self.frontend_origin:
            origins.append(str(self.frontend_origin).rstrip("/"))
        else:
            origins.extend([
                "http://localhost:5173",
                "http://127.0.0.1:5173",
            ])

        for origin in self.additional_origins:
            origins.append(str(origin).rstrip("/"))

        seen: set[str] = set()
        unique: list[str] = []
        for origin in origins:
            if origin not in seen:
                seen.add(origin)
                unique.append(origin)

        return unique


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()
