"""Application configuration utilities.

This module centralizes environment configuration for the impact tracker
backend: persistence provider, rubric dataset location, JWT settings,
logging and fiscal calendar.

PySecure-4-Minimal controls:
- Do not log secrets.
- Validate enum-like env values.
- Avoid crashing on missing env; provide safe defaults for dev.

Environment variables (to be provided via .env by orchestrator):
- DATA_PROVIDER: 'sqlite' (default) or 'memory'
- DB_PATH: Optional path to the sqlite database; defaults to ./impact_tracker.db
- DATA_DIR: Directory holding the rubric dataset; defaults to the packaged data/
- RUBRIC_DATASET: Rubric dataset file name (default craft_skills_rubric.json)
- JWT_SECRET / JWT_ALGORITHM / ACCESS_TOKEN_EXPIRE_MINUTES
- CORS_ORIGINS: Comma separated origins
- LOG_LEVEL: Defaults to INFO
- FISCAL_YEAR_START_MONTH: First month of the fiscal year (default 8 = August)
- DEFAULT_JOB_FAMILY / DEFAULT_LEVEL: Rubric selection used when a user has none
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Optional
from pydantic import BaseModel, Field, field_validator

from impact_tracker.rubric.enums import JobFamily, Level, parse_job_family, parse_level

PACKAGE_DATA_DIR = Path(__file__).resolve().parents[1] / "data"


class Settings(BaseModel):
    """Configuration settings loaded from environment with secure defaults."""
    data_provider: Literal["memory", "sqlite"] = Field(
        default="sqlite", description="Persistence provider for users and impacts."
    )
    jwt_secret: str = Field(
        default="dev-secret-change-me", description="JWT secret key (dev default)."
    )
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm.")
    access_token_expire_minutes: int = Field(
        default=60, description="Access token TTL in minutes."
    )
    db_path: Optional[str] = Field(
        default=None, description="SQLite DB path (used when DATA_PROVIDER=sqlite)."
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173"],
        description="Allowed CORS origins.",
    )
    data_dir: str = Field(
        default=str(PACKAGE_DATA_DIR), description="Path to JSON data directory."
    )
    rubric_dataset: str = Field(
        default="craft_skills_rubric.json", description="Rubric dataset filename inside data_dir."
    )
    log_level: str = Field(default="INFO", description="Root logging level.")
    fiscal_year_start_month: int = Field(
        default=8, ge=1, le=12, description="First calendar month of the fiscal year."
    )
    default_job_family: JobFamily = Field(
        default=JobFamily.TPM, description="Job family used when the user has not chosen one."
    )
    default_level: Level = Field(
        default=Level.STAFF, description="Level used when the user has not chosen one."
    )

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, v: str) -> str:
        v = v.strip().upper()
        return v if v in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} else "INFO"


def _default_db_path() -> str:
    """Resolve the default SQLite file path (working directory)."""
    return str(Path.cwd() / "impact_tracker.db")


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


def load_settings() -> Settings:
    """Load settings from environment with robust defaults and validation.

    Returns:
        Settings: Validated settings object.

    Raises:
        InvalidEnumerationValue: If DEFAULT_JOB_FAMILY or DEFAULT_LEVEL is not a known value.
        ValidationError: If other environment values are invalid.
    """
    data_provider = os.getenv("DATA_PROVIDER", "sqlite").strip().lower()
    if data_provider not in {"memory", "sqlite"}:
        data_provider = "sqlite"  # safe default favoring persistence

    cors_origins_raw = os.getenv("CORS_ORIGINS", "http://localhost:5173")
    cors_origins = [o.strip() for o in cors_origins_raw.split(",") if o.strip()]

    fiscal_start = _int_env("FISCAL_YEAR_START_MONTH", 8)
    if not 1 <= fiscal_start <= 12:
        fiscal_start = 8

    return Settings(
        data_provider=data_provider,  # type: ignore[arg-type]
        jwt_secret=os.getenv("JWT_SECRET", "dev-secret-change-me"),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        access_token_expire_minutes=_int_env("ACCESS_TOKEN_EXPIRE_MINUTES", 60),
        db_path=os.getenv("DB_PATH") or _default_db_path(),
        cors_origins=cors_origins,
        data_dir=os.getenv("DATA_DIR") or str(PACKAGE_DATA_DIR),
        rubric_dataset=os.getenv("RUBRIC_DATASET", "craft_skills_rubric.json"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        fiscal_year_start_month=fiscal_start,
        default_job_family=parse_job_family(os.getenv("DEFAULT_JOB_FAMILY", JobFamily.TPM.value)),
        default_level=parse_level(os.getenv("DEFAULT_LEVEL", Level.STAFF.value)),
    )


# Singleton-style accessor
_settings: Optional[Settings] = None

# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Get cached application settings."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings

# PUBLIC_INTERFACE
def reset_settings_cache() -> None:
    """Reset the cached settings.

    This is primarily intended for tests to ensure that changes to environment
    variables (e.g., DATA_PROVIDER, DB_PATH) take effect on subsequent calls
    to get_settings().
    """
    global _settings
    _settings = None
