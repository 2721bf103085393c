# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for provider keys, pipeline limits, revision
ceiling, stale-job thresholds, storage and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === AI PROVIDERS ===
    llm_primary_provider: Literal["anthropic", "google"] = "anthropic"
    llm_timeout_s: float = 120.0

    # Provider API keys
    anthropic_api_key: str = ""
    google_api_key: str = ""

    # Models
    anthropic_model: str = "claude-sonnet-4-20250514"
    anthropic_light_model: str = "claude-3-5-haiku-20241022"
    google_model: str = "gemini-2.0-flash"

    # === Content preparation ===
    content_summarize_threshold_chars: int = 8_000
    content_max_chars: int = 50_000
    design_source_excerpt_chars: int = 3_000
    revision_prior_artifact_chars: int = 4_000

    # === Quality gate ===
    qa_review_enabled: bool = False
    qa_min_review_score: float = 0.5

    # === Revisions ===
    max_revision_attempts: int = 3
    output_fix_max_attempts: int = 3  # automatic repairs after output validation

    # === Stale job monitor ===
    stale_processing_minutes: int = 15
    stale_deploying_minutes: int = 10
    stale_check_interval_s: float = 60.0

    # === Storage ===
    job_store_backend: Literal["memory", "sqlite"] = "memory"
    job_store_path: Path = Path("~/.toolfactory/jobs.db")

    # === Deployment ===
    deploy_output_dir: Path = Path("./deployed")

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("max_revision_attempts")
    @classmethod
    def validate_max_revision_attempts(cls, v: int) -> int:  # noqa: N805
        """MAX_REVISION_ATTEMPTS must allow at least one pass."""
        if v < 1:
            raise ValueError("max_revision_attempts must be >= 1")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.content_summarize_threshold_chars >= self.content_max_chars:
            errors.append(
                "CONTENT_SUMMARIZE_THRESHOLD_CHARS must be < CONTENT_MAX_CHARS"
            )

        if self.stale_processing_minutes <= 0 or self.stale_deploying_minutes <= 0:
            errors.append("Stale job thresholds must be positive")

        if self.stale_check_interval_s <= 0:
            errors.append("STALE_CHECK_INTERVAL_S must be positive")

        if self.output_fix_max_attempts < 0:
            errors.append("OUTPUT_FIX_MAX_ATTEMPTS must be >= 0")

        if not 0.0 <= self.qa_min_review_score <= 1.0:
            errors.append("QA_MIN_REVIEW_SCORE must be within [0, 1]")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def has_any_provider(self) -> bool:
        """Whether at least one AI provider has credentials."""
        return bool(self.anthropic_api_key or self.google_api_key)


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-run config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
