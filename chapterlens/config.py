"""
Configuration settings for chapterlens.

Uses Pydantic Settings for environment variable management with .env file support.
All variables use the CHAPTERLENS_ prefix, e.g. CHAPTERLENS_MIN_WORD_COUNT=150.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CHAPTERLENS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Minimum level for the stderr log sink",
    )

    # ========================================
    # Input validation
    # ========================================
    min_word_count: int = Field(
        default=200,
        ge=0,
        description="Chapters shorter than this are rejected before analysis",
    )

    # ========================================
    # Pipeline execution
    # ========================================
    max_workers: int = Field(
        default=1,
        ge=1,
        le=16,
        description="Threads used to run principle evaluators (1 = sequential)",
    )
    isolate_evaluator_failures: bool = Field(
        default=True,
        description="Degrade a failing evaluator to a zero score instead of aborting the run",
    )

    # ========================================
    # Concept extraction
    # ========================================
    default_domain: str = Field(
        default="general",
        description="Domain recorded on chapters when none is given",
    )
    include_cross_domain: bool = Field(
        default=True,
        description="Seed extraction with the cross-domain concept library",
    )
    custom_concepts_path: Path | None = Field(
        default=None,
        description="JSON file of custom concept definitions",
    )

    # ========================================
    # Reporting
    # ========================================
    reading_words_per_minute: int = Field(
        default=200,
        ge=50,
        description="Reading speed used for the reading-time metric",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
