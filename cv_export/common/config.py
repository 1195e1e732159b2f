"""
CV Export Configuration Module

Centralized configuration management with Pydantic validation.
All environment variables are validated on first access to catch
misconfigurations early.
"""

import logging
from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class ExportSettings(BaseSettings):
    """
    Export configuration with validation.

    Every setting can be overridden with a CV_EXPORT_-prefixed environment
    variable (e.g. CV_EXPORT_MARGIN_MM=12) or a .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="CV_EXPORT_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # === Page geometry ===
    page_format: str = Field(default="a4", description="Page format: 'a4' or 'letter'")
    margin_mm: float = Field(default=15.0, ge=0, le=50, description="Uniform page margin in mm")
    render_scale: float = Field(
        default=2.0,
        ge=1.0,
        le=4.0,
        description="Device scale factor used when rasterizing blocks"
    )
    section_gap_mm: float = Field(default=2.0, ge=0, le=20, description="Vertical gap between blocks")

    # === Measurement ===
    measurement_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Per-block rasterization timeout; expiry skips the block"
    )
    max_parallel_measurements: int = Field(default=4, ge=1, le=32)

    # === Playwright ===
    playwright_headless: bool = Field(default=True)
    playwright_timeout_ms: int = Field(default=30000, ge=1000)

    # === Service ===
    max_concurrent_exports: int = Field(default=5, ge=1, le=50)

    # === Logo ===
    logo_fetch_timeout_seconds: float = Field(default=10.0, gt=0)
    logo_max_height_mm: float = Field(default=12.0, gt=0)

    # === Typography ===
    font_family: str = Field(default="Inter")
    font_size_pt: float = Field(default=10.0, ge=6, le=18)

    # === Logging ===
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="simple", description="'simple' or 'json'")
    debug_mode: bool = Field(default=False, description="Log at DEBUG, including page plans")

    @field_validator("page_format")
    @classmethod
    def validate_page_format(cls, v: str) -> str:
        """Validate page format is a known value."""
        allowed = {"a4", "letter"}
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"page_format must be one of: {', '.join(sorted(allowed))}")
        return v_lower

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v_lower = v.lower()
        if v_lower not in {"simple", "json"}:
            raise ValueError("log_format must be 'simple' or 'json'")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v_upper = v.upper()
        if v_upper not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return v_upper

    def validate_rendering_config(self) -> List[str]:
        """
        Check settings combinations that work but produce poor output.

        Returns list of warning messages.
        """
        issues = []
        if self.render_scale < 2.0:
            issues.append("WARNING: render_scale below 2.0 produces blurry PDF text")
        if self.margin_mm < 5:
            issues.append("WARNING: margins below 5mm may be clipped by printers")
        if self.measurement_timeout_seconds * 1000 > self.playwright_timeout_ms:
            issues.append(
                "WARNING: measurement timeout exceeds Playwright timeout; "
                "Playwright errors will surface first"
            )
        return issues


@lru_cache()
def get_settings() -> ExportSettings:
    """
    Get cached settings instance.

    Settings are loaded once and cached for performance.
    """
    return ExportSettings()


def validate_config_on_startup() -> ExportSettings:
    """
    Validate configuration at application startup.

    Raises ValueError with details if config is invalid.
    Logs warnings for non-critical issues.
    """
    try:
        settings = get_settings()
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}")

    for issue in settings.validate_rendering_config():
        logger.warning(issue)

    return settings
