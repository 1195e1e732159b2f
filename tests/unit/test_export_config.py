"""
Unit tests for cv_export/common/config.py

Tests environment overrides, validation, and rendering warnings.
"""

import pytest
from pydantic import ValidationError

from cv_export.common.config import ExportSettings, get_settings, validate_config_on_startup


class TestExportSettingsDefaults:
    """Tests for default values."""

    def test_defaults(self):
        """Test the documented defaults."""
        settings = ExportSettings(_env_file=None)

        assert settings.page_format == "a4"
        assert settings.margin_mm == 15.0
        assert settings.render_scale == 2.0
        assert settings.section_gap_mm == 2.0
        assert settings.measurement_timeout_seconds == 20.0
        assert settings.max_parallel_measurements == 4
        assert settings.playwright_headless is True
        assert settings.max_concurrent_exports == 5
        assert settings.logo_max_height_mm == 12.0
        assert settings.log_format == "simple"
        assert settings.debug_mode is False


class TestEnvironmentOverrides:
    """Tests for CV_EXPORT_ environment variables."""

    def test_env_prefix(self, monkeypatch):
        """Test that prefixed variables override defaults."""
        monkeypatch.setenv("CV_EXPORT_MARGIN_MM", "12")
        monkeypatch.setenv("CV_EXPORT_PAGE_FORMAT", "LETTER")
        monkeypatch.setenv("CV_EXPORT_PLAYWRIGHT_HEADLESS", "false")
        monkeypatch.setenv("CV_EXPORT_DEBUG_MODE", "true")

        settings = ExportSettings(_env_file=None)

        assert settings.margin_mm == 12.0
        assert settings.page_format == "letter"
        assert settings.playwright_headless is False
        assert settings.debug_mode is True

    def test_get_settings_is_cached(self):
        """Test that get_settings returns one instance until the cache is cleared."""
        assert get_settings() is get_settings()


class TestValidation:
    """Tests for field validators."""

    def test_unknown_page_format_rejected(self):
        """Test that only a4 and letter are accepted."""
        with pytest.raises(ValidationError, match="page_format"):
            ExportSettings(_env_file=None, page_format="tabloid")

    def test_unknown_log_format_rejected(self):
        with pytest.raises(ValidationError):
            ExportSettings(_env_file=None, log_format="xml")

    def test_log_level_normalized(self):
        assert ExportSettings(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_margin_bounds(self):
        """Test that negative margins are rejected."""
        with pytest.raises(ValidationError):
            ExportSettings(_env_file=None, margin_mm=-1)


class TestRenderingWarnings:
    """Tests for validate_rendering_config() and startup validation."""

    def test_defaults_have_no_warnings(self):
        assert ExportSettings(_env_file=None).validate_rendering_config() == []

    def test_low_scale_warns(self):
        """Test that a blurry render scale is flagged."""
        issues = ExportSettings(_env_file=None, render_scale=1.0).validate_rendering_config()

        assert any("render_scale" in issue for issue in issues)

    def test_startup_validation_raises_on_bad_env(self, monkeypatch):
        """Test that invalid configuration surfaces as ValueError at startup."""
        monkeypatch.setenv("CV_EXPORT_PAGE_FORMAT", "tabloid")
        get_settings.cache_clear()

        with pytest.raises(ValueError, match="Configuration validation failed"):
            validate_config_on_startup()
