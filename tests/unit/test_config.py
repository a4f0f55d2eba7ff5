"""Unit tests for configuration module.

Tests for timescope/config.py - Settings and the config builders.

Run with:
    pytest tests/unit/test_config.py -v
    pytest tests/unit/test_config.py -v -m fast
"""

import logging

import pytest
from pydantic import ValidationError

from timescope.config import Settings, configure_logging, get_settings
from timescope.core.dates import MS_PER_DAY, MS_PER_YEAR


@pytest.mark.fast
class TestSettings:
    """Tests for Settings class."""

    def test_settings_default_values(self, test_settings):
        """Test defaults match the host option defaults."""
        assert test_settings.DISPLAY_WIDTH == 1000
        assert test_settings.SCALE_FACTOR == 3
        assert test_settings.TIMELINE_PADDING == 0.1
        assert test_settings.MIN_TIMELINE_SPAN_MS == MS_PER_YEAR
        assert test_settings.ZOOM_STEP == 1.5
        assert test_settings.MIN_ZOOM == 0.1
        assert test_settings.MAX_ZOOM is None
        assert test_settings.VIRTUAL_THRESHOLD == 50
        assert test_settings.VIRTUAL_BUFFER_SIZE == 2
        assert test_settings.LOG_LEVEL == "INFO"

    def test_env_override(self, test_settings, monkeypatch):
        """Test TIMESCOPE_-prefixed environment variables override defaults."""
        monkeypatch.setenv("TIMESCOPE_SCALE_FACTOR", "5")
        monkeypatch.setenv("TIMESCOPE_VIRTUAL_SCROLLING_ENABLED", "false")
        monkeypatch.setenv("TIMESCOPE_MIN_TIMELINE_SPAN_MS", str(MS_PER_DAY))
        settings = Settings(_env_file=None)
        assert settings.SCALE_FACTOR == 5
        assert settings.VIRTUAL_SCROLLING_ENABLED is False
        assert settings.MIN_TIMELINE_SPAN_MS == MS_PER_DAY

    def test_log_level_normalized(self, test_settings):
        """Test log level names are upper-cased."""
        assert Settings(_env_file=None, LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"

    def test_invalid_log_level(self, test_settings):
        """Test unknown log levels are rejected."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, LOG_LEVEL="chatty")

    def test_zoom_step_must_exceed_one(self, test_settings):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, ZOOM_STEP=1)

    def test_get_settings_cached(self):
        """Test get_settings returns the same instance."""
        assert get_settings() is get_settings()


@pytest.mark.fast
class TestConfigBuilders:
    """Tests for the per-component config builders."""

    def test_scale_config(self, test_settings):
        config = test_settings.scale_config()
        assert config.display_width == 1000
        assert config.screen_multiplier == 3
        assert config.padding == 0.1

    def test_scale_config_width_override(self, test_settings):
        assert test_settings.scale_config(display_width=640).display_width == 640

    def test_animation_config(self, test_settings):
        config = Settings(_env_file=None, ANIMATION_EASING="easeOutCubic").animation_config()
        assert config.easing == "easeOutCubic"
        assert config.duration_ms == 600

    def test_invalid_easing_rejected_on_build(self, test_settings):
        settings = Settings(_env_file=None, ANIMATION_EASING="wobble")
        with pytest.raises(ValidationError):
            settings.animation_config()

    def test_window_configs(self, test_settings):
        settings = Settings(_env_file=None, VIRTUAL_MARKERS_ENABLED=True, VIRTUAL_BUFFER_SIZE=4)
        assert settings.marker_window_config().enabled is True
        assert settings.marker_window_config().threshold == 100
        assert settings.slide_window_config().buffer_size == 4
        assert settings.slide_window_config().enabled is None


@pytest.mark.fast
class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_explicit_level(self, monkeypatch):
        calls = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.update(kwargs))
        configure_logging("WARNING")
        assert calls["level"] == "WARNING"
        assert "%(name)s" in calls["format"]
