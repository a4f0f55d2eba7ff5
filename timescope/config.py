"""Engine configuration with Pydantic Settings.

Settings are loaded from ``TIMESCOPE_``-prefixed environment variables and
an optional ``.env`` file. Option names mirror the timeline host options
(``scale_factor``, ``timeline_padding``, ``virtual_threshold``...).

Examples:
    >>> from timescope.config import get_settings
    >>> settings = get_settings()
    >>> settings.ZOOM_STEP
    1.5

    >>> settings.scale_config().screen_multiplier
    3.0

Tests:
    - tests/unit/test_config.py::TestSettings::test_settings_default_values
    - tests/unit/test_config.py::TestSettings::test_env_override
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from timescope.core.animation import AnimationConfig
from timescope.core.dates import MS_PER_YEAR
from timescope.core.scale import ScaleConfig
from timescope.core.windowing import MarkerWindowConfig, SlideWindowConfig

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Settings(BaseSettings):
    """Timeline engine settings.

    Attributes:
        DISPLAY_WIDTH: Visible viewport width in pixels
        SCALE_FACTOR: Scrollable width as a multiple of the display width
        TIMELINE_PADDING: Domain padding as a fraction of the span, per side
        MIN_TIMELINE_SPAN_MS: Minimum domain span before padding
        AXIS_TICK_COUNT: Target number of axis ticks
        ZOOM_STEP: Multiplier applied by zoom in / zoom out
        MIN_ZOOM: Zoom-out floor
        MAX_ZOOM: Optional zoom-in ceiling (unset = unbounded)
        ANIMATIONS_ENABLED: Animate zoom transitions
        ANIMATION_DURATION_MS: Zoom animation length
        RESPECT_REDUCED_MOTION: Collapse animations when reduced motion is requested
        VIRTUAL_MARKERS_ENABLED: Force marker windowing on/off (unset = auto)
        VIRTUAL_MARKER_THRESHOLD: Marker count that auto-enables windowing
        VIRTUAL_MARKER_BUFFER_PERCENT: Viewport buffer per side, in percent
        VIRTUAL_SCROLLING_ENABLED: Force slide windowing on/off (unset = auto)
        VIRTUAL_THRESHOLD: Slide count that auto-enables windowing
        VIRTUAL_BUFFER_SIZE: Slides kept on each side of the focused slide
        LOG_LEVEL: Root logging level used by ``configure_logging``
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TIMESCOPE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Scale
    DISPLAY_WIDTH: float = Field(default=1000.0, gt=0, description="Display width in pixels")
    SCALE_FACTOR: float = Field(default=3.0, gt=0, description="Screen multiplier")
    TIMELINE_PADDING: float = Field(default=0.1, ge=0, description="Padding fraction per side")
    MIN_TIMELINE_SPAN_MS: float = Field(
        default=MS_PER_YEAR,
        gt=0,
        description="Minimum span when all events share a date",
    )
    AXIS_TICK_COUNT: int = Field(default=10, ge=0, description="Target axis tick count")

    # Zoom
    ZOOM_STEP: float = Field(default=1.5, gt=1, description="Zoom in/out multiplier")
    MIN_ZOOM: float = Field(default=0.1, gt=0, description="Zoom-out floor")
    MAX_ZOOM: float | None = Field(default=None, gt=0, description="Zoom-in ceiling")

    # Animation
    ANIMATIONS_ENABLED: bool = Field(default=True)
    ANIMATION_DURATION_MS: float = Field(default=600.0, ge=0)
    ANIMATION_EASING: str = Field(default="linear")
    RESPECT_REDUCED_MOTION: bool = Field(default=True)

    # Windowing
    VIRTUAL_MARKERS_ENABLED: bool | None = Field(default=None)
    VIRTUAL_MARKER_THRESHOLD: int = Field(default=100, ge=0)
    VIRTUAL_MARKER_BUFFER_PERCENT: float = Field(default=10.0, ge=0)
    VIRTUAL_SCROLLING_ENABLED: bool | None = Field(default=None)
    VIRTUAL_THRESHOLD: int = Field(default=50, ge=0)
    VIRTUAL_BUFFER_SIZE: int = Field(default=2, ge=0)

    LOG_LEVEL: str = Field(default="INFO")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and upper-case the log level name."""
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown LOG_LEVEL: {v}")
        return level

    def scale_config(self, display_width: float | None = None) -> ScaleConfig:
        """Build a ScaleConfig from these settings.

        Args:
            display_width: Override for the configured display width.

        Returns:
            ScaleConfig: Scale builder configuration.
        """
        return ScaleConfig(
            display_width=display_width or self.DISPLAY_WIDTH,
            screen_multiplier=self.SCALE_FACTOR,
            padding=self.TIMELINE_PADDING,
            min_span_ms=self.MIN_TIMELINE_SPAN_MS,
        )

    def animation_config(self) -> AnimationConfig:
        """Build an AnimationConfig from these settings."""
        return AnimationConfig(
            enabled=self.ANIMATIONS_ENABLED,
            duration_ms=self.ANIMATION_DURATION_MS,
            easing=self.ANIMATION_EASING,
            respect_reduced_motion=self.RESPECT_REDUCED_MOTION,
        )

    def marker_window_config(self) -> MarkerWindowConfig:
        """Build the marker windowing policy from these settings."""
        return MarkerWindowConfig(
            enabled=self.VIRTUAL_MARKERS_ENABLED,
            threshold=self.VIRTUAL_MARKER_THRESHOLD,
            buffer_percent=self.VIRTUAL_MARKER_BUFFER_PERCENT,
        )

    def slide_window_config(self) -> SlideWindowConfig:
        """Build the slide windowing policy from these settings."""
        return SlideWindowConfig(
            enabled=self.VIRTUAL_SCROLLING_ENABLED,
            threshold=self.VIRTUAL_THRESHOLD,
            buffer_size=self.VIRTUAL_BUFFER_SIZE,
        )


def configure_logging(level: str | int | None = None) -> None:
    """Configure root logging with the engine's format.

    Args:
        level: Level name or number; defaults to ``Settings.LOG_LEVEL``.
    """
    if level is None:
        level = get_settings().LOG_LEVEL
    logging.basicConfig(level=level, format=LOG_FORMAT)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: The engine settings.
    """
    return Settings()
