"""Continuous time <-> pixel scale and the scale builder.

A ``Scale`` is a linear mapping between a time domain (epoch
milliseconds, UTC) and a pixel range. Scales are immutable; zooming or
resizing produces a new one.

Examples:
    >>> from timescope.core.scale import ScaleConfig, build_scale
    >>> from timescope.schemas import TimelineEvent
    >>> events = [TimelineEvent(start_date={"year": 2000}), TimelineEvent(start_date={"year": 2010})]
    >>> scale = build_scale(events, ScaleConfig(display_width=1000))
    >>> scale.range
    (0.0, 3000.0)

Tests:
    - tests/unit/test_scale.py::TestBuildScale
    - tests/unit/test_scale.py::TestScaleMapping
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict, Field, model_validator

from timescope.core.dates import (
    MS_PER_YEAR,
    CanonicalDate,
    FlexibleDateInput,
    earliest_date,
    from_epoch_ms,
    latest_date,
    to_epoch_ms,
    to_instant,
)
from timescope.errors import ScaleFallback
from timescope.schemas.timeline import TimelineEvent

logger = logging.getLogger(__name__)


class ScaleConfig(BaseModel):
    """Scale builder configuration.

    Attributes:
        display_width: Visible width in pixels
        screen_multiplier: Total scrollable width as a multiple of display_width
        padding: Domain padding per side, as a fraction of the span
        min_span_ms: Minimum span used when events are (nearly) simultaneous
    """

    model_config = ConfigDict(frozen=True)

    display_width: float = Field(gt=0, description="Display width in pixels")
    screen_multiplier: float = Field(default=3.0, gt=0)
    padding: float = Field(default=0.1, ge=0)
    min_span_ms: float = Field(default=MS_PER_YEAR, gt=0)


class Scale(BaseModel):
    """Invertible linear mapping between time and pixels.

    Attributes:
        domain: (start, end) in epoch milliseconds, strictly increasing
        range: (min, max) pixel interval, non-decreasing
        fallback: Degenerate-input fallback applied while building, if any
    """

    model_config = ConfigDict(frozen=True)

    domain: tuple[float, float]
    range: tuple[float, float]
    fallback: ScaleFallback | None = None

    @model_validator(mode="after")
    def validate_bounds(self) -> Scale:
        """Domain bounds strictly increasing, range bounds non-decreasing."""
        if not self.domain[0] < self.domain[1]:
            raise ValueError(f"Scale domain must be strictly increasing: {self.domain}")
        if self.range[0] > self.range[1]:
            raise ValueError(f"Scale range must be non-decreasing: {self.range}")
        return self

    @property
    def span_ms(self) -> float:
        return self.domain[1] - self.domain[0]

    @property
    def pixel_width(self) -> float:
        return self.range[1] - self.range[0]

    @property
    def midpoint_ms(self) -> float:
        return (self.domain[0] + self.domain[1]) / 2

    @property
    def domain_dates(self) -> tuple[CanonicalDate, CanonicalDate]:
        """Domain bounds as calendar dates."""
        return from_epoch_ms(self.domain[0]), from_epoch_ms(self.domain[1])

    def forward_ms(self, ms: float) -> float:
        """Map an instant to a pixel; extrapolates outside the domain."""
        d0, d1 = self.domain
        r0, r1 = self.range
        return r0 + (ms - d0) / (d1 - d0) * (r1 - r0)

    def forward(self, value: FlexibleDateInput) -> float:
        """Map any accepted date input to a pixel position."""
        return self.forward_ms(to_instant(value))

    def invert_ms(self, pixel: float) -> float:
        """Map a pixel back to an instant; a zero-width range maps to the domain start."""
        d0, d1 = self.domain
        r0, r1 = self.range
        if r1 == r0:
            return d0
        return d0 + (pixel - r0) / (r1 - r0) * (d1 - d0)

    def invert(self, pixel: float) -> CanonicalDate:
        return from_epoch_ms(self.invert_ms(pixel))

    def percentage(self, pixel: float) -> float:
        """Pixel position as a percentage of the range (0 for a zero-width range)."""
        if self.pixel_width == 0:
            return 0.0
        return (pixel - self.range[0]) / self.pixel_width * 100

    def contains(self, value: FlexibleDateInput) -> bool:
        ms = to_instant(value)
        return self.domain[0] <= ms <= self.domain[1]

    def copy(self) -> Scale:  # type: ignore[override]
        return self.model_copy()

    def with_domain(self, start_ms: float, end_ms: float) -> Scale:
        """New scale over another domain, same range."""
        return Scale(domain=(start_ms, end_ms), range=self.range)

    def with_range(self, start_px: float, end_px: float) -> Scale:
        """New scale over another range, same domain."""
        return Scale(domain=self.domain, range=(start_px, end_px), fallback=self.fallback)

    def domain_equals(self, other: Scale) -> bool:
        return self.domain == other.domain


def build_scale(
    events: Sequence[TimelineEvent],
    config: ScaleConfig,
    now: float | None = None,
) -> Scale:
    """Build a padded scale covering all events.

    Algorithm:
        1. No events: domain ``[now - min_span, now]`` over ``[0, display_width]``
        2. Otherwise earliest start to latest end (or start)
        3. Span below ``min_span``: a ``min_span`` window centered on the earliest instant
        4. Pad each side by ``span * padding``
        5. Range ``[0, display_width * screen_multiplier]``

    Args:
        events: Events, usually sorted by start date.
        config: Scale configuration.
        now: Epoch milliseconds used by the empty-dataset fallback
            (defaults to the current time).

    Returns:
        Scale: The built scale.
    """
    earliest = earliest_date(events)
    latest = latest_date(events)

    if earliest is None or latest is None:
        end = now if now is not None else time.time() * 1000
        logger.debug("No events, using a %.0f ms window ending now", config.min_span_ms)
        return Scale(
            domain=(end - config.min_span_ms, end),
            range=(0.0, float(config.display_width)),
            fallback=ScaleFallback.EMPTY_DATASET,
        )

    start_ms = to_epoch_ms(earliest)
    end_ms = to_epoch_ms(latest)
    span = end_ms - start_ms
    fallback = None

    if span < config.min_span_ms:
        logger.debug("Span %.0f ms below minimum, centering %.0f ms window", span, config.min_span_ms)
        span = config.min_span_ms
        center = start_ms
        start_ms = center - span / 2
        end_ms = center + span / 2
        fallback = ScaleFallback.DEGENERATE_SPAN

    pad = span * config.padding
    pixel_width = config.display_width * config.screen_multiplier

    return Scale(
        domain=(start_ms - pad, end_ms + pad),
        range=(0.0, float(pixel_width)),
        fallback=fallback,
    )
