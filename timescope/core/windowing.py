"""Windowing (virtualization) for large timelines.

Two policies share one shape: decide whether windowing is on (explicit
override, else auto-enable at a size threshold), then compute the
minimal set of item indices to materialize.

- Markers: items whose percentage position lies within the visible
  percentage range widened by a buffer on each side.
- Slides: the focused slide plus ``buffer_size`` neighbours on each side.
  An optional title slide occupies index 0.

Examples:
    >>> window = compute_visible_slides(200, 100, SlideWindowConfig())
    >>> window.indices
    (98, 99, 100, 101, 102)
    >>> window.memory_reduction_percent
    98

Tests:
    - tests/unit/test_windowing.py::TestMarkerWindowing
    - tests/unit/test_windowing.py::TestSlideWindowing
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

from timescope.core.positioning import MarkerPosition
from timescope.schemas.timeline import TimelineEvent


class MarkerWindowConfig(BaseModel):
    """Marker windowing policy.

    Attributes:
        enabled: Force on/off; None auto-enables at ``threshold`` events
        threshold: Event count that auto-enables windowing
        buffer_percent: Extra percentage kept on each side of the viewport
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool | None = None
    threshold: int = Field(default=100, ge=0)
    buffer_percent: float = Field(default=10.0, ge=0)

    def is_enabled(self, total: int) -> bool:
        if self.enabled is not None:
            return self.enabled
        return total >= self.threshold


class SlideWindowConfig(BaseModel):
    """Slide windowing policy.

    Attributes:
        enabled: Force on/off; None auto-enables at ``threshold`` slides
        threshold: Slide count (title included) that auto-enables windowing
        buffer_size: Slides kept on each side of the focused slide
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool | None = None
    threshold: int = Field(default=50, ge=0)
    buffer_size: int = Field(default=2, ge=0)

    def is_enabled(self, total: int) -> bool:
        if self.enabled is not None:
            return self.enabled
        return total >= self.threshold


class VisibleSet(BaseModel):
    """Indices to materialize, with counts for observability."""

    model_config = ConfigDict(frozen=True)

    indices: tuple[int, ...]
    keys: tuple[str, ...] = ()
    rendered_count: int
    total_count: int
    enabled: bool

    @computed_field  # type: ignore[prop-decorator]
    @property
    def memory_reduction_percent(self) -> int:
        """Share of items skipped, rounded half up; 0 when windowing is off."""
        if not self.enabled or self.total_count == 0:
            return 0
        return math.floor((1 - self.rendered_count / self.total_count) * 100 + 0.5)


class SlideRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["title", "event"]
    index: int
    key: str


class SlideWindow(VisibleSet):
    """Visible slides plus the range and transform offset for a slider.

    Attributes:
        range_start: First rendered slide index (inclusive)
        range_end: Last rendered slide index (exclusive)
        transform_offset: Offset of the focused slide, in percent of a slide width
        slides: Title/event references for each rendered slide
    """

    range_start: int
    range_end: int
    transform_offset: float
    slides: tuple[SlideRef, ...] = ()


def clamp_viewport(start: float, end: float) -> tuple[float, float]:
    """Clamp a percentage viewport to [0, 100]."""
    return max(0.0, start), min(100.0, end)


def compute_visible_markers(
    items: Sequence[MarkerPosition] | Sequence[TimelineEvent],
    viewport: tuple[float, float] = (0.0, 100.0),
    config: MarkerWindowConfig | None = None,
) -> VisibleSet:
    """Select the markers to render for a percentage viewport.

    Args:
        items: Marker positions, or bare events. Events carry no position,
            so each is placed at ``index / total * 100``.
        viewport: Visible (start, end) percentages, clamped to [0, 100].
        config: Windowing policy.

    Returns:
        VisibleSet: Indices in ascending order.
    """
    config = config or MarkerWindowConfig()
    total = len(items)
    enabled = config.is_enabled(total)

    def key_of(i: int) -> str:
        item = items[i]
        event = item.event if isinstance(item, MarkerPosition) else item
        return event.unique_id or f"marker-{i}"

    if not enabled:
        indices = tuple(range(total))
    else:
        start, end = clamp_viewport(*viewport)
        low = start - config.buffer_percent
        high = end + config.buffer_percent
        indices = tuple(
            i
            for i, item in enumerate(items)
            if low <= _percentage_of(item, i, total) <= high
        )

    return VisibleSet(
        indices=indices,
        keys=tuple(key_of(i) for i in indices),
        rendered_count=len(indices),
        total_count=total,
        enabled=enabled,
    )


def _percentage_of(item: MarkerPosition | TimelineEvent, index: int, total: int) -> float:
    if isinstance(item, MarkerPosition):
        return item.percentage
    return index / total * 100


def compute_visible_slides(
    total_count: int,
    focus_index: int,
    config: SlideWindowConfig | None = None,
    has_title: bool = False,
    keys: Sequence[str | None] | None = None,
) -> SlideWindow:
    """Select the slides to render around the focused slide.

    Args:
        total_count: Number of event slides (title excluded).
        focus_index: Index of the focused slide (title, if any, is 0).
        config: Windowing policy.
        has_title: A title slide precedes the events.
        keys: Optional ``unique_id`` per event for render keys.

    Returns:
        SlideWindow: Visible slide indices and slider bookkeeping.
    """
    config = config or SlideWindowConfig()
    offset = 1 if has_title else 0
    total_slides = total_count + offset
    enabled = config.is_enabled(total_slides)

    if enabled:
        start = max(0, focus_index - config.buffer_size)
        end = min(total_slides, focus_index + config.buffer_size + 1)
        transform_offset = float((focus_index - start) * 100)
    else:
        start, end = 0, total_slides
        transform_offset = float(focus_index * 100)

    slides = []
    if has_title and start == 0 and end > 0:
        slides.append(SlideRef(kind="title", index=0, key="title"))
    for event_index in range(max(0, start - offset), max(0, min(total_count, end - offset))):
        unique_id = keys[event_index] if keys is not None else None
        slides.append(
            SlideRef(
                kind="event",
                index=event_index + offset,
                key=unique_id or f"event-{event_index}",
            )
        )

    return SlideWindow(
        indices=tuple(s.index for s in slides),
        keys=tuple(s.key for s in slides),
        rendered_count=len(slides),
        total_count=total_slides,
        enabled=enabled,
        range_start=start,
        range_end=max(start, end),
        transform_offset=transform_offset,
        slides=tuple(slides),
    )
