"""Zoom and pan over a scale's domain.

``ZoomController`` owns a ``ZoomState``: the baseline scale captured when
the dataset was loaded, the current scale and the zoom level
(``baseline span / current span``). Every operation replaces the current
scale wholesale; the baseline is only replaced by ``set_baseline``.

Only one animated zoom runs at a time. A zoom request made while an
animation is in flight is ignored and returns the unchanged state.

Examples:
    >>> from timescope.core.scale import Scale
    >>> controller = ZoomController(Scale(domain=(0, 1000), range=(0, 100)))
    >>> controller.zoom_in().zoom_level
    1.5
    >>> controller.reset_zoom().current_scale.domain
    (0.0, 1000.0)

Tests:
    - tests/unit/test_zoom.py::TestZoomTransform
    - tests/unit/test_zoom.py::TestZoomController
    - tests/unit/test_zoom.py::TestAnimatedZoom
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from pydantic import BaseModel, ConfigDict, Field

from timescope.core.animation import AnimationConfig, ProgressTask
from timescope.core.dates import FlexibleDateInput, to_epoch_ms, to_instant
from timescope.core.scale import Scale
from timescope.schemas.timeline import TimelineEvent

logger = logging.getLogger(__name__)

ZOOM_STEP = 1.5
MIN_ZOOM = 0.1


def create_zoom_transform(
    scale: Scale,
    factor: float,
    center: FlexibleDateInput | None = None,
) -> Scale:
    """Zoom a scale's domain by ``factor`` around a center.

    The new span is ``span / factor`` centered on ``center`` (the domain
    midpoint when omitted); the range is kept.

    Raises:
        ValueError: If ``factor`` is not positive.
    """
    if factor <= 0:
        raise ValueError(f"Zoom factor must be positive, got {factor}")
    new_span = scale.span_ms / factor
    center_ms = scale.midpoint_ms if center is None else to_instant(center)
    return scale.with_domain(center_ms - new_span / 2, center_ms + new_span / 2)


def zoom_level(current: Scale, original: Scale) -> float:
    """Zoom level of ``current`` relative to ``original`` (1 = unzoomed)."""
    return original.span_ms / current.span_ms


class ZoomState(BaseModel):
    """Snapshot of the zoom controller.

    Attributes:
        current_scale: Scale used for positioning right now
        original_scale: Baseline captured for the current dataset
        zoom_level: Requested level, ``original span / current span``
        is_animating: An animated zoom is in flight
    """

    model_config = ConfigDict(frozen=True)

    current_scale: Scale
    original_scale: Scale
    zoom_level: float = Field(default=1.0, gt=0)
    is_animating: bool = False

    @property
    def is_zoomed(self) -> bool:
        return not self.current_scale.domain_equals(self.original_scale)


class ZoomController:
    """Zoom/pan state machine (Idle -> Animating -> Idle).

    Args:
        original_scale: Baseline scale for the dataset.
        events: Sorted events, used by ``zoom_to_event``.
        animation: Animation settings for animated zooms.
        step: Multiplier for ``zoom_in``/``zoom_out``.
        min_zoom: Zoom-out floor.
        max_zoom: Optional zoom-in ceiling.
        on_update: Called with every new state, including animation frames.
    """

    def __init__(
        self,
        original_scale: Scale,
        events: Sequence[TimelineEvent] = (),
        animation: AnimationConfig | None = None,
        step: float = ZOOM_STEP,
        min_zoom: float = MIN_ZOOM,
        max_zoom: float | None = None,
        on_update: Callable[[ZoomState], None] | None = None,
    ) -> None:
        self.events = list(events)
        self.animation = animation or AnimationConfig()
        self.step = step
        self.min_zoom = min_zoom
        self.max_zoom = max_zoom
        self.on_update = on_update
        self.prefers_reduced_motion = False
        self._state = ZoomState(
            current_scale=original_scale.copy(),
            original_scale=original_scale.copy(),
        )

    @property
    def state(self) -> ZoomState:
        return self._state

    @property
    def is_animating(self) -> bool:
        return self._state.is_animating

    @property
    def animations_active(self) -> bool:
        return self.animation.is_active(self.prefers_reduced_motion)

    def _set_state(self, state: ZoomState) -> ZoomState:
        self._state = state
        if self.on_update is not None:
            self.on_update(state)
        return state

    def _clamp(self, level: float) -> float:
        level = max(level, self.min_zoom)
        if self.max_zoom is not None:
            level = min(level, self.max_zoom)
        return level

    def _scale_at(self, level: float, center_ms: float) -> Scale:
        return create_zoom_transform(self._state.original_scale, level, center_ms)

    def _busy(self, operation: str) -> bool:
        if self._state.is_animating:
            logger.debug("Ignoring %s while a zoom animation is running", operation)
            return True
        return False

    def set_baseline(self, scale: Scale, events: Sequence[TimelineEvent] | None = None) -> ZoomState:
        """Replace the baseline for a new dataset and reset to it."""
        if events is not None:
            self.events = list(events)
        return self._set_state(
            ZoomState(current_scale=scale.copy(), original_scale=scale.copy())
        )

    def resize(self, start_px: float, end_px: float) -> ZoomState:
        """Apply a new pixel range to both scales, keeping domains and level."""
        state = self._state
        return self._set_state(
            state.model_copy(
                update={
                    "current_scale": state.current_scale.with_range(start_px, end_px),
                    "original_scale": state.original_scale.with_range(start_px, end_px),
                }
            )
        )

    def zoom_to_level(self, level: float, center: FlexibleDateInput | None = None) -> ZoomState:
        """Jump to an absolute zoom level, centered on ``center`` or the current midpoint."""
        if self._busy("zoom"):
            return self._state
        level = self._clamp(level)
        center_ms = self._state.current_scale.midpoint_ms if center is None else to_instant(center)
        return self._set_state(
            self._state.model_copy(
                update={"current_scale": self._scale_at(level, center_ms), "zoom_level": level}
            )
        )

    def zoom_in(self) -> ZoomState:
        """Zoom in by one step around the current center."""
        return self.zoom_to_level(self._state.zoom_level * self.step)

    def zoom_out(self) -> ZoomState:
        """Zoom out by one step, never below ``min_zoom``."""
        return self.zoom_to_level(self._state.zoom_level / self.step)

    def zoom_to_date(self, date: FlexibleDateInput, factor: float = 2.0) -> ZoomState:
        """Center on ``date`` and zoom in by ``factor`` relative to the current level."""
        return self.zoom_to_level(self._state.zoom_level * factor, center=date)

    def zoom_to_event(self, index: int, factor: float = 2.0) -> ZoomState:
        """Center on the start date of the event at ``index``.

        Raises:
            IndexError: If there is no event at ``index``.
        """
        return self.zoom_to_date(self._event_instant(index), factor)

    def reset_zoom(self) -> ZoomState:
        """Restore the baseline scale exactly."""
        if self._busy("reset"):
            return self._state
        original = self._state.original_scale
        return self._set_state(
            self._state.model_copy(update={"current_scale": original.copy(), "zoom_level": 1.0})
        )

    def _event_instant(self, index: int) -> float:
        if not 0 <= index < len(self.events):
            raise IndexError(f"No event at index {index} ({len(self.events)} events)")
        return to_epoch_ms(self.events[index].start_date)

    async def animate_zoom(
        self,
        level: float,
        center: FlexibleDateInput | None = None,
    ) -> ZoomState:
        """Animate to an absolute zoom level.

        Each frame rebuilds the scale from the baseline at a level blended
        linearly from the start level to ``level``; when ``center`` is given
        the center is blended from the start midpoint to ``center``, giving
        a combined zoom and pan.

        Returns the final state, or the unchanged state if another
        animation is already running.
        """
        if self._busy("animated zoom"):
            return self._state

        target = self._clamp(level)
        start_level = self._state.zoom_level
        start_center = self._state.current_scale.midpoint_ms
        end_center = start_center if center is None else to_instant(center)

        if not self.animations_active:
            return self.zoom_to_level(target, center=end_center)

        def step(progress: float) -> None:
            blended = start_level + (target - start_level) * progress
            center_ms = start_center + (end_center - start_center) * progress
            final = progress >= 1.0
            self._set_state(
                self._state.model_copy(
                    update={
                        "current_scale": self._scale_at(target if final else blended, center_ms),
                        "zoom_level": target if final else blended,
                        "is_animating": not final,
                    }
                )
            )

        self._state = self._state.model_copy(update={"is_animating": True})
        task = ProgressTask(
            step,
            duration_ms=self.animation.duration_ms,
            easing=self.animation.easing,
            frame_interval=self.animation.frame_interval,
        )
        try:
            await task.run()
        finally:
            if self._state.is_animating:
                self._state = self._state.model_copy(update={"is_animating": False})
        return self._state

    async def animate_zoom_in(self) -> ZoomState:
        return await self.animate_zoom(self._state.zoom_level * self.step)

    async def animate_zoom_out(self) -> ZoomState:
        return await self.animate_zoom(self._state.zoom_level / self.step)

    async def animate_zoom_to_event(self, index: int, factor: float = 2.0) -> ZoomState:
        """Animated zoom + pan onto an event."""
        return await self.animate_zoom(self._state.zoom_level * factor, center=self._event_instant(index))
