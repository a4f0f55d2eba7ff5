"""Progress-driven animation tasks.

An animation is a step function ``step(progress)`` driven from 0 to 1
over a duration by an asyncio frame loop. Progress is strictly
increasing and the last step is always exactly ``1.0``. With animations
disabled, or reduced motion requested, the task collapses to a single
synchronous ``step(1.0)``.

Examples:
    >>> import asyncio
    >>> seen = []
    >>> task = ProgressTask(seen.append, duration_ms=0)
    >>> asyncio.run(task.run())
    >>> seen
    [1.0]

Tests:
    - tests/unit/test_animation.py::TestProgressTask
    - tests/unit/test_animation.py::TestEasing
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

FRAME_INTERVAL = 1 / 60


def _ease_out_cubic(t: float) -> float:
    t -= 1
    return t * t * t + 1


def _ease_in_out_cubic(t: float) -> float:
    return 4 * t * t * t if t < 0.5 else (t - 1) * (2 * t - 2) * (2 * t - 2) + 1


def _ease_out_quart(t: float) -> float:
    t -= 1
    return 1 - t * t * t * t


def _ease_in_out_quart(t: float) -> float:
    if t < 0.5:
        return 8 * t * t * t * t
    t -= 1
    return 1 - 8 * t * t * t * t


def _ease_out_quint(t: float) -> float:
    t -= 1
    return 1 + t * t * t * t * t


def _ease_in_out_quint(t: float) -> float:
    if t < 0.5:
        return 16 * t * t * t * t * t
    t -= 1
    return 1 + 16 * t * t * t * t * t


EASING_FUNCTIONS: dict[str, Callable[[float], float]] = {
    "linear": lambda t: t,
    "easeInQuad": lambda t: t * t,
    "easeOutQuad": lambda t: t * (2 - t),
    "easeInOutQuad": lambda t: 2 * t * t if t < 0.5 else -1 + (4 - 2 * t) * t,
    "easeInCubic": lambda t: t * t * t,
    "easeOutCubic": _ease_out_cubic,
    "easeInOutCubic": _ease_in_out_cubic,
    "easeInQuart": lambda t: t * t * t * t,
    "easeOutQuart": _ease_out_quart,
    "easeInOutQuart": _ease_in_out_quart,
    "easeInQuint": lambda t: t * t * t * t * t,
    "easeOutQuint": _ease_out_quint,
    "easeInOutQuint": _ease_in_out_quint,
}


class AnimationConfig(BaseModel):
    """Animation settings.

    Attributes:
        enabled: Animate at all
        duration_ms: Animation length in milliseconds
        easing: Name of an entry in ``EASING_FUNCTIONS``
        respect_reduced_motion: Collapse animations when reduced motion is requested
        frame_interval: Seconds between frames
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    duration_ms: float = Field(default=600.0, ge=0)
    easing: str = "linear"
    respect_reduced_motion: bool = True
    frame_interval: float = Field(default=FRAME_INTERVAL, gt=0)

    @field_validator("easing")
    @classmethod
    def validate_easing(cls, v: str) -> str:
        if v not in EASING_FUNCTIONS:
            raise ValueError(f"Unknown easing: {v}. Must be one of {sorted(EASING_FUNCTIONS)}")
        return v

    def is_active(self, prefers_reduced_motion: bool = False) -> bool:
        """Whether animations should actually run."""
        if not self.enabled:
            return False
        if self.respect_reduced_motion and prefers_reduced_motion:
            return False
        return True

    def effective_duration(self, prefers_reduced_motion: bool = False) -> float:
        """Duration in ms, 0 when animations are inactive."""
        return self.duration_ms if self.is_active(prefers_reduced_motion) else 0.0


class ProgressTask:
    """Run ``step(progress)`` once per frame until progress reaches 1.

    Args:
        step: Called with eased progress values in (0, 1].
        duration_ms: Total duration; 0 means a single ``step(1.0)``.
        easing: Name of an entry in ``EASING_FUNCTIONS``.
        frame_interval: Seconds to wait between frames.
        clock: Monotonic clock in seconds.
        sleep: Coroutine used to wait for the next frame.
    """

    def __init__(
        self,
        step: Callable[[float], None],
        duration_ms: float,
        easing: str = "linear",
        frame_interval: float = FRAME_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._step = step
        self.duration_ms = duration_ms
        self._ease = EASING_FUNCTIONS[easing]
        self.frame_interval = frame_interval
        self._clock = clock
        self._sleep = sleep
        self.progress = 0.0
        self.frames = 0
        self.is_running = False

    @property
    def done(self) -> bool:
        return self.progress >= 1.0

    def _emit(self, progress: float) -> None:
        self.progress = progress
        self.frames += 1
        self._step(1.0 if progress >= 1.0 else self._ease(progress))

    def run_sync(self) -> None:
        """Jump straight to the final frame."""
        self._emit(1.0)

    async def run(self) -> None:
        """Drive the step function until progress reaches 1."""
        if self.is_running:
            raise RuntimeError("ProgressTask is already running")
        if self.duration_ms <= 0:
            self.run_sync()
            return

        self.is_running = True
        try:
            start = self._clock()
            while not self.done:
                elapsed_ms = (self._clock() - start) * 1000
                progress = min(elapsed_ms / self.duration_ms, 1.0)
                if progress > self.progress:
                    self._emit(progress)
                if not self.done:
                    await self._sleep(self.frame_interval)
        finally:
            self.is_running = False
        logger.debug("Animation finished after %d frames", self.frames)


async def animate_value(
    start: float,
    end: float,
    on_update: Callable[[float], None],
    config: AnimationConfig | None = None,
    prefers_reduced_motion: bool = False,
) -> None:
    """Animate a number from ``start`` to ``end``, reporting each frame."""
    config = config or AnimationConfig()
    task = ProgressTask(
        lambda p: on_update(start + (end - start) * p),
        duration_ms=config.effective_duration(prefers_reduced_motion),
        easing=config.easing,
        frame_interval=config.frame_interval,
    )
    await task.run()
