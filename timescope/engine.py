"""Timeline engine facade.

``TimelineEngine`` holds one dataset and wires the pieces together:
sorted events -> scale -> marker/era positions and axis ticks, with a
``ZoomController`` replacing the scale on zoom and windowing helpers for
large datasets. Derived values are recomputed from the current scale on
every access, never cached across scale changes.

Examples:
    >>> engine = TimelineEngine([{"start_date": {"year": 2020}}, {"start_date": {"year": 2019}}])
    >>> [m.event.start_date.year for m in engine.marker_positions]
    [2019, 2020]

Tests:
    - tests/unit/test_engine.py::TestTimelineEngine
    - tests/unit/test_engine.py::TestEngineScenarios
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from timescope.config import Settings, get_settings
from timescope.core.dates import FlexibleDateInput, sort_events_by_date
from timescope.core.positioning import EraPosition, MarkerPosition, position_era, position_events
from timescope.core.scale import Scale, ScaleConfig, build_scale
from timescope.core.ticks import Tick, generate_ticks
from timescope.core.windowing import (
    SlideWindow,
    VisibleSet,
    compute_visible_markers,
    compute_visible_slides,
)
from timescope.core.zoom import ZoomController, ZoomState
from timescope.ingestion import EventFailure, normalize_eras, normalize_events
from timescope.schemas.mapping import PropertyMapping
from timescope.schemas.timeline import TimelineData, TimelineEra, TimelineEvent, TimelineTitle

logger = logging.getLogger(__name__)


class TimelineEngine:
    """Positioning, zoom and windowing for one timeline dataset.

    Args:
        events: Raw records or TimelineEvents.
        eras: Raw records or TimelineEras.
        title: Optional title slide.
        settings: Engine settings; defaults to ``get_settings()``.
        mapping: Property mapping for raw records.
        now: Epoch ms for the empty-dataset fallback (tests).
    """

    def __init__(
        self,
        events: Iterable[Mapping[str, Any] | TimelineEvent] = (),
        eras: Iterable[Mapping[str, Any] | TimelineEra] = (),
        title: TimelineTitle | None = None,
        settings: Settings | None = None,
        mapping: PropertyMapping | None = None,
        now: float | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.scale_config: ScaleConfig = self.settings.scale_config()
        self.tick_count = self.settings.AXIS_TICK_COUNT
        self.title = title
        self.mapping = mapping
        self._now = now
        self.failures: list[EventFailure] = []
        self.warnings: list[Warning] = []
        self.eras: list[TimelineEra] = []
        self.events: list[TimelineEvent] = []
        self.zoom = ZoomController(
            self._build(),
            animation=self.settings.animation_config(),
            step=self.settings.ZOOM_STEP,
            min_zoom=self.settings.MIN_ZOOM,
            max_zoom=self.settings.MAX_ZOOM,
        )
        self.set_events(events, eras)

    @classmethod
    def from_data(
        cls,
        data: TimelineData | Mapping[str, Any],
        settings: Settings | None = None,
        mapping: PropertyMapping | None = None,
    ) -> TimelineEngine:
        """Build an engine from a whole timeline document."""
        if not isinstance(data, TimelineData):
            data = TimelineData.model_validate(data)
        return cls(data.events, data.eras, title=data.title, settings=settings, mapping=mapping)

    def _build(self) -> Scale:
        return build_scale(self.events, self.scale_config, now=self._now)

    def set_events(
        self,
        events: Iterable[Mapping[str, Any] | TimelineEvent],
        eras: Iterable[Mapping[str, Any] | TimelineEra] | None = None,
    ) -> None:
        """Replace the dataset, rebuild the scale and capture a new zoom baseline."""
        result = normalize_events(events, self.mapping)
        self.events = sort_events_by_date(result.events)
        self.failures = list(result.failures)
        self.warnings = list(result.warnings)
        if eras is not None:
            era_result = normalize_eras(eras)
            self.eras = era_result.eras
            self.failures.extend(era_result.failures)
            self.warnings.extend(era_result.warnings)

        self.zoom.set_baseline(self._build(), self.events)
        logger.info("Loaded %d events, %d eras", len(self.events), len(self.eras))

    def set_display_width(self, display_width: float) -> None:
        """React to a viewport resize; domains and zoom level are kept."""
        self.scale_config = self.scale_config.model_copy(update={"display_width": display_width})
        pixel_width = (
            display_width if not self.events else display_width * self.scale_config.screen_multiplier
        )
        self.zoom.resize(0.0, pixel_width)

    # Derived values

    @property
    def scale(self) -> Scale:
        return self.zoom.state.current_scale

    @property
    def original_scale(self) -> Scale:
        return self.zoom.state.original_scale

    @property
    def zoom_level(self) -> float:
        return self.zoom.state.zoom_level

    @property
    def pixel_width(self) -> float:
        return self.scale.pixel_width

    @property
    def marker_positions(self) -> list[MarkerPosition]:
        return position_events(self.events, self.scale)

    @property
    def era_positions(self) -> list[EraPosition]:
        return [position_era(era, self.scale) for era in self.eras]

    @property
    def axis_ticks(self) -> list[Tick]:
        return generate_ticks(self.scale, self.tick_count)

    def event_position(self, index: int) -> float:
        """Pixel position of an event, 0 if there is no such event."""
        if not 0 <= index < len(self.events):
            return 0.0
        return position_events([self.events[index]], self.scale)[0].x

    def event_percentage(self, index: int) -> float:
        if not 0 <= index < len(self.events):
            return 0.0
        return self.scale.percentage(self.event_position(index))

    def era_position(self, era: TimelineEra) -> EraPosition:
        return position_era(era, self.scale)

    # Zoom

    def zoom_in(self) -> ZoomState:
        return self.zoom.zoom_in()

    def zoom_out(self) -> ZoomState:
        return self.zoom.zoom_out()

    def zoom_to_date(self, date: FlexibleDateInput, factor: float = 2.0) -> ZoomState:
        return self.zoom.zoom_to_date(date, factor)

    def zoom_to_event(self, index: int, factor: float = 2.0) -> ZoomState:
        return self.zoom.zoom_to_event(index, factor)

    def reset_zoom(self) -> ZoomState:
        return self.zoom.reset_zoom()

    # Windowing

    def visible_markers(self, viewport: tuple[float, float] = (0.0, 100.0)) -> VisibleSet:
        return compute_visible_markers(
            self.marker_positions, viewport, self.settings.marker_window_config()
        )

    def visible_slides(self, focus_index: int) -> SlideWindow:
        return compute_visible_slides(
            len(self.events),
            focus_index,
            self.settings.slide_window_config(),
            has_title=self.title is not None,
            keys=[event.unique_id for event in self.events],
        )
