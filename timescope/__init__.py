"""timescope: timeline positioning and windowing engine.

Normalizes dated events, maps them onto a zoomable pixel axis, generates
axis ticks and decides which markers and slides need rendering.
"""

from timescope.core.dates import (
    CanonicalDate,
    DatePrecision,
    DateScale,
    determine_precision,
    from_native,
    normalize,
    to_native,
)
from timescope.core.positioning import EraPosition, MarkerPosition, position_era, position_events
from timescope.core.scale import Scale, ScaleConfig, build_scale
from timescope.core.ticks import Tick, generate_ticks
from timescope.core.windowing import (
    MarkerWindowConfig,
    SlideWindow,
    SlideWindowConfig,
    VisibleSet,
    compute_visible_markers,
    compute_visible_slides,
)
from timescope.core.zoom import ZoomController, ZoomState, create_zoom_transform
from timescope.engine import TimelineEngine
from timescope.errors import DateParseError, InvalidRangeWarning, ScaleFallback, TimelineError
from timescope.ingestion import normalize_events
from timescope.schemas import PropertyMapping, TimelineEra, TimelineEvent

__version__ = "0.1.0"

# Short names for the presentation layer
build = build_scale
position_all = position_events
ticks = generate_ticks

__all__ = [
    "CanonicalDate",
    "DateParseError",
    "DatePrecision",
    "DateScale",
    "EraPosition",
    "InvalidRangeWarning",
    "MarkerPosition",
    "MarkerWindowConfig",
    "PropertyMapping",
    "Scale",
    "ScaleConfig",
    "ScaleFallback",
    "SlideWindow",
    "SlideWindowConfig",
    "Tick",
    "TimelineEngine",
    "TimelineEra",
    "TimelineError",
    "TimelineEvent",
    "VisibleSet",
    "ZoomController",
    "ZoomState",
    "build_scale",
    "compute_visible_markers",
    "compute_visible_slides",
    "create_zoom_transform",
    "determine_precision",
    "from_native",
    "generate_ticks",
    "normalize",
    "normalize_events",
    "position_era",
    "position_events",
    "to_native",
]
