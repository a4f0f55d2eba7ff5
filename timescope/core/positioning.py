"""Marker and era positions from a built scale.

Positions are derived values: recompute them whenever the scale or the
event list changes, never patch them.

Tests:
    - tests/unit/test_positioning.py::TestPositionEvents
    - tests/unit/test_positioning.py::TestPositionEra
"""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict

from timescope.core.dates import normalize, to_epoch_ms
from timescope.core.scale import Scale
from timescope.schemas.timeline import TimelineEra, TimelineEvent

MIN_ERA_WIDTH = 1.0


class MarkerPosition(BaseModel):
    """Pixel and percentage position of one event marker.

    Attributes:
        index: Position of the event in the input sequence
        x: Pixel offset from the range start
        percentage: Position within the range (0-100 inside the domain)
        event: The positioned event
    """

    model_config = ConfigDict(frozen=True)

    index: int
    x: float
    percentage: float
    event: TimelineEvent

    @property
    def key(self) -> str:
        return self.event.unique_id or f"marker-{self.index}"


class EraPosition(BaseModel):
    """Pixel and percentage extent of an era.

    ``width`` is floored at one pixel; ``percentage_width`` is the raw
    extent, so an inverted era reports a negative percentage width.
    """

    model_config = ConfigDict(frozen=True)

    x: float
    width: float
    percentage: float
    percentage_width: float


def position_events(events: Sequence[TimelineEvent], scale: Scale) -> list[MarkerPosition]:
    """Position every event by its start date, preserving input order.

    Args:
        events: Events to position.
        scale: Scale to map through.

    Returns:
        list[MarkerPosition]: One position per event, ``index`` matching input order.
    """
    positions = []
    for index, event in enumerate(events):
        x = scale.forward_ms(to_epoch_ms(normalize(event.start_date)))
        positions.append(
            MarkerPosition(index=index, x=x, percentage=scale.percentage(x), event=event)
        )
    return positions


def position_era(era: TimelineEra, scale: Scale) -> EraPosition:
    """Position an era from its start and end dates.

    Start and end are mapped in the order given; an inverted era is not
    reordered.
    """
    x = scale.forward_ms(to_epoch_ms(era.start_date))
    end_x = scale.forward_ms(to_epoch_ms(era.end_date))
    width = end_x - x

    total = scale.pixel_width
    if total == 0:
        percentage = percentage_width = 0.0
    else:
        percentage = (x - scale.range[0]) / total * 100
        percentage_width = width / total * 100

    return EraPosition(
        x=x,
        width=max(width, MIN_ERA_WIDTH),
        percentage=percentage,
        percentage_width=percentage_width,
    )


def position_eras(eras: Sequence[TimelineEra], scale: Scale) -> list[EraPosition]:
    return [position_era(era, scale) for era in eras]
