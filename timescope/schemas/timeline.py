"""Timeline value objects.

Events, eras and the title slide as immutable Pydantic models. Dates are
normalized on construction, so ``start_date``/``end_date`` are always
``CanonicalDate`` once a model exists; flexible inputs (strings, epoch
milliseconds, ``datetime``) are accepted at the constructor boundary.

Field names are snake_case; camelCase aliases (``startDate``,
``uniqueId``...) are accepted as well.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from timescope.core.dates import CanonicalDate, DatePrecision, normalize, to_epoch_ms


class _Record(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )


class TimelineText(_Record):
    """Headline and body text."""

    headline: str | None = None
    text: str | None = None


class TimelineMedia(_Record):
    """Media reference attached to a slide."""

    url: str | None = None
    caption: str | None = None
    credit: str | None = None
    thumbnail: str | None = None
    alt: str | None = None
    title: str | None = None
    link: str | None = None
    link_target: str | None = None


class TimelineLocation(_Record):
    """Map location attached to an event."""

    name: str | None = None
    lat: float | None = None
    lon: float | None = None
    zoom: float | None = None
    line: bool | None = None
    icon: str | None = None


class TimelineBackground(_Record):
    url: str | None = None
    color: str | None = None


class TimelineEvent(_Record):
    """A dated event.

    ``end_date`` is not required to follow ``start_date``; ingestion flags
    inverted ranges, positioning keeps the literal order.

    Attributes:
        start_date: When the event starts
        end_date: When the event ends, optional
        unique_id: Stable identifier used for render keys
        text: Headline and body
        media: Attached media
        location: Map location
        group: Grouping label for stacked rows
        precision: Explicit precision override
    """

    start_date: CanonicalDate
    end_date: CanonicalDate | None = None
    unique_id: str | None = None
    text: TimelineText | None = None
    media: TimelineMedia | None = None
    location: TimelineLocation | None = None
    background: TimelineBackground | None = None
    group: str | None = None
    display_date: str | None = None
    autolink: bool | None = None
    type: str | None = None
    precision: DatePrecision | None = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def normalize_dates(cls, v: Any) -> Any:
        """Accept any flexible date input."""
        if v is None:
            return None
        return normalize(v)

    @property
    def is_range(self) -> bool:
        return self.end_date is not None

    @property
    def is_inverted(self) -> bool:
        """True when the end date precedes the start date."""
        return self.end_date is not None and to_epoch_ms(self.end_date) < to_epoch_ms(self.start_date)


class TimelineEra(_Record):
    """A named span drawn behind the markers."""

    start_date: CanonicalDate
    end_date: CanonicalDate
    text: TimelineText | None = None
    unique_id: str | None = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def normalize_dates(cls, v: Any) -> Any:
        return normalize(v)

    @property
    def is_inverted(self) -> bool:
        return to_epoch_ms(self.end_date) < to_epoch_ms(self.start_date)


class TimelineTitle(_Record):
    """The optional title slide shown before the first event."""

    text: TimelineText | None = None
    media: TimelineMedia | None = None
    background: TimelineBackground | None = None
    unique_id: str | None = None
    autolink: bool | None = None


class TimelineData(BaseModel):
    """A whole timeline document: title, events and eras.

    Events are kept raw here; run them through
    ``timescope.ingestion.normalize_events`` to isolate bad rows.
    """

    model_config = ConfigDict(extra="ignore")

    title: TimelineTitle | None = None
    events: list[dict[str, Any]] = Field(default_factory=list)
    eras: list[dict[str, Any]] = Field(default_factory=list)
    scale: str | None = None
