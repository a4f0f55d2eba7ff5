"""Property mapping for arbitrary input schemas.

A host application whose records do not use the timeline field names
supplies a ``PropertyMapping`` naming its own keys. Every field defaults
independently to the canonical key, so a mapping only lists what differs.

Examples:
    >>> mapping = PropertyMapping(event=EventFieldMapping(start_date="when", headline="title"))
    >>> mapping.event.end_date
    'end_date'
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class EventFieldMapping(BaseModel):
    """Source key for each canonical event field."""

    model_config = ConfigDict(frozen=True)

    start_date: str = "start_date"
    end_date: str = "end_date"
    headline: str = "headline"
    text: str = "text"
    media: str = "media"
    location: str = "location"
    group: str = "group"
    unique_id: str = "unique_id"
    precision: str = "precision"
    display_date: str = "display_date"


class DateFieldMapping(BaseModel):
    """Source key for each calendar field of a nested date object."""

    model_config = ConfigDict(frozen=True)

    year: str = "year"
    month: str = "month"
    day: str = "day"
    hour: str = "hour"
    minute: str = "minute"
    second: str = "second"
    millisecond: str = "millisecond"


DEFAULT_EVENT_FIELD_MAPPING = EventFieldMapping()
DEFAULT_DATE_FIELD_MAPPING = DateFieldMapping()


class PropertyMapping(BaseModel):
    """Mapping configuration supplied by the host application.

    Attributes:
        event: Event field keys
        date: Calendar field keys; applied only to nested date objects that
            have no ``year`` key of their own. None disables date mapping.
    """

    model_config = ConfigDict(frozen=True)

    event: EventFieldMapping = Field(default=DEFAULT_EVENT_FIELD_MAPPING)
    date: DateFieldMapping | None = None


DEFAULT_PROPERTY_MAPPING = PropertyMapping()
