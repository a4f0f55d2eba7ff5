"""Timeline value objects and input mapping records."""

from timescope.schemas.mapping import (
    DEFAULT_DATE_FIELD_MAPPING,
    DEFAULT_EVENT_FIELD_MAPPING,
    DEFAULT_PROPERTY_MAPPING,
    DateFieldMapping,
    EventFieldMapping,
    PropertyMapping,
)
from timescope.schemas.timeline import (
    TimelineBackground,
    TimelineData,
    TimelineEra,
    TimelineEvent,
    TimelineLocation,
    TimelineMedia,
    TimelineText,
    TimelineTitle,
)

__all__ = [
    "DEFAULT_DATE_FIELD_MAPPING",
    "DEFAULT_EVENT_FIELD_MAPPING",
    "DEFAULT_PROPERTY_MAPPING",
    "DateFieldMapping",
    "EventFieldMapping",
    "PropertyMapping",
    "TimelineBackground",
    "TimelineData",
    "TimelineEra",
    "TimelineEvent",
    "TimelineLocation",
    "TimelineMedia",
    "TimelineText",
    "TimelineTitle",
]
