"""Ingestion of raw event records.

``normalize_events`` maps host records onto ``TimelineEvent`` through a
``PropertyMapping`` and normalizes their dates. Failures are isolated per
record: a record whose date cannot be parsed is left out and reported,
the rest of the dataset is still processed. Inverted ranges are kept as
given and reported as ``InvalidRangeWarning``.

Examples:
    >>> result = normalize_events([{"start_date": "2020-01-01"}, {"start_date": "soon"}])
    >>> len(result.events), len(result.failures)
    (1, 1)

Tests:
    - tests/unit/test_ingestion.py::TestMapEvent
    - tests/unit/test_ingestion.py::TestNormalizeEvents
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from timescope.core.dates import CanonicalDate, normalize
from timescope.errors import DateParseError, InvalidRangeWarning
from timescope.schemas.mapping import DEFAULT_PROPERTY_MAPPING, DateFieldMapping, PropertyMapping
from timescope.schemas.timeline import TimelineEra, TimelineEvent

logger = logging.getLogger(__name__)


class EventFailure(BaseModel):
    """A raw record that could not be normalized."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    index: int
    raw: Any
    error: str


class NormalizationResult(BaseModel):
    """Outcome of normalizing a batch of records.

    Attributes:
        events: Successfully normalized events, in input order
        failures: Records left out, with the reason
        warnings: Data-quality warnings for kept records
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    events: list[TimelineEvent] = Field(default_factory=list)
    failures: list[EventFailure] = Field(default_factory=list)
    warnings: list[InvalidRangeWarning] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class EraNormalizationResult(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    eras: list[TimelineEra] = Field(default_factory=list)
    failures: list[EventFailure] = Field(default_factory=list)
    warnings: list[InvalidRangeWarning] = Field(default_factory=list)


def map_date(value: Any, date_mapping: DateFieldMapping | None = None) -> CanonicalDate:
    """Normalize a raw date, applying the date field mapping to nested objects.

    The mapping is used only for mappings without a ``year`` key of their own.
    """
    if (
        date_mapping is not None
        and isinstance(value, Mapping)
        and "year" not in value
    ):
        fields = {
            name: value.get(source_key)
            for name, source_key in date_mapping.model_dump().items()
        }
        value = {name: v for name, v in fields.items() if v is not None}
        if "year" not in value:
            raise DateParseError(fields, f"missing year field {date_mapping.year!r}")
    return normalize(value)


def _field(raw: Mapping[str, Any], key: str) -> Any:
    """Value of ``key``, falling back to its camelCase alias."""
    if key in raw:
        return raw[key]
    return raw.get(to_camel(key))


def map_event(raw: Mapping[str, Any] | TimelineEvent, mapping: PropertyMapping | None = None) -> TimelineEvent:
    """Map one host record onto a TimelineEvent.

    Each mapped key is looked up as given, then as its camelCase alias
    (``start_date`` -> ``startDate``).

    Raises:
        DateParseError: If the record is not a mapping, or the start or
            end date cannot be interpreted.
        ValidationError: If another field has the wrong shape.
    """
    if isinstance(raw, TimelineEvent):
        return raw
    if not isinstance(raw, Mapping):
        raise DateParseError(raw, "not a record")
    mapping = mapping or DEFAULT_PROPERTY_MAPPING
    keys = mapping.event

    start = _field(raw, keys.start_date)
    if start is None:
        raise DateParseError(None, f"missing start date field {keys.start_date!r}")

    data: dict[str, Any] = {
        "start_date": map_date(start, mapping.date),
        "unique_id": _field(raw, keys.unique_id),
    }
    end = _field(raw, keys.end_date)
    if end is not None:
        data["end_date"] = map_date(end, mapping.date)

    text = _field(raw, keys.text)
    headline = _field(raw, keys.headline)
    if isinstance(text, Mapping):
        # Already in {headline, text} form
        data["text"] = text
    elif headline or text:
        data["text"] = {"headline": headline, "text": text}

    for name in ("media", "location", "group", "precision", "display_date"):
        value = _field(raw, getattr(keys, name))
        if value:
            data[name] = value

    for name in ("background", "autolink", "type"):
        value = _field(raw, name)
        if value is not None:
            data[name] = value

    return TimelineEvent.model_validate(data)


def normalize_events(
    raw_events: Iterable[Mapping[str, Any] | TimelineEvent],
    mapping: PropertyMapping | None = None,
) -> NormalizationResult:
    """Normalize a batch of raw event records.

    Args:
        raw_events: Host records (or already-built events).
        mapping: Field mapping; defaults to the canonical field names.

    Returns:
        NormalizationResult: Kept events, failures and warnings.
    """
    result = NormalizationResult()
    for index, raw in enumerate(raw_events):
        try:
            event = map_event(raw, mapping)
        except (DateParseError, ValidationError) as e:
            logger.warning("Skipping event #%d: %s", index, e)
            result.failures.append(EventFailure(index=index, raw=raw, error=str(e)))
            continue

        if event.is_inverted:
            warning = InvalidRangeWarning(
                event.start_date, event.end_date, index=index, unique_id=event.unique_id
            )
            logger.warning("Inverted range kept as given: %s", warning)
            result.warnings.append(warning)
        result.events.append(event)

    if result.failures:
        logger.info(
            "Normalized %d events, %d skipped",
            len(result.events),
            len(result.failures),
        )
    return result


def normalize_eras(raw_eras: Iterable[Mapping[str, Any] | TimelineEra]) -> EraNormalizationResult:
    """Normalize eras with the same per-record isolation as events."""
    result = EraNormalizationResult()
    for index, raw in enumerate(raw_eras):
        try:
            era = raw if isinstance(raw, TimelineEra) else TimelineEra.model_validate(raw)
        except ValidationError as e:
            logger.warning("Skipping era #%d: %s", index, e)
            result.failures.append(EventFailure(index=index, raw=raw, error=str(e)))
            continue

        if era.is_inverted:
            warning = InvalidRangeWarning(era.start_date, era.end_date, index=index, unique_id=era.unique_id)
            logger.warning("Inverted era kept as given: %s", warning)
            result.warnings.append(warning)
        result.eras.append(era)
    return result
