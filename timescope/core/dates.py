"""Canonical dates and the date normalizer.

Every date entering the engine is turned into a ``CanonicalDate``: a
calendar-field record where only ``year`` is mandatory and a missing
sub-year field means "unspecified", not zero.

Supports:
- Pass-through of canonical dates and ``{"year": ...}`` mappings
- ``datetime``/``date`` values and numeric epoch milliseconds
- ISO strings, a few textual formats, ``YYYY-M-D`` and bare years
- BCE years (zero and negative, astronomical numbering)

All calendar arithmetic is proleptic Gregorian in UTC and runs on day
counts rather than ``datetime``, so years outside 1..9999 still map to a
continuous instant (float milliseconds since 1970-01-01T00:00:00Z).

Examples:
    >>> from timescope.core.dates import normalize, determine_precision
    >>> d = normalize("1776-07-04")
    >>> (d.year, d.month, d.day)
    (1776, 7, 4)
    >>> determine_precision(CanonicalDate(year=2020, minute=30)).value
    'day'

Tests:
    - tests/unit/test_dates.py::TestNormalize
    - tests/unit/test_dates.py::TestDeterminePrecision
    - tests/unit/test_dates.py::TestNativeRoundTrip
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from timescope.errors import DateParseError

if TYPE_CHECKING:
    from timescope.schemas.timeline import TimelineEvent

MS_PER_SECOND = 1000
MS_PER_MINUTE = MS_PER_SECOND * 60
MS_PER_HOUR = MS_PER_MINUTE * 60
MS_PER_DAY = MS_PER_HOUR * 24
MS_PER_YEAR = float(MS_PER_DAY * 365)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

MONTH_ABBR = (
    "", "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


class DatePrecision(str, Enum):
    """Finest calendar unit considered meaningful for a date."""

    MILLISECOND = "millisecond"
    SECOND = "second"
    MINUTE = "minute"
    HOUR = "hour"
    DAY = "day"
    MONTH = "month"
    YEAR = "year"


class DateScale(str, Enum):
    """Display scales, from most to least precise."""

    MILLISECOND = "millisecond"
    SECOND = "second"
    MINUTE = "minute"
    HOUR = "hour"
    DAY = "day"
    MONTH = "month"
    YEAR = "year"
    DECADE = "decade"
    CENTURY = "century"
    MILLENNIUM = "millennium"


# Approximate milliseconds per unit (30-day months, 365-day years)
SCALES: list[tuple[DateScale, float]] = [
    (DateScale.MILLISECOND, 1),
    (DateScale.SECOND, MS_PER_SECOND),
    (DateScale.MINUTE, MS_PER_MINUTE),
    (DateScale.HOUR, MS_PER_HOUR),
    (DateScale.DAY, MS_PER_DAY),
    (DateScale.MONTH, MS_PER_DAY * 30),
    (DateScale.YEAR, MS_PER_YEAR),
    (DateScale.DECADE, MS_PER_YEAR * 10),
    (DateScale.CENTURY, MS_PER_YEAR * 100),
    (DateScale.MILLENNIUM, MS_PER_YEAR * 1000),
]


class CanonicalDate(BaseModel):
    """A calendar-field date with varying precision.

    Attributes:
        year: The year (zero and negative for BCE)
        month: Month (1-12), optional
        day: Day of month (1-31), optional
        hour: Hour (0-23), optional
        minute: Minute (0-59), optional
        second: Second (0-59), optional
        millisecond: Millisecond (0-999), optional
        display_text: Caller-supplied label that overrides formatting

    Examples:
        >>> CanonicalDate(year=-44, month=3, day=15).display_year
        '44 BCE'
        >>> CanonicalDate(year="2020").year
        2020
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    year: int = Field(..., description="Year (negative for BCE)")
    month: int | None = Field(default=None, ge=1, le=12)
    day: int | None = Field(default=None, ge=1, le=31)
    hour: int | None = Field(default=None, ge=0, le=23)
    minute: int | None = Field(default=None, ge=0, le=59)
    second: int | None = Field(default=None, ge=0, le=59)
    millisecond: int | None = Field(default=None, ge=0, le=999)
    display_text: str | None = Field(default=None, alias="displayText")

    @property
    def is_bce(self) -> bool:
        """Check if this is a BCE date."""
        return self.year < 0

    @property
    def display_year(self) -> str:
        """Human-readable year, e.g. ``'1776'`` or ``'44 BCE'``."""
        if self.is_bce:
            return f"{abs(self.year)} BCE"
        return str(self.year)

    @property
    def populated_fields(self) -> dict[str, int]:
        """Calendar fields that are actually set."""
        return {
            name: value
            for name, value in self.model_dump(exclude={"display_text"}).items()
            if value is not None
        }

    def __str__(self) -> str:
        return self.display_text or format_date(self)


FlexibleDateInput = Union[CanonicalDate, Mapping[str, Any], datetime, date, int, float, str]


# Proleptic Gregorian day counts (days since 1970-01-01), valid for any year.

def days_from_civil(year: int, month: int, day: int) -> int:
    """Day number of a civil date; out-of-range days roll into the next month."""
    y = year - (1 if month <= 2 else 0)
    era = y // 400
    yoe = y - era * 400
    doy = (153 * (month + (-3 if month > 2 else 9)) + 2) // 5 + day - 1
    doe = yoe * 365 + yoe // 4 - yoe // 100 + doy
    return era * 146097 + doe - 719468


def civil_from_days(days: int) -> tuple[int, int, int]:
    """Inverse of ``days_from_civil``."""
    z = days + 719468
    era = z // 146097
    doe = z - era * 146097
    yoe = (doe - doe // 1460 + doe // 36524 - doe // 146096) // 365
    doy = doe - (365 * yoe + yoe // 4 - yoe // 100)
    mp = (5 * doy + 2) // 153
    day = doy - (153 * mp + 2) // 5 + 1
    month = mp + (3 if mp < 10 else -9)
    year = yoe + era * 400 + (1 if month <= 2 else 0)
    return year, month, day


def to_epoch_ms(value: CanonicalDate) -> float:
    """Convert a canonical date to milliseconds since the Unix epoch (UTC).

    Unspecified fields take their lowest value (month 1, day 1, midnight).
    """
    days = days_from_civil(value.year, value.month or 1, value.day or 1)
    return float(
        days * MS_PER_DAY
        + (value.hour or 0) * MS_PER_HOUR
        + (value.minute or 0) * MS_PER_MINUTE
        + (value.second or 0) * MS_PER_SECOND
        + (value.millisecond or 0)
    )


def from_epoch_ms(ms: float) -> CanonicalDate:
    """Decompose an epoch-millisecond instant into a fully populated date.

    Fractional milliseconds are rounded to the nearest whole millisecond.
    """
    if isinstance(ms, bool) or not math.isfinite(ms):
        raise DateParseError(ms, "not a finite timestamp")
    total = int(math.floor(ms + 0.5))
    days, rem = divmod(total, MS_PER_DAY)
    year, month, day = civil_from_days(days)
    hour, rem = divmod(rem, MS_PER_HOUR)
    minute, rem = divmod(rem, MS_PER_MINUTE)
    second, millisecond = divmod(rem, MS_PER_SECOND)
    return CanonicalDate(
        year=year,
        month=month,
        day=day,
        hour=hour,
        minute=minute,
        second=second,
        millisecond=millisecond,
    )


def to_native(value: CanonicalDate) -> datetime:
    """Convert to a UTC-aware ``datetime``.

    Raises:
        DateParseError: If the year is outside ``datetime``'s range.
    """
    try:
        return EPOCH + timedelta(milliseconds=to_epoch_ms(value))
    except OverflowError as e:
        raise DateParseError(value, "year outside the native datetime range") from e


def from_native(value: datetime | date) -> CanonicalDate:
    """Create from a ``datetime`` or ``date``.

    Naive datetimes are taken as UTC; aware ones are converted to UTC.
    A plain ``date`` yields year, month and day only.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return CanonicalDate(
            year=value.year,
            month=value.month,
            day=value.day,
            hour=value.hour,
            minute=value.minute,
            second=value.second,
            millisecond=value.microsecond // 1000,
        )
    return CanonicalDate(year=value.year, month=value.month, day=value.day)


_TEXT_FORMATS = (
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d %H:%M:%S",
)
_SIMPLE_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_BARE_YEAR = re.compile(r"^([+-]?\d{4})$")


def parse_date_string(text: str) -> CanonicalDate:
    """Parse a date string.

    Tries, in order: a full ISO date-time parse and a few common textual
    formats, a strict ``YYYY-MM-DD`` pattern (1- or 2-digit month and
    day), then a bare 4-digit year.

    Raises:
        DateParseError: If no stage accepts the string.
    """
    candidate = text.strip()
    if not candidate:
        raise DateParseError(text, "empty string")

    try:
        return from_native(datetime.fromisoformat(candidate))
    except ValueError:
        pass
    for fmt in _TEXT_FORMATS:
        try:
            return from_native(datetime.strptime(candidate, fmt))
        except ValueError:
            continue

    match = _SIMPLE_DATE.match(candidate)
    if match:
        year, month, day = (int(g) for g in match.groups())
        try:
            return CanonicalDate(year=year, month=month, day=day)
        except ValidationError as e:
            raise DateParseError(text, "month or day out of range") from e

    match = _BARE_YEAR.match(candidate)
    if match:
        return CanonicalDate(year=int(match.group(1)))

    raise DateParseError(text, "unrecognized date string")


def normalize(value: FlexibleDateInput) -> CanonicalDate:
    """Resolve any accepted date input to a CanonicalDate.

    Resolution order (first match wins):
        1. A CanonicalDate, or a mapping with a ``year`` key, passes through
        2. ``datetime``/``date`` values and numeric epoch milliseconds are
           decomposed in UTC
        3. Strings go through ``parse_date_string``

    Args:
        value: The date input.

    Returns:
        CanonicalDate: The normalized date.

    Raises:
        DateParseError: If no interpretation succeeds.

    Examples:
        >>> normalize({"year": 2020, "month": 5}).month
        5
        >>> normalize(0).year
        1970
    """
    if isinstance(value, CanonicalDate):
        return value
    if isinstance(value, Mapping) and "year" in value:
        try:
            return CanonicalDate.model_validate(value)
        except ValidationError as e:
            raise DateParseError(dict(value), "invalid calendar fields") from e
    if isinstance(value, (datetime, date)):
        return from_native(value)
    if isinstance(value, bool):
        raise DateParseError(value, "booleans are not dates")
    if isinstance(value, (int, float)):
        return from_epoch_ms(value)
    if isinstance(value, str):
        return parse_date_string(value)
    raise DateParseError(value, f"unsupported input type {type(value).__name__}")


def to_instant(value: FlexibleDateInput) -> float:
    """Epoch milliseconds for any accepted input; numbers pass through unrounded."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    return to_epoch_ms(normalize(value))


def _is_set(value: int | None) -> bool:
    # Zero counts as unset: upstream sources default missing fields to 0.
    return value is not None and value != 0


def determine_precision(value: CanonicalDate) -> DatePrecision:
    """Determine the precision of a date from its populated fields.

    Rules, in order:
        - only ``minute`` among the time fields -> DAY (treated as noise)
        - no time fields -> DAY
        - otherwise the most granular time field
        - otherwise DAY / MONTH / YEAR from the date fields

    Zero-valued fields count as unset.
    """
    has_ms = _is_set(value.millisecond)
    has_second = _is_set(value.second)
    has_minute = _is_set(value.minute)
    has_hour = _is_set(value.hour)

    if has_minute and not (has_hour or has_second or has_ms):
        return DatePrecision.DAY
    if not (has_hour or has_minute or has_second or has_ms):
        return DatePrecision.DAY

    if has_ms:
        return DatePrecision.MILLISECOND
    if has_second:
        return DatePrecision.SECOND
    if has_minute:
        return DatePrecision.MINUTE
    if has_hour:
        return DatePrecision.HOUR

    if _is_set(value.day):
        return DatePrecision.DAY
    if _is_set(value.month):
        return DatePrecision.MONTH
    return DatePrecision.YEAR


def resolve_precision(event: TimelineEvent) -> DatePrecision:
    """An event's explicit precision override, else its start date's precision."""
    if event.precision is not None:
        return event.precision
    return determine_precision(event.start_date)


def is_before(a: CanonicalDate, b: CanonicalDate) -> bool:
    """True when ``a`` is strictly earlier than ``b``."""
    return to_epoch_ms(a) < to_epoch_ms(b)


def is_after(a: CanonicalDate, b: CanonicalDate) -> bool:
    """True when ``a`` is strictly later than ``b``."""
    return to_epoch_ms(a) > to_epoch_ms(b)


def date_span_ms(start: CanonicalDate, end: CanonicalDate) -> float:
    """Signed span from ``start`` to ``end`` in milliseconds."""
    return to_epoch_ms(end) - to_epoch_ms(start)


def sort_events_by_date(events: Iterable[TimelineEvent]) -> list[TimelineEvent]:
    """Stable sort by start date."""
    return sorted(events, key=lambda event: to_epoch_ms(event.start_date))


def earliest_date(events: Sequence[TimelineEvent]) -> CanonicalDate | None:
    """Earliest start date, or None for an empty sequence."""
    if not events:
        return None
    return min((e.start_date for e in events), key=to_epoch_ms)


def latest_date(events: Sequence[TimelineEvent]) -> CanonicalDate | None:
    """Latest end date (start date when an event has no end), or None."""
    if not events:
        return None
    return max((e.end_date or e.start_date for e in events), key=to_epoch_ms)


def floor_date(value: CanonicalDate, scale: DateScale) -> CanonicalDate:
    """Floor a date to the start of its ``scale`` unit.

    Examples:
        >>> floor_date(CanonicalDate(year=1987, month=6, day=3), DateScale.DECADE).year
        1980
    """
    full = from_epoch_ms(to_epoch_ms(value))
    if scale == DateScale.MILLISECOND:
        return full

    fields = full.model_dump(exclude={"display_text"})
    year = fields["year"]
    if scale == DateScale.MILLENNIUM:
        year -= year % 1000
    elif scale == DateScale.CENTURY:
        year -= year % 100
    elif scale == DateScale.DECADE:
        year -= year % 10
    fields["year"] = year

    # Each scale resets every field finer than itself.
    resets = [
        (DateScale.YEAR, "month", 1),
        (DateScale.MONTH, "day", 1),
        (DateScale.DAY, "hour", 0),
        (DateScale.HOUR, "minute", 0),
        (DateScale.MINUTE, "second", 0),
        (DateScale.SECOND, "millisecond", 0),
    ]
    order = [s for s, _ in SCALES]
    for unit, name, lowest in resets:
        if order.index(scale) >= order.index(unit):
            fields[name] = lowest
    return CanonicalDate(**fields)


def find_best_scale(value: CanonicalDate) -> DateScale:
    """Pick the display scale for a single date from its populated fields."""
    if _is_set(value.millisecond):
        return DateScale.MILLISECOND
    if _is_set(value.second):
        return DateScale.SECOND
    if _is_set(value.minute):
        return DateScale.MINUTE
    if _is_set(value.hour):
        return DateScale.HOUR
    if _is_set(value.day) and value.day != 1:
        return DateScale.DAY
    if _is_set(value.month) and value.month != 1:
        return DateScale.MONTH
    return DateScale.YEAR


def optimal_scale(span_ms: float) -> DateScale:
    """Largest scale that fits at least twice into ``span_ms``."""
    for scale, ms_per_unit in reversed(SCALES):
        if span_ms >= ms_per_unit * 2:
            return scale
    return DateScale.MILLISECOND


def format_date(value: CanonicalDate, scale: DateScale | None = None) -> str:
    """Default label for a date at a display scale.

    Examples:
        >>> format_date(CanonicalDate(year=1776, month=7, day=4))
        'Jul 4, 1776'
    """
    if value.display_text:
        return value.display_text
    full = from_epoch_ms(to_epoch_ms(value))
    scale = scale or find_best_scale(value)

    if scale in (DateScale.MILLISECOND, DateScale.SECOND):
        return f"{full.hour:02d}:{full.minute:02d}:{full.second:02d}"
    if scale in (DateScale.MINUTE, DateScale.HOUR):
        return f"{full.hour:02d}:{full.minute:02d}"
    if scale == DateScale.DAY:
        return f"{MONTH_ABBR[full.month]} {full.day}, {full.display_year}"
    if scale == DateScale.MONTH:
        return f"{MONTH_ABBR[full.month]} {full.display_year}"
    return full.display_year
