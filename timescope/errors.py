"""Error taxonomy for the timeline engine.

Parse failures are real errors and are raised. Inverted ranges are
data-quality warnings: they are collected and logged, never raised by
the engine itself. Degenerate inputs to the scale builder are not errors
at all; they are recorded on the built scale (see ``ScaleFallback``).

Examples:
    >>> from timescope.errors import DateParseError
    >>> err = DateParseError("not a date")
    >>> err.value
    'not a date'

Tests:
    - tests/unit/test_dates.py::TestNormalize::test_unparseable_string_raises
    - tests/unit/test_ingestion.py::TestNormalizeEvents::test_inverted_range_is_warning
"""

from __future__ import annotations

from enum import Enum
from typing import Any

__all__ = [
    "TimelineError",
    "DateParseError",
    "InvalidRangeWarning",
    "ScaleFallback",
]


class TimelineError(Exception):
    """Base exception for timeline engine errors."""


class DateParseError(TimelineError, ValueError):
    """Raised when a date input matches none of the accepted shapes.

    Attributes:
        value: The offending input
        reason: Short description of what failed
    """

    def __init__(self, value: Any, reason: str | None = None) -> None:
        """Initialize parse error.

        Args:
            value: The input that could not be interpreted.
            reason: Optional detail (which stage rejected it).
        """
        message = f"Unable to parse date: {value!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
        self.value = value
        self.reason = reason


class InvalidRangeWarning(UserWarning):
    """An event or era whose end date precedes its start date.

    Positioning keeps the literal order, so the range renders flipped.
    Instances are reported alongside normalized events instead of raised.
    """

    def __init__(
        self,
        start: Any,
        end: Any,
        index: int | None = None,
        unique_id: str | None = None,
    ) -> None:
        label = unique_id or (f"#{index}" if index is not None else "range")
        super().__init__(f"{label}: end date {end} is before start date {start}")
        self.start = start
        self.end = end
        self.index = index
        self.unique_id = unique_id


class ScaleFallback(str, Enum):
    """Defined fallbacks applied by the scale builder.

    - EMPTY_DATASET: no events, a window ending now is synthesized
    - DEGENERATE_SPAN: span below the minimum, a minimum-width window is centered
    """

    EMPTY_DATASET = "empty_dataset"
    DEGENERATE_SPAN = "degenerate_span"
