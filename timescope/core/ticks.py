"""Calendar-aligned axis ticks.

The tick interval is chosen from the domain span so that roughly
``count`` ticks fall inside the domain: whole seconds, minutes, hours,
days, Sunday-aligned weeks, months or quarters, and "nice" multiples of
years (1, 2, 5 x 10^k). Sub-second spans use nice millisecond steps.

Examples:
    >>> from timescope.core.scale import Scale
    >>> from timescope.core.dates import CanonicalDate, to_epoch_ms
    >>> scale = Scale(
    ...     domain=(to_epoch_ms(CanonicalDate(year=2000)), to_epoch_ms(CanonicalDate(year=2010))),
    ...     range=(0, 1000),
    ... )
    >>> [t.date.year for t in generate_ticks(scale, 5)]
    [2000, 2002, 2004, 2006, 2008, 2010]

Tests:
    - tests/unit/test_ticks.py::TestGenerateTicks
    - tests/unit/test_ticks.py::TestTickStep
"""

from __future__ import annotations

import bisect
import math
from collections.abc import Callable, Iterator

from pydantic import BaseModel, ConfigDict

from timescope.core.dates import (
    MS_PER_DAY,
    MS_PER_HOUR,
    MS_PER_MINUTE,
    MS_PER_SECOND,
    MS_PER_YEAR,
    CanonicalDate,
    DateScale,
    civil_from_days,
    days_from_civil,
    format_date,
    from_epoch_ms,
)
from timescope.core.scale import Scale

MS_PER_WEEK = MS_PER_DAY * 7
MS_PER_MONTH = MS_PER_DAY * 30

# (unit, step, approximate duration in ms), ascending by duration
TICK_INTERVALS: list[tuple[DateScale, int, float]] = [
    (DateScale.SECOND, 1, MS_PER_SECOND),
    (DateScale.SECOND, 5, 5 * MS_PER_SECOND),
    (DateScale.SECOND, 15, 15 * MS_PER_SECOND),
    (DateScale.SECOND, 30, 30 * MS_PER_SECOND),
    (DateScale.MINUTE, 1, MS_PER_MINUTE),
    (DateScale.MINUTE, 5, 5 * MS_PER_MINUTE),
    (DateScale.MINUTE, 15, 15 * MS_PER_MINUTE),
    (DateScale.MINUTE, 30, 30 * MS_PER_MINUTE),
    (DateScale.HOUR, 1, MS_PER_HOUR),
    (DateScale.HOUR, 3, 3 * MS_PER_HOUR),
    (DateScale.HOUR, 6, 6 * MS_PER_HOUR),
    (DateScale.HOUR, 12, 12 * MS_PER_HOUR),
    (DateScale.DAY, 1, MS_PER_DAY),
    (DateScale.DAY, 2, 2 * MS_PER_DAY),
    (DateScale.DAY, 7, MS_PER_WEEK),
    (DateScale.MONTH, 1, MS_PER_MONTH),
    (DateScale.MONTH, 3, 3 * MS_PER_MONTH),
    (DateScale.YEAR, 1, MS_PER_YEAR),
]
_DURATIONS = [duration for _, _, duration in TICK_INTERVALS]

_FIXED_UNITS = {
    DateScale.MILLISECOND: 1,
    DateScale.SECOND: MS_PER_SECOND,
    DateScale.MINUTE: MS_PER_MINUTE,
    DateScale.HOUR: MS_PER_HOUR,
}


class Tick(BaseModel):
    """One axis tick.

    Attributes:
        position: Pixel position
        instant: Epoch milliseconds of the tick
        date: Tick date
        scale: Calendar unit the tick is aligned to
        label: Display label
    """

    model_config = ConfigDict(frozen=True)

    position: float
    instant: float
    date: CanonicalDate
    scale: DateScale
    label: str


def tick_step(start: float, stop: float, count: int) -> float:
    """A 1, 2 or 5 x 10^k step giving about ``count`` ticks over [start, stop]."""
    raw = abs(stop - start) / max(1, count)
    power = 10 ** math.floor(math.log10(raw))
    error = raw / power
    if error >= math.sqrt(50):
        power *= 10
    elif error >= math.sqrt(10):
        power *= 5
    elif error >= math.sqrt(2):
        power *= 2
    return power


def choose_interval(start: float, stop: float, count: int) -> tuple[DateScale, float]:
    """Pick the tick unit and step for a domain.

    Returns:
        tuple: (unit, step) where step counts units of ``unit``.
    """
    target = abs(stop - start) / count
    i = bisect.bisect_right(_DURATIONS, target)
    if i == len(TICK_INTERVALS):
        years = tick_step(start / MS_PER_YEAR, stop / MS_PER_YEAR, count)
        return DateScale.YEAR, max(1, round(years))
    if i == 0:
        return DateScale.MILLISECOND, max(1.0, tick_step(start, stop, count))
    before, after = TICK_INTERVALS[i - 1], TICK_INTERVALS[i]
    unit, step, _ = before if target / before[2] < after[2] / target else after
    return unit, step


def _fixed_instants(start: float, stop: float, step_ms: float) -> Iterator[float]:
    k = math.ceil(start / step_ms)
    while k * step_ms <= stop:
        yield k * step_ms
        k += 1


def _day_instants(start: float, stop: float, step: int) -> Iterator[float]:
    day = math.ceil(start / MS_PER_DAY)
    while day * MS_PER_DAY <= stop:
        if step == 7:
            # 1970-01-01 was a Thursday; keep Sundays
            keep = (day + 4) % 7 == 0
        else:
            keep = (civil_from_days(day)[2] - 1) % step == 0
        if keep:
            yield float(day * MS_PER_DAY)
        day += 1


def _month_instants(start: float, stop: float, step: int) -> Iterator[float]:
    first = from_epoch_ms(start)
    index = first.year * 12 + first.month - 1
    while True:
        year, month0 = divmod(index, 12)
        ms = float(days_from_civil(year, month0 + 1, 1) * MS_PER_DAY)
        if ms > stop:
            return
        if ms >= start and month0 % step == 0:
            yield ms
        index += 1


def _year_instants(start: float, stop: float, step: int) -> Iterator[float]:
    year = math.ceil(from_epoch_ms(start).year / step) * step
    while True:
        ms = float(days_from_civil(year, 1, 1) * MS_PER_DAY)
        if ms > stop:
            return
        if ms >= start:
            yield ms
        year += step


def tick_instants(start: float, stop: float, count: int) -> tuple[DateScale, list[float]]:
    """Calendar-aligned tick instants inside [start, stop]."""
    if count <= 0 or stop <= start:
        return DateScale.MILLISECOND, []
    unit, step = choose_interval(start, stop, count)
    if unit in _FIXED_UNITS:
        instants = _fixed_instants(start, stop, step * _FIXED_UNITS[unit])
    elif unit == DateScale.DAY:
        instants = _day_instants(start, stop, int(step))
    elif unit == DateScale.MONTH:
        instants = _month_instants(start, stop, int(step))
    else:
        instants = _year_instants(start, stop, int(step))
    return unit, list(instants)


def generate_ticks(
    scale: Scale,
    count: int = 10,
    formatter: Callable[[CanonicalDate, DateScale], str] | None = None,
) -> list[Tick]:
    """Generate axis ticks for a scale.

    Args:
        scale: The scale to generate ticks for.
        count: Approximate number of ticks wanted.
        formatter: Label formatter; defaults to ``format_date``.

    Returns:
        list[Tick]: Ticks in ascending order.
    """
    formatter = formatter or format_date
    unit, instants = tick_instants(scale.domain[0], scale.domain[1], count)
    ticks = []
    for ms in instants:
        tick_date = from_epoch_ms(ms)
        ticks.append(
            Tick(
                position=scale.forward_ms(ms),
                instant=ms,
                date=tick_date,
                scale=unit,
                label=formatter(tick_date, unit),
            )
        )
    return ticks
