"""Tests for calendar-aligned axis ticks."""

from datetime import date

import pytest

from timescope.core.dates import MS_PER_HOUR, CanonicalDate, DateScale, to_epoch_ms
from timescope.core.scale import Scale
from timescope.core.ticks import choose_interval, generate_ticks, tick_instants, tick_step


def ms(**fields) -> float:
    return to_epoch_ms(CanonicalDate(**fields))


def scale_between(start: float, end: float, width: float = 1000) -> Scale:
    return Scale(domain=(start, end), range=(0, width))


@pytest.mark.fast
class TestTickStep:
    """Tests for tick_step()."""

    @pytest.mark.parametrize(
        "start,stop,count,expected",
        [
            (0, 10, 10, 1),
            (0, 10, 5, 2),
            (0, 100, 4, 20),
            (0, 100, 10, 10),
            (0, 1, 2, 0.5),
        ],
    )
    def test_nice_steps(self, start, stop, count, expected):
        assert tick_step(start, stop, count) == pytest.approx(expected)


@pytest.mark.fast
class TestChooseInterval:
    """Tests for choose_interval()."""

    def test_decade_uses_two_year_steps(self):
        assert choose_interval(ms(year=2000), ms(year=2010), 5) == (DateScale.YEAR, 2)

    def test_year_uses_months(self):
        unit, step = choose_interval(ms(year=2020), ms(year=2020, month=12, day=31), 12)
        assert (unit, step) == (DateScale.MONTH, 1)

    def test_day_uses_hours(self):
        unit, step = choose_interval(ms(year=2020), ms(year=2020, month=1, day=2), 8)
        assert (unit, step) == (DateScale.HOUR, 3)

    def test_sub_second_uses_milliseconds(self):
        assert choose_interval(0, 100, 10) == (DateScale.MILLISECOND, 10)


@pytest.mark.fast
class TestGenerateTicks:
    """Tests for generate_ticks()."""

    def test_decade_ticks(self):
        ticks = generate_ticks(scale_between(ms(year=2000), ms(year=2010)), 5)
        assert [t.date.year for t in ticks] == [2000, 2002, 2004, 2006, 2008, 2010]
        assert [t.label for t in ticks][:2] == ["2000", "2002"]
        assert ticks[0].position == 0
        assert ticks[-1].position == 1000

    def test_positions_ascend(self):
        ticks = generate_ticks(scale_between(ms(year=1900), ms(year=2000)), 10)
        positions = [t.position for t in ticks]
        assert positions == sorted(positions)
        assert all(0 <= p <= 1000 for p in positions)

    def test_month_ticks(self):
        ticks = generate_ticks(scale_between(ms(year=2020), ms(year=2020, month=12, day=31)), 12)
        assert [t.date.month for t in ticks] == list(range(1, 13))
        assert ticks[2].label == "Mar 2020"
        assert all(t.scale == DateScale.MONTH for t in ticks)

    def test_hour_ticks(self):
        start = ms(year=2020, month=1, day=1)
        ticks = generate_ticks(scale_between(start, start + 24 * MS_PER_HOUR), 8)
        assert [t.date.hour for t in ticks] == [0, 3, 6, 9, 12, 15, 18, 21, 0]
        assert ticks[1].label == "03:00"

    def test_week_ticks_fall_on_sundays(self):
        start = ms(year=2024, month=1, day=1)
        ticks = generate_ticks(scale_between(start, start + 70 * 24 * MS_PER_HOUR), 10)
        assert ticks
        for tick in ticks:
            assert date(tick.date.year, tick.date.month, tick.date.day).weekday() == 6

    def test_bce_year_ticks(self):
        ticks = generate_ticks(scale_between(ms(year=-500), ms(year=500)), 10)
        years = [t.date.year for t in ticks]
        assert years == sorted(years)
        assert 0 in years
        assert any(t.label.endswith("BCE") for t in ticks)

    def test_custom_formatter(self):
        ticks = generate_ticks(
            scale_between(ms(year=2000), ms(year=2010)),
            5,
            formatter=lambda d, unit: f"{unit.value}:{d.year}",
        )
        assert ticks[0].label == "year:2000"

    def test_zero_count(self):
        assert generate_ticks(scale_between(ms(year=2000), ms(year=2010)), 0) == []

    def test_tick_instants_reports_unit(self):
        unit, instants = tick_instants(0, 100, 10)
        assert unit == DateScale.MILLISECOND
        assert instants == [float(i) for i in range(0, 101, 10)]
