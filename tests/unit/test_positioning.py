"""Tests for marker and era positioning."""

import pytest

from timescope.core.dates import CanonicalDate, to_epoch_ms
from timescope.core.positioning import position_era, position_eras, position_events
from timescope.core.scale import Scale, build_scale
from timescope.schemas import TimelineEra, TimelineEvent


@pytest.mark.fast
class TestPositionEvents:
    """Tests for position_events()."""

    def test_sorted_events_increase(self, scale_config):
        events = [
            TimelineEvent(start_date={"year": 2019}),
            TimelineEvent(start_date={"year": 2020}),
            TimelineEvent(start_date={"year": 2021}),
        ]
        scale = build_scale(events, scale_config)
        positions = position_events(events, scale)
        percentages = [p.percentage for p in positions]
        assert percentages == sorted(percentages)
        assert len(set(percentages)) == 3
        assert all(0 <= p <= 100 for p in percentages)

    def test_padding_keeps_markers_off_edges(self, decade_events, scale_config):
        scale = build_scale(decade_events, scale_config)
        positions = position_events(decade_events, scale)
        assert positions[0].x > 0
        assert positions[-1].x < scale.range[1]

    def test_index_follows_input_order(self, decade_events, scale_config):
        scale = build_scale(decade_events, scale_config)
        shuffled = [decade_events[2], decade_events[0], decade_events[1]]
        positions = position_events(shuffled, scale)
        assert [p.index for p in positions] == [0, 1, 2]
        assert [p.event.unique_id for p in positions] == ["end", "start", "middle"]
        assert positions[0].x > positions[2].x > positions[1].x

    def test_marker_key(self):
        scale = Scale(domain=(0, 1000), range=(0, 100))
        positions = position_events(
            [TimelineEvent(start_date=0, unique_id="launch"), TimelineEvent(start_date=0)],
            scale,
        )
        assert positions[0].key == "launch"
        assert positions[1].key == "marker-1"

    def test_empty(self, scale_config):
        assert position_events([], build_scale([], scale_config)) == []


@pytest.mark.fast
class TestPositionEra:
    """Tests for position_era()."""

    def test_era_extent(self, decade_events, scale_config, sample_era):
        scale = build_scale(decade_events, scale_config)
        position = position_era(sample_era, scale)
        start = scale.forward({"year": 2002})
        end = scale.forward({"year": 2008})
        assert position.x == start
        assert position.width == pytest.approx(end - start)
        assert 0 < position.percentage_width < 100

    def test_zero_length_era_is_one_pixel(self, decade_events, scale_config):
        scale = build_scale(decade_events, scale_config)
        era = TimelineEra(start_date={"year": 2005}, end_date={"year": 2005})
        position = position_era(era, scale)
        assert position.width == 1.0
        assert position.percentage_width == 0.0

    def test_inverted_era_not_reordered(self, decade_events, scale_config):
        scale = build_scale(decade_events, scale_config)
        era = TimelineEra(start_date={"year": 2008}, end_date={"year": 2002})
        position = position_era(era, scale)
        assert position.x == scale.forward({"year": 2008})
        assert position.width == 1.0
        assert position.percentage_width < 0

    def test_percentage_relative_to_range(self):
        scale = Scale(domain=(0, 1000), range=(0, 200))
        era = TimelineEra(
            start_date=to_epoch_ms(CanonicalDate(year=1970)) + 250,
            end_date=750,
        )
        position = position_era(era, scale)
        assert position.percentage == pytest.approx(25.0)
        assert position.percentage_width == pytest.approx(50.0)

    def test_position_eras(self, decade_events, scale_config, sample_era):
        scale = build_scale(decade_events, scale_config)
        assert len(position_eras([sample_era, sample_era], scale)) == 2
