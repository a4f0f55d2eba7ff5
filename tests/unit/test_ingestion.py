"""Tests for raw record ingestion and property mapping."""

import logging

import pytest

from timescope.errors import DateParseError, InvalidRangeWarning
from timescope.ingestion import map_date, map_event, normalize_eras, normalize_events
from timescope.schemas import (
    DateFieldMapping,
    EventFieldMapping,
    PropertyMapping,
    TimelineData,
    TimelineEvent,
)


@pytest.mark.fast
class TestMapEvent:
    """Tests for map_event() and map_date()."""

    def test_canonical_record(self):
        event = map_event(
            {
                "start_date": {"year": 1969, "month": 7, "day": 20},
                "text": {"headline": "Moon landing", "text": "One small step"},
                "unique_id": "apollo-11",
                "group": "space",
            }
        )
        assert event.start_date.year == 1969
        assert event.text.headline == "Moon landing"
        assert event.unique_id == "apollo-11"
        assert event.group == "space"

    def test_flat_headline_and_text(self):
        event = map_event({"start_date": "2020-01-01", "headline": "New year", "text": "Body"})
        assert event.text.headline == "New year"
        assert event.text.text == "Body"

    def test_custom_mapping(self):
        mapping = PropertyMapping(
            event=EventFieldMapping(start_date="when", end_date="until", headline="title", unique_id="id")
        )
        event = map_event(
            {"when": "1914-07-28", "until": "1918-11-11", "title": "Great War", "id": "ww1"},
            mapping,
        )
        assert (event.start_date.year, event.end_date.year) == (1914, 1918)
        assert event.text.headline == "Great War"
        assert event.unique_id == "ww1"

    def test_date_field_mapping(self):
        mapping = PropertyMapping(date=DateFieldMapping(year="y", month="m", day="d"))
        event = map_event({"start_date": {"y": 2001, "m": 9, "d": 11}}, mapping)
        assert (event.start_date.year, event.start_date.month, event.start_date.day) == (2001, 9, 11)

    def test_date_mapping_skipped_when_year_present(self):
        mapping = DateFieldMapping(year="y")
        assert map_date({"year": 1999, "y": 2001}, mapping).year == 1999

    def test_date_mapping_missing_year(self):
        with pytest.raises(DateParseError, match="missing year"):
            map_date({"m": 5}, DateFieldMapping(year="y"))

    def test_missing_start_date(self):
        with pytest.raises(DateParseError, match="missing start date"):
            map_event({"headline": "Undated"})

    def test_event_passes_through(self):
        event = TimelineEvent(start_date={"year": 2000})
        assert map_event(event) is event

    def test_epoch_zero_end_date_kept(self):
        event = map_event({"start_date": -1000, "end_date": 0})
        assert event.end_date is not None
        assert (event.end_date.year, event.end_date.month, event.end_date.day) == (1970, 1, 1)

    def test_non_mapping_record_rejected(self):
        with pytest.raises(DateParseError, match="not a record"):
            map_event(42)


@pytest.mark.fast
class TestNormalizeEvents:
    """Tests for normalize_events() failure isolation and warnings."""

    def test_all_valid(self, raw_events):
        result = normalize_events(raw_events)
        assert result.ok
        assert [e.unique_id for e in result.events] == ["b", "c", "a"]

    def test_bad_record_is_isolated(self, caplog):
        raw = [
            {"start_date": "2020-01-01", "unique_id": "good"},
            {"start_date": "sometime soon", "unique_id": "bad"},
            {"start_date": {"year": 2021}, "unique_id": "also-good"},
        ]
        with caplog.at_level(logging.WARNING, logger="timescope.ingestion"):
            result = normalize_events(raw)
        assert [e.unique_id for e in result.events] == ["good", "also-good"]
        assert len(result.failures) == 1
        assert result.failures[0].index == 1
        assert result.failures[0].raw["unique_id"] == "bad"
        assert "sometime soon" in result.failures[0].error
        assert not result.ok
        assert "Skipping event #1" in caplog.text

    def test_wrong_shape_is_isolated(self):
        result = normalize_events(
            [{"start_date": {"year": 2020}, "location": {"lat": "north"}}, {"start_date": {"year": 2021}}]
        )
        assert len(result.events) == 1
        assert result.failures[0].index == 0

    def test_inverted_range_is_warning(self):
        result = normalize_events(
            [{"start_date": {"year": 2010}, "end_date": {"year": 2000}, "unique_id": "flipped"}]
        )
        assert len(result.events) == 1
        assert result.events[0].is_inverted
        assert len(result.warnings) == 1
        warning = result.warnings[0]
        assert isinstance(warning, InvalidRangeWarning)
        assert warning.unique_id == "flipped"
        assert "flipped" in str(warning)

    def test_camel_case_records(self):
        result = normalize_events(
            [
                {
                    "startDate": {"year": 2000},
                    "endDate": {"year": 2001},
                    "uniqueId": "x",
                    "displayDate": "Y2K",
                }
            ]
        )
        assert result.ok
        event = result.events[0]
        assert event.unique_id == "x"
        assert event.end_date.year == 2001
        assert event.display_date == "Y2K"

    def test_mapped_key_wins_over_alias(self):
        event = map_event({"start_date": {"year": 1999}, "startDate": {"year": 2000}})
        assert event.start_date.year == 1999

    def test_non_mapping_records_are_isolated(self):
        result = normalize_events([{"start_date": {"year": 2000}}, 42, "2001"])
        assert len(result.events) == 1
        assert [f.index for f in result.failures] == [1, 2]
        assert "not a record" in result.failures[0].error

    def test_input_order_kept(self, make_events):
        events = list(reversed(make_events(5)))
        result = normalize_events(events)
        assert [e.unique_id for e in result.events] == ["e4", "e3", "e2", "e1", "e0"]

    def test_empty(self):
        result = normalize_events([])
        assert result.events == []
        assert result.ok


@pytest.mark.fast
class TestNormalizeEras:
    """Tests for normalize_eras()."""

    def test_valid_and_invalid(self):
        result = normalize_eras(
            [
                {"start_date": {"year": 1939}, "end_date": {"year": 1945}},
                {"start_date": {"year": 1939}},
                {"start_date": {"year": 1990}, "end_date": {"year": 1980}},
            ]
        )
        assert len(result.eras) == 2
        assert [f.index for f in result.failures] == [1]
        assert len(result.warnings) == 1


@pytest.mark.fast
class TestTimelineData:
    """Tests for whole-document parsing."""

    def test_document(self):
        data = TimelineData.model_validate(
            {
                "title": {"text": {"headline": "History"}},
                "events": [{"start_date": {"year": 2000}}],
                "eras": [],
                "unknown": True,
            }
        )
        assert data.title.text.headline == "History"
        assert len(data.events) == 1
