"""Tests for the pure new-result detection strategies."""

from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import given, strategies as st

from saved_searches.domain.entities.results import ResultItem, ResultSet
from saved_searches.domain.services.new_results_detector import (
    NewResultsDetector,
    parse_date_value,
)

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def item(item_id: str, **fields) -> ResultItem:
    return ResultItem(item_id=item_id, fields=fields)


class TestDateFieldDetection:

    def setup_method(self):
        self.detector = NewResultsDetector()

    def test_only_results_strictly_after_last_check_are_new(self):
        results = ResultSet(
            items=[
                item("old", created=T0 - timedelta(seconds=10)),
                item("newer", created=T0 + timedelta(seconds=5)),
                item("newest", created=T0 + timedelta(seconds=20)),
            ]
        )

        new_results = self.detector.new_by_date(results, "created", since=T0)

        assert [result.item_id for result in new_results] == ["newer", "newest"]

    def test_result_dated_exactly_at_last_check_is_not_new(self):
        results = ResultSet(items=[item("same", created=T0)])

        assert self.detector.new_by_date(results, "created", since=T0) == []

    def test_mixed_value_representations(self):
        later = T0 + timedelta(minutes=1)
        results = ResultSet(
            items=[
                item("timestamp", created=int(later.timestamp())),
                item("iso", created=later.isoformat().replace("+00:00", "Z")),
                item("multi", created=[later.isoformat(), T0.isoformat()]),
                item("missing"),
                item("garbage", created="yesterday"),
            ]
        )

        new_results = self.detector.new_by_date(results, "created", since=T0)

        assert [result.item_id for result in new_results] == ["timestamp", "iso", "multi"]


class TestKnownIdDetection:

    def setup_method(self):
        self.detector = NewResultsDetector()

    def test_unknown_ids_are_new(self):
        results = ResultSet(items=[item("A"), item("B"), item("C"), item("D")])

        new_results = self.detector.new_by_known_ids(results, {"A", "B", "C"})

        assert [result.item_id for result in new_results] == ["D"]

    def test_duplicates_within_one_execution_are_reported_once(self):
        results = ResultSet(items=[item("X"), item("Y"), item("X")])

        new_results = self.detector.new_by_known_ids(results, set())

        assert [result.item_id for result in new_results] == ["X", "Y"]

    @given(
        known=st.sets(st.text(min_size=1, max_size=5), max_size=20),
        returned=st.lists(st.text(min_size=1, max_size=5), max_size=30),
    )
    def test_new_results_are_exactly_the_unknown_ids(self, known, returned):
        results = ResultSet(items=[item(item_id) for item_id in returned])

        new_ids = [result.item_id for result in self.detector.new_by_known_ids(results, known)]

        assert set(new_ids) == set(returned) - known
        assert len(new_ids) == len(set(new_ids))


class TestParseDateValue:

    @pytest.mark.parametrize("value", [None, True, False, "", "  ", [], "not a date"])
    def test_unusable_values(self, value):
        assert parse_date_value(value) is None

    def test_naive_datetime_is_utc(self):
        assert parse_date_value(datetime(2026, 3, 1, 12, 0)) == T0

    def test_digit_string_is_a_timestamp(self):
        assert parse_date_value(str(int(T0.timestamp()))) == T0

    def test_offset_is_converted_to_utc(self):
        assert parse_date_value("2026-03-01T14:00:00+02:00") == T0
