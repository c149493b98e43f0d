"""Tests for calendar helpers: day normalisation and inclusive day ranges."""

from datetime import UTC, date, datetime, timedelta, timezone

import pytest
from subscriptions.shared.calendar import DayRange, days_between_inclusive, each_day, normalize
from subscriptions.shared.errors import InvalidInput, InvalidRange


class TestNormalize:
    def test_date_is_returned_unchanged(self):
        assert normalize(date(2024, 1, 5)) == date(2024, 1, 5)

    def test_naive_datetime_is_truncated(self):
        assert normalize(datetime(2024, 1, 5, 23, 59)) == date(2024, 1, 5)

    def test_aware_datetime_is_converted_to_utc_first(self):
        ist = timezone(timedelta(hours=5, minutes=30))
        assert normalize(datetime(2024, 1, 2, 1, 0, tzinfo=ist)) == date(2024, 1, 1)

    def test_utc_datetime(self):
        assert normalize(datetime(2024, 1, 5, 0, 0, tzinfo=UTC)) == date(2024, 1, 5)

    def test_iso_date_string(self):
        assert normalize("2024-01-05") == date(2024, 1, 5)

    def test_iso_datetime_string_with_zulu_suffix(self):
        assert normalize("2024-01-05T18:30:00.000Z") == date(2024, 1, 5)

    def test_iso_datetime_string_with_offset(self):
        assert normalize("2024-01-06T02:00:00+05:30") == date(2024, 1, 5)

    def test_garbage_string_is_invalid_input(self):
        with pytest.raises(InvalidInput) as exc:
            normalize("next tuesday")
        assert exc.value.kind == "invalid_input"

    def test_none_is_invalid_input(self):
        with pytest.raises(InvalidInput):
            normalize(None)


class TestDaysBetweenInclusive:
    def test_single_day(self):
        assert days_between_inclusive("2024-01-05", "2024-01-05") == 1

    def test_counts_both_ends(self):
        assert days_between_inclusive(date(2024, 1, 1), date(2024, 1, 10)) == 10

    def test_across_a_leap_day(self):
        assert days_between_inclusive("2024-02-28", "2024-03-01") == 3

    def test_start_after_end(self):
        with pytest.raises(InvalidRange) as exc:
            days_between_inclusive("2024-01-10", "2024-01-01")
        assert exc.value.messages == {"invalid_range": ["Start date 2024-01-10 is after end date 2024-01-01"]}


class TestEachDay:
    def test_yields_every_day_inclusive(self):
        days = list(each_day("2024-01-30", "2024-02-02"))
        assert days == [date(2024, 1, 30), date(2024, 1, 31), date(2024, 2, 1), date(2024, 2, 2)]

    def test_is_restartable(self):
        days = each_day("2024-01-01", "2024-01-03")
        assert list(days) == list(days)

    def test_length_matches_inclusive_count(self):
        assert len(each_day("2024-01-01", "2024-01-10")) == days_between_inclusive("2024-01-01", "2024-01-10")

    def test_membership(self):
        days = each_day("2024-01-01", "2024-01-10")
        assert "2024-01-10" in days
        assert date(2024, 1, 11) not in days

    def test_start_after_end(self):
        with pytest.raises(InvalidRange):
            each_day("2024-01-02", "2024-01-01")


class TestDayRangeOverlap:
    def test_shared_boundary_day_overlaps(self):
        assert DayRange(date(2024, 1, 1), date(2024, 1, 5)).overlaps(DayRange(date(2024, 1, 5), date(2024, 1, 9)))

    def test_adjacent_ranges_do_not_overlap(self):
        assert not DayRange(date(2024, 1, 1), date(2024, 1, 5)).overlaps(DayRange(date(2024, 1, 6), date(2024, 1, 9)))

    def test_containment_overlaps(self):
        assert DayRange(date(2024, 1, 1), date(2024, 1, 31)).overlaps(DayRange(date(2024, 1, 10), date(2024, 1, 12)))
