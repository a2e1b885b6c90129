"""
Unit tests for booking conflict detection.
"""
from datetime import date

import pytest

from rentals.dates import InvalidDateError
from rentals.errors import InvalidDateRangeError
from rentals.models import Booking
from rentals.overlap import DateRange, find_conflicts, has_conflict, ranges_overlap


def make_booking(booking_id, start, end, property_id="p-1"):
    return Booking(
        id=booking_id,
        property_id=property_id,
        user_id="u-1",
        start_date=date.fromisoformat(start),
        end_date=date.fromisoformat(end),
    )


RANGES = [
    ("2024-01-01", "2024-01-05"),
    ("2024-01-05", "2024-01-10"),
    ("2024-01-06", "2024-01-10"),
    ("2024-01-02", "2024-01-03"),
    ("2023-12-25", "2024-01-01"),
    ("2024-02-01", "2024-02-01"),
    ("2024-01-10", "2024-01-10"),
]


class TestHasConflict:
    """Tests for has_conflict."""

    def test_no_existing_bookings(self):
        """An empty booking list never conflicts."""
        assert has_conflict(DateRange.parse("2024-01-01", "2024-01-05"), []) is False

    def test_boundary_touch_is_conflict(self):
        """A stay starting on another stay's last day conflicts."""
        existing = [make_booking("a", "2024-01-01", "2024-01-05")]
        assert has_conflict(DateRange.parse("2024-01-05", "2024-01-10"), existing) is True

    def test_gap_day_is_no_conflict(self):
        """Ranges separated by a free day do not conflict."""
        existing = [make_booking("a", "2024-01-01", "2024-01-04")]
        assert has_conflict(DateRange.parse("2024-01-06", "2024-01-10"), existing) is False

    def test_adjacent_days_without_shared_day(self):
        """Checkout on the 4th and check-in on the 5th share no day."""
        existing = [make_booking("a", "2024-01-01", "2024-01-04")]
        assert has_conflict(DateRange.parse("2024-01-05", "2024-01-10"), existing) is False

    def test_contained_range_conflicts(self):
        existing = [make_booking("a", "2024-01-01", "2024-01-31")]
        assert has_conflict(DateRange.parse("2024-01-10", "2024-01-12"), existing) is True

    def test_self_exclusion(self):
        """A booking edited to its own dates does not conflict with itself."""
        booking = make_booking("a", "2024-01-01", "2024-01-05")
        candidate = DateRange.of(booking)
        assert has_conflict(candidate, [booking], exclude_booking_id="a") is False
        assert has_conflict(candidate, [booking]) is True

    def test_exclusion_only_skips_that_booking(self):
        existing = [
            make_booking("a", "2024-01-01", "2024-01-05"),
            make_booking("b", "2024-01-06", "2024-01-08"),
        ]
        candidate = DateRange.parse("2024-01-03", "2024-01-07")
        assert has_conflict(candidate, existing, exclude_booking_id="a") is True

    def test_instants_without_timezone_are_utc(self):
        """Stored values lacking a timezone suffix are read as UTC."""
        existing = [Booking.from_dict({
            "id": "a",
            "property_id": "p-1",
            "start_date": "2024-01-01T00:00:00",
            "end_date": "2024-01-05T00:00:00",
        })]
        assert has_conflict(DateRange.parse("2024-01-05T00:00:00.000Z", "2024-01-06"), existing) is True
        assert has_conflict(DateRange.parse("2024-01-06", "2024-01-07"), existing) is False

    @pytest.mark.parametrize("first", RANGES)
    @pytest.mark.parametrize("second", RANGES)
    def test_symmetry(self, first, second):
        """Conflict is symmetric for any pair of ranges."""
        a = make_booking("a", *first)
        b = make_booking("b", *second)
        assert has_conflict(DateRange.of(a), [b]) == has_conflict(DateRange.of(b), [a])

    def test_input_not_modified(self):
        existing = [make_booking("a", "2024-01-01", "2024-01-05")]
        snapshot = list(existing)
        has_conflict(DateRange.parse("2024-01-02", "2024-01-03"), existing)
        assert existing == snapshot


class TestFindConflicts:
    """Tests for find_conflicts and ranges_overlap."""

    def test_returns_every_overlapping_booking(self):
        existing = [
            make_booking("a", "2024-01-01", "2024-01-05"),
            make_booking("b", "2024-01-06", "2024-01-08"),
            make_booking("c", "2024-02-01", "2024-02-03"),
        ]
        conflicts = find_conflicts(DateRange.parse("2024-01-04", "2024-01-07"), existing)
        assert [b.id for b in conflicts] == ["a", "b"]

    def test_ranges_overlap_single_day(self):
        day = DateRange.parse("2024-01-05", "2024-01-05")
        assert ranges_overlap(day, DateRange.parse("2024-01-01", "2024-01-05"))
        assert not ranges_overlap(day, DateRange.parse("2024-01-06", "2024-01-09"))


class TestDateRange:
    """Tests for date range validation."""

    def test_end_before_start_rejected(self):
        with pytest.raises(InvalidDateRangeError):
            DateRange.parse("2024-01-05", "2024-01-01")

    def test_malformed_date_rejected(self):
        """Bad input fails closed instead of comparing as an invalid date."""
        with pytest.raises(InvalidDateError):
            DateRange.parse("2024-13-45", "2024-01-01")
        with pytest.raises(InvalidDateError):
            DateRange.parse("not a date", "2024-01-01")

    def test_single_day_range(self):
        rng = DateRange.parse("2024-01-05", "2024-01-05")
        assert rng.contains(date(2024, 1, 5))
        assert not rng.contains(date(2024, 1, 6))
