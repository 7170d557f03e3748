import unittest
from datetime import date

from table_booking import Booking, Interval, find_overlapping, has_time_overlap, interval_on, is_occupied

DAY = date(2026, 3, 2)


def make_booking(time: str, duration_hours: float, status: str = "confirmed", table_id: int = 1, **overrides) -> Booking:
    values = {
        "restaurant_id": 1,
        "table_id": table_id,
        "customer_name": "Guest",
        "customer_phone": "555-010-0000",
        "party_size": 2,
        "reservation_date": DAY,
        "reservation_time": time,
        "duration_hours": duration_hours,
        "status": status,
    }
    values.update(overrides)
    return Booking(**values)


class TestTimeOverlap(unittest.TestCase):
    def setUp(self) -> None:
        self.existing = Interval(19 * 60, 21 * 60)

    def test_non_overlapping_before_passes(self) -> None:
        self.assertFalse(has_time_overlap(Interval(17 * 60, 18 * 60 + 59), self.existing))

    def test_exactly_touching_boundary_passes(self) -> None:
        self.assertFalse(has_time_overlap(Interval(21 * 60, 22 * 60), self.existing))
        self.assertFalse(has_time_overlap(Interval(17 * 60, 19 * 60), self.existing))

    def test_partially_overlapping_fails(self) -> None:
        self.assertTrue(has_time_overlap(Interval(20 * 60, 22 * 60), self.existing))

    def test_fully_contained_fails(self) -> None:
        self.assertTrue(has_time_overlap(Interval(19 * 60 + 15, 19 * 60 + 45), self.existing))

    def test_identical_interval_overlaps(self) -> None:
        self.assertTrue(has_time_overlap(self.existing, self.existing))

    def test_overlap_is_symmetric(self) -> None:
        intervals = [
            Interval(0, 60),
            Interval(30, 90),
            Interval(60, 120),
            Interval(1380, 1560),
            Interval(1400, 1400),
        ]
        for first in intervals:
            for second in intervals:
                self.assertEqual(has_time_overlap(first, second), has_time_overlap(second, first))

    def test_zero_length_interval_never_overlaps(self) -> None:
        self.assertFalse(has_time_overlap(Interval(20 * 60, 20 * 60), self.existing))


class TestIsOccupied(unittest.TestCase):
    def test_back_to_back_booking_is_free(self) -> None:
        existing = [make_booking("18:00", 2)]
        self.assertFalse(is_occupied(existing, Interval(20 * 60, 22 * 60), table_id=1, reservation_date=DAY))

    def test_cancelled_booking_never_occupies(self) -> None:
        existing = [make_booking("19:00", 2, status="cancelled")]
        self.assertFalse(is_occupied(existing, Interval(19 * 60, 21 * 60), table_id=1, reservation_date=DAY))

    def test_other_table_and_date_are_ignored(self) -> None:
        existing = [
            make_booking("19:00", 2, table_id=2),
            make_booking("19:00", 2, reservation_date=date(2026, 3, 3)),
        ]
        self.assertFalse(is_occupied(existing, Interval(19 * 60, 21 * 60), table_id=1, reservation_date=DAY))

    def test_excluded_booking_id_is_ignored(self) -> None:
        existing = [make_booking("19:00", 2, booking_id=7)]
        candidate = Interval(19 * 60 + 30, 21 * 60 + 30)
        self.assertTrue(is_occupied(existing, candidate, table_id=1, reservation_date=DAY))
        self.assertFalse(is_occupied(existing, candidate, table_id=1, reservation_date=DAY, exclude_booking_id=7))

    def test_fractional_duration_uses_rounded_minutes(self) -> None:
        existing = [make_booking("19:00", 1.5)]
        self.assertFalse(is_occupied(existing, Interval(20 * 60 + 30, 21 * 60), table_id=1, reservation_date=DAY))
        self.assertTrue(is_occupied(existing, Interval(20 * 60 + 29, 21 * 60), table_id=1, reservation_date=DAY))

    def test_previous_evening_booking_reaches_past_midnight(self) -> None:
        next_day = date(2026, 3, 3)
        late = make_booking("23:00", 2)

        self.assertEqual(interval_on(late, next_day), Interval(-60, 60))
        self.assertTrue(is_occupied([late], Interval(0, 60), table_id=1, reservation_date=next_day))
        self.assertFalse(is_occupied([late], Interval(60, 120), table_id=1, reservation_date=next_day))

    def test_next_morning_booking_blocks_late_candidate(self) -> None:
        early = make_booking("00:30", 1, reservation_date=date(2026, 3, 3))

        self.assertEqual(interval_on(early, DAY), Interval(1470, 1530))
        self.assertTrue(is_occupied([early], Interval(23 * 60, 25 * 60), table_id=1, reservation_date=DAY))

    def test_bookings_two_days_away_are_skipped(self) -> None:
        far = make_booking("23:00", 2, reservation_date=date(2026, 2, 28))
        self.assertFalse(is_occupied([far], Interval(0, 24 * 60), table_id=1, reservation_date=DAY))

    def test_find_overlapping_returns_conflicts(self) -> None:
        first = make_booking("12:00", 1, booking_id=1)
        second = make_booking("13:30", 1, booking_id=2)
        third = make_booking("18:00", 1, booking_id=3)

        conflicts = find_overlapping([first, second, third], Interval(12 * 60 + 30, 14 * 60), table_id=1)

        self.assertEqual([booking.booking_id for booking in conflicts], [1, 2])


if __name__ == "__main__":
    unittest.main()
