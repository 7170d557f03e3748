import tempfile
import unittest
from datetime import date, datetime
from pathlib import Path

from table_booking import (
    Booking,
    BookingPatch,
    ConflictError,
    NotFoundError,
    TableBookingYamlRepository,
)

DAY = date(2026, 3, 2)
NOW = datetime(2026, 3, 1, 9, 0)


def new_booking(
    table_id: int,
    time: str,
    duration_hours: float = 2,
    restaurant_id: int = 1,
    reservation_date: date = DAY,
) -> Booking:
    return Booking(
        restaurant_id=restaurant_id,
        table_id=table_id,
        customer_name="Guest",
        customer_phone="555-010-0000",
        party_size=2,
        reservation_date=reservation_date,
        reservation_time=time,
        duration_hours=duration_hours,
    )


class TestTableBookingYamlRepository(unittest.TestCase):
    def setUp(self) -> None:
        self._temp_dir = tempfile.TemporaryDirectory()
        self.data_dir = Path(self._temp_dir.name) / "data"
        self.repo = TableBookingYamlRepository(self.data_dir)
        self.restaurant = self.repo.create_restaurant("Bistro", "10:00", "22:00", now=NOW)
        self.table = self.repo.create_table(self.restaurant.restaurant_id, "T1", 4, now=NOW)

    def tearDown(self) -> None:
        self._temp_dir.cleanup()

    def test_creates_yaml_files(self) -> None:
        for name in ["restaurants.yaml", "tables.yaml", "bookings.yaml", "booking_events.yaml"]:
            self.assertTrue((self.data_dir / name).exists())

    def test_records_survive_reload(self) -> None:
        self.repo.create_booking(new_booking(self.table.table_id, "19:00"), now=NOW)

        reloaded = TableBookingYamlRepository(self.data_dir)
        restaurant = reloaded.get_restaurant(self.restaurant.restaurant_id)
        bookings = reloaded.list_bookings(self.table.table_id, DAY)

        self.assertEqual(restaurant.opening_time, "10:00")
        self.assertEqual(restaurant.closing_time, "22:00")
        self.assertEqual(restaurant.total_tables, 1)
        self.assertEqual(len(bookings), 1)
        self.assertEqual(bookings[0].reservation_time, "19:00")
        self.assertEqual(bookings[0].reservation_date, DAY)
        self.assertEqual(bookings[0].status, "confirmed")

    def test_list_tables_orders_by_capacity_and_filters(self) -> None:
        rid = self.restaurant.restaurant_id
        self.repo.create_table(rid, "T2", 2, now=NOW)
        self.repo.create_table(rid, "T3", 6, now=NOW)

        self.assertEqual([table.capacity for table in self.repo.list_tables(rid)], [2, 4, 6])
        self.assertEqual([table.table_number for table in self.repo.list_tables(rid, 3)], ["T1", "T3"])
        self.assertEqual(self.repo.get_restaurant(rid).total_tables, 3)

    def test_duplicate_table_number_conflicts(self) -> None:
        with self.assertRaises(ConflictError):
            self.repo.create_table(self.restaurant.restaurant_id, "T1", 2, now=NOW)

    def test_table_for_unknown_restaurant_is_not_found(self) -> None:
        with self.assertRaises(NotFoundError):
            self.repo.create_table(999, "T1", 2, now=NOW)

    def test_create_booking_assigns_sequential_ids(self) -> None:
        first = self.repo.create_booking(new_booking(self.table.table_id, "12:00"), now=NOW)
        second = self.repo.create_booking(new_booking(self.table.table_id, "14:00"), now=NOW)

        self.assertEqual(first.booking_id, 1)
        self.assertEqual(second.booking_id, 2)
        self.assertEqual(first.created_at, NOW)

    def test_create_booking_rechecks_overlap(self) -> None:
        self.repo.create_booking(new_booking(self.table.table_id, "19:00"), now=NOW)

        with self.assertRaises(ConflictError):
            self.repo.create_booking(new_booking(self.table.table_id, "20:00"), now=NOW)

        created = self.repo.create_booking(new_booking(self.table.table_id, "21:00", 1), now=NOW)
        self.assertEqual(created.reservation_time, "21:00")

    def test_create_booking_checks_bookings_running_past_midnight(self) -> None:
        next_day = date(2026, 3, 3)
        self.repo.create_booking(new_booking(self.table.table_id, "23:00", 2), now=NOW)

        with self.assertRaises(ConflictError):
            self.repo.create_booking(new_booking(self.table.table_id, "00:00", 1, reservation_date=next_day), now=NOW)

        created = self.repo.create_booking(new_booking(self.table.table_id, "01:00", 1, reservation_date=next_day), now=NOW)
        self.assertEqual(created.reservation_date, next_day)

    def test_update_booking_into_next_morning_conflicts(self) -> None:
        next_day = date(2026, 3, 3)
        self.repo.create_booking(new_booking(self.table.table_id, "00:30", 1, reservation_date=next_day), now=NOW)
        evening = self.repo.create_booking(new_booking(self.table.table_id, "20:00", 2), now=NOW)

        later = BookingPatch()
        later.set_reservation_time("23:30")
        with self.assertRaises(ConflictError):
            self.repo.update_booking(evening.booking_id, later, now=NOW)

    def test_list_bookings_between_spans_dates(self) -> None:
        self.repo.create_booking(new_booking(self.table.table_id, "12:00", reservation_date=date(2026, 3, 1)), now=NOW)
        self.repo.create_booking(new_booking(self.table.table_id, "12:00"), now=NOW)
        self.repo.create_booking(new_booking(self.table.table_id, "12:00", reservation_date=date(2026, 3, 4)), now=NOW)

        found = self.repo.list_bookings_between(self.table.table_id, date(2026, 3, 1), date(2026, 3, 3))
        self.assertEqual([booking.reservation_date for booking in found], [date(2026, 3, 1), DAY])

    def test_list_bookings_excludes_cancelled_by_default(self) -> None:
        created = self.repo.create_booking(new_booking(self.table.table_id, "19:00"), now=NOW)
        patch = BookingPatch()
        patch.set_status("cancelled")
        self.repo.update_booking(created.booking_id, patch, now=NOW)

        self.assertEqual(self.repo.list_bookings(self.table.table_id, DAY), [])
        self.assertEqual(len(self.repo.list_bookings(self.table.table_id, DAY, exclude_status=())), 1)

    def test_update_booking_checks_overlap_against_others_only(self) -> None:
        first = self.repo.create_booking(new_booking(self.table.table_id, "12:00"), now=NOW)
        self.repo.create_booking(new_booking(self.table.table_id, "16:00"), now=NOW)

        shift = BookingPatch()
        shift.set_reservation_time("13:00")
        moved = self.repo.update_booking(first.booking_id, shift, now=NOW)
        self.assertEqual(moved.reservation_time, "13:00")

        clash = BookingPatch()
        clash.set_reservation_time("15:00")
        with self.assertRaises(ConflictError):
            self.repo.update_booking(first.booking_id, clash, now=NOW)

    def test_reactivating_cancelled_booking_rechecks_overlap(self) -> None:
        first = self.repo.create_booking(new_booking(self.table.table_id, "12:00"), now=NOW)
        cancel = BookingPatch()
        cancel.set_status("cancelled")
        self.repo.update_booking(first.booking_id, cancel, now=NOW)
        self.repo.create_booking(new_booking(self.table.table_id, "12:30"), now=NOW)

        restore = BookingPatch()
        restore.set_status("confirmed")
        with self.assertRaises(ConflictError):
            self.repo.update_booking(first.booking_id, restore, now=NOW)

    def test_update_unknown_booking_is_not_found(self) -> None:
        with self.assertRaises(NotFoundError):
            self.repo.update_booking(42, BookingPatch(), now=NOW)

    def test_list_restaurant_bookings_sorted_by_time(self) -> None:
        other = self.repo.create_table(self.restaurant.restaurant_id, "T2", 2, now=NOW)
        self.repo.create_booking(new_booking(self.table.table_id, "19:00"), now=NOW)
        self.repo.create_booking(new_booking(other.table_id, "11:30"), now=NOW)

        bookings = self.repo.list_restaurant_bookings(self.restaurant.restaurant_id, DAY)
        self.assertEqual([booking.reservation_time for booking in bookings], ["11:30", "19:00"])

    def test_logs_create_update_cancel_events(self) -> None:
        created = self.repo.create_booking(new_booking(self.table.table_id, "19:00"), now=NOW)
        shift = BookingPatch()
        shift.set_duration_hours(1.5)
        self.repo.update_booking(created.booking_id, shift, now=NOW)
        cancel = BookingPatch()
        cancel.set_status("cancelled")
        self.repo.update_booking(created.booking_id, cancel, now=NOW)

        event_types = [event["event_type"] for event in self.repo.get_events()]
        self.assertIn("RESTAURANT_CREATED", event_types)
        self.assertIn("TABLE_CREATED", event_types)
        self.assertIn("BOOKING_CREATED", event_types)
        self.assertIn("BOOKING_UPDATED", event_types)
        self.assertIn("BOOKING_CANCELLED", event_types)

    def test_recovers_corrupted_yaml(self) -> None:
        (self.data_dir / "bookings.yaml").write_text("{not: [valid", encoding="utf-8")

        self.assertEqual(self.repo.list_bookings(self.table.table_id, DAY), [])
        backups = list(self.data_dir.glob("bookings.corrupt.*.yaml"))
        self.assertEqual(len(backups), 1)
        self.assertIn("YAML_RECOVERED", [event["event_type"] for event in self.repo.get_events()])

    def test_skips_rows_that_are_not_mappings(self) -> None:
        (self.data_dir / "tables.yaml").write_text(
            "- just a string\n- id: 5\n  restaurant_id: 1\n  table_number: T5\n  capacity: 2\n",
            encoding="utf-8",
        )

        tables = self.repo.list_tables(self.restaurant.restaurant_id)
        self.assertEqual([table.table_id for table in tables], [5])
        self.assertIn("YAML_ROW_SKIPPED", [event["event_type"] for event in self.repo.get_events()])

    def test_seed_demo_data(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            repo = TableBookingYamlRepository(Path(temp_dir) / "data")
            restaurant = repo.seed_demo_data(now=NOW)

            self.assertEqual(restaurant.total_tables, 3)
            self.assertEqual([table.capacity for table in repo.list_tables(restaurant.restaurant_id)], [2, 4, 6])


if __name__ == "__main__":
    unittest.main()
