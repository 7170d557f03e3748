from __future__ import annotations

import shutil
import threading
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterable

import yaml

from .booking import find_overlapping
from .errors import ConflictError, NotFoundError, StorageError
from .models import STATUS_CANCELLED, Booking, BookingPatch, Restaurant, Table
from .timewindow import to_minutes

DEFAULT_EXCLUDED_STATUSES = frozenset({STATUS_CANCELLED})


class TableBookingYamlRepository:
    """Keyed store for restaurants, tables and bookings backed by YAML files.

    ``create_booking`` and ``update_booking`` re-check for overlaps and write
    under one lock, so the check-then-insert is atomic for every caller
    sharing this repository instance.
    """

    def __init__(self, base_dir: str | Path = "data") -> None:
        self.base_dir = Path(base_dir)
        self.restaurants_file = self.base_dir / "restaurants.yaml"
        self.tables_file = self.base_dir / "tables.yaml"
        self.bookings_file = self.base_dir / "bookings.yaml"
        self.log_file = self.base_dir / "booking_events.yaml"
        self._lock = threading.RLock()
        self._ensure_files()

    def _ensure_files(self) -> None:
        self.base_dir.mkdir(parents=True, exist_ok=True)
        for path in (self.restaurants_file, self.tables_file, self.bookings_file, self.log_file):
            if not path.exists():
                path.write_text("[]\n", encoding="utf-8")

    def _read_yaml_list(self, path: Path) -> list[dict[str, Any]]:
        try:
            payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            path.write_text("[]\n", encoding="utf-8")
            return []
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as error:
            self._recover_corrupted_yaml(path, error)
            return []

        if payload is None:
            return []
        if not isinstance(payload, list):
            self._recover_corrupted_yaml(path, ValueError("top-level YAML is not a list"))
            return []

        sanitized: list[dict[str, Any]] = []
        for index, row in enumerate(payload):
            if isinstance(row, dict):
                sanitized.append(row)
            else:
                self._log_event(
                    "YAML_ROW_SKIPPED",
                    {
                        "file": str(path.name),
                        "index": index,
                        "reason": "row is not a mapping",
                    },
                )
        return sanitized

    def _write_yaml_list(self, path: Path, rows: list[dict[str, Any]]) -> None:
        temp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            temp_path.write_text(yaml.safe_dump(rows, allow_unicode=True, sort_keys=False), encoding="utf-8")
            temp_path.replace(path)
        except OSError as error:
            raise StorageError(f"Failed to write YAML file: {path}") from error
        finally:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)

    def _recover_corrupted_yaml(self, path: Path, error: Exception) -> None:
        timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
        backup_path = path.with_name(f"{path.stem}.corrupt.{timestamp}{path.suffix}")
        try:
            if path.exists():
                shutil.copy2(path, backup_path)
        except OSError:
            pass

        path.write_text("[]\n", encoding="utf-8")
        if path != self.log_file:
            self._log_event(
                "YAML_RECOVERED",
                {
                    "file": str(path.name),
                    "backup": str(backup_path.name),
                    "reason": str(error),
                },
            )

    def _log_event(self, event_type: str, payload: dict[str, Any], event_time: datetime | None = None) -> None:
        timestamp = (event_time or datetime.now()).isoformat(timespec="seconds")
        events = self._read_yaml_list(self.log_file)
        events.append({"event_time": timestamp, "event_type": event_type, "payload": payload})
        self._write_yaml_list(self.log_file, events)

    def get_events(self) -> list[dict[str, Any]]:
        return self._read_yaml_list(self.log_file)

    # Restaurants

    def list_restaurants(self) -> list[Restaurant]:
        return [Restaurant.from_dict(row) for row in self._read_yaml_list(self.restaurants_file)]

    def get_restaurant(self, restaurant_id: int) -> Restaurant | None:
        for restaurant in self.list_restaurants():
            if restaurant.restaurant_id == restaurant_id:
                return restaurant
        return None

    def create_restaurant(
        self,
        name: str,
        opening_time: str,
        closing_time: str,
        now: datetime | None = None,
    ) -> Restaurant:
        to_minutes(opening_time)
        to_minutes(closing_time)
        effective_now = now or datetime.now()

        with self._lock:
            rows = self._read_yaml_list(self.restaurants_file)
            restaurant = Restaurant(
                restaurant_id=_next_id(rows),
                name=name.strip(),
                opening_time=opening_time,
                closing_time=closing_time,
                total_tables=0,
                created_at=effective_now,
            )
            rows.append(restaurant.to_dict())
            self._write_yaml_list(self.restaurants_file, rows)
            self._log_event(
                "RESTAURANT_CREATED",
                {
                    "restaurant_id": restaurant.restaurant_id,
                    "name": restaurant.name,
                    "hours": f"{opening_time}-{closing_time}",
                },
                effective_now,
            )
        return restaurant

    def _set_total_tables(self, restaurant_id: int, count: int) -> None:
        rows = self._read_yaml_list(self.restaurants_file)
        for row in rows:
            if int(row.get("id", -1)) == restaurant_id:
                row["total_tables"] = count
        self._write_yaml_list(self.restaurants_file, rows)

    # Tables

    def _all_tables(self) -> list[Table]:
        return [Table.from_dict(row) for row in self._read_yaml_list(self.tables_file)]

    def get_table(self, table_id: int) -> Table | None:
        for table in self._all_tables():
            if table.table_id == table_id:
                return table
        return None

    def find_table_by_number(self, restaurant_id: int, table_number: str) -> Table | None:
        for table in self._all_tables():
            if table.restaurant_id == restaurant_id and table.table_number == table_number:
                return table
        return None

    def list_tables(self, restaurant_id: int, min_capacity: int = 1) -> list[Table]:
        """Return the restaurant's tables seating at least ``min_capacity``, smallest first."""
        tables = [
            table
            for table in self._all_tables()
            if table.restaurant_id == restaurant_id and table.capacity >= min_capacity
        ]
        return sorted(tables, key=lambda table: (table.capacity, table.table_id))

    def create_table(
        self,
        restaurant_id: int,
        table_number: str,
        capacity: int,
        now: datetime | None = None,
    ) -> Table:
        effective_now = now or datetime.now()
        table_number = table_number.strip()

        with self._lock:
            if self.get_restaurant(restaurant_id) is None:
                raise NotFoundError("Restaurant not found")
            if self.find_table_by_number(restaurant_id, table_number) is not None:
                raise ConflictError("Table number already exists for this restaurant")

            rows = self._read_yaml_list(self.tables_file)
            table = Table(
                table_id=_next_id(rows),
                restaurant_id=restaurant_id,
                table_number=table_number,
                capacity=capacity,
                created_at=effective_now,
            )
            rows.append(table.to_dict())
            self._write_yaml_list(self.tables_file, rows)
            self._set_total_tables(restaurant_id, len(self.list_tables(restaurant_id)))

            self._log_event(
                "TABLE_CREATED",
                {
                    "table_id": table.table_id,
                    "restaurant_id": restaurant_id,
                    "table_number": table_number,
                    "capacity": capacity,
                },
                effective_now,
            )
        return table

    # Bookings

    def _all_bookings(self) -> list[Booking]:
        return [Booking.from_dict(row) for row in self._read_yaml_list(self.bookings_file)]

    def get_booking(self, booking_id: int) -> Booking | None:
        for booking in self._all_bookings():
            if booking.booking_id == booking_id:
                return booking
        return None

    def list_bookings(
        self,
        table_id: int,
        reservation_date: date,
        exclude_status: Iterable[str] = DEFAULT_EXCLUDED_STATUSES,
    ) -> list[Booking]:
        return self.list_bookings_between(table_id, reservation_date, reservation_date, exclude_status)

    def list_bookings_between(
        self,
        table_id: int,
        first_date: date,
        last_date: date,
        exclude_status: Iterable[str] = DEFAULT_EXCLUDED_STATUSES,
    ) -> list[Booking]:
        """Return the table's bookings dated ``first_date`` through ``last_date`` inclusive."""
        excluded = set(exclude_status)
        return [
            booking
            for booking in self._all_bookings()
            if booking.table_id == table_id
            and first_date <= booking.reservation_date <= last_date
            and booking.status not in excluded
        ]

    def list_restaurant_bookings(self, restaurant_id: int, reservation_date: date) -> list[Booking]:
        bookings = [
            booking
            for booking in self._all_bookings()
            if booking.restaurant_id == restaurant_id and booking.reservation_date == reservation_date
        ]
        return sorted(bookings, key=lambda booking: (to_minutes(booking.reservation_time), booking.booking_id or 0))

    def create_booking(self, booking: Booking, now: datetime | None = None) -> Booking:
        """Insert ``booking`` unless it overlaps an active booking on the same table.

        Bookings on the neighbouring dates count too, since late bookings can
        run past midnight.
        """
        effective_now = now or datetime.now()

        with self._lock:
            rows = self._read_yaml_list(self.bookings_file)
            if booking.is_active:
                existing = [Booking.from_dict(row) for row in rows]
                conflicts = find_overlapping(
                    existing,
                    booking.to_interval(),
                    table_id=booking.table_id,
                    reservation_date=booking.reservation_date,
                )
                if conflicts:
                    raise ConflictError("Table is already reserved for this time slot")

            created = replace(
                booking,
                booking_id=_next_id(rows),
                created_at=effective_now,
                updated_at=effective_now,
            )
            rows.append(created.to_dict())
            self._write_yaml_list(self.bookings_file, rows)

            self._log_event(
                "BOOKING_CREATED",
                {
                    "booking_id": created.booking_id,
                    "table_id": created.table_id,
                    "date": created.reservation_date.isoformat(),
                    "time": created.reservation_time,
                    "duration_hours": created.duration_hours,
                    "party_size": created.party_size,
                },
                effective_now,
            )
        return created

    def update_booking(self, booking_id: int, patch: BookingPatch, now: datetime | None = None) -> Booking:
        effective_now = now or datetime.now()

        with self._lock:
            rows = self._read_yaml_list(self.bookings_file)
            found_index = -1
            for index, row in enumerate(rows):
                if row.get("id") is not None and int(row["id"]) == booking_id:
                    found_index = index
                    break

            if found_index < 0:
                raise NotFoundError("Reservation not found")

            current = Booking.from_dict(rows[found_index])
            updated = patch.apply_to(current, now=effective_now)

            if updated.is_active and (patch.changes_window or not current.is_active):
                others = [Booking.from_dict(row) for i, row in enumerate(rows) if i != found_index]
                conflicts = find_overlapping(
                    others,
                    updated.to_interval(),
                    table_id=updated.table_id,
                    reservation_date=updated.reservation_date,
                )
                if conflicts:
                    raise ConflictError("Table is already reserved for this time slot")

            rows[found_index] = updated.to_dict()
            self._write_yaml_list(self.bookings_file, rows)

            event_type = (
                "BOOKING_CANCELLED"
                if updated.status == STATUS_CANCELLED and current.status != STATUS_CANCELLED
                else "BOOKING_UPDATED"
            )
            self._log_event(
                event_type,
                {
                    "booking_id": booking_id,
                    "table_id": updated.table_id,
                    "date": updated.reservation_date.isoformat(),
                    "time": updated.reservation_time,
                    "duration_hours": updated.duration_hours,
                    "status": updated.status,
                },
                effective_now,
            )
        return updated

    def seed_demo_data(self, now: datetime | None = None) -> Restaurant:
        """Create a demo restaurant open 10:00-22:00 with tables for 2, 4 and 6."""
        effective_now = now or datetime.now()
        restaurant = self.create_restaurant("Demo Bistro", "10:00", "22:00", now=effective_now)
        for number, capacity in (("T1", 2), ("T2", 4), ("T3", 6)):
            self.create_table(restaurant.restaurant_id, number, capacity, now=effective_now)
        return self.get_restaurant(restaurant.restaurant_id) or restaurant


def _next_id(rows: list[dict[str, Any]]) -> int:
    ids = [int(row["id"]) for row in rows if row.get("id") is not None]
    return max(ids, default=0) + 1
