"""Availability queries composed from the overlap, hours and slot helpers.

Every call re-reads restaurants, tables and bookings from the store it was
given, so each answer is a point-in-time snapshot. The engine only decides;
committing a booking atomically is the store's job (see
``TableBookingYamlRepository.create_booking``).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, Iterable, Protocol

from .booking import is_occupied
from .errors import BookingError, FormatError, NotFoundError, OutOfHoursError, PastDateError
from .hours import interval_within_hours
from .logger import get_logger
from .models import AvailableSlot, Booking, Restaurant, Table
from .slots import DEFAULT_STEP_MINUTES, generate_slots, select_best
from .timewindow import interval, parse_date, to_minutes

logger = get_logger(__name__)


class BookingStore(Protocol):
    def get_restaurant(self, restaurant_id: int) -> Restaurant | None: ...

    def get_table(self, table_id: int) -> Table | None: ...

    def list_tables(self, restaurant_id: int, min_capacity: int = 1) -> list[Table]: ...

    def list_bookings_between(
        self,
        table_id: int,
        first_date: date,
        last_date: date,
        exclude_status: Iterable[str] = ...,
    ) -> list[Booking]: ...


@dataclass(frozen=True)
class TimeValidation:
    valid: bool
    error: BookingError | None = None

    @property
    def message(self) -> str | None:
        return self.error.message if self.error is not None else None


class AvailabilityEngine:
    def __init__(self, store: BookingStore, today_provider: Callable[[], date] | None = None) -> None:
        self.store = store
        self.today_provider: Callable[[], date] = today_provider or date.today

    def _require_restaurant(self, restaurant_id: int) -> Restaurant:
        restaurant = self.store.get_restaurant(restaurant_id)
        if restaurant is None:
            raise NotFoundError("Restaurant not found")
        return restaurant

    def _bookings_around(self, table_id: int, day: date) -> list[Booking]:
        """Return active bookings on ``day`` and its neighbours.

        Late bookings on the previous evening can run past midnight into ``day``,
        and a late candidate on ``day`` can run into the next morning.
        """
        return self.store.list_bookings_between(table_id, day - timedelta(days=1), day + timedelta(days=1))

    def check_availability(
        self,
        table_id: int,
        reservation_date: date | str,
        time: str,
        duration_hours: float,
        exclude_booking_id: int | None = None,
    ) -> bool:
        """Return True when the table has no active booking overlapping the window."""
        if self.store.get_table(table_id) is None:
            raise NotFoundError("Table not found")

        day = parse_date(reservation_date)
        candidate = interval(to_minutes(time), duration_hours)
        bookings = self._bookings_around(table_id, day)
        occupied = is_occupied(
            bookings,
            candidate,
            table_id=table_id,
            reservation_date=day,
            exclude_booking_id=exclude_booking_id,
        )
        logger.debug("table %s on %s at %s for %sh: occupied=%s", table_id, day, time, duration_hours, occupied)
        return not occupied

    def find_available_tables(
        self,
        restaurant_id: int,
        reservation_date: date | str,
        time: str,
        duration_hours: float,
        party_size: int,
    ) -> list[Table]:
        """Return the tables that seat the party and are free for the exact window, smallest first."""
        self._require_restaurant(restaurant_id)
        day = parse_date(reservation_date)
        candidate = interval(to_minutes(time), duration_hours)

        available: list[Table] = []
        for table in self.store.list_tables(restaurant_id, party_size):
            bookings = self._bookings_around(table.table_id, day)
            if not is_occupied(bookings, candidate, table_id=table.table_id, reservation_date=day):
                available.append(table)
        return available

    def list_available_slots(
        self,
        restaurant_id: int,
        reservation_date: date | str,
        party_size: int,
        duration_hours: float = 2,
        step_minutes: int = DEFAULT_STEP_MINUTES,
    ) -> list[AvailableSlot]:
        restaurant = self._require_restaurant(restaurant_id)
        day = parse_date(reservation_date)

        tables = self.store.list_tables(restaurant_id, party_size)
        bookings_by_table = {table.table_id: self._bookings_around(table.table_id, day) for table in tables}

        slots = generate_slots(
            restaurant.opening_minutes,
            restaurant.closing_minutes,
            tables,
            bookings_by_table,
            day,
            duration_hours,
            step_minutes,
        )
        logger.debug(
            "restaurant %s on %s, party %s, %sh: %d slot(s) over %d table(s)",
            restaurant_id,
            day,
            party_size,
            duration_hours,
            len(slots),
            len(tables),
        )
        return slots

    def suggest_best_table(
        self,
        restaurant_id: int,
        reservation_date: date | str,
        time: str,
        duration_hours: float,
        party_size: int,
    ) -> Table | None:
        free = self.find_available_tables(restaurant_id, reservation_date, time, duration_hours, party_size)
        return select_best(free)

    def validate_booking_time(
        self,
        restaurant_id: int,
        reservation_date: date | str,
        time: str,
        duration_hours: float,
    ) -> TimeValidation:
        restaurant = self.store.get_restaurant(restaurant_id)
        if restaurant is None:
            return TimeValidation(False, NotFoundError("Restaurant not found"))

        try:
            day = parse_date(reservation_date)
            candidate = interval(to_minutes(time), duration_hours)
            opening = restaurant.opening_minutes
            closing = restaurant.closing_minutes
        except FormatError as error:
            return TimeValidation(False, error)

        if candidate.duration <= 0:
            return TimeValidation(False, FormatError("Duration must be greater than 0"))

        if not interval_within_hours(candidate, opening, closing):
            return TimeValidation(
                False,
                OutOfHoursError(
                    "Reservation must be within operating hours "
                    f"({restaurant.opening_time} - {restaurant.closing_time})"
                ),
            )

        if day < self.today_provider():
            return TimeValidation(False, PastDateError("Cannot make reservations for past dates"))

        return TimeValidation(True)
