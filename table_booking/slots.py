from __future__ import annotations

from datetime import date
from typing import Iterable, Mapping, Sequence

from .booking import is_occupied
from .models import AvailableSlot, Booking, Table
from .timewindow import Interval, duration_minutes, to_clock

DEFAULT_STEP_MINUTES = 30


def generate_slots(
    opening: int,
    closing: int,
    tables: Sequence[Table],
    bookings_by_table: Mapping[int, Iterable[Booking]],
    reservation_date: date | None,
    duration_hours: float,
    step_minutes: int = DEFAULT_STEP_MINUTES,
) -> list[AvailableSlot]:
    """Walk the operating window and collect the free tables at each step.

    Only same-day hours are scanned: wrap-style (closing before opening)
    and zero-width hours yield no slots. Steps where no table is free are
    left out. ``bookings_by_table`` is read once per table and reused for
    every step so the whole scan sees one snapshot.
    """
    if step_minutes <= 0:
        raise ValueError("step_minutes must be greater than zero")

    length = duration_minutes(duration_hours)
    if length <= 0:
        return []

    snapshot = {table.table_id: list(bookings_by_table.get(table.table_id, ())) for table in tables}

    slots: list[AvailableSlot] = []
    start = opening
    while start + length <= closing:
        candidate = Interval(start, start + length)
        free = [
            table.table_id
            for table in tables
            if not is_occupied(
                snapshot[table.table_id],
                candidate,
                table_id=table.table_id,
                reservation_date=reservation_date,
            )
        ]
        if free:
            slots.append(AvailableSlot(time=to_clock(start), available_tables=free))
        start += step_minutes

    return slots


def select_best(free_tables: Iterable[Table]) -> Table | None:
    """Return the free table with the smallest capacity.

    The first table of the minimal-capacity set, in input order, wins ties.
    """
    best: Table | None = None
    for table in free_tables:
        if best is None or table.capacity < best.capacity:
            best = table
    return best
