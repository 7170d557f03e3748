from __future__ import annotations

from datetime import date
from typing import Iterable

from .models import Booking
from .timewindow import MINUTES_PER_DAY, Interval


def has_time_overlap(candidate: Interval, existing: Interval) -> bool:
    """Return True when two minute intervals overlap by even one minute.

    Intervals are treated as half-open ranges: [start, end)
    so touching boundaries (e.g. 19:00-21:00 and 21:00-22:00) do not overlap.
    A zero-length interval never overlaps anything.
    """
    if candidate.duration <= 0 or existing.duration <= 0:
        return False
    return candidate.start < existing.end and existing.start < candidate.end


def interval_on(booking: Booking, reservation_date: date | None) -> Interval:
    """Return the booking's interval in minutes from midnight of ``reservation_date``.

    A booking from the previous evening that runs past midnight starts below
    zero here, so it still collides with early bookings on ``reservation_date``.
    """
    own = booking.to_interval()
    if reservation_date is None:
        return own
    shift = (booking.reservation_date - reservation_date).days * MINUTES_PER_DAY
    return Interval(own.start + shift, own.end + shift)


def _relevant_bookings(
    existing_bookings: Iterable[Booking],
    table_id: int | None,
    reservation_date: date | None,
    exclude_booking_id: int | None,
) -> Iterable[Booking]:
    for booking in existing_bookings:
        if not booking.is_active:
            continue
        if table_id is not None and booking.table_id != table_id:
            continue
        # Bookings never span a whole day, so only neighbouring dates can reach this one.
        if reservation_date is not None and abs((booking.reservation_date - reservation_date).days) > 1:
            continue
        if exclude_booking_id is not None and booking.booking_id == exclude_booking_id:
            continue
        yield booking


def find_overlapping(
    existing_bookings: Iterable[Booking],
    candidate: Interval,
    table_id: int | None = None,
    reservation_date: date | None = None,
    exclude_booking_id: int | None = None,
) -> list[Booking]:
    """Return the non-cancelled bookings whose interval overlaps ``candidate``.

    With ``reservation_date`` set, ``candidate`` is measured from that day's
    midnight and bookings on the previous and next day are compared too.
    """
    return [
        booking
        for booking in _relevant_bookings(existing_bookings, table_id, reservation_date, exclude_booking_id)
        if has_time_overlap(candidate, interval_on(booking, reservation_date))
    ]


def is_occupied(
    existing_bookings: Iterable[Booking],
    candidate: Interval,
    table_id: int | None = None,
    reservation_date: date | None = None,
    exclude_booking_id: int | None = None,
) -> bool:
    for booking in _relevant_bookings(existing_bookings, table_id, reservation_date, exclude_booking_id):
        if has_time_overlap(candidate, interval_on(booking, reservation_date)):
            return True
    return False
