from __future__ import annotations

from datetime import datetime
from typing import Any

from .availability import AvailabilityEngine
from .errors import BookingError, ConflictError, NotFoundError, ValidationError
from .logger import get_logger
from .models import BOOKING_STATUSES, STATUS_CANCELLED, STATUS_CONFIRMED, Booking, BookingPatch, Table
from .timewindow import parse_date
from .validation import validate_duration, validate_reservation
from .yaml_store import TableBookingYamlRepository

logger = get_logger(__name__)


def create_reservation(
    repository: TableBookingYamlRepository,
    engine: AvailabilityEngine,
    payload: dict[str, Any],
    now: datetime | None = None,
) -> Booking:
    errors = validate_reservation(payload)
    status = str(payload.get("status") or STATUS_CONFIRMED)
    if status not in BOOKING_STATUSES:
        errors.append(f"Unknown booking status: {status}")
    if errors:
        raise ValidationError(errors)

    restaurant_id = int(payload["restaurant_id"])
    table_id = int(payload["table_id"])
    party_size = int(payload["party_size"])
    reservation_date = parse_date(str(payload["reservation_date"]))
    reservation_time = str(payload["reservation_time"])
    duration_hours = float(payload["duration_hours"])

    if repository.get_restaurant(restaurant_id) is None:
        raise NotFoundError("Restaurant not found")
    table = repository.get_table(table_id)
    if table is None:
        raise NotFoundError("Table not found")
    if table.restaurant_id != restaurant_id:
        raise BookingError("Table does not belong to the specified restaurant")
    if table.capacity < party_size:
        raise BookingError(f"Table capacity ({table.capacity}) is insufficient for party size ({party_size})")

    check = engine.validate_booking_time(restaurant_id, reservation_date, reservation_time, duration_hours)
    if not check.valid and check.error is not None:
        raise check.error

    if not engine.check_availability(table_id, reservation_date, reservation_time, duration_hours):
        raise ConflictError("Table is already reserved for this time slot")

    created = repository.create_booking(
        Booking(
            restaurant_id=restaurant_id,
            table_id=table_id,
            customer_name=str(payload["customer_name"]).strip(),
            customer_phone=str(payload["customer_phone"]).strip(),
            party_size=party_size,
            reservation_date=reservation_date,
            reservation_time=reservation_time,
            duration_hours=duration_hours,
            status=status,
        ),
        now=now,
    )
    notify_confirmation(created, table)
    return created


def update_reservation(
    repository: TableBookingYamlRepository,
    engine: AvailabilityEngine,
    booking_id: int,
    patch: BookingPatch,
    now: datetime | None = None,
) -> Booking:
    """Apply ``patch`` after running it through the same checks as a new booking.

    The booking being changed is left out of its own overlap check.
    """
    existing = repository.get_booking(booking_id)
    if existing is None:
        raise NotFoundError("Reservation not found")

    candidate = patch.apply_to(existing, now=now)

    if patch.table_id is not None:
        table = repository.get_table(patch.table_id)
        if table is None:
            raise NotFoundError("Table not found")
        if table.restaurant_id != existing.restaurant_id:
            raise BookingError("Table does not belong to the restaurant")
        if table.capacity < existing.party_size:
            raise BookingError("Table capacity is insufficient")

    if patch.duration_hours is not None:
        errors = validate_duration(patch.duration_hours)
        if errors:
            raise ValidationError(errors)

    if candidate.is_active and (patch.changes_window or not existing.is_active):
        check = engine.validate_booking_time(
            candidate.restaurant_id,
            candidate.reservation_date,
            candidate.reservation_time,
            candidate.duration_hours,
        )
        if not check.valid and check.error is not None:
            raise check.error

        available = engine.check_availability(
            candidate.table_id,
            candidate.reservation_date,
            candidate.reservation_time,
            candidate.duration_hours,
            exclude_booking_id=booking_id,
        )
        if not available:
            raise ConflictError("Table is already reserved for this time slot")

    updated = repository.update_booking(booking_id, patch, now=now)
    logger.info(
        "Reservation updated: id=%s table=%s date=%s time=%s duration=%sh status=%s",
        updated.booking_id,
        updated.table_id,
        updated.reservation_date.isoformat(),
        updated.reservation_time,
        updated.duration_hours,
        updated.status,
    )
    return updated


def cancel_reservation(
    repository: TableBookingYamlRepository,
    booking_id: int,
    now: datetime | None = None,
) -> Booking:
    existing = repository.get_booking(booking_id)
    if existing is None:
        raise NotFoundError("Reservation not found")

    patch = BookingPatch()
    patch.set_status(STATUS_CANCELLED)
    cancelled = repository.update_booking(booking_id, patch, now=now)
    logger.info("Reservation cancelled: id=%s customer=%s", booking_id, existing.customer_name)
    return cancelled


def notify_confirmation(booking: Booking, table: Table) -> None:
    # Stand-in for an email/SMS confirmation.
    logger.info(
        "Reservation confirmation: customer=%s phone=%s date=%s time=%s duration=%sh party=%s table=%s",
        booking.customer_name,
        booking.customer_phone,
        booking.reservation_date.isoformat(),
        booking.reservation_time,
        booking.duration_hours,
        booking.party_size,
        table.table_number,
    )
