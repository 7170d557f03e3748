"""Field-level checks for request payloads before they reach the engine."""

from __future__ import annotations

import re
from datetime import date
from typing import Any

from .config import get_settings

_TIME_RE = re.compile(r"^([0-1][0-9]|2[0-3]):[0-5][0-9]$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_PHONE_RE = re.compile(r"^[\d\s\-()+]+$")


def validate_time(value: Any) -> bool:
    return isinstance(value, str) and bool(_TIME_RE.match(value))


def validate_date(value: Any) -> bool:
    if not isinstance(value, str) or not _DATE_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def validate_phone(value: Any) -> bool:
    if not isinstance(value, str) or not _PHONE_RE.match(value):
        return False
    return len(re.sub(r"\D", "", value)) >= 10


def _positive_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def validate_restaurant(payload: dict[str, Any]) -> list[str]:
    errors: list[str] = []

    name = payload.get("name")
    if not isinstance(name, str) or not name.strip():
        errors.append("Restaurant name is required")
    if not validate_time(payload.get("opening_time")):
        errors.append("Valid opening time is required (HH:MM format)")
    if not validate_time(payload.get("closing_time")):
        errors.append("Valid closing time is required (HH:MM format)")

    return errors


def validate_table(payload: dict[str, Any]) -> list[str]:
    errors: list[str] = []
    table_number = payload.get("table_number")
    capacity = payload.get("capacity")

    if not table_number or not str(table_number).strip() or capacity in (None, ""):
        errors.append("Table number and capacity are required")
        return errors
    if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
        errors.append("Table capacity must be at least 1")
    return errors


def validate_reservation(payload: dict[str, Any]) -> list[str]:
    errors: list[str] = []

    for key in ("restaurant_id", "table_id"):
        value = payload.get(key)
        if isinstance(value, bool) or not isinstance(value, int):
            errors.append(f"{key} is required")

    name = payload.get("customer_name")
    if not isinstance(name, str) or not name.strip():
        errors.append("Customer name is required")
    if not validate_phone(payload.get("customer_phone")):
        errors.append("Valid customer phone is required")

    party_size = payload.get("party_size")
    if isinstance(party_size, bool) or not isinstance(party_size, int) or party_size < 1:
        errors.append("Party size must be at least 1")

    if not validate_date(payload.get("reservation_date")):
        errors.append("Valid reservation date is required (YYYY-MM-DD format)")
    if not validate_time(payload.get("reservation_time")):
        errors.append("Valid reservation time is required (HH:MM format)")

    errors.extend(validate_duration(payload.get("duration_hours")))
    return errors


def validate_duration(value: Any) -> list[str]:
    duration = _positive_number(value)
    if duration is None:
        return ["Duration must be greater than 0"]

    max_hours = get_settings().MAX_DURATION_HOURS
    if duration > max_hours:
        return [f"Reservation duration cannot exceed {max_hours:g} hours"]
    return []
