from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any

from .errors import FormatError
from .timewindow import Interval, interval, parse_date, to_minutes

STATUS_PENDING = "pending"
STATUS_CONFIRMED = "confirmed"
STATUS_COMPLETED = "completed"
STATUS_CANCELLED = "cancelled"
BOOKING_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED, STATUS_COMPLETED, STATUS_CANCELLED)


@dataclass(frozen=True)
class Restaurant:
    restaurant_id: int
    name: str
    opening_time: str
    closing_time: str
    total_tables: int = 0
    created_at: datetime | None = None

    @property
    def opening_minutes(self) -> int:
        return to_minutes(self.opening_time)

    @property
    def closing_minutes(self) -> int:
        return to_minutes(self.closing_time)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.restaurant_id,
            "name": self.name,
            "opening_time": self.opening_time,
            "closing_time": self.closing_time,
            "total_tables": self.total_tables,
        }
        if self.created_at is not None:
            payload["created_at"] = self.created_at.isoformat(timespec="seconds")
        return payload

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Restaurant":
        return Restaurant(
            restaurant_id=int(data["id"]),
            name=str(data["name"]),
            opening_time=str(data["opening_time"]),
            closing_time=str(data["closing_time"]),
            total_tables=int(data.get("total_tables", 0)),
            created_at=_optional_datetime(data.get("created_at")),
        )


@dataclass(frozen=True)
class Table:
    table_id: int
    restaurant_id: int
    table_number: str
    capacity: int
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.capacity < 1:
            raise ValueError("Table capacity must be at least 1")

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.table_id,
            "restaurant_id": self.restaurant_id,
            "table_number": self.table_number,
            "capacity": self.capacity,
        }
        if self.created_at is not None:
            payload["created_at"] = self.created_at.isoformat(timespec="seconds")
        return payload

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Table":
        return Table(
            table_id=int(data["id"]),
            restaurant_id=int(data["restaurant_id"]),
            table_number=str(data["table_number"]),
            capacity=int(data["capacity"]),
            created_at=_optional_datetime(data.get("created_at")),
        )


@dataclass(frozen=True)
class Booking:
    restaurant_id: int
    table_id: int
    customer_name: str
    customer_phone: str
    party_size: int
    reservation_date: date
    reservation_time: str
    duration_hours: float
    status: str = STATUS_CONFIRMED
    booking_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status != STATUS_CANCELLED

    def to_interval(self) -> Interval:
        return interval(to_minutes(self.reservation_time), self.duration_hours)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.booking_id,
            "restaurant_id": self.restaurant_id,
            "table_id": self.table_id,
            "customer_name": self.customer_name,
            "customer_phone": self.customer_phone,
            "party_size": self.party_size,
            "reservation_date": self.reservation_date.isoformat(),
            "reservation_time": self.reservation_time,
            "duration_hours": self.duration_hours,
            "status": self.status,
        }
        if self.created_at is not None:
            payload["created_at"] = self.created_at.isoformat(timespec="seconds")
        if self.updated_at is not None:
            payload["updated_at"] = self.updated_at.isoformat(timespec="seconds")
        return payload

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Booking":
        return Booking(
            booking_id=(int(data["id"]) if data.get("id") is not None else None),
            restaurant_id=int(data["restaurant_id"]),
            table_id=int(data["table_id"]),
            customer_name=str(data["customer_name"]),
            customer_phone=str(data["customer_phone"]),
            party_size=int(data["party_size"]),
            reservation_date=parse_date(str(data["reservation_date"])),
            reservation_time=str(data["reservation_time"]),
            duration_hours=float(data["duration_hours"]),
            status=str(data.get("status") or STATUS_CONFIRMED),
            created_at=_optional_datetime(data.get("created_at")),
            updated_at=_optional_datetime(data.get("updated_at")),
        )


@dataclass(frozen=True)
class AvailableSlot:
    time: str
    available_tables: list[int] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"time": self.time, "available_tables": list(self.available_tables)}


@dataclass
class BookingPatch:
    """Changes to the mutable fields of a booking; ``None`` leaves a field as is."""

    reservation_time: str | None = None
    reservation_date: date | None = None
    duration_hours: float | None = None
    table_id: int | None = None
    status: str | None = None

    @property
    def changes_window(self) -> bool:
        return any(
            value is not None
            for value in (self.reservation_time, self.reservation_date, self.duration_hours, self.table_id)
        )

    def set_reservation_time(self, value: str) -> None:
        to_minutes(value)
        self.reservation_time = value

    def set_reservation_date(self, value: date | str) -> None:
        self.reservation_date = parse_date(value)

    def set_duration_hours(self, value: float) -> None:
        self.duration_hours = float(value)

    def set_table_id(self, value: int) -> None:
        self.table_id = int(value)

    def set_status(self, value: str) -> None:
        if value not in BOOKING_STATUSES:
            raise FormatError(f"Unknown booking status: {value!r}")
        self.status = value

    def apply_to(self, booking: Booking, now: datetime | None = None) -> Booking:
        updated = booking
        if self.reservation_time is not None:
            updated = replace(updated, reservation_time=self.reservation_time)
        if self.reservation_date is not None:
            updated = replace(updated, reservation_date=self.reservation_date)
        if self.duration_hours is not None:
            updated = replace(updated, duration_hours=self.duration_hours)
        if self.table_id is not None:
            updated = replace(updated, table_id=self.table_id)
        if self.status is not None:
            updated = replace(updated, status=self.status)
        return replace(updated, updated_at=now or datetime.now())

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "BookingPatch":
        patch = BookingPatch()
        if data.get("reservation_time") is not None:
            patch.set_reservation_time(str(data["reservation_time"]))
        if data.get("reservation_date") is not None:
            patch.set_reservation_date(str(data["reservation_date"]))
        if data.get("duration_hours") is not None:
            patch.set_duration_hours(_as_float(data["duration_hours"], "duration_hours"))
        if data.get("table_id") is not None:
            patch.set_table_id(_as_int(data["table_id"], "table_id"))
        if data.get("status") is not None:
            patch.set_status(str(data["status"]))
        return patch


def _optional_datetime(value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _as_float(value: Any, name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as error:
        raise FormatError(f"{name} must be a number") from error


def _as_int(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as error:
        raise FormatError(f"{name} must be an integer") from error
