from .availability import AvailabilityEngine, BookingStore, TimeValidation
from .booking import find_overlapping, has_time_overlap, interval_on, is_occupied
from .errors import (
	BookingError,
	ConflictError,
	FormatError,
	NotFoundError,
	OutOfHoursError,
	PastDateError,
	StorageError,
	ValidationError,
)
from .hours import interval_within_hours, within_hours
from .models import AvailableSlot, Booking, BookingPatch, Restaurant, Table
from .reservations import cancel_reservation, create_reservation, update_reservation
from .slots import generate_slots, select_best
from .timewindow import Interval, interval, parse_date, to_clock, to_minutes
from .yaml_store import TableBookingYamlRepository

__all__ = [
	"AvailabilityEngine",
	"BookingStore",
	"TimeValidation",
	"find_overlapping",
	"has_time_overlap",
	"interval_on",
	"is_occupied",
	"BookingError",
	"ConflictError",
	"FormatError",
	"NotFoundError",
	"OutOfHoursError",
	"PastDateError",
	"StorageError",
	"ValidationError",
	"interval_within_hours",
	"within_hours",
	"AvailableSlot",
	"Booking",
	"BookingPatch",
	"Restaurant",
	"Table",
	"cancel_reservation",
	"create_reservation",
	"update_reservation",
	"generate_slots",
	"select_best",
	"Interval",
	"interval",
	"parse_date",
	"to_clock",
	"to_minutes",
	"TableBookingYamlRepository",
]
