from __future__ import annotations


class BookingError(ValueError):
    """Base class for every error kind reported to callers of the engine."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class FormatError(BookingError):
    pass


class ValidationError(BookingError):
    def __init__(self, errors: list[str]) -> None:
        super().__init__("Validation failed")
        self.errors = list(errors)


class NotFoundError(BookingError):
    status_code = 404


class OutOfHoursError(BookingError):
    pass


class PastDateError(BookingError):
    pass


class ConflictError(BookingError):
    status_code = 409


class StorageError(RuntimeError):
    status_code = 500
