from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Any, Callable

from flask import Flask, jsonify, request

from .availability import AvailabilityEngine
from .config import get_settings
from .errors import BookingError, FormatError, NotFoundError, ValidationError
from .logger import get_logger
from .models import BookingPatch
from .reservations import cancel_reservation, create_reservation, update_reservation
from .validation import validate_date, validate_restaurant, validate_table, validate_time
from .yaml_store import TableBookingYamlRepository

logger = get_logger(__name__)


def create_app(
    data_dir: str | Path | None = None,
    today_provider: Callable[[], date] | None = None,
) -> Flask:
    settings = get_settings()
    app = Flask(__name__)
    repository = TableBookingYamlRepository(data_dir or settings.DATA_DIR)
    engine = AvailabilityEngine(repository, today_provider=today_provider)

    @app.after_request
    def add_cors_headers(response: Any) -> Any:
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        return response

    @app.errorhandler(BookingError)
    def handle_booking_error(error: BookingError) -> Any:
        body: dict[str, Any] = {"error": error.message}
        if isinstance(error, ValidationError):
            body["details"] = error.errors
        return jsonify(body), error.status_code

    @app.get("/api/health")
    def health() -> Any:
        return jsonify({"ok": True})

    @app.post("/api/restaurants")
    def create_restaurant() -> Any:
        payload = request.get_json(silent=True) or {}
        errors = validate_restaurant(payload)
        if errors:
            raise ValidationError(errors)

        created = repository.create_restaurant(
            str(payload["name"]),
            str(payload["opening_time"]),
            str(payload["closing_time"]),
        )
        return jsonify(created.to_dict()), 201

    @app.get("/api/restaurants/<int:restaurant_id>")
    def get_restaurant(restaurant_id: int) -> Any:
        restaurant = repository.get_restaurant(restaurant_id)
        if restaurant is None:
            raise NotFoundError("Restaurant not found")
        return jsonify(restaurant.to_dict())

    @app.get("/api/restaurants/<int:restaurant_id>/available-tables")
    def get_restaurant_tables_overview(restaurant_id: int) -> Any:
        restaurant = repository.get_restaurant(restaurant_id)
        if restaurant is None:
            raise NotFoundError("Restaurant not found")

        return jsonify(
            {
                "restaurant": {
                    "id": restaurant.restaurant_id,
                    "name": restaurant.name,
                    "opening_time": restaurant.opening_time,
                    "closing_time": restaurant.closing_time,
                },
                "tables": [table.to_dict() for table in repository.list_tables(restaurant_id)],
            }
        )

    @app.post("/api/restaurants/<int:restaurant_id>/tables")
    def create_table(restaurant_id: int) -> Any:
        if repository.get_restaurant(restaurant_id) is None:
            raise NotFoundError("Restaurant not found")

        payload = request.get_json(silent=True) or {}
        errors = validate_table(payload)
        if errors:
            raise ValidationError(errors)

        created = repository.create_table(restaurant_id, str(payload["table_number"]), int(payload["capacity"]))
        return jsonify(created.to_dict()), 201

    @app.get("/api/restaurants/<int:restaurant_id>/tables")
    def list_tables(restaurant_id: int) -> Any:
        if repository.get_restaurant(restaurant_id) is None:
            raise NotFoundError("Restaurant not found")
        return jsonify([table.to_dict() for table in repository.list_tables(restaurant_id)])

    @app.get("/api/restaurants/<int:restaurant_id>/reservations")
    def list_restaurant_reservations(restaurant_id: int) -> Any:
        reservation_date = request.args.get("date", "")
        if not validate_date(reservation_date):
            return jsonify({"error": "Valid date is required (YYYY-MM-DD format)"}), 400
        if repository.get_restaurant(restaurant_id) is None:
            raise NotFoundError("Restaurant not found")

        bookings = repository.list_restaurant_bookings(restaurant_id, date.fromisoformat(reservation_date))
        return jsonify([booking.to_dict() for booking in bookings])

    @app.get("/api/restaurants/<int:restaurant_id>/available-slots")
    def available_slots(restaurant_id: int) -> Any:
        party_size = _int_arg("partySize")
        reservation_date = request.args.get("date", "")
        duration_hours = _duration_arg(settings.DEFAULT_DURATION_HOURS)

        if party_size is None or party_size < 1:
            return jsonify({"error": "Valid party size is required"}), 400
        if not validate_date(reservation_date):
            return jsonify({"error": "Valid date is required (YYYY-MM-DD format)"}), 400

        slots = engine.list_available_slots(
            restaurant_id,
            reservation_date,
            party_size,
            duration_hours,
            settings.SLOT_STEP_MINUTES,
        )
        return jsonify(
            {
                "restaurant_id": restaurant_id,
                "date": reservation_date,
                "party_size": party_size,
                "duration_hours": duration_hours,
                "available_slots": [slot.to_dict() for slot in slots],
            }
        )

    @app.get("/api/restaurants/<int:restaurant_id>/suggest-table")
    def suggest_table(restaurant_id: int) -> Any:
        party_size = _int_arg("partySize")
        reservation_date = request.args.get("date", "")
        time = request.args.get("time", "")
        duration_hours = _duration_arg(settings.DEFAULT_DURATION_HOURS)

        if party_size is None or party_size < 1:
            return jsonify({"error": "Valid party size is required"}), 400
        if not validate_date(reservation_date):
            return jsonify({"error": "Valid date is required (YYYY-MM-DD format)"}), 400
        if not validate_time(time):
            return jsonify({"error": "Valid time is required (HH:MM format)"}), 400

        table = engine.suggest_best_table(restaurant_id, reservation_date, time, duration_hours, party_size)
        return jsonify({"table": table.to_dict() if table is not None else None})

    @app.get("/api/tables/<int:table_id>/availability")
    def table_availability(table_id: int) -> Any:
        reservation_date = request.args.get("date", "")
        time = request.args.get("time", "")
        duration_hours = _duration_arg(settings.DEFAULT_DURATION_HOURS)

        if not validate_date(reservation_date):
            return jsonify({"error": "Valid date is required (YYYY-MM-DD format)"}), 400
        if not validate_time(time):
            return jsonify({"error": "Valid time is required (HH:MM format)"}), 400

        available = engine.check_availability(table_id, reservation_date, time, duration_hours)
        return jsonify(
            {
                "table_id": table_id,
                "date": reservation_date,
                "time": time,
                "duration_hours": duration_hours,
                "available": available,
            }
        )

    @app.post("/api/reservations")
    def create_reservation_route() -> Any:
        payload = request.get_json(silent=True) or {}
        created = create_reservation(repository, engine, payload)
        return jsonify(created.to_dict()), 201

    @app.get("/api/reservations/<int:booking_id>")
    def get_reservation(booking_id: int) -> Any:
        booking = repository.get_booking(booking_id)
        if booking is None:
            raise NotFoundError("Reservation not found")
        return jsonify(booking.to_dict())

    @app.put("/api/reservations/<int:booking_id>")
    def update_reservation_route(booking_id: int) -> Any:
        payload = request.get_json(silent=True) or {}
        patch = BookingPatch.from_dict(payload)
        updated = update_reservation(repository, engine, booking_id, patch)
        return jsonify(updated.to_dict())

    @app.delete("/api/reservations/<int:booking_id>")
    def cancel_reservation_route(booking_id: int) -> Any:
        cancelled = cancel_reservation(repository, booking_id)
        return jsonify(cancelled.to_dict())

    return app


def _int_arg(name: str) -> int | None:
    value = request.args.get(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _duration_arg(default: float) -> float:
    value = request.args.get("durationHours")
    if value is None:
        return default
    try:
        number = float(value)
    except ValueError:
        number = 0.0
    if not number > 0:
        raise FormatError("Duration must be a positive number of hours")
    return number


if __name__ == "__main__":
    settings = get_settings()
    app = create_app()
    logger.info("Table booking API listening on %s:%s (data dir %s)", settings.HOST, settings.PORT, settings.DATA_DIR)
    app.run(host=settings.HOST, port=settings.PORT, debug=False)
