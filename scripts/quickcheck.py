from __future__ import annotations

from datetime import date, datetime, timedelta
from pathlib import Path
import tempfile
import traceback

from table_booking import AvailabilityEngine, TableBookingYamlRepository, create_reservation


def main() -> int:
    print("[INFO] Table Booking Quick Check")

    with tempfile.TemporaryDirectory() as temp_dir:
        data_dir = Path(temp_dir) / "data"
        repo = TableBookingYamlRepository(data_dir)
        restaurant = repo.seed_demo_data(now=datetime.now())
        engine = AvailabilityEngine(repo)
        print(f"[OK] Seeded restaurant {restaurant.name} with {restaurant.total_tables} tables")

        day = date.today() + timedelta(days=1)
        best = engine.suggest_best_table(restaurant.restaurant_id, day, "19:00", 2, party_size=2)
        if best is None:
            raise RuntimeError("expected a free table on an empty day")
        print(f"[OK] Best table for 2 at 19:00: {best.table_number} (capacity {best.capacity})")

        created = create_reservation(
            repo,
            engine,
            {
                "restaurant_id": restaurant.restaurant_id,
                "table_id": best.table_id,
                "customer_name": "Quick Check",
                "customer_phone": "+1 555 010 0000",
                "party_size": 2,
                "reservation_date": day.isoformat(),
                "reservation_time": "19:00",
                "duration_hours": 2,
            },
        )
        print(f"[OK] Created booking {created.booking_id} at {created.reservation_time}")

        overlapping = engine.check_availability(best.table_id, day, "20:00", 2)
        back_to_back = engine.check_availability(best.table_id, day, "21:00", 1)
        print(f"[OK] 20:00 free: {overlapping}, 21:00 free: {back_to_back}")

        slots = engine.list_available_slots(restaurant.restaurant_id, day, party_size=2, duration_hours=2)
        print(f"[OK] {len(slots)} slot(s) available for a party of 2")

    print("[DONE] Quick check completed successfully.")
    return 0


if __name__ == "__main__":
    try:
        raise SystemExit(main())
    except Exception:
        print("[ERROR] Quick check failed.")
        traceback.print_exc()
        raise SystemExit(1)
