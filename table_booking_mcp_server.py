from __future__ import annotations

from pathlib import Path

from mcp.server.fastmcp import FastMCP

from table_booking import AvailabilityEngine, TableBookingYamlRepository

mcp = FastMCP(
    "Table Booking MCP Server",
    instructions="Expose table availability queries from the table_booking project.",
    json_response=True,
)

DATA_DIR = Path(__file__).parent / "data"
REPOSITORY = TableBookingYamlRepository(DATA_DIR)
ENGINE = AvailabilityEngine(REPOSITORY)


@mcp.tool()
def list_tables(restaurant_id: int, min_capacity: int = 1) -> list[dict]:
    """List a restaurant's tables that seat at least ``min_capacity``."""
    return [table.to_dict() for table in REPOSITORY.list_tables(restaurant_id, min_capacity)]


@mcp.tool()
def check_availability(table_id: int, date: str, time: str, duration_hours: float = 2) -> bool:
    """Return True when the table is free for the given window."""
    return ENGINE.check_availability(table_id, date, time, duration_hours)


@mcp.tool()
def list_available_slots(restaurant_id: int, date: str, party_size: int, duration_hours: float = 2) -> list[dict]:
    """List start times with at least one free table for the party."""
    slots = ENGINE.list_available_slots(restaurant_id, date, party_size, duration_hours)
    return [slot.to_dict() for slot in slots]


@mcp.tool()
def suggest_best_table(
    restaurant_id: int,
    date: str,
    time: str,
    party_size: int,
    duration_hours: float = 2,
) -> dict | None:
    """Suggest the smallest free table that seats the party."""
    table = ENGINE.suggest_best_table(restaurant_id, date, time, duration_hours, party_size)
    return table.to_dict() if table is not None else None


def main() -> None:
    mcp.run()


if __name__ == "__main__":
    main()
