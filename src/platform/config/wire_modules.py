"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.seating.app.command import clear_seat_use_case, upsert_seat_use_case
from src.service.seating.app.query import (
    export_seat_table_use_case,
    list_seat_table_use_case,
    list_seats_use_case,
    stream_seat_updates_use_case,
)


WIRE_MODULES: list[ModuleType] = [
    upsert_seat_use_case,
    clear_seat_use_case,
    list_seats_use_case,
    list_seat_table_use_case,
    export_seat_table_use_case,
    stream_seat_updates_use_case,
]
