"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.cache.driving_adapter.http_controller import cache_ops_controller
from src.service.catalog.app.command import (
    create_schedule_use_case,
    create_trip_use_case,
    update_trip_use_case,
)
from src.service.catalog.app.query import (
    get_trip_use_case,
    list_schedules_use_case,
    list_trips_use_case,
)
from src.service.payment.app.command import process_webhook_use_case
from src.service.telemetry.driving_adapter.http_controller import telemetry_controller


WIRE_MODULES: list[ModuleType] = [
    list_trips_use_case,
    get_trip_use_case,
    list_schedules_use_case,
    create_trip_use_case,
    update_trip_use_case,
    create_schedule_use_case,
    process_webhook_use_case,
    cache_ops_controller,
    telemetry_controller,
]
