"""
Preventive maintenance scheduling for a depot-based truck fleet.

This package provides:
- MaintenanceKind / VehicleStatus: enums for visits and vehicles
- Depot, Vehicle, MaintenanceRecord, Fleet: fleet data
- ScheduleSnapshot: open dates consulted by the policies
- SchedulerConfig: spacing, capacity pools and interval rules
- calendar_rules, spacing, capacity, intervals: the individual policies
- schedule_next / plan_next: the scheduling engine
- book_next_preventive / close_and_reschedule: persistence boundary with retry
"""

from .kinds import MaintenanceKind, VehicleStatus
from .depot import Depot
from .vehicle import Vehicle
from .maintenance_record import MaintenanceRecord
from .fleet import Fleet
from .errors import (
    SchedulingError,
    InvalidVehicleState,
    SchedulingExhausted,
    ConcurrentSchedulingConflict,
)
from .snapshot import ScheduleSnapshot, SnapshotEntry
from .config import SchedulerConfig, DepotGroup, TaskInterval
from .calendar_rules import is_disallowed_day, next_allowed_day, clamp_future
from .spacing import violates_spacing, find_next_spaced
from .capacity import CapacityPolicy, DepotPool
from .intervals import IntervalRules, IntervalDecision, compute_base_interval, reference_date
from .scheduler import ScheduleDecision, schedule_next, plan_next, is_date_acceptable
from .loader import load_fleet, save_fleet, load_config, append_record
from .booking import (
    ScheduleStore,
    FleetStore,
    BookingResult,
    book_next_preventive,
    close_and_reschedule,
    plan_fleet,
    book_fleet,
)

__all__ = [
    "MaintenanceKind",
    "VehicleStatus",
    "Depot",
    "Vehicle",
    "MaintenanceRecord",
    "Fleet",
    "SchedulingError",
    "InvalidVehicleState",
    "SchedulingExhausted",
    "ConcurrentSchedulingConflict",
    "ScheduleSnapshot",
    "SnapshotEntry",
    "SchedulerConfig",
    "DepotGroup",
    "TaskInterval",
    "is_disallowed_day",
    "next_allowed_day",
    "clamp_future",
    "violates_spacing",
    "find_next_spaced",
    "CapacityPolicy",
    "DepotPool",
    "IntervalRules",
    "IntervalDecision",
    "compute_base_interval",
    "reference_date",
    "ScheduleDecision",
    "schedule_next",
    "plan_next",
    "is_date_acceptable",
    "load_fleet",
    "save_fleet",
    "load_config",
    "append_record",
    "ScheduleStore",
    "FleetStore",
    "BookingResult",
    "book_next_preventive",
    "close_and_reschedule",
    "plan_fleet",
    "book_fleet",
]
