"""
Scheduling engine: picks the next preventive maintenance date for a vehicle.

Pure computation over a vehicle, its history and a snapshot of open dates.
Candidates move through: base interval -> clamp to the future -> weekly
off-day -> spacing -> capacity, advancing one day at a time until all
policies agree or the search horizon runs out.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Sequence

from .calendar_rules import add_days, clamp_future, is_disallowed_day
from .capacity import CapacityPolicy, DepotPool
from .config import SchedulerConfig
from .depot import Depot
from .errors import InvalidVehicleState, SchedulingExhausted
from .intervals import IntervalDecision, IntervalRules
from .maintenance_record import MaintenanceRecord
from .snapshot import ScheduleSnapshot
from .spacing import find_next_spaced, violates_spacing
from .vehicle import Vehicle

logger = logging.getLogger(__name__)


@dataclass
class ScheduleDecision:
    """Accepted date for a vehicle and how it was reached."""

    vehicle_id: int
    date: date
    base_date: date
    first_candidate: date
    interval: IntervalDecision
    pool_key: Optional[str] = None

    @property
    def days_advanced(self) -> int:
        """Days the policies pushed the date past the first candidate."""
        return (self.date - self.first_candidate).days

    @property
    def explanation(self) -> str:
        text = self.interval.explanation
        if self.first_candidate != self.base_date:
            text += f"; clamped to {self.first_candidate.isoformat()}"
        if self.days_advanced:
            text += f"; moved {self.days_advanced}d for calendar/spacing/capacity"
        return text


def _spacing_dates(
    snapshot: ScheduleSnapshot,
    vehicle: Vehicle,
    pool: Optional[DepotPool],
    config: SchedulerConfig,
) -> List[date]:
    """Dates the vehicle must keep its distance from (never its own)."""
    others = snapshot.excluding_vehicle(vehicle.vehicle_id)
    if config.spacing_scope == "pool" and pool is not None:
        return others.dates(pool.depot_ids)
    return others.dates()


def validate_history(vehicle: Vehicle, history: Sequence[MaintenanceRecord]) -> None:
    """Raise InvalidVehicleState for a missing vehicle or malformed records."""
    if vehicle is None or getattr(vehicle, "vehicle_id", None) is None:
        raise InvalidVehicleState("Vehicle is missing or has no id")
    for record in history:
        if record.vehicle_id != vehicle.vehicle_id:
            raise InvalidVehicleState(
                f"Record {record.record_id} belongs to vehicle {record.vehicle_id}, "
                f"not {vehicle.vehicle_id}",
                vehicle_id=vehicle.vehicle_id,
                record_id=record.record_id,
            )
        record.validate()


def plan_next(
    vehicle: Vehicle,
    history: Sequence[MaintenanceRecord],
    snapshot: ScheduleSnapshot,
    config: Optional[SchedulerConfig] = None,
    today: Optional[date] = None,
    tasks_performed: Optional[Sequence[str]] = None,
    depots: Optional[Iterable[Depot]] = None,
    capacity: Optional[CapacityPolicy] = None,
) -> ScheduleDecision:
    """
    Compute the next preventive date for `vehicle`.

    Spacing ignores the vehicle's own open entries; capacity counts every
    open entry in the vehicle's pool. The search covers `horizon_days`
    days from the first (clamped) candidate.

    Raises:
        InvalidVehicleState: vehicle or history is malformed
        SchedulingExhausted: no date in the horizon passes every policy
    """
    config = config or SchedulerConfig()
    today = today or date.today()
    validate_history(vehicle, history)

    interval = IntervalRules(config).decide(history, tasks_performed, today)
    base = add_days(interval.reference_date, interval.days)
    first = clamp_future(base, today)
    last_day = add_days(first, config.horizon_days)

    policy = capacity or CapacityPolicy(config, depots)
    pool = policy.pool_for(vehicle.depot_id)
    spacing_dates = _spacing_dates(snapshot, vehicle, pool, config)
    min_separation = policy.separation_for(pool)

    candidate = first
    try:
        while True:
            candidate = find_next_spaced(
                candidate,
                spacing_dates,
                min_separation,
                config.disallowed_weekday,
                last_day,
                vehicle.vehicle_id,
            )
            if policy.has_capacity(pool, candidate, snapshot):
                break
            logger.debug(
                "Pool %s full on %s for vehicle %s",
                pool.key if pool else None,
                candidate.isoformat(),
                vehicle.vehicle_id,
            )
            candidate = add_days(candidate, 1)
    except SchedulingExhausted:
        raise SchedulingExhausted(vehicle.vehicle_id, first, last_day) from None

    logger.debug(
        "Vehicle %s: base %s, accepted %s", vehicle.vehicle_id, base.isoformat(), candidate.isoformat()
    )
    return ScheduleDecision(
        vehicle_id=vehicle.vehicle_id,
        date=candidate,
        base_date=base,
        first_candidate=first,
        interval=interval,
        pool_key=pool.key if pool else None,
    )


def is_date_acceptable(
    vehicle: Vehicle,
    day: date,
    snapshot: ScheduleSnapshot,
    config: Optional[SchedulerConfig] = None,
    today: Optional[date] = None,
    depots: Optional[Iterable[Depot]] = None,
) -> bool:
    """
    Check a single date against every policy, as of `snapshot`.

    Used at write time to detect a date taken since the snapshot was read.
    """
    config = config or SchedulerConfig()
    today = today or date.today()
    if day <= today or is_disallowed_day(day, config.disallowed_weekday):
        return False
    policy = CapacityPolicy(config, depots)
    pool = policy.pool_for(vehicle.depot_id)
    spacing_dates = _spacing_dates(snapshot, vehicle, pool, config)
    if violates_spacing(day, spacing_dates, policy.separation_for(pool)):
        return False
    return policy.has_capacity(pool, day, snapshot)


def schedule_next(
    vehicle: Vehicle,
    history: Sequence[MaintenanceRecord],
    snapshot: ScheduleSnapshot,
    config: Optional[SchedulerConfig] = None,
    today: Optional[date] = None,
    tasks_performed: Optional[Sequence[str]] = None,
    depots: Optional[Iterable[Depot]] = None,
) -> date:
    """Next preventive maintenance date for `vehicle` (see plan_next)."""
    return plan_next(
        vehicle, history, snapshot, config, today, tasks_performed, depots
    ).date
