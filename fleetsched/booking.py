"""
Booking boundary: reads a fresh snapshot, runs the engine, writes the result.

The engine is pure; races happen between reading the snapshot and writing
the new record. Stores re-check the chosen date under their own lock and
raise ConcurrentSchedulingConflict if it was taken meanwhile; callers here
retry with a fresh snapshot a bounded number of times.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from .config import SchedulerConfig
from .depot import Depot
from .errors import ConcurrentSchedulingConflict, InvalidVehicleState, SchedulingError
from .fleet import Fleet
from .kinds import MaintenanceKind, VehicleStatus
from .loader import save_fleet
from .maintenance_record import MaintenanceRecord
from .scheduler import ScheduleDecision, is_date_acceptable, plan_next
from .snapshot import ScheduleSnapshot
from .vehicle import Vehicle

logger = logging.getLogger(__name__)

DEFAULT_REASON = "Suggested preventive plan"
DEFAULT_MAX_ATTEMPTS = 3


class ScheduleStore:
    """Persistence operations the booking helpers rely on."""

    def snapshot(self) -> ScheduleSnapshot:
        raise NotImplementedError

    def get_vehicle(self, vehicle_id: int) -> Optional[Vehicle]:
        raise NotImplementedError

    def history(self, vehicle_id: int) -> List[MaintenanceRecord]:
        raise NotImplementedError

    def depots(self) -> List[Depot]:
        raise NotImplementedError

    def open_records(self, vehicle_id: int) -> List[MaintenanceRecord]:
        raise NotImplementedError

    def insert_preventive(
        self, record: MaintenanceRecord, config: SchedulerConfig, today: date
    ) -> MaintenanceRecord:
        """Insert `record` unless its date no longer passes every policy."""
        raise NotImplementedError

    def close_record(
        self, record_id: int, end_date: date, tasks: Optional[Sequence[str]] = None
    ) -> MaintenanceRecord:
        raise NotImplementedError

    def set_vehicle_status(self, vehicle_id: int, status: VehicleStatus) -> None:
        raise NotImplementedError

    def cancel_pending_preventive(self, vehicle_id: int, today: date) -> List[MaintenanceRecord]:
        """Drop unreserved PREVENTIVE bookings that start after `today`."""
        raise NotImplementedError


class FleetStore(ScheduleStore):
    """
    Thread-safe store over an in-memory Fleet.

    When `path` is given, the fleet is written back to that YAML file after
    every change.
    """

    def __init__(self, fleet: Fleet, path: Optional[Union[str, Path]] = None):
        self.fleet = fleet
        self.path = path
        self._lock = threading.RLock()

    def snapshot(self) -> ScheduleSnapshot:
        with self._lock:
            return self.fleet.snapshot()

    def get_vehicle(self, vehicle_id: int) -> Optional[Vehicle]:
        with self._lock:
            return self.fleet.get_vehicle(vehicle_id)

    def history(self, vehicle_id: int) -> List[MaintenanceRecord]:
        with self._lock:
            return self.fleet.history_for(vehicle_id)

    def depots(self) -> List[Depot]:
        with self._lock:
            return list(self.fleet.depots)

    def open_records(self, vehicle_id: int) -> List[MaintenanceRecord]:
        with self._lock:
            return self.fleet.open_records(vehicle_id)

    def insert_preventive(
        self, record: MaintenanceRecord, config: SchedulerConfig, today: date
    ) -> MaintenanceRecord:
        with self._lock:
            vehicle = self.fleet.get_vehicle(record.vehicle_id)
            if vehicle is None:
                raise InvalidVehicleState(
                    f"Unknown vehicle {record.vehicle_id}", vehicle_id=record.vehicle_id
                )
            if not is_date_acceptable(
                vehicle, record.start_date, self.fleet.snapshot(), config, today, self.fleet.depots
            ):
                raise ConcurrentSchedulingConflict(record.vehicle_id, record.start_date)
            record.record_id = self.fleet.next_record_id()
            self.fleet.records.append(record)
            self._persist()
            return record

    def close_record(
        self, record_id: int, end_date: date, tasks: Optional[Sequence[str]] = None
    ) -> MaintenanceRecord:
        with self._lock:
            record = self.fleet.get_record(record_id)
            if record is None:
                raise InvalidVehicleState(f"Unknown record {record_id}", record_id=record_id)
            if not record.is_open:
                raise InvalidVehicleState(
                    f"Record {record_id} is already closed",
                    vehicle_id=record.vehicle_id,
                    record_id=record_id,
                )
            if end_date < record.start_date:
                raise InvalidVehicleState(
                    f"Record {record_id} cannot end ({end_date.isoformat()}) before it "
                    f"starts ({record.start_date.isoformat()})",
                    vehicle_id=record.vehicle_id,
                    record_id=record_id,
                )
            record.end_date = end_date
            if tasks:
                record.tasks = list(tasks)
            self._persist()
            return record

    def set_vehicle_status(self, vehicle_id: int, status: VehicleStatus) -> None:
        with self._lock:
            vehicle = self.fleet.get_vehicle(vehicle_id)
            if vehicle is None:
                raise InvalidVehicleState(f"Unknown vehicle {vehicle_id}", vehicle_id=vehicle_id)
            vehicle.status = status
            self._persist()

    def cancel_pending_preventive(self, vehicle_id: int, today: date) -> List[MaintenanceRecord]:
        with self._lock:
            cancelled = [
                r for r in self.fleet.open_records(vehicle_id)
                if r.is_pending(today)
                and r.kind == MaintenanceKind.PREVENTIVE
                and not r.reserved
            ]
            if cancelled:
                self.fleet.records = [r for r in self.fleet.records if r not in cancelled]
                self._persist()
            return cancelled

    def _persist(self) -> None:
        if self.path is not None:
            save_fleet(self.path, self.fleet)


@dataclass
class BookingResult:
    """A persisted preventive record and the decision behind it."""

    record: MaintenanceRecord
    decision: ScheduleDecision
    attempts: int = 1


def book_next_preventive(
    store: ScheduleStore,
    vehicle_id: int,
    config: Optional[SchedulerConfig] = None,
    today: Optional[date] = None,
    tasks_performed: Optional[Sequence[str]] = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    created_by: Optional[int] = None,
    reason: str = DEFAULT_REASON,
) -> BookingResult:
    """
    Schedule and persist the next PREVENTIVE visit for a vehicle.

    Each attempt reads a fresh snapshot. A write-time conflict triggers a
    retry; after `max_attempts` the conflict is raised to the caller.
    """
    config = config or SchedulerConfig()
    today = today or date.today()
    vehicle = store.get_vehicle(vehicle_id)
    if vehicle is None:
        raise InvalidVehicleState(f"Unknown vehicle {vehicle_id}", vehicle_id=vehicle_id)

    conflict = None
    for attempt in range(1, max_attempts + 1):
        decision = plan_next(
            vehicle,
            store.history(vehicle_id),
            store.snapshot(),
            config,
            today,
            tasks_performed,
            store.depots(),
        )
        record = MaintenanceRecord(
            record_id=None,
            vehicle_id=vehicle_id,
            kind=MaintenanceKind.PREVENTIVE,
            start_date=decision.date,
            depot_id=vehicle.depot_id,
            reason=reason,
            created_by=created_by,
        )
        try:
            saved = store.insert_preventive(record, config, today)
        except ConcurrentSchedulingConflict as e:
            conflict = e
            logger.warning(
                "Date %s for vehicle %s taken concurrently (attempt %d/%d)",
                decision.date.isoformat(),
                vehicle_id,
                attempt,
                max_attempts,
            )
            continue
        logger.info(
            "Booked vehicle %s (%s) on %s: %s",
            vehicle_id,
            vehicle.plate,
            saved.start_date.isoformat(),
            decision.explanation,
        )
        return BookingResult(record=saved, decision=decision, attempts=attempt)

    raise ConcurrentSchedulingConflict(
        vehicle_id,
        conflict.conflict_date if conflict else today,
        attempts=max_attempts,
    )


def close_and_reschedule(
    store: ScheduleStore,
    record_id: int,
    end_date: Optional[date] = None,
    config: Optional[SchedulerConfig] = None,
    today: Optional[date] = None,
    tasks_performed: Optional[Sequence[str]] = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    created_by: Optional[int] = None,
) -> BookingResult:
    """
    Close an open ticket and book the vehicle's next preventive visit.

    The vehicle goes back to ACTIVE once none of its other open records has
    already started; otherwise it stays IN_SHOP. Unreserved preventive
    bookings still pending for the vehicle are replaced by the new one.
    """
    today = today or date.today()
    closed = store.close_record(record_id, end_date or today, tasks_performed)
    vehicle_id = closed.vehicle_id

    for stale in store.cancel_pending_preventive(vehicle_id, today):
        logger.info(
            "Replacing pending preventive %s (%s) for vehicle %s",
            stale.record_id,
            stale.start_date.isoformat(),
            vehicle_id,
        )

    still_in_shop = [r for r in store.open_records(vehicle_id) if r.start_date <= today]
    store.set_vehicle_status(
        vehicle_id, VehicleStatus.IN_SHOP if still_in_shop else VehicleStatus.ACTIVE
    )

    return book_next_preventive(
        store,
        vehicle_id,
        config,
        today,
        tasks_performed,
        max_attempts,
        created_by,
    )


@dataclass
class PlanOutcome:
    """Result of planning one vehicle in a batch."""

    vehicle: Vehicle
    decision: Optional[ScheduleDecision] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.decision is not None


@dataclass
class FleetPlan:
    """Outcome of planning or booking a batch of vehicles."""

    outcomes: List[PlanOutcome] = field(default_factory=list)

    @property
    def scheduled(self) -> List[PlanOutcome]:
        return [o for o in self.outcomes if o.ok]

    @property
    def failures(self) -> List[PlanOutcome]:
        return [o for o in self.outcomes if not o.ok]


def plannable_vehicles(fleet: Fleet, include_scheduled: bool = False) -> List[Vehicle]:
    """ACTIVE vehicles by plate, skipping those already holding an open record."""
    vehicles = sorted((v for v in fleet.vehicles if v.is_active), key=lambda v: v.plate)
    if include_scheduled:
        return vehicles
    return [v for v in vehicles if not fleet.open_records(v.vehicle_id)]


def plan_fleet(
    fleet: Fleet,
    config: Optional[SchedulerConfig] = None,
    today: Optional[date] = None,
    vehicles: Optional[Iterable[Vehicle]] = None,
) -> FleetPlan:
    """
    Preview next dates for many vehicles without writing anything.

    Each accepted date joins the working snapshot, so later vehicles respect
    earlier ones exactly as if they had been booked in order.
    """
    config = config or SchedulerConfig()
    today = today or date.today()
    snapshot = fleet.snapshot()
    plan = FleetPlan()
    for vehicle in vehicles if vehicles is not None else plannable_vehicles(fleet):
        try:
            decision = plan_next(
                vehicle,
                fleet.history_for(vehicle.vehicle_id),
                snapshot,
                config,
                today,
                depots=fleet.depots,
            )
        except SchedulingError as e:
            plan.outcomes.append(PlanOutcome(vehicle=vehicle, error=str(e)))
            continue
        snapshot = snapshot.with_entry(decision.date, vehicle.depot_id, vehicle.vehicle_id)
        plan.outcomes.append(PlanOutcome(vehicle=vehicle, decision=decision))
    return plan


def book_fleet(
    store: ScheduleStore,
    vehicles: Iterable[Vehicle],
    config: Optional[SchedulerConfig] = None,
    today: Optional[date] = None,
    created_by: Optional[int] = None,
) -> FleetPlan:
    """Book the next preventive visit for each vehicle, collecting failures."""
    plan = FleetPlan()
    for vehicle in vehicles:
        try:
            result = book_next_preventive(
                store, vehicle.vehicle_id, config, today, created_by=created_by
            )
        except SchedulingError as e:
            logger.warning("Could not book vehicle %s: %s", vehicle.vehicle_id, e)
            plan.outcomes.append(PlanOutcome(vehicle=vehicle, error=str(e)))
            continue
        plan.outcomes.append(PlanOutcome(vehicle=vehicle, decision=result.decision))
    return plan
