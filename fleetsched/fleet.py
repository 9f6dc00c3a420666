"""Fleet class - the aggregate of depots, vehicles and maintenance records."""

from datetime import date
from typing import List, Optional

from .depot import Depot
from .maintenance_record import MaintenanceRecord
from .snapshot import ScheduleSnapshot
from .vehicle import Vehicle


class Fleet:
    """All depots, vehicles and maintenance records of a fleet."""

    def __init__(
        self,
        depots: Optional[List[Depot]] = None,
        vehicles: Optional[List[Vehicle]] = None,
        records: Optional[List[MaintenanceRecord]] = None,
    ):
        self.depots = depots or []
        self.vehicles = vehicles or []
        self.records = records or []

    def get_depot(self, depot_id: Optional[int]) -> Optional[Depot]:
        for depot in self.depots:
            if depot.depot_id == depot_id:
                return depot
        return None

    def get_depot_by_name(self, name: str) -> Optional[Depot]:
        for depot in self.depots:
            if depot.name.lower() == name.lower():
                return depot
        return None

    def get_vehicle(self, vehicle_id: int) -> Optional[Vehicle]:
        for vehicle in self.vehicles:
            if vehicle.vehicle_id == vehicle_id:
                return vehicle
        return None

    def get_vehicle_by_plate(self, plate: str) -> Optional[Vehicle]:
        """Find a vehicle by plate (case-insensitive)."""
        plate = plate.upper()
        for vehicle in self.vehicles:
            if vehicle.plate == plate:
                return vehicle
        return None

    def get_record(self, record_id: int) -> Optional[MaintenanceRecord]:
        for record in self.records:
            if record.record_id == record_id:
                return record
        return None

    def history_for(self, vehicle_id: int) -> List[MaintenanceRecord]:
        """All records of a vehicle, newest first."""
        return sorted(
            (r for r in self.records if r.vehicle_id == vehicle_id),
            key=lambda r: (r.reference_date, r.record_id or 0),
            reverse=True,
        )

    def open_records(self, vehicle_id: Optional[int] = None) -> List[MaintenanceRecord]:
        """Open records ordered by start date, optionally for one vehicle."""
        records = [
            r for r in self.records
            if r.is_open and (vehicle_id is None or r.vehicle_id == vehicle_id)
        ]
        return sorted(records, key=lambda r: (r.start_date, r.record_id or 0))

    def in_shop_records(self, today: date) -> List[MaintenanceRecord]:
        """Open records that have already started."""
        return [r for r in self.open_records() if r.start_date <= today]

    def scheduled_records(self, today: date) -> List[MaintenanceRecord]:
        """Open records that start in the future."""
        return [r for r in self.open_records() if r.start_date > today]

    def snapshot(self) -> ScheduleSnapshot:
        """Fresh snapshot of every open record's start date."""
        return ScheduleSnapshot.from_records(self.records)

    def next_record_id(self) -> int:
        ids = [r.record_id for r in self.records if r.record_id is not None]
        return max(ids, default=0) + 1
