"""MaintenanceRecord class for shop visits (open or closed tickets)."""

from datetime import date
from typing import List, Optional

from .errors import InvalidVehicleState
from .kinds import MaintenanceKind


class MaintenanceRecord:
    """A maintenance ticket. An open ticket has no end date."""

    def __init__(
        self,
        record_id: Optional[int],
        vehicle_id: int,
        kind: MaintenanceKind,
        start_date: date,
        end_date: Optional[date] = None,
        depot_id: Optional[int] = None,
        reason: Optional[str] = None,
        odometer: Optional[float] = None,
        reserved: bool = False,
        created_by: Optional[int] = None,
        tasks: Optional[List[str]] = None,
    ):
        self.record_id = record_id
        self.vehicle_id = vehicle_id
        self.kind = kind
        self.start_date = start_date
        self.end_date = end_date
        self.depot_id = depot_id
        self.reason = reason
        self.odometer = odometer
        self.reserved = reserved or False
        self.created_by = created_by
        self.tasks = tasks or []

    @property
    def is_open(self) -> bool:
        return self.end_date is None

    @property
    def is_corrective(self) -> bool:
        return self.kind == MaintenanceKind.CORRECTIVE

    @property
    def duration_days(self) -> Optional[int]:
        """Days between start and end; None while the ticket is open."""
        if self.end_date is None:
            return None
        return (self.end_date - self.start_date).days

    def is_pending(self, today: date) -> bool:
        """Open and not started yet: a booked visit that has not happened."""
        return self.is_open and self.start_date > today

    @property
    def reference_date(self) -> date:
        """End date when closed, otherwise start date."""
        return self.end_date or self.start_date

    def validate(self) -> None:
        """Raise InvalidVehicleState if the record's dates are unusable."""
        if not isinstance(self.start_date, date):
            raise InvalidVehicleState(
                f"Record {self.record_id} has no start date",
                vehicle_id=self.vehicle_id,
                record_id=self.record_id,
            )
        if self.end_date is not None and self.end_date < self.start_date:
            raise InvalidVehicleState(
                f"Record {self.record_id} ends ({self.end_date.isoformat()}) "
                f"before it starts ({self.start_date.isoformat()})",
                vehicle_id=self.vehicle_id,
                record_id=self.record_id,
            )

    def __repr__(self) -> str:
        return (
            f"MaintenanceRecord({self.record_id!r}, vehicle_id={self.vehicle_id!r}, "
            f"kind={self.kind.value}, start={self.start_date}, end={self.end_date})"
        )
