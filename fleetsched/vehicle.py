"""Vehicle class for fleet units."""

from typing import Optional

from .kinds import VehicleStatus


class Vehicle:
    """A fleet vehicle and its depot affiliation."""

    def __init__(
        self,
        vehicle_id: int,
        plate: str,
        depot_id: Optional[int] = None,
        odometer: float = 0,
        status: VehicleStatus = VehicleStatus.ACTIVE,
        kind: str = "TRUCK",
    ):
        self.vehicle_id = vehicle_id
        self.plate = plate.upper()
        self.depot_id = depot_id
        self.odometer = odometer or 0
        self.status = status
        self.kind = kind

    @property
    def is_active(self) -> bool:
        return self.status == VehicleStatus.ACTIVE

    @property
    def is_in_shop(self) -> bool:
        return self.status == VehicleStatus.IN_SHOP

    def __repr__(self) -> str:
        return f"Vehicle({self.vehicle_id!r}, {self.plate!r}, depot_id={self.depot_id!r})"
