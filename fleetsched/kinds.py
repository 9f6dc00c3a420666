"""Enums for maintenance kinds and vehicle operational status."""

from enum import Enum


class MaintenanceKind(Enum):
    """Kind of maintenance visit."""

    PREVENTIVE = "PREVENTIVE"
    CORRECTIVE = "CORRECTIVE"  # Unplanned repair after a failure

    @classmethod
    def parse(cls, value) -> "MaintenanceKind":
        """Accept an enum member or a case-insensitive name (English or Spanish)."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().upper()
        aliases = {"PREVENTIVO": "PREVENTIVE", "CORRECTIVO": "CORRECTIVE"}
        return cls(aliases.get(text, text))


class VehicleStatus(Enum):
    """Operational status of a vehicle."""

    ACTIVE = "ACTIVE"
    IN_SHOP = "IN_SHOP"
    INACTIVE = "INACTIVE"

    @classmethod
    def parse(cls, value) -> "VehicleStatus":
        if isinstance(value, cls):
            return value
        text = str(value).strip().upper()
        aliases = {"ACTIVA": "ACTIVE", "EN_TALLER": "IN_SHOP", "INACTIVA": "INACTIVE"}
        return cls(aliases.get(text, text))
