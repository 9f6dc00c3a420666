"""YAML loading and saving utilities for fleet data and scheduler config."""

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from dateutil.parser import isoparse

from .config import DepotGroup, SchedulerConfig, TaskInterval
from .depot import Depot
from .fleet import Fleet
from .kinds import MaintenanceKind, VehicleStatus
from .maintenance_record import MaintenanceRecord
from .vehicle import Vehicle

logger = logging.getLogger(__name__)


def _parse_date(value: Any) -> Optional[date]:
    """Accept YAML dates, datetimes, or ISO strings."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return isoparse(str(value)).date()


def _parse_depot(dct: Dict[str, Any]) -> Depot:
    return Depot(
        dct["id"],
        dct["name"],
        dct.get("email"),
        dct.get("capacity"),
    )


def _parse_vehicle(dct: Dict[str, Any]) -> Vehicle:
    return Vehicle(
        dct["id"],
        str(dct["plate"]),
        dct.get("depotId"),
        dct.get("odometer", 0),
        VehicleStatus.parse(dct.get("status", "ACTIVE")),
        dct.get("kind", "TRUCK"),
    )


def _parse_record(dct: Dict[str, Any]) -> MaintenanceRecord:
    return MaintenanceRecord(
        dct.get("id"),
        dct["vehicleId"],
        MaintenanceKind.parse(dct.get("kind", "PREVENTIVE")),
        _parse_date(dct.get("startDate")),
        _parse_date(dct.get("endDate")),
        dct.get("depotId"),
        dct.get("reason"),
        dct.get("odometer"),
        dct.get("reserved", False),
        dct.get("createdBy"),
        dct.get("tasks"),
    )


def load_fleet(filename: Union[str, Path]) -> Fleet:
    """Load depots, vehicles and records from a fleet YAML file."""
    with open(filename, "r") as fp:
        data = yaml.load(fp, Loader=yaml.SafeLoader) or {}
    fleet = Fleet(
        [_parse_depot(d) for d in data.get("depots") or []],
        [_parse_vehicle(v) for v in data.get("vehicles") or []],
        [_parse_record(r) for r in data.get("records") or []],
    )
    logger.debug(
        "Loaded %s: %d depots, %d vehicles, %d records",
        filename,
        len(fleet.depots),
        len(fleet.vehicles),
        len(fleet.records),
    )
    return fleet


def _depot_to_dict(depot: Depot) -> Dict[str, Any]:
    d: Dict[str, Any] = {"id": depot.depot_id, "name": depot.name}
    if depot.email:
        d["email"] = depot.email
    if depot.capacity is not None:
        d["capacity"] = depot.capacity
    return d


def _vehicle_to_dict(vehicle: Vehicle) -> Dict[str, Any]:
    d: Dict[str, Any] = {"id": vehicle.vehicle_id, "plate": vehicle.plate}
    if vehicle.depot_id is not None:
        d["depotId"] = vehicle.depot_id
    if vehicle.odometer:
        d["odometer"] = vehicle.odometer
    d["status"] = vehicle.status.value
    if vehicle.kind != "TRUCK":
        d["kind"] = vehicle.kind
    return d


def _record_to_dict(record: MaintenanceRecord) -> Dict[str, Any]:
    """Serialize a MaintenanceRecord to the YAML dict format (camelCase keys)."""
    d: Dict[str, Any] = {
        "id": record.record_id,
        "vehicleId": record.vehicle_id,
        "kind": record.kind.value,
        "startDate": record.start_date.isoformat(),
    }
    if record.end_date is not None:
        d["endDate"] = record.end_date.isoformat()
    if record.depot_id is not None:
        d["depotId"] = record.depot_id
    if record.reason is not None:
        d["reason"] = record.reason
    if record.odometer is not None:
        d["odometer"] = record.odometer
    if record.reserved:
        d["reserved"] = True
    if record.created_by is not None:
        d["createdBy"] = record.created_by
    if record.tasks:
        d["tasks"] = list(record.tasks)
    return d


def save_fleet(filename: Union[str, Path], fleet: Fleet) -> None:
    """Write the whole fleet back to a YAML file."""
    data = {
        "depots": [_depot_to_dict(d) for d in fleet.depots],
        "vehicles": [_vehicle_to_dict(v) for v in fleet.vehicles],
        "records": [_record_to_dict(r) for r in fleet.records],
    }
    with open(filename, "w") as fp:
        yaml.dump(
            data,
            fp,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
            width=120,
        )


def append_record(filename: Union[str, Path], record: MaintenanceRecord) -> MaintenanceRecord:
    """
    Append a maintenance record to a fleet YAML file.

    Loads the raw YAML, assigns the next free id when the record has none,
    appends it to the records list, and writes back to the file.
    """
    with open(filename, "r") as fp:
        data = yaml.load(fp, Loader=yaml.SafeLoader) or {}

    if data.get("records") is None:
        data["records"] = []

    if record.record_id is None:
        ids = [r["id"] for r in data["records"] if r.get("id") is not None]
        record.record_id = max(ids, default=0) + 1

    data["records"].append(_record_to_dict(record))

    with open(filename, "w") as fp:
        yaml.dump(
            data,
            fp,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
            width=120,
        )
    return record


def load_config(filename: Optional[Union[str, Path]] = None) -> SchedulerConfig:
    """Load a SchedulerConfig from YAML; defaults when no file is given."""
    if filename is None:
        return SchedulerConfig()
    with open(filename, "r") as fp:
        data = yaml.load(fp, Loader=yaml.SafeLoader) or {}

    kwargs: Dict[str, Any] = {}
    simple = {
        "minSeparationDays": "min_separation_days",
        "spacingScope": "spacing_scope",
        "disallowedWeekday": "disallowed_weekday",
        "horizonDays": "horizon_days",
        "defaultCapacity": "default_capacity",
        "correctiveCapDays": "corrective_cap_days",
    }
    for key, attr in simple.items():
        if key in data:
            kwargs[attr] = data[key]

    if "depotCapacities" in data:
        kwargs["depot_capacities"] = {
            int(k): int(v) for k, v in (data["depotCapacities"] or {}).items()
        }
    if "depotGroups" in data:
        kwargs["depot_groups"] = [
            DepotGroup(
                g["key"],
                list(g.get("depots") or []),
                g.get("capacity", 5),
                g.get("minSeparationDays"),
            )
            for g in data["depotGroups"] or []
        ]
    if "visitIntervals" in data:
        kwargs["visit_intervals"] = [
            (int(v["minVisits"]), int(v["days"])) for v in data["visitIntervals"] or []
        ]
    if "taskIntervals" in data:
        kwargs["task_intervals"] = [
            TaskInterval(
                str(t["key"]).lower(),
                int(t["days"]),
                tuple(str(k).lower() for k in t.get("keywords") or []),
            )
            for t in data["taskIntervals"] or []
        ]
    return SchedulerConfig(**kwargs)
