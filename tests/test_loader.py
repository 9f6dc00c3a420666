#!/usr/bin/env python3
"""Tests for YAML loading and saving utilities."""

from datetime import date

import pytest
import yaml

from fleetsched import (
    Depot,
    Fleet,
    MaintenanceKind,
    MaintenanceRecord,
    SchedulerConfig,
    Vehicle,
    VehicleStatus,
    append_record,
    load_config,
    load_fleet,
    save_fleet,
)
from fleetsched.calendar_rules import SUNDAY

FLEET_YAML = """
depots:
  - id: 1
    name: Norte
    email: norte@example.com
    capacity: 2
vehicles:
  - id: 10
    plate: abc123
    depotId: 1
    odometer: 120500
    status: ACTIVE
  - id: 11
    plate: XYZ789
    status: EN_TALLER
records:
  - id: 1
    vehicleId: 10
    depotId: 1
    kind: PREVENTIVE
    startDate: '2024-01-02'
    endDate: 2024-01-03
    tasks: [oil change]
  - id: 2
    vehicleId: 11
    kind: CORRECTIVO
    reason: Brake failure
    startDate: '2024-01-08'
"""

# =============================================================================
# load_fleet tests
# =============================================================================


class TestLoadFleet:
    """Tests for load_fleet function."""

    @pytest.fixture
    def fleet_file(self, tmp_path):
        path = tmp_path / "fleet.yaml"
        path.write_text(FLEET_YAML)
        return path

    def test_loads_depots(self, fleet_file):
        fleet = load_fleet(fleet_file)
        assert len(fleet.depots) == 1
        depot = fleet.depots[0]
        assert isinstance(depot, Depot)
        assert depot.name == "Norte"
        assert depot.email == "norte@example.com"
        assert depot.capacity == 2

    def test_loads_vehicles(self, fleet_file):
        fleet = load_fleet(fleet_file)
        vehicle = fleet.get_vehicle(10)
        assert isinstance(vehicle, Vehicle)
        assert vehicle.plate == "ABC123"
        assert vehicle.depot_id == 1
        assert vehicle.odometer == 120500
        assert vehicle.status == VehicleStatus.ACTIVE

    def test_spanish_aliases(self, fleet_file):
        fleet = load_fleet(fleet_file)
        assert fleet.get_vehicle(11).status == VehicleStatus.IN_SHOP
        assert fleet.get_record(2).kind == MaintenanceKind.CORRECTIVE

    def test_dates_quoted_or_native(self, fleet_file):
        record = load_fleet(fleet_file).get_record(1)
        assert record.start_date == date(2024, 1, 2)
        assert record.end_date == date(2024, 1, 3)
        assert record.tasks == ["oil change"]

    def test_open_record_has_no_end(self, fleet_file):
        record = load_fleet(fleet_file).get_record(2)
        assert record.is_open
        assert record.reason == "Brake failure"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        fleet = load_fleet(path)
        assert fleet.vehicles == []
        assert fleet.records == []

    def test_nonexistent_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_fleet(tmp_path / "missing.yaml")


# =============================================================================
# save_fleet / append_record tests
# =============================================================================


class TestSaveFleet:
    """Tests for save_fleet function."""

    def test_writes_camel_case_keys(self, tmp_path):
        fleet = Fleet(
            vehicles=[Vehicle(1, "ABC123", depot_id=2)],
            records=[
                MaintenanceRecord(
                    1, 1, MaintenanceKind.PREVENTIVE, date(2024, 2, 24), created_by=7, reserved=True
                )
            ],
        )
        path = tmp_path / "out.yaml"
        save_fleet(path, fleet)

        data = yaml.safe_load(path.read_text())
        assert data["vehicles"][0] == {"id": 1, "plate": "ABC123", "depotId": 2, "status": "ACTIVE"}
        record = data["records"][0]
        assert record["startDate"] == "2024-02-24"
        assert record["createdBy"] == 7
        assert record["reserved"] is True
        assert "endDate" not in record

    def test_reload_keeps_records(self, tmp_path):
        path = tmp_path / "fleet.yaml"
        path.write_text(FLEET_YAML)
        save_fleet(path, load_fleet(path))

        fleet = load_fleet(path)
        assert [r.record_id for r in fleet.records] == [1, 2]
        assert fleet.get_record(1).end_date == date(2024, 1, 3)
        assert fleet.get_record(2).kind == MaintenanceKind.CORRECTIVE


class TestAppendRecord:
    """Tests for append_record function."""

    def test_assigns_next_id(self, tmp_path):
        path = tmp_path / "fleet.yaml"
        path.write_text(FLEET_YAML)
        record = MaintenanceRecord(None, 10, MaintenanceKind.PREVENTIVE, date(2024, 2, 2))

        append_record(path, record)

        assert record.record_id == 3
        assert load_fleet(path).get_record(3).start_date == date(2024, 2, 2)

    def test_creates_records_list(self, tmp_path):
        path = tmp_path / "fleet.yaml"
        path.write_text("vehicles:\n  - id: 1\n    plate: ABC123\n")
        append_record(path, MaintenanceRecord(None, 1, MaintenanceKind.PREVENTIVE, date(2024, 2, 2)))

        data = yaml.safe_load(path.read_text())
        assert data["records"][0]["id"] == 1


# =============================================================================
# load_config tests
# =============================================================================


class TestLoadConfig:
    """Tests for load_config function."""

    def test_defaults_without_file(self):
        config = load_config()
        assert config == SchedulerConfig()
        assert config.disallowed_weekday == SUNDAY

    def test_maps_keys(self, tmp_path):
        path = tmp_path / "scheduler.yaml"
        path.write_text("""
minSeparationDays: 3
spacingScope: pool
disallowedWeekday: sabado
horizonDays: 90
depotCapacities: {1: 4}
depotGroups:
  - key: shared
    depots: [Cartago, 3]
    capacity: 5
    minSeparationDays: 0
visitIntervals:
  - {minVisits: 0, days: 50}
  - {minVisits: 2, days: 20}
correctiveCapDays: 15
taskIntervals:
  - key: Oil
    days: 25
    keywords: [Aceite]
""")
        config = load_config(path)
        assert config.min_separation_days == 3
        assert config.spacing_scope == "pool"
        assert config.disallowed_weekday == 5
        assert config.horizon_days == 90
        assert config.depot_capacities == {1: 4}
        group = config.depot_groups[0]
        assert group.depots == ["Cartago", 3]
        assert group.min_separation_days == 0
        assert config.visit_intervals == [(2, 20), (0, 50)]
        assert config.corrective_cap_days == 15
        assert config.task_intervals[0].key == "oil"
        assert config.task_intervals[0].keywords == ("aceite",)

    def test_null_weekday_disables_off_day(self, tmp_path):
        path = tmp_path / "scheduler.yaml"
        path.write_text("disallowedWeekday: null\n")
        assert load_config(path).disallowed_weekday is None

    def test_invalid_scope_raises(self, tmp_path):
        path = tmp_path / "scheduler.yaml"
        path.write_text("spacingScope: region\n")
        with pytest.raises(ValueError):
            load_config(path)

    def test_shipped_config_loads(self):
        from pathlib import Path

        config = load_config(Path(__file__).parent.parent / "scheduler.yaml")
        assert config.depot_groups[0].key == "shared-workshop"
