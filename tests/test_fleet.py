#!/usr/bin/env python3
"""Tests for the Fleet aggregate."""

from datetime import date

import pytest

from fleetsched import Depot, Fleet, MaintenanceKind, MaintenanceRecord, Vehicle


@pytest.fixture
def fleet():
    return Fleet(
        depots=[Depot(1, "Norte"), Depot(2, "Cartago")],
        vehicles=[Vehicle(10, "abc123", depot_id=1), Vehicle(11, "XYZ789", depot_id=2)],
        records=[
            MaintenanceRecord(
                1, 10, MaintenanceKind.PREVENTIVE, date(2024, 1, 2), date(2024, 1, 3), depot_id=1
            ),
            MaintenanceRecord(2, 11, MaintenanceKind.CORRECTIVE, date(2024, 1, 8), depot_id=2),
            MaintenanceRecord(3, 10, MaintenanceKind.PREVENTIVE, date(2024, 2, 20), depot_id=1),
        ],
    )


class TestLookups:
    """Tests for depot, vehicle and record lookups."""

    def test_get_depot(self, fleet):
        assert fleet.get_depot(2).name == "Cartago"
        assert fleet.get_depot(None) is None

    def test_get_depot_by_name_ignores_case(self, fleet):
        assert fleet.get_depot_by_name("norte").depot_id == 1
        assert fleet.get_depot_by_name("Sur") is None

    def test_get_vehicle_by_plate_ignores_case(self, fleet):
        assert fleet.get_vehicle_by_plate("ABC123").vehicle_id == 10
        assert fleet.get_vehicle_by_plate("xyz789").vehicle_id == 11
        assert fleet.get_vehicle_by_plate("NOPE") is None

    def test_get_record(self, fleet):
        assert fleet.get_record(2).kind == MaintenanceKind.CORRECTIVE
        assert fleet.get_record(99) is None


class TestRecords:
    """Tests for history and open-record views."""

    def test_history_newest_first(self, fleet):
        assert [r.record_id for r in fleet.history_for(10)] == [3, 1]

    def test_open_records_by_start(self, fleet):
        assert [r.record_id for r in fleet.open_records()] == [2, 3]
        assert [r.record_id for r in fleet.open_records(11)] == [2]

    def test_in_shop_and_scheduled(self, fleet):
        today = date(2024, 1, 10)
        assert [r.record_id for r in fleet.in_shop_records(today)] == [2]
        assert [r.record_id for r in fleet.scheduled_records(today)] == [3]

    def test_snapshot_holds_open_records_only(self, fleet):
        snapshot = fleet.snapshot()
        assert snapshot.dates() == [date(2024, 1, 8), date(2024, 2, 20)]

    def test_next_record_id(self, fleet):
        assert fleet.next_record_id() == 4
        assert Fleet().next_record_id() == 1
