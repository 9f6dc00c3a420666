"""Point-in-time view of open maintenance dates."""

from dataclasses import dataclass, field
from datetime import date
from typing import Collection, Iterable, List, Optional, Tuple

from .maintenance_record import MaintenanceRecord


@dataclass(frozen=True)
class SnapshotEntry:
    """Start date of one open record, with its depot and vehicle."""

    date: date
    depot_id: Optional[int] = None
    vehicle_id: Optional[int] = None


@dataclass(frozen=True)
class ScheduleSnapshot:
    """
    Immutable set of open-record dates consulted by the spacing and
    capacity policies. Built fresh by the caller for each scheduling call.
    """

    entries: Tuple[SnapshotEntry, ...] = field(default_factory=tuple)

    @classmethod
    def from_records(cls, records: Iterable[MaintenanceRecord]) -> "ScheduleSnapshot":
        """Build a snapshot from the open records among `records`."""
        entries = [
            SnapshotEntry(r.start_date, r.depot_id, r.vehicle_id)
            for r in records
            if r.is_open
        ]
        return cls(tuple(sorted(entries, key=_entry_sort_key)))

    @classmethod
    def from_dates(
        cls, dates: Iterable[date], depot_id: Optional[int] = None
    ) -> "ScheduleSnapshot":
        return cls(tuple(sorted((SnapshotEntry(d, depot_id) for d in dates), key=_entry_sort_key)))

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def dates(self, depot_ids: Optional[Collection[int]] = None) -> List[date]:
        """Scheduled dates, optionally restricted to the given depots."""
        return [e.date for e in self.for_depots(depot_ids).entries]

    def for_depots(self, depot_ids: Optional[Collection[int]]) -> "ScheduleSnapshot":
        """Entries whose depot is in `depot_ids` (all entries when None)."""
        if depot_ids is None:
            return self
        return ScheduleSnapshot(tuple(e for e in self.entries if e.depot_id in depot_ids))

    def excluding_vehicle(self, vehicle_id: Optional[int]) -> "ScheduleSnapshot":
        """Drop the given vehicle's own entries."""
        if vehicle_id is None:
            return self
        return ScheduleSnapshot(tuple(e for e in self.entries if e.vehicle_id != vehicle_id))

    def count_on(self, day: date, depot_ids: Optional[Collection[int]] = None) -> int:
        """Open records starting on `day`, optionally restricted to depots."""
        return sum(1 for e in self.for_depots(depot_ids).entries if e.date == day)

    def with_entry(
        self, day: date, depot_id: Optional[int] = None, vehicle_id: Optional[int] = None
    ) -> "ScheduleSnapshot":
        """New snapshot with one more entry (used when planning in batches)."""
        entries = list(self.entries) + [SnapshotEntry(day, depot_id, vehicle_id)]
        return ScheduleSnapshot(tuple(sorted(entries, key=_entry_sort_key)))


def _entry_sort_key(entry: SnapshotEntry):
    return (
        entry.date,
        entry.depot_id if entry.depot_id is not None else -1,
        entry.vehicle_id if entry.vehicle_id is not None else -1,
    )
