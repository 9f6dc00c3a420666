"""Per-depot daily intake capacity, with shared pools for grouped depots."""

from dataclasses import dataclass
from datetime import date
from typing import Dict, FrozenSet, Iterable, Optional

from .config import SchedulerConfig
from .depot import Depot
from .snapshot import ScheduleSnapshot


@dataclass(frozen=True)
class DepotPool:
    """A set of depots whose daily intake is counted together."""

    key: str
    depot_ids: FrozenSet[int]
    capacity: int
    min_separation_days: Optional[int] = None


class CapacityPolicy:
    """Resolves a depot to its capacity pool and checks daily counts."""

    def __init__(self, config: SchedulerConfig, depots: Optional[Iterable[Depot]] = None):
        self.config = config
        self.depots: Dict[int, Depot] = {d.depot_id: d for d in (depots or [])}
        self._group_pools: Dict[int, DepotPool] = {}

        by_name = {d.name.lower(): d.depot_id for d in self.depots.values()}
        for group in config.depot_groups:
            ids = set()
            for member in group.depots:
                if isinstance(member, int):
                    ids.add(member)
                elif member.lower() in by_name:
                    ids.add(by_name[member.lower()])
            pool = DepotPool(
                key=group.key,
                depot_ids=frozenset(ids),
                capacity=group.capacity,
                min_separation_days=group.min_separation_days,
            )
            for depot_id in ids:
                self._group_pools.setdefault(depot_id, pool)

    def pool_for(self, depot_id: Optional[int]) -> Optional[DepotPool]:
        """The pool a depot belongs to; None when there is no depot."""
        if depot_id is None:
            return None
        if depot_id in self._group_pools:
            return self._group_pools[depot_id]
        return DepotPool(
            key=f"depot:{depot_id}",
            depot_ids=frozenset([depot_id]),
            capacity=self._depot_capacity(depot_id),
        )

    def _depot_capacity(self, depot_id: int) -> int:
        if depot_id in self.config.depot_capacities:
            return self.config.depot_capacities[depot_id]
        depot = self.depots.get(depot_id)
        if depot is not None and depot.capacity:
            return depot.capacity
        return self.config.default_capacity

    def capacity_of(self, pool: Optional[DepotPool]) -> Optional[int]:
        """Daily intake of `pool`; None when there is no pool to limit."""
        return pool.capacity if pool is not None else None

    def daily_count(self, pool: DepotPool, day: date, snapshot: ScheduleSnapshot) -> int:
        """Open records in the pool starting on `day`."""
        return snapshot.count_on(day, pool.depot_ids)

    def has_capacity(
        self, pool: Optional[DepotPool], day: date, snapshot: ScheduleSnapshot
    ) -> bool:
        """True if the pool can take one more vehicle on `day`."""
        limit = self.capacity_of(pool)
        if limit is None:
            return True
        return self.daily_count(pool, day, snapshot) < limit

    def separation_for(self, pool: Optional[DepotPool]) -> int:
        """Spacing window that applies to vehicles in `pool`."""
        if pool is not None and pool.min_separation_days is not None:
            return pool.min_separation_days
        return self.config.min_separation_days
