"""Scheduler configuration: spacing, capacity pools and interval rules."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from .calendar_rules import SUNDAY, parse_weekday

SPACING_SCOPES = ("fleet", "pool")


@dataclass
class DepotGroup:
    """
    Depots sharing one workshop and therefore one daily intake pool.

    Members may be given as depot ids or exact depot names; names are
    resolved against the fleet's depots by the capacity policy.
    """

    key: str
    depots: List[Union[int, str]]
    capacity: int = 5
    min_separation_days: Optional[int] = None


@dataclass
class TaskInterval:
    """Nominal re-service interval implied by a task performed."""

    key: str
    days: int
    keywords: Tuple[str, ...] = ()

    def matches(self, label: str) -> bool:
        text = label.strip().lower()
        return text == self.key or any(k in text for k in self.keywords)


DEFAULT_VISIT_INTERVALS: List[Tuple[int, int]] = [(5, 35), (3, 40), (0, 45)]

DEFAULT_TASK_INTERVALS: List[TaskInterval] = [
    TaskInterval("oil", 30, ("oil", "filter", "aceite", "filtro")),
    TaskInterval("brakes", 45, ("brake", "freno", "balata")),
    TaskInterval("tires", 60, ("tire", "tyre", "llanta", "neumático", "neumatico")),
    TaskInterval("belts", 90, ("belt", "banda", "correa")),
]


@dataclass
class SchedulerConfig:
    """All tunables of the scheduling engine. Defaults are representative."""

    min_separation_days: int = 7
    spacing_scope: str = "fleet"
    disallowed_weekday: Optional[int] = SUNDAY
    horizon_days: int = 365
    default_capacity: int = 1
    depot_capacities: Dict[int, int] = field(default_factory=dict)
    depot_groups: List[DepotGroup] = field(default_factory=list)
    visit_intervals: List[Tuple[int, int]] = field(
        default_factory=lambda: list(DEFAULT_VISIT_INTERVALS)
    )
    corrective_cap_days: int = 30
    task_intervals: List[TaskInterval] = field(
        default_factory=lambda: list(DEFAULT_TASK_INTERVALS)
    )

    def __post_init__(self):
        self.disallowed_weekday = parse_weekday(self.disallowed_weekday)
        if self.spacing_scope not in SPACING_SCOPES:
            raise ValueError(
                f"spacingScope must be one of {', '.join(SPACING_SCOPES)}: {self.spacing_scope!r}"
            )
        if self.min_separation_days < 0:
            raise ValueError(f"minSeparationDays must be >= 0: {self.min_separation_days}")
        if self.horizon_days < 1:
            raise ValueError(f"horizonDays must be >= 1: {self.horizon_days}")
        if self.default_capacity < 1:
            raise ValueError(f"defaultCapacity must be >= 1: {self.default_capacity}")
        for depot_id, capacity in self.depot_capacities.items():
            if capacity < 1:
                raise ValueError(f"depotCapacities[{depot_id}] must be >= 1: {capacity}")
        for group in self.depot_groups:
            if group.capacity < 1:
                raise ValueError(f"depotGroups[{group.key}].capacity must be >= 1")
        if not self.visit_intervals:
            raise ValueError("visitIntervals must not be empty")
        for min_visits, days in self.visit_intervals:
            if min_visits < 0 or days < 1:
                raise ValueError(
                    f"visitIntervals entries need minVisits >= 0 and days >= 1: "
                    f"({min_visits}, {days})"
                )
        if self.corrective_cap_days < 1:
            raise ValueError(f"correctiveCapDays must be >= 1: {self.corrective_cap_days}")
        for task in self.task_intervals:
            if task.days < 1:
                raise ValueError(f"taskIntervals[{task.key}].days must be >= 1: {task.days}")
        # Highest threshold first so the first match wins
        self.visit_intervals = sorted(self.visit_intervals, key=lambda t: t[0], reverse=True)
