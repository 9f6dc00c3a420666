"""Interval rules: days until the next preventive visit."""

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple

from .config import SchedulerConfig
from .kinds import MaintenanceKind
from .maintenance_record import MaintenanceRecord


@dataclass
class IntervalDecision:
    """Base interval for a vehicle and the rule that produced it."""

    days: int
    rule: str
    visit_count: int
    reference_date: date
    last_kind: Optional[MaintenanceKind] = None
    matched_tasks: List[str] = field(default_factory=list)
    corrective_capped: bool = False

    @property
    def explanation(self) -> str:
        """One-line summary, e.g. 'Base 30 days from 2024-01-10 (corrective cap)'."""
        parts = [f"Base {self.days} days from {self.reference_date.isoformat()}"]
        if self.rule == "tasks":
            parts.append(f"tasks: {', '.join(self.matched_tasks)}")
        else:
            parts.append(f"{self.visit_count} prior visits")
        if self.corrective_capped:
            parts.append("corrective cap")
        return f"{parts[0]} ({'; '.join(parts[1:])})"


def visited(history: Iterable[MaintenanceRecord], today: date) -> List[MaintenanceRecord]:
    """Records that have started by `today`; pending bookings are left out."""
    return [r for r in history if not r.is_pending(today)]


def most_recent(
    history: Iterable[MaintenanceRecord], today: Optional[date] = None
) -> Optional[MaintenanceRecord]:
    """
    Latest record by reference date, ties broken by record id.

    With `today`, open records that have not started yet are ignored.
    """
    records = list(history) if today is None else visited(history, today)
    if not records:
        return None
    return max(
        records,
        key=lambda r: (r.reference_date, r.record_id if r.record_id is not None else -1),
    )


def reference_date(history: Iterable[MaintenanceRecord], today: date) -> date:
    """End date of the latest record, else its start date, else today."""
    last = most_recent(history, today)
    return last.reference_date if last is not None else today


class IntervalRules:
    """Visit-count intervals, task overrides and the corrective cap."""

    def __init__(self, config: Optional[SchedulerConfig] = None):
        self.config = config or SchedulerConfig()

    def visit_interval(self, visit_count: int) -> int:
        for min_visits, days in self.config.visit_intervals:
            if visit_count >= min_visits:
                return days
        # Thresholds not starting at zero: fall back to the longest interval
        return max(days for _, days in self.config.visit_intervals)

    def task_interval(self, tasks: Sequence[str]) -> Tuple[Optional[int], List[str]]:
        """Shortest interval among recognised tasks, and the matched task keys."""
        matched = []
        for task in self.config.task_intervals:
            if any(task.matches(label) for label in tasks if label):
                matched.append(task)
        if not matched:
            return None, []
        return min(t.days for t in matched), [t.key for t in matched]

    def decide(
        self,
        history: Sequence[MaintenanceRecord],
        tasks_performed: Optional[Sequence[str]] = None,
        today: Optional[date] = None,
    ) -> IntervalDecision:
        """
        Compute the base interval for a vehicle.

        Logic:
        - Visit count picks the base interval (45 / 40 / 35 by default)
        - Recognised tasks override it with the shortest task interval
          (tasks default to those recorded on the latest closed record)
        - A CORRECTIVE latest record caps the result (30 by default)
        - Bookings that have not started yet are not visits and are ignored
        """
        today = today or date.today()
        history = visited(history, today)
        last = most_recent(history)

        if tasks_performed is None and last is not None and not last.is_open:
            tasks_performed = last.tasks

        days = self.visit_interval(len(history))
        rule = "visits"
        task_days, matched = self.task_interval(tasks_performed or [])
        if task_days is not None:
            days = task_days
            rule = "tasks"

        capped = False
        if last is not None and last.is_corrective and days > self.config.corrective_cap_days:
            days = self.config.corrective_cap_days
            capped = True

        return IntervalDecision(
            days=days,
            rule=rule,
            visit_count=len(history),
            reference_date=last.reference_date if last is not None else today,
            last_kind=last.kind if last is not None else None,
            matched_tasks=matched,
            corrective_capped=capped,
        )


def compute_base_interval(
    history: Sequence[MaintenanceRecord],
    tasks_performed: Optional[Sequence[str]] = None,
    config: Optional[SchedulerConfig] = None,
) -> int:
    """Days until the next preventive visit, before calendar adjustments."""
    return IntervalRules(config).decide(history, tasks_performed).days
