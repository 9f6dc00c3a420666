"""Errors raised by the scheduling engine and the booking boundary."""

from datetime import date
from typing import Optional


class SchedulingError(Exception):
    """Base class for scheduling failures surfaced to callers."""


class InvalidVehicleState(SchedulingError):
    """Vehicle or history data is missing or malformed. Not retried."""

    def __init__(
        self,
        message: str,
        vehicle_id: Optional[int] = None,
        record_id: Optional[int] = None,
    ):
        super().__init__(message)
        self.vehicle_id = vehicle_id
        self.record_id = record_id


class SchedulingExhausted(SchedulingError):
    """No date inside the search horizon satisfies every policy."""

    def __init__(self, vehicle_id: Optional[int], first_candidate: date, last_day: date):
        super().__init__(
            f"No valid date for vehicle {vehicle_id} between "
            f"{first_candidate.isoformat()} and {last_day.isoformat()}"
        )
        self.vehicle_id = vehicle_id
        self.first_candidate = first_candidate
        self.last_day = last_day


class ConcurrentSchedulingConflict(SchedulingError):
    """A date chosen from a snapshot was taken before it could be written."""

    def __init__(self, vehicle_id: Optional[int], conflict_date: date, attempts: int = 1):
        super().__init__(
            f"Date {conflict_date.isoformat()} for vehicle {vehicle_id} was taken "
            f"concurrently (after {attempts} attempt{'s' if attempts != 1 else ''})"
        )
        self.vehicle_id = vehicle_id
        self.conflict_date = conflict_date
        self.attempts = attempts
