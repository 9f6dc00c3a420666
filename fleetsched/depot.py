"""Depot class for regional distribution centers (CEDIS)."""

from typing import Optional


class Depot:
    """A regional depot that vehicles are affiliated with."""

    def __init__(
        self,
        depot_id: int,
        name: str,
        email: Optional[str] = None,
        capacity: Optional[int] = None,
    ):
        self.depot_id = depot_id
        self.name = name
        self.email = email
        self.capacity = capacity

    @property
    def daily_capacity(self) -> int:
        """Vehicles the depot can take in per day (defaults to 1)."""
        return self.capacity or 1
