"""Calendar helpers: weekly off-day, day advancing and future clamping."""

from datetime import date
from typing import Optional, Union

from dateutil.relativedelta import relativedelta, weekday as Weekday
from dateutil.relativedelta import MO, TU, WE, TH, FR, SA, SU

SUNDAY = SU.weekday

_WEEKDAY_NAMES = {
    "MO": MO, "MON": MO, "MONDAY": MO, "LUNES": MO,
    "TU": TU, "TUE": TU, "TUESDAY": TU, "MARTES": TU,
    "WE": WE, "WED": WE, "WEDNESDAY": WE, "MIERCOLES": WE, "MIÉRCOLES": WE,
    "TH": TH, "THU": TH, "THURSDAY": TH, "JUEVES": TH,
    "FR": FR, "FRI": FR, "FRIDAY": FR, "VIERNES": FR,
    "SA": SA, "SAT": SA, "SATURDAY": SA, "SABADO": SA, "SÁBADO": SA,
    "SU": SU, "SUN": SU, "SUNDAY": SU, "DOMINGO": SU,
}


def parse_weekday(value: Union[int, str, Weekday, None]) -> Optional[int]:
    """
    Normalize a weekday to Python's numbering (Monday = 0, Sunday = 6).

    Accepts an int, a dateutil weekday constant (SU, MO, ...), or a name such
    as "SU", "sunday" or "domingo". None means no weekly off-day.
    """
    if value is None:
        return None
    if isinstance(value, Weekday):
        return value.weekday
    if isinstance(value, int):
        if not 0 <= value <= 6:
            raise ValueError(f"Weekday out of range (0..6): {value}")
        return value
    key = str(value).strip().upper()
    if key not in _WEEKDAY_NAMES:
        raise ValueError(f"Unknown weekday: {value!r}")
    return _WEEKDAY_NAMES[key].weekday


def add_days(day: date, days: int) -> date:
    """day + days calendar days."""
    return day + relativedelta(days=days)


def days_between(a: date, b: date) -> int:
    """Absolute difference in days."""
    return abs((a - b).days)


def is_disallowed_day(day: date, disallowed_weekday: Optional[int] = SUNDAY) -> bool:
    """True if `day` falls on the fleet's non-operating weekday."""
    if disallowed_weekday is None:
        return False
    return day.weekday() == disallowed_weekday


def next_allowed_day(day: date, disallowed_weekday: Optional[int] = SUNDAY) -> date:
    """Return `day` itself, or the first following day that is not an off-day."""
    for _ in range(7):
        if not is_disallowed_day(day, disallowed_weekday):
            return day
        day = add_days(day, 1)
    return day


def clamp_future(day: date, today: date) -> date:
    """Never earlier than tomorrow."""
    tomorrow = add_days(today, 1)
    return day if day >= tomorrow else tomorrow
