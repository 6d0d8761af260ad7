"""Calendar helpers for program months, payment dates and UWS Saturdays."""
from datetime import date, datetime, timedelta
from typing import Tuple, Union
from zoneinfo import ZoneInfo

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


def get_previous_month(year: int, month: int) -> Tuple[int, int]:
    """(year, month) immediately before the given month."""
    if month == 1:
        return year - 1, 12
    return year, month - 1


def get_payment_date(year: int, month: int) -> date:
    """Payment date: first day of the month two months after (year, month)."""
    payment_year = year
    payment_month = month + 2
    if payment_month > 12:
        payment_year += (payment_month - 1) // 12
        payment_month = (payment_month - 1) % 12 + 1
    return date(payment_year, payment_month, 1)


def get_month_name(month: int) -> str:
    return MONTH_NAMES[month - 1]


def normalize_week_date(value: Union[date, datetime]) -> date:
    """Drop the time of day so one Saturday maps to one key."""
    if isinstance(value, datetime):
        return value.date()
    return value


def get_upcoming_saturday(today: date) -> date:
    """Today when it is Saturday, otherwise the next Saturday."""
    # Monday=0 ... Saturday=5
    return today + timedelta(days=(5 - today.weekday()) % 7)


def to_program_time(now_utc: datetime, tz_name: str) -> datetime:
    """Convert a naive UTC datetime to local time in the program timezone."""
    return now_utc.replace(tzinfo=ZoneInfo("UTC")).astimezone(ZoneInfo(tz_name))


def is_rsvp_window_open(now_utc: datetime, tz_name: str) -> bool:
    """RSVPs close Wednesday 23:59 in the program timezone and reopen on Sunday.

    ``now_utc`` is a naive UTC datetime as produced by the clock.
    """
    local = to_program_time(now_utc, tz_name)
    # isoweekday: Sunday=7, so shift to Sunday=0 ... Saturday=6
    day_of_week = local.isoweekday() % 7
    if day_of_week > 3:
        return False
    if day_of_week == 3 and local.hour == 23 and local.minute >= 59:
        return False
    return True
