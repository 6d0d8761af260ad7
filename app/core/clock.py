"""Time source for edge detection (completion and payment due dates).

Services never read the wall clock directly; they take a ``clock`` callable
so tests can move time across a payment due date.
"""
from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current UTC time as a naive datetime (matches the DateTime columns)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_clock() -> Clock:
    """FastAPI dependency returning the process clock."""
    return utc_now
