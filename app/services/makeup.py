"""Make-up rule: crediting work done this month to last month."""
from datetime import datetime
from typing import Tuple

from app.core.clock import Clock, utc_now
from app.core.exceptions import ValidationError
from app.repositories import Repositories
from app.utils.dates import get_month_name, get_previous_month


def can_apply_make_up(
    repos: Repositories,
    participant_id: str,
    current_year: int,
    current_month: int,
    target_year: int,
    target_month: int
) -> bool:
    """Whether activity logged in the current month may count toward the target.

    Only the immediately preceding month qualifies, and only while its
    MonthLog exists and is still incomplete.
    """
    previous_year, previous_month = get_previous_month(current_year, current_month)
    if (target_year, target_month) != (previous_year, previous_month):
        return False

    target_log = repos.month_logs.get(participant_id, target_year, target_month)
    if target_log is None:
        return False
    return not target_log.is_complete


def resolve_applied_month(
    repos: Repositories,
    participant_id: str,
    activity_at: datetime,
    apply_as_make_up: bool = False,
    clock: Clock = utc_now
) -> Tuple[int, int]:
    """Pick the (year, month) a self-reported activity counts toward.

    Self-reported activity must have happened in the current calendar month
    and not in the future. It counts toward the current month, or toward the
    previous month when logged as make-up and that month is eligible.
    """
    now = clock()
    if activity_at > now:
        raise ValidationError("Activity cannot be logged for a future date")
    if (activity_at.year, activity_at.month) != (now.year, now.month):
        raise ValidationError("Activity must take place in the current month")

    if not apply_as_make_up:
        return now.year, now.month

    target_year, target_month = get_previous_month(now.year, now.month)
    if not can_apply_make_up(repos, participant_id, now.year, now.month, target_year, target_month):
        raise ValidationError(
            f"{get_month_name(target_month)} {target_year} is not eligible for make-up"
        )
    return target_year, target_month
