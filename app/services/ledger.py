"""Monthly compliance ledger: activity rows in, MonthLog rollups out.

A MonthLog is a materialized view over the participant's non-deleted meal
and learning rows for one applied month. Only those rows are counted;
confirmed attendance credits reach the rollup through the grant rows that
confirmation materializes, never through a second sum over attendances.
"""
import logging
from datetime import datetime
from typing import List, Optional

from app.core.clock import Clock, utc_now
from app.core.config import settings
from app.core.exceptions import NotFoundError, ValidationError
from app.models.activity import (
    LearningSession,
    LearningSource,
    MealLog,
    MealSource,
    MealType,
)
from app.models.month_log import MonthLog, PaymentStatus
from app.repositories import Repositories
from app.utils.dates import get_payment_date

logger = logging.getLogger(__name__)

MIN_SESSION_MINUTES = 1
MAX_SESSION_MINUTES = 360


def _validate_month(year: int, month: int) -> None:
    if not 1 <= month <= 12:
        raise ValidationError(f"Invalid month: {month}")
    if year < 1:
        raise ValidationError(f"Invalid year: {year}")


def _require_participant(repos: Repositories, participant_id: str) -> None:
    if repos.participants.get(participant_id) is None:
        raise NotFoundError("Participant not found")


def _new_month_log(participant_id: str, year: int, month: int) -> MonthLog:
    return MonthLog(
        participant_id=participant_id,
        year=year,
        month=month,
        meals_required=settings.MEALS_REQUIRED,
        minutes_required=settings.MINUTES_REQUIRED,
        meals_earned=0,
        minutes_earned=0,
        is_complete=False,
        computed_payment_date=get_payment_date(year, month),
        payment_status=PaymentStatus.NOT_DUE,
    )


# ---------------------------------------------------------------------------
# MonthLog access
# ---------------------------------------------------------------------------

def get_or_create_month_log(
    repos: Repositories,
    participant_id: str,
    year: int,
    month: int
) -> MonthLog:
    """Return the rollup for the month, creating it with defaults if absent.

    Flushes but does not commit; callers that only read should commit
    themselves (see ``ensure_month_log``).
    """
    _validate_month(year, month)
    month_log = repos.month_logs.get(participant_id, year, month)
    if month_log is None:
        month_log = repos.month_logs.add(_new_month_log(participant_id, year, month))
        logger.info("Created month log for %s %04d-%02d", participant_id, year, month)
    return month_log


def ensure_month_log(
    repos: Repositories,
    participant_id: str,
    year: int,
    month: int
) -> MonthLog:
    """``get_or_create_month_log`` as its own unit of work."""
    try:
        month_log = get_or_create_month_log(repos, participant_id, year, month)
        repos.commit()
    except Exception:
        repos.rollback()
        raise
    return month_log


def get_month_log(
    repos: Repositories,
    participant_id: str,
    year: int,
    month: int
) -> Optional[MonthLog]:
    return repos.month_logs.get(participant_id, year, month)


def recompute_month_log(
    repos: Repositories,
    participant_id: str,
    year: int,
    month: int,
    clock: Clock = utc_now
) -> MonthLog:
    """Re-derive earned totals, completion and payment edge for one month.

    Runs inside the caller's transaction: the row is read under a row lock so
    concurrent recomputes of the same key serialize, and nothing is committed
    here. The payment status only ever moves Not due -> Due in this function.
    """
    _validate_month(year, month)
    month_log = repos.month_logs.get_for_update(participant_id, year, month)
    if month_log is None:
        month_log = repos.month_logs.add(_new_month_log(participant_id, year, month))

    meals = repos.meal_logs.list_active_for_month(participant_id, year, month)
    sessions = repos.learning_sessions.list_active_for_month(participant_id, year, month)

    meals_earned = len(meals)
    minutes_earned = sum(s.minutes for s in sessions)

    was_complete = bool(month_log.is_complete)
    is_complete = (
        meals_earned >= month_log.meals_required
        and minutes_earned >= month_log.minutes_required
    )
    now = clock()

    month_log.meals_earned = meals_earned
    month_log.minutes_earned = minutes_earned
    month_log.is_complete = is_complete

    if is_complete and not was_complete:
        month_log.completed_at = now
    elif not is_complete and was_complete:
        month_log.completed_at = None

    if (
        is_complete
        and now.date() >= month_log.computed_payment_date
        and month_log.payment_status == PaymentStatus.NOT_DUE
    ):
        month_log.payment_status = PaymentStatus.DUE
        logger.info("Payment now due for %s %04d-%02d", participant_id, year, month)

    repos.db.flush()
    return month_log


def refresh_month_log(
    repos: Repositories,
    participant_id: str,
    year: int,
    month: int,
    clock: Clock = utc_now
) -> MonthLog:
    """Recompute one month as its own unit of work (admin maintenance)."""
    try:
        _require_participant(repos, participant_id)
        month_log = recompute_month_log(repos, participant_id, year, month, clock)
        repos.commit()
    except Exception:
        repos.rollback()
        raise
    return month_log


def list_month_logs_for_participant(repos: Repositories, participant_id: str) -> List[MonthLog]:
    return repos.month_logs.list_for_participant(participant_id)


def list_all_month_logs(repos: Repositories) -> List[MonthLog]:
    return repos.month_logs.list_all()


# ---------------------------------------------------------------------------
# Meal logs
# ---------------------------------------------------------------------------

def insert_meal_log(
    repos: Repositories,
    participant_id: str,
    occurred_at: datetime,
    applied_year: int,
    applied_month: int,
    meal_type: MealType,
    source: MealSource,
    created_by: str,
    notes: Optional[str] = None,
    shabbaton_id: Optional[int] = None
) -> MealLog:
    """Append a meal row without recomputing or committing."""
    _validate_month(applied_year, applied_month)
    return repos.meal_logs.add(MealLog(
        participant_id=participant_id,
        occurred_at=occurred_at,
        applied_year=applied_year,
        applied_month=applied_month,
        type=meal_type,
        source=source,
        notes=notes,
        shabbaton_id=shabbaton_id,
        created_by=created_by,
        deleted=False,
    ))


def add_meal_log(
    repos: Repositories,
    participant_id: str,
    occurred_at: datetime,
    applied_year: int,
    applied_month: int,
    meal_type: MealType,
    source: MealSource,
    created_by: str,
    notes: Optional[str] = None,
    shabbaton_id: Optional[int] = None,
    clock: Clock = utc_now
) -> MealLog:
    """Record a meal and recompute the month it is applied to."""
    try:
        _require_participant(repos, participant_id)
        meal_log = insert_meal_log(
            repos, participant_id, occurred_at, applied_year, applied_month,
            meal_type, source, created_by, notes=notes, shabbaton_id=shabbaton_id
        )
        recompute_month_log(repos, participant_id, applied_year, applied_month, clock)
        repos.commit()
    except Exception:
        repos.rollback()
        raise
    logger.info(
        "Meal %s logged for %s toward %04d-%02d (%s)",
        meal_log.id, participant_id, applied_year, applied_month, source.value
    )
    return meal_log


def soft_delete_meal_log(
    repos: Repositories,
    meal_log_id: int,
    reason: str,
    deleted_by: str,
    clock: Clock = utc_now
) -> MealLog:
    """Flag a meal row deleted and recompute its applied month.

    Deleting an already deleted row changes nothing.
    """
    if not reason or not reason.strip():
        raise ValidationError("A reason is required to delete a meal")
    try:
        meal_log = repos.meal_logs.get(meal_log_id)
        if meal_log is None:
            raise NotFoundError("Meal log not found")
        if meal_log.deleted:
            return meal_log
        repos.meal_logs.soft_delete(meal_log, reason.strip(), deleted_by, clock())
        recompute_month_log(
            repos, meal_log.participant_id, meal_log.applied_year, meal_log.applied_month, clock
        )
        repos.commit()
    except Exception:
        repos.rollback()
        raise
    logger.info("Meal %s deleted by %s: %s", meal_log_id, deleted_by, reason)
    return meal_log


def list_meal_logs(repos: Repositories, participant_id: Optional[str] = None) -> List[MealLog]:
    return repos.meal_logs.list_active(participant_id)


# ---------------------------------------------------------------------------
# Learning sessions
# ---------------------------------------------------------------------------

def insert_learning_session(
    repos: Repositories,
    participant_id: str,
    started_at: datetime,
    minutes: int,
    applied_year: int,
    applied_month: int,
    source: LearningSource,
    created_by: str,
    notes: Optional[str] = None,
    shabbaton_id: Optional[int] = None
) -> LearningSession:
    """Append a learning row without recomputing or committing."""
    if not MIN_SESSION_MINUTES <= minutes <= MAX_SESSION_MINUTES:
        raise ValidationError(
            f"Learning sessions must be between {MIN_SESSION_MINUTES} and {MAX_SESSION_MINUTES} minutes"
        )
    _validate_month(applied_year, applied_month)
    return repos.learning_sessions.add(LearningSession(
        participant_id=participant_id,
        started_at=started_at,
        minutes=minutes,
        applied_year=applied_year,
        applied_month=applied_month,
        source=source,
        notes=notes,
        shabbaton_id=shabbaton_id,
        created_by=created_by,
        deleted=False,
    ))


def add_learning_session(
    repos: Repositories,
    participant_id: str,
    started_at: datetime,
    minutes: int,
    applied_year: int,
    applied_month: int,
    source: LearningSource,
    created_by: str,
    notes: Optional[str] = None,
    shabbaton_id: Optional[int] = None,
    clock: Clock = utc_now
) -> LearningSession:
    """Record a learning session and recompute the month it is applied to."""
    try:
        _require_participant(repos, participant_id)
        session = insert_learning_session(
            repos, participant_id, started_at, minutes, applied_year, applied_month,
            source, created_by, notes=notes, shabbaton_id=shabbaton_id
        )
        recompute_month_log(repos, participant_id, applied_year, applied_month, clock)
        repos.commit()
    except Exception:
        repos.rollback()
        raise
    logger.info(
        "Learning session %s (%d min) logged for %s toward %04d-%02d",
        session.id, minutes, participant_id, applied_year, applied_month
    )
    return session


def soft_delete_learning_session(
    repos: Repositories,
    session_id: int,
    reason: str,
    deleted_by: str,
    clock: Clock = utc_now
) -> LearningSession:
    """Flag a learning row deleted and recompute its applied month."""
    if not reason or not reason.strip():
        raise ValidationError("A reason is required to delete a learning session")
    try:
        session = repos.learning_sessions.get(session_id)
        if session is None:
            raise NotFoundError("Learning session not found")
        if session.deleted:
            return session
        repos.learning_sessions.soft_delete(session, reason.strip(), deleted_by, clock())
        recompute_month_log(
            repos, session.participant_id, session.applied_year, session.applied_month, clock
        )
        repos.commit()
    except Exception:
        repos.rollback()
        raise
    logger.info("Learning session %s deleted by %s: %s", session_id, deleted_by, reason)
    return session


def list_learning_sessions(repos: Repositories, participant_id: Optional[str] = None) -> List[LearningSession]:
    return repos.learning_sessions.list_active(participant_id)
