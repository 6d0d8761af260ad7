"""Shabbaton attendance lifecycle.

Pending -> Confirmed materializes grant rows (one learning session plus one
meal row per granted meal); Confirmed -> Denied soft-deletes them again.
Each transition commits as one transaction together with the recompute of
the applied month, so the rollup never sees half of a grant.
"""
import logging
from datetime import datetime
from typing import List, Optional

from app.core.clock import Clock, utc_now
from app.core.config import settings
from app.core.exceptions import NotFoundError, ValidationError
from app.models.activity import LearningSource, MealSource, MealType
from app.models.shabbaton import Attendance, AttendanceStatus, Shabbaton
from app.repositories import Repositories
from app.services.ledger import (
    MAX_SESSION_MINUTES,
    MIN_SESSION_MINUTES,
    insert_learning_session,
    insert_meal_log,
    recompute_month_log,
)

logger = logging.getLogger(__name__)

REVOKE_REASON = "Attendance revoked"


def create_shabbaton(
    repos: Repositories,
    title: str,
    date: datetime,
    meals: Optional[int] = None,
    minutes: Optional[int] = None
) -> Shabbaton:
    """Create an event with its default credits (3 meals / 180 minutes unless given)."""
    if not title or not title.strip():
        raise ValidationError("Title is required")
    meals = settings.SHABBATON_DEFAULT_MEALS if meals is None else meals
    minutes = settings.SHABBATON_DEFAULT_MINUTES if minutes is None else minutes
    if meals < 0:
        raise ValidationError("Meal credits cannot be negative")
    if not MIN_SESSION_MINUTES <= minutes <= MAX_SESSION_MINUTES:
        raise ValidationError(
            f"Learning credit must be between {MIN_SESSION_MINUTES} and {MAX_SESSION_MINUTES} minutes"
        )

    try:
        shabbaton = repos.shabbatons.add(Shabbaton(
            title=title.strip(),
            date=date,
            default_meals=meals,
            default_minutes=minutes,
            attendance_count=0,
        ))
        repos.commit()
    except Exception:
        repos.rollback()
        raise
    logger.info("Created shabbaton %s '%s' on %s", shabbaton.id, shabbaton.title, date.date())
    return shabbaton


def list_shabbatons(repos: Repositories, upcoming_from: Optional[datetime] = None) -> List[Shabbaton]:
    shabbatons = repos.shabbatons.list_all()
    if upcoming_from is not None:
        shabbatons = [s for s in shabbatons if s.date >= upcoming_from]
    return shabbatons


def list_attendances(
    repos: Repositories,
    participant_id: Optional[str] = None,
    shabbaton_id: Optional[int] = None
) -> List[Attendance]:
    return repos.attendances.list(participant_id=participant_id, shabbaton_id=shabbaton_id)


def request_attendance(repos: Repositories, participant_id: str, shabbaton_id: int) -> Attendance:
    """Participant asks for credit for a Shabbaton.

    One attendance per participant and Shabbaton, whatever its status: a
    denied attendance cannot be requested again.
    """
    try:
        shabbaton = repos.shabbatons.get(shabbaton_id)
        if shabbaton is None:
            raise NotFoundError("Shabbaton not found")

        if repos.attendances.get_for_participant(participant_id, shabbaton_id) is not None:
            raise ValidationError("Attendance already requested for this Shabbaton")

        attendance = repos.attendances.add(Attendance(
            participant_id=participant_id,
            shabbaton_id=shabbaton_id,
            applied_year=shabbaton.date.year,
            applied_month=shabbaton.date.month,
            granted_meals=shabbaton.default_meals,
            granted_minutes=shabbaton.default_minutes,
            status=AttendanceStatus.PENDING,
        ))
        repos.commit()
    except Exception:
        repos.rollback()
        raise
    logger.info("Attendance %s requested by %s for shabbaton %s", attendance.id, participant_id, shabbaton_id)
    return attendance


def _refresh_attendance_count(repos: Repositories, shabbaton: Shabbaton) -> None:
    shabbaton.attendance_count = repos.attendances.count_confirmed(shabbaton.id)
    repos.db.flush()


def _get_attendance(repos: Repositories, attendance_id: int) -> Attendance:
    attendance = repos.attendances.get(attendance_id)
    if attendance is None:
        raise NotFoundError("Attendance not found")
    return attendance


def confirm_attendance(
    repos: Repositories,
    attendance_id: int,
    confirmed_by: str,
    clock: Clock = utc_now
) -> Attendance:
    """Confirm a pending attendance and materialize its grants.

    Already confirmed is a no-op. Denied is terminal.
    """
    try:
        attendance = _get_attendance(repos, attendance_id)
        if attendance.status == AttendanceStatus.CONFIRMED:
            return attendance
        if attendance.status == AttendanceStatus.DENIED:
            raise ValidationError("Denied attendance cannot be confirmed")

        shabbaton = repos.shabbatons.get(attendance.shabbaton_id)
        if shabbaton is None:
            raise NotFoundError("Shabbaton not found")

        attendance.status = AttendanceStatus.CONFIRMED
        attendance.marked_by = confirmed_by
        attendance.marked_at = clock()

        insert_learning_session(
            repos,
            participant_id=attendance.participant_id,
            started_at=shabbaton.date,
            minutes=attendance.granted_minutes,
            applied_year=attendance.applied_year,
            applied_month=attendance.applied_month,
            source=LearningSource.SHABBATON,
            created_by=confirmed_by,
            notes=f"Shabbaton attendance grant: {shabbaton.title}",
            shabbaton_id=shabbaton.id,
        )

        for i in range(attendance.granted_meals):
            insert_meal_log(
                repos,
                participant_id=attendance.participant_id,
                occurred_at=shabbaton.date,
                applied_year=attendance.applied_year,
                applied_month=attendance.applied_month,
                meal_type=MealType.SHABBATON,
                source=MealSource.ATTENDANCE_GRANT,
                created_by=confirmed_by,
                notes=f"Shabbaton meal grant {i + 1}: {shabbaton.title}",
                shabbaton_id=shabbaton.id,
            )

        recompute_month_log(
            repos, attendance.participant_id, attendance.applied_year, attendance.applied_month, clock
        )
        _refresh_attendance_count(repos, shabbaton)
        repos.commit()
    except Exception:
        repos.rollback()
        raise

    logger.info(
        "Attendance %s confirmed by %s: %d meal(s), %d minute(s) granted",
        attendance_id, confirmed_by, attendance.granted_meals, attendance.granted_minutes
    )
    return attendance


def revoke_attendance(
    repos: Repositories,
    attendance_id: int,
    revoked_by: str,
    clock: Clock = utc_now
) -> Attendance:
    """Move a confirmed attendance to Denied and soft-delete its grants.

    Anything other than Confirmed is left untouched.
    """
    try:
        attendance = _get_attendance(repos, attendance_id)
        if attendance.status != AttendanceStatus.CONFIRMED:
            return attendance

        now = clock()
        learning_grants = repos.learning_sessions.list_active_grants(attendance.participant_id, attendance.shabbaton_id)
        meal_grants = repos.meal_logs.list_active_grants(attendance.participant_id, attendance.shabbaton_id)
        for session in learning_grants:
            repos.learning_sessions.soft_delete(session, REVOKE_REASON, revoked_by, now)
        for meal in meal_grants:
            repos.meal_logs.soft_delete(meal, REVOKE_REASON, revoked_by, now)

        attendance.status = AttendanceStatus.DENIED
        attendance.marked_by = revoked_by
        attendance.marked_at = now
        repos.db.flush()

        recompute_month_log(
            repos, attendance.participant_id, attendance.applied_year, attendance.applied_month, clock
        )
        shabbaton = repos.shabbatons.get(attendance.shabbaton_id)
        if shabbaton is not None:
            _refresh_attendance_count(repos, shabbaton)
        repos.commit()
    except Exception:
        repos.rollback()
        raise

    logger.info(
        "Attendance %s revoked by %s: %d grant row(s) soft-deleted",
        attendance_id, revoked_by, len(learning_grants) + len(meal_grants)
    )
    return attendance


def deny_attendance(
    repos: Repositories,
    attendance_id: int,
    denied_by: str,
    clock: Clock = utc_now
) -> Attendance:
    """Deny an attendance.

    Pending becomes Denied directly; a confirmed attendance is revoked so its
    grants are removed; an already denied attendance is returned as is.
    """
    attendance = _get_attendance(repos, attendance_id)
    if attendance.status == AttendanceStatus.CONFIRMED:
        return revoke_attendance(repos, attendance_id, denied_by, clock)
    if attendance.status == AttendanceStatus.DENIED:
        return attendance

    try:
        attendance.status = AttendanceStatus.DENIED
        attendance.marked_by = denied_by
        attendance.marked_at = clock()
        repos.commit()
    except Exception:
        repos.rollback()
        raise
    logger.info("Attendance %s denied by %s", attendance_id, denied_by)
    return attendance
