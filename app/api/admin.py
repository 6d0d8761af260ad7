from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Response

from app.core.audit import write_audit_log
from app.core.clock import Clock, get_clock
from app.core.dependencies import require_admin
from app.models.activity import LearningSource, MealSource
from app.models.participant import Participant
from app.repositories import Repositories, get_repositories
from app.schemas.ledger import (
    ActivityResponse,
    LearningSessionResponse,
    ManualLearningEntry,
    ManualMealEntry,
    MealLogResponse,
    MonthLogResponse,
    PaymentMark,
    SoftDeleteRequest,
)
from app.schemas.participant import (
    ParticipantNotesUpdate,
    ParticipantResponse,
    ParticipantStatusUpdate,
)
from app.schemas.shabbaton import (
    AttendanceResponse,
    RsvpCreate,
    RsvpResponse,
    ShabbatonCreate,
    ShabbatonResponse,
)
from app.services import attendance as attendance_service
from app.services import ledger, participant as participant_service, reports, rsvp as rsvp_service
from app.services.payment import mark_payment

router = APIRouter(prefix="/api/admin", tags=["admin"])


def _audit(admin: Participant, action: str, details: str = "") -> None:
    write_audit_log(
        actor_name=admin.preferred_name or admin.email,
        actor_role=admin.role.value,
        action=action,
        details=details,
    )


# ---------------------------------------------------------------------------
# Participants
# ---------------------------------------------------------------------------

@router.get("/participants", response_model=List[ParticipantResponse])
def get_participants(
    current_user: Participant = Depends(require_admin),
    repos: Repositories = Depends(get_repositories)
):
    """Active participants (Admin only)."""
    return participant_service.list_active_participants(repos)


@router.put("/participants/{participant_id}/status", response_model=ParticipantResponse)
def update_participant_status(
    participant_id: str,
    update: ParticipantStatusUpdate,
    current_user: Participant = Depends(require_admin),
    repos: Repositories = Depends(get_repositories)
):
    """Enable or disable a participant."""
    participant = participant_service.set_participant_status(repos, participant_id, update.status, current_user.id)
    _audit(current_user, "Participant status", f"participant={participant_id} status={update.status.value}")
    return participant


@router.put("/participants/{participant_id}/notes", response_model=ParticipantResponse)
def update_participant_notes(
    participant_id: str,
    update: ParticipantNotesUpdate,
    current_user: Participant = Depends(require_admin),
    repos: Repositories = Depends(get_repositories)
):
    return participant_service.update_participant_notes(repos, participant_id, update.notes)


@router.get("/participants/{participant_id}/activity", response_model=ActivityResponse)
def get_participant_activity(
    participant_id: str,
    current_user: Participant = Depends(require_admin),
    repos: Repositories = Depends(get_repositories)
):
    """All live meals and learning sessions of one participant."""
    participant_service.get_participant(repos, participant_id)
    return ActivityResponse(
        meals=[MealLogResponse.model_validate(m) for m in ledger.list_meal_logs(repos, participant_id)],
        learning_sessions=[
            LearningSessionResponse.model_validate(s)
            for s in ledger.list_learning_sessions(repos, participant_id)
        ],
    )


# ---------------------------------------------------------------------------
# Month logs and payments
# ---------------------------------------------------------------------------

@router.get("/month-logs", response_model=List[MonthLogResponse])
def get_month_logs(
    year: Optional[int] = None,
    month: Optional[int] = None,
    current_user: Participant = Depends(require_admin),
    repos: Repositories = Depends(get_repositories)
):
    """All month logs, or those of one month when year and month are given."""
    if year is not None and month is not None:
        return repos.month_logs.list_for_month(year, month)
    return ledger.list_all_month_logs(repos)


@router.post("/participants/{participant_id}/month-logs/{year}/{month}/recompute", response_model=MonthLogResponse)
def recompute_month(
    participant_id: str,
    year: int,
    month: int,
    current_user: Participant = Depends(require_admin),
    repos: Repositories = Depends(get_repositories),
    clock: Clock = Depends(get_clock)
):
    """Re-derive one month log from its activity rows."""
    return ledger.refresh_month_log(repos, participant_id, year, month, clock)


@router.put("/participants/{participant_id}/month-logs/{year}/{month}/payment", response_model=MonthLogResponse)
def mark_month_payment(
    participant_id: str,
    year: int,
    month: int,
    payment: PaymentMark,
    current_user: Participant = Depends(require_admin),
    repos: Repositories = Depends(get_repositories),
    clock: Clock = Depends(get_clock)
):
    """Mark a month paid, or clear the mark so the status is re-derived."""
    month_log = mark_payment(repos, participant_id, year, month, payment.paid, current_user.id, clock)
    _audit(
        current_user,
        "Mark payment",
        f"participant={participant_id} month={year:04d}-{month:02d} status={month_log.payment_status.value}",
    )
    return month_log


# ---------------------------------------------------------------------------
# Manual entries and soft deletes
# ---------------------------------------------------------------------------

@router.post("/participants/{participant_id}/meals", response_model=MealLogResponse, status_code=201)
def add_manual_meal(
    participant_id: str,
    entry: ManualMealEntry,
    current_user: Participant = Depends(require_admin),
    repos: Repositories = Depends(get_repositories),
    clock: Clock = Depends(get_clock)
):
    """Admin entry of a meal, credited to the month it occurred in."""
    meal_log = ledger.add_meal_log(
        repos,
        participant_id=participant_id,
        occurred_at=entry.occurred_at,
        applied_year=entry.occurred_at.year,
        applied_month=entry.occurred_at.month,
        meal_type=entry.type,
        source=MealSource.ADMIN_ENTRY,
        created_by=current_user.id,
        notes=entry.notes.strip() if entry.notes else None,
        clock=clock,
    )
    _audit(current_user, "Manual meal", f"participant={participant_id} meal={meal_log.id}")
    return meal_log


@router.post("/participants/{participant_id}/learning-sessions", response_model=LearningSessionResponse, status_code=201)
def add_manual_learning(
    participant_id: str,
    entry: ManualLearningEntry,
    current_user: Participant = Depends(require_admin),
    repos: Repositories = Depends(get_repositories),
    clock: Clock = Depends(get_clock)
):
    """Admin entry of learning minutes, credited to the month they started in."""
    session = ledger.add_learning_session(
        repos,
        participant_id=participant_id,
        started_at=entry.started_at,
        minutes=entry.minutes,
        applied_year=entry.started_at.year,
        applied_month=entry.started_at.month,
        source=LearningSource.ADMIN_ENTRY,
        created_by=current_user.id,
        notes=entry.notes.strip() if entry.notes else None,
        clock=clock,
    )
    _audit(current_user, "Manual learning", f"participant={participant_id} session={session.id}")
    return session


@router.post("/meals/{meal_log_id}/delete", response_model=MealLogResponse)
def delete_meal(
    meal_log_id: int,
    request: SoftDeleteRequest,
    current_user: Participant = Depends(require_admin),
    repos: Repositories = Depends(get_repositories),
    clock: Clock = Depends(get_clock)
):
    """Soft-delete a meal; the row stays for the audit trail."""
    meal_log = ledger.soft_delete_meal_log(repos, meal_log_id, request.reason, current_user.id, clock)
    _audit(current_user, "Delete meal", f"meal={meal_log_id} reason={request.reason}")
    return meal_log


@router.post("/learning-sessions/{session_id}/delete", response_model=LearningSessionResponse)
def delete_learning_session(
    session_id: int,
    request: SoftDeleteRequest,
    current_user: Participant = Depends(require_admin),
    repos: Repositories = Depends(get_repositories),
    clock: Clock = Depends(get_clock)
):
    """Soft-delete a learning session; the row stays for the audit trail."""
    session = ledger.soft_delete_learning_session(repos, session_id, request.reason, current_user.id, clock)
    _audit(current_user, "Delete learning", f"session={session_id} reason={request.reason}")
    return session


# ---------------------------------------------------------------------------
# Shabbatons and attendance
# ---------------------------------------------------------------------------

@router.get("/shabbatons", response_model=List[ShabbatonResponse])
def get_shabbatons(
    current_user: Participant = Depends(require_admin),
    repos: Repositories = Depends(get_repositories)
):
    return attendance_service.list_shabbatons(repos)


@router.post("/shabbatons", response_model=ShabbatonResponse, status_code=201)
def create_shabbaton(
    shabbaton_data: ShabbatonCreate,
    current_user: Participant = Depends(require_admin),
    repos: Repositories = Depends(get_repositories)
):
    shabbaton = attendance_service.create_shabbaton(
        repos,
        title=shabbaton_data.title,
        date=shabbaton_data.date,
        meals=shabbaton_data.meals,
        minutes=shabbaton_data.minutes,
    )
    _audit(current_user, "Create shabbaton", f"shabbaton={shabbaton.id} title={shabbaton.title}")
    return shabbaton


@router.get("/attendances", response_model=List[AttendanceResponse])
def get_attendances(
    shabbaton_id: Optional[int] = None,
    participant_id: Optional[str] = None,
    current_user: Participant = Depends(require_admin),
    repos: Repositories = Depends(get_repositories)
):
    return attendance_service.list_attendances(repos, participant_id=participant_id, shabbaton_id=shabbaton_id)


@router.post("/attendances/{attendance_id}/confirm", response_model=AttendanceResponse)
def confirm_attendance(
    attendance_id: int,
    current_user: Participant = Depends(require_admin),
    repos: Repositories = Depends(get_repositories),
    clock: Clock = Depends(get_clock)
):
    """Confirm attendance and grant its meals and minutes."""
    attendance = attendance_service.confirm_attendance(repos, attendance_id, current_user.id, clock)
    _audit(current_user, "Confirm attendance", f"attendance={attendance_id}")
    return attendance


@router.post("/attendances/{attendance_id}/deny", response_model=AttendanceResponse)
def deny_attendance(
    attendance_id: int,
    current_user: Participant = Depends(require_admin),
    repos: Repositories = Depends(get_repositories),
    clock: Clock = Depends(get_clock)
):
    """Deny a pending attendance."""
    attendance = attendance_service.deny_attendance(repos, attendance_id, current_user.id, clock)
    _audit(current_user, "Deny attendance", f"attendance={attendance_id}")
    return attendance


@router.post("/attendances/{attendance_id}/revoke", response_model=AttendanceResponse)
def revoke_attendance(
    attendance_id: int,
    current_user: Participant = Depends(require_admin),
    repos: Repositories = Depends(get_repositories),
    clock: Clock = Depends(get_clock)
):
    """Revoke a confirmed attendance and remove its grants."""
    attendance = attendance_service.revoke_attendance(repos, attendance_id, current_user.id, clock)
    _audit(current_user, "Revoke attendance", f"attendance={attendance_id}")
    return attendance


# ---------------------------------------------------------------------------
# UWS RSVPs
# ---------------------------------------------------------------------------

@router.get("/rsvps", response_model=List[RsvpResponse])
def get_rsvps(
    week_date: Optional[date] = None,
    current_user: Participant = Depends(require_admin),
    repos: Repositories = Depends(get_repositories)
):
    """RSVPs for one Saturday, or all of them when no week is given."""
    return [RsvpResponse.from_rsvp(r) for r in rsvp_service.list_rsvps(repos, week_date)]


@router.post("/rsvps", response_model=RsvpResponse, status_code=201)
def add_rsvp(
    rsvp_data: RsvpCreate,
    current_user: Participant = Depends(require_admin),
    repos: Repositories = Depends(get_repositories),
    clock: Clock = Depends(get_clock)
):
    rsvp = rsvp_service.add_rsvp(repos, rsvp_data.participant_id, rsvp_data.week_date, rsvp_data.attending, clock)
    return RsvpResponse.from_rsvp(rsvp)


@router.delete("/rsvps/{rsvp_id}", status_code=204)
def delete_rsvp(
    rsvp_id: int,
    current_user: Participant = Depends(require_admin),
    repos: Repositories = Depends(get_repositories)
):
    rsvp_service.delete_rsvp(repos, rsvp_id)
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------

@router.get("/reports/monthly-compliance")
def export_monthly_compliance(
    year: int,
    month: int,
    current_user: Participant = Depends(require_admin),
    repos: Repositories = Depends(get_repositories)
):
    """Monthly compliance CSV."""
    content = reports.monthly_compliance_csv(repos, year, month)
    filename = f"monthly-compliance-{year}-{month:02d}.csv"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/reports/payments")
def export_payments(
    current_user: Participant = Depends(require_admin),
    repos: Repositories = Depends(get_repositories),
    clock: Clock = Depends(get_clock)
):
    """Payment status CSV (Due and Paid months)."""
    content = reports.payment_report_csv(repos)
    filename = f"payment-report-{clock().date().isoformat()}.csv"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
