from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from app.core.clock import Clock, get_clock
from app.core.config import settings
from app.core.dependencies import get_current_active_user
from app.models.activity import LearningSource, MealSource, MealType
from app.models.participant import Participant
from app.repositories import Repositories, get_repositories
from app.schemas.ledger import (
    ActivityResponse,
    DashboardResponse,
    LearningSessionCreate,
    LearningSessionResponse,
    MealLogCreate,
    MealLogResponse,
    MonthLogResponse,
)
from app.schemas.shabbaton import (
    AttendanceRequest,
    AttendanceResponse,
    RsvpResponse,
    RsvpSet,
    ShabbatonResponse,
)
from app.services import attendance as attendance_service
from app.services import ledger, rsvp as rsvp_service
from app.services.makeup import can_apply_make_up, resolve_applied_month
from app.utils.dates import get_previous_month, get_upcoming_saturday, to_program_time

router = APIRouter(prefix="/api/participant", tags=["participant"])

SELF_REPORT_MEAL_TYPES = (MealType.UWS, MealType.OTHER)
SELF_REPORT_LEARNING_SOURCES = (LearningSource.SELF, LearningSource.HEVRUTA)


def _upcoming_week(clock: Clock):
    """The UWS Saturday for today in the program timezone."""
    return get_upcoming_saturday(to_program_time(clock(), settings.PROGRAM_TIMEZONE).date())


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(
    current_user: Participant = Depends(get_current_active_user),
    repos: Repositories = Depends(get_repositories),
    clock: Clock = Depends(get_clock)
):
    """Current month progress, last month's state and whether make-up is open."""
    now = clock()
    current = ledger.ensure_month_log(repos, current_user.id, now.year, now.month)
    prev_year, prev_month = get_previous_month(now.year, now.month)
    previous = ledger.get_month_log(repos, current_user.id, prev_year, prev_month)
    return DashboardResponse(
        current=MonthLogResponse.model_validate(current),
        previous=MonthLogResponse.model_validate(previous) if previous else None,
        can_make_up=can_apply_make_up(repos, current_user.id, now.year, now.month, prev_year, prev_month),
    )


@router.get("/month-logs", response_model=List[MonthLogResponse])
def get_my_month_logs(
    current_user: Participant = Depends(get_current_active_user),
    repos: Repositories = Depends(get_repositories)
):
    """All of the participant's month logs, newest first."""
    return ledger.list_month_logs_for_participant(repos, current_user.id)


@router.post("/meals", response_model=MealLogResponse, status_code=201)
def log_meal(
    meal: MealLogCreate,
    current_user: Participant = Depends(get_current_active_user),
    repos: Repositories = Depends(get_repositories),
    clock: Clock = Depends(get_clock)
):
    """Self-report a meal, optionally as make-up for last month."""
    if meal.type not in SELF_REPORT_MEAL_TYPES:
        raise HTTPException(status_code=400, detail="Shabbaton meals are granted by attendance confirmation")

    applied_year, applied_month = resolve_applied_month(
        repos, current_user.id, meal.occurred_at, meal.apply_as_make_up, clock
    )
    return ledger.add_meal_log(
        repos,
        participant_id=current_user.id,
        occurred_at=meal.occurred_at,
        applied_year=applied_year,
        applied_month=applied_month,
        meal_type=meal.type,
        source=MealSource.SELF_REPORT,
        created_by=current_user.id,
        notes=meal.notes.strip() if meal.notes else None,
        clock=clock,
    )


@router.post("/learning-sessions", response_model=LearningSessionResponse, status_code=201)
def log_learning_session(
    session: LearningSessionCreate,
    current_user: Participant = Depends(get_current_active_user),
    repos: Repositories = Depends(get_repositories),
    clock: Clock = Depends(get_clock)
):
    """Self-report learning minutes, optionally as make-up for last month."""
    if session.source not in SELF_REPORT_LEARNING_SOURCES:
        raise HTTPException(status_code=400, detail="Learning source must be Self or Hevruta")

    applied_year, applied_month = resolve_applied_month(
        repos, current_user.id, session.started_at, session.apply_as_make_up, clock
    )
    return ledger.add_learning_session(
        repos,
        participant_id=current_user.id,
        started_at=session.started_at,
        minutes=session.minutes,
        applied_year=applied_year,
        applied_month=applied_month,
        source=session.source,
        created_by=current_user.id,
        notes=session.notes.strip() if session.notes else None,
        clock=clock,
    )


@router.get("/activity", response_model=ActivityResponse)
def get_recent_activity(
    limit: int = 5,
    current_user: Participant = Depends(get_current_active_user),
    repos: Repositories = Depends(get_repositories)
):
    """Most recent meals and learning sessions."""
    return ActivityResponse(
        meals=[MealLogResponse.model_validate(m) for m in ledger.list_meal_logs(repos, current_user.id)[:limit]],
        learning_sessions=[
            LearningSessionResponse.model_validate(s)
            for s in ledger.list_learning_sessions(repos, current_user.id)[:limit]
        ],
    )


@router.get("/shabbatons", response_model=List[ShabbatonResponse])
def get_upcoming_shabbatons(
    current_user: Participant = Depends(get_current_active_user),
    repos: Repositories = Depends(get_repositories),
    clock: Clock = Depends(get_clock)
):
    """Shabbatons from today onward."""
    today = clock().replace(hour=0, minute=0, second=0, microsecond=0)
    return attendance_service.list_shabbatons(repos, upcoming_from=today)


@router.get("/attendances", response_model=List[AttendanceResponse])
def get_my_attendances(
    current_user: Participant = Depends(get_current_active_user),
    repos: Repositories = Depends(get_repositories)
):
    return attendance_service.list_attendances(repos, participant_id=current_user.id)


@router.post("/attendances", response_model=AttendanceResponse, status_code=201)
def request_attendance(
    request: AttendanceRequest,
    current_user: Participant = Depends(get_current_active_user),
    repos: Repositories = Depends(get_repositories)
):
    """Ask for Shabbaton credit; an admin confirms it later."""
    return attendance_service.request_attendance(repos, current_user.id, request.shabbaton_id)


@router.get("/rsvp", response_model=Optional[RsvpResponse])
def get_my_rsvp(
    week_date: Optional[date] = None,
    current_user: Participant = Depends(get_current_active_user),
    repos: Repositories = Depends(get_repositories),
    clock: Clock = Depends(get_clock)
):
    """RSVP for the given Saturday, defaulting to the upcoming one."""
    week = week_date or _upcoming_week(clock)
    rsvp = rsvp_service.get_rsvp(repos, current_user.id, week)
    return RsvpResponse.from_rsvp(rsvp) if rsvp else None


@router.put("/rsvp", response_model=RsvpResponse)
def set_my_rsvp(
    rsvp_data: RsvpSet,
    current_user: Participant = Depends(get_current_active_user),
    repos: Repositories = Depends(get_repositories),
    clock: Clock = Depends(get_clock)
):
    """Set attendance intent for the upcoming UWS Saturday."""
    week = rsvp_data.week_date or _upcoming_week(clock)
    rsvp = rsvp_service.set_rsvp(
        repos, current_user.id, week, rsvp_data.attending, clock=clock, enforce_window=True
    )
    return RsvpResponse.from_rsvp(rsvp)
