from dataclasses import dataclass
from fastapi import Depends
from sqlalchemy.orm import Session
from app.db.base import get_db
from app.repositories.participant import ParticipantRepository
from app.repositories.month_log import MonthLogRepository
from app.repositories.activity import MealLogRepository, LearningSessionRepository
from app.repositories.shabbaton import ShabbatonRepository, AttendanceRepository
from app.repositories.rsvp import RsvpRepository


@dataclass
class Repositories:
    """Per-request bundle of entity repositories sharing one session.

    Repositories only flush; the service that owns the operation commits or
    rolls back through ``commit``/``rollback``.
    """
    db: Session
    participants: ParticipantRepository
    month_logs: MonthLogRepository
    meal_logs: MealLogRepository
    learning_sessions: LearningSessionRepository
    shabbatons: ShabbatonRepository
    attendances: AttendanceRepository
    rsvps: RsvpRepository

    @classmethod
    def from_session(cls, db: Session) -> "Repositories":
        return cls(
            db=db,
            participants=ParticipantRepository(db),
            month_logs=MonthLogRepository(db),
            meal_logs=MealLogRepository(db),
            learning_sessions=LearningSessionRepository(db),
            shabbatons=ShabbatonRepository(db),
            attendances=AttendanceRepository(db),
            rsvps=RsvpRepository(db),
        )

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()


def get_repositories(db: Session = Depends(get_db)) -> Repositories:
    """FastAPI dependency building the repository bundle for a request."""
    return Repositories.from_session(db)


__all__ = [
    "Repositories",
    "get_repositories",
    "ParticipantRepository",
    "MonthLogRepository",
    "MealLogRepository",
    "LearningSessionRepository",
    "ShabbatonRepository",
    "AttendanceRepository",
    "RsvpRepository",
]
