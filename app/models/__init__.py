from app.db.base import Base

# Import all models so Alembic can detect them
from app.models.participant import Participant, ParticipantRole, ParticipantStatus
from app.models.month_log import MonthLog, PaymentStatus
from app.models.activity import (
    MealLog,
    MealType,
    MealSource,
    LearningSession,
    LearningSource,
)
from app.models.shabbaton import Shabbaton, Attendance, AttendanceStatus
from app.models.rsvp import UWSRsvp

__all__ = [
    "Base",
    "Participant",
    "ParticipantRole",
    "ParticipantStatus",
    "MonthLog",
    "PaymentStatus",
    "MealLog",
    "MealType",
    "MealSource",
    "LearningSession",
    "LearningSource",
    "Shabbaton",
    "Attendance",
    "AttendanceStatus",
    "UWSRsvp",
]
