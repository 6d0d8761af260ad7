from sqlalchemy import Column, String, ForeignKey, DateTime, Boolean, Integer, Text, Enum as SQLEnum, Index, text, func
from app.db.base import Base
import enum


class MealType(str, enum.Enum):
    """Kind of meal."""
    UWS = "UWS"
    SHABBATON = "Shabbaton"
    OTHER = "Other"


class MealSource(str, enum.Enum):
    """Who recorded the meal."""
    SELF_REPORT = "Self report"
    ADMIN_ENTRY = "Admin entry"
    ATTENDANCE_GRANT = "Attendance grant"


class LearningSource(str, enum.Enum):
    """Learning session origin."""
    SELF = "Self"
    HEVRUTA = "Hevruta"
    SHABBATON = "Shabbaton"
    ADMIN_ENTRY = "Admin entry"


class SoftDeleteMixin:
    """Audit-preserving delete: rows are flagged, never removed."""
    deleted = Column(Boolean, nullable=False, default=False)
    deleted_reason = Column(Text, nullable=True)
    deleted_by = Column(String(64), nullable=True)
    deleted_at = Column(DateTime, nullable=True)


class MealLog(SoftDeleteMixin, Base):
    """One meal credited toward the applied month."""
    __tablename__ = "meal_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    participant_id = Column(String(64), ForeignKey("participant.id"), nullable=False, index=True)
    occurred_at = Column(DateTime, nullable=False)
    applied_year = Column(Integer, nullable=False)
    applied_month = Column(Integer, nullable=False)
    type = Column(SQLEnum(MealType, native_enum=False, values_callable=lambda obj: [e.value for e in obj]), nullable=False)
    notes = Column(Text, nullable=True)
    source = Column(SQLEnum(MealSource, native_enum=False, values_callable=lambda obj: [e.value for e in obj]), nullable=False)
    shabbaton_id = Column(Integer, ForeignKey("shabbaton.id"), nullable=True, index=True)
    created_by = Column(String(64), nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(DateTime, nullable=True, onupdate=func.now())

    __table_args__ = (
        Index("ix_meal_log_applied", "participant_id", "applied_year", "applied_month"),
    )


class LearningSession(SoftDeleteMixin, Base):
    """Learning minutes credited toward the applied month."""
    __tablename__ = "learning_session"

    id = Column(Integer, primary_key=True, autoincrement=True)
    participant_id = Column(String(64), ForeignKey("participant.id"), nullable=False, index=True)
    started_at = Column(DateTime, nullable=False)
    minutes = Column(Integer, nullable=False)  # 1-360 per session
    notes = Column(Text, nullable=True)
    applied_year = Column(Integer, nullable=False)
    applied_month = Column(Integer, nullable=False)
    source = Column(SQLEnum(LearningSource, native_enum=False, values_callable=lambda obj: [e.value for e in obj]), nullable=False)
    shabbaton_id = Column(Integer, ForeignKey("shabbaton.id"), nullable=True, index=True)
    created_by = Column(String(64), nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(DateTime, nullable=True, onupdate=func.now())

    __table_args__ = (
        Index("ix_learning_session_applied", "participant_id", "applied_year", "applied_month"),
    )
