from sqlalchemy import Column, String, ForeignKey, DateTime, Integer, Enum as SQLEnum, UniqueConstraint, text
from sqlalchemy.orm import relationship
from app.db.base import Base
import enum


class AttendanceStatus(str, enum.Enum):
    """Attendance request status."""
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    DENIED = "Denied"


class Shabbaton(Base):
    """Program event whose confirmed attendance grants meals and minutes."""
    __tablename__ = "shabbaton"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    date = Column(DateTime, nullable=False)
    default_meals = Column(Integer, nullable=False, default=3)
    default_minutes = Column(Integer, nullable=False, default=180)
    attendance_count = Column(Integer, nullable=False, default=0)  # confirmed attendances
    created_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))

    # Relationships
    attendances = relationship("Attendance", back_populates="shabbaton")


class Attendance(Base):
    """A participant's attendance at a Shabbaton.

    Credits and applied month are copied from the Shabbaton at request time
    and never follow later edits to the event.
    """
    __tablename__ = "attendance"

    id = Column(Integer, primary_key=True, autoincrement=True)
    participant_id = Column(String(64), ForeignKey("participant.id"), nullable=False, index=True)
    shabbaton_id = Column(Integer, ForeignKey("shabbaton.id"), nullable=False, index=True)
    applied_year = Column(Integer, nullable=False)
    applied_month = Column(Integer, nullable=False)
    granted_meals = Column(Integer, nullable=False)
    granted_minutes = Column(Integer, nullable=False)
    status = Column(SQLEnum(AttendanceStatus, native_enum=False, values_callable=lambda obj: [e.value for e in obj]), default=AttendanceStatus.PENDING, nullable=False)
    marked_by = Column(String(64), nullable=True)
    marked_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))

    # Relationships
    shabbaton = relationship("Shabbaton", back_populates="attendances")

    __table_args__ = (
        UniqueConstraint("participant_id", "shabbaton_id", name="uq_attendance_participant_shabbaton"),
    )
