from sqlalchemy import Column, String, ForeignKey, DateTime, Date, Boolean, Integer, Enum as SQLEnum, UniqueConstraint, text
from sqlalchemy.orm import relationship
from app.db.base import Base
import enum


class PaymentStatus(str, enum.Enum):
    """Stipend payment state for a month."""
    NOT_DUE = "Not due"
    DUE = "Due"
    PAID = "Paid"


class MonthLog(Base):
    """Per-participant, per-month compliance rollup.

    Earned and completion fields are derived from the activity rows by the
    recomputation engine; payment fields change through the payment rule.
    """
    __tablename__ = "month_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    participant_id = Column(String(64), ForeignKey("participant.id"), nullable=False, index=True)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)  # 1-12
    meals_required = Column(Integer, nullable=False, default=4)
    minutes_required = Column(Integer, nullable=False, default=720)
    meals_earned = Column(Integer, nullable=False, default=0)
    minutes_earned = Column(Integer, nullable=False, default=0)
    is_complete = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime, nullable=True)
    computed_payment_date = Column(Date, nullable=False)  # first day of month + 2
    payment_status = Column(SQLEnum(PaymentStatus, native_enum=False, values_callable=lambda obj: [e.value for e in obj]), default=PaymentStatus.NOT_DUE, nullable=False)
    payment_marked_at = Column(DateTime, nullable=True)
    payment_marked_by = Column(String(64), nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))

    # Relationships
    participant = relationship("Participant", back_populates="month_logs")

    # One rollup per participant and month
    __table_args__ = (
        UniqueConstraint("participant_id", "year", "month", name="uq_month_log_participant_month"),
    )
