from sqlalchemy.orm import Session
from app.models.month_log import MonthLog, PaymentStatus
from typing import List, Optional


class MonthLogRepository:
    """Keyed access to the (participant, year, month) rollup rows."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, participant_id: str, year: int, month: int) -> Optional[MonthLog]:
        return self.db.query(MonthLog).filter(
            MonthLog.participant_id == participant_id,
            MonthLog.year == year,
            MonthLog.month == month
        ).first()

    def get_for_update(self, participant_id: str, year: int, month: int) -> Optional[MonthLog]:
        """Fetch the row under a row lock for the rest of the transaction."""
        return self.db.query(MonthLog).filter(
            MonthLog.participant_id == participant_id,
            MonthLog.year == year,
            MonthLog.month == month
        ).with_for_update().first()

    def add(self, month_log: MonthLog) -> MonthLog:
        self.db.add(month_log)
        self.db.flush()
        return month_log

    def list_for_participant(self, participant_id: str) -> List[MonthLog]:
        return self.db.query(MonthLog).filter(
            MonthLog.participant_id == participant_id
        ).order_by(MonthLog.year.desc(), MonthLog.month.desc()).all()

    def list_for_month(self, year: int, month: int) -> List[MonthLog]:
        return self.db.query(MonthLog).filter(
            MonthLog.year == year,
            MonthLog.month == month
        ).order_by(MonthLog.participant_id).all()

    def list_all(self) -> List[MonthLog]:
        return self.db.query(MonthLog).order_by(
            MonthLog.year.desc(), MonthLog.month.desc()
        ).all()

    def list_payment_rows(self) -> List[MonthLog]:
        """Rows whose payment is Due or already Paid."""
        return self.db.query(MonthLog).filter(
            MonthLog.payment_status.in_([PaymentStatus.DUE, PaymentStatus.PAID])
        ).order_by(MonthLog.year.desc(), MonthLog.month.desc()).all()
