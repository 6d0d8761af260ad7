from datetime import datetime
from sqlalchemy.orm import Session
from app.models.activity import MealLog, MealSource, LearningSession, LearningSource
from typing import List, Optional


class _SoftDeleteRepository:
    """Append-insert and soft-delete for one activity table."""

    model = None

    def __init__(self, db: Session):
        self.db = db

    def add(self, row):
        self.db.add(row)
        self.db.flush()
        return row

    def get(self, row_id: int):
        return self.db.query(self.model).filter(self.model.id == row_id).first()

    def soft_delete(self, row, reason: str, deleted_by: str, deleted_at: datetime):
        row.deleted = True
        row.deleted_reason = reason
        row.deleted_by = deleted_by
        row.deleted_at = deleted_at
        self.db.flush()
        return row

    def list_active_for_month(self, participant_id: str, year: int, month: int) -> List:
        return self.db.query(self.model).filter(
            self.model.participant_id == participant_id,
            self.model.applied_year == year,
            self.model.applied_month == month,
            self.model.deleted.is_(False)
        ).all()


class MealLogRepository(_SoftDeleteRepository):
    model = MealLog

    def get(self, row_id: int) -> Optional[MealLog]:
        return super().get(row_id)

    def list_active(self, participant_id: Optional[str] = None) -> List[MealLog]:
        query = self.db.query(MealLog).filter(MealLog.deleted.is_(False))
        if participant_id:
            query = query.filter(MealLog.participant_id == participant_id)
        return query.order_by(MealLog.occurred_at.desc(), MealLog.id.desc()).all()

    def list_active_grants(self, participant_id: str, shabbaton_id: int) -> List[MealLog]:
        """Live meal rows materialized from an attendance confirmation."""
        return self.db.query(MealLog).filter(
            MealLog.participant_id == participant_id,
            MealLog.shabbaton_id == shabbaton_id,
            MealLog.source == MealSource.ATTENDANCE_GRANT,
            MealLog.deleted.is_(False)
        ).all()


class LearningSessionRepository(_SoftDeleteRepository):
    model = LearningSession

    def get(self, row_id: int) -> Optional[LearningSession]:
        return super().get(row_id)

    def list_active(self, participant_id: Optional[str] = None) -> List[LearningSession]:
        query = self.db.query(LearningSession).filter(LearningSession.deleted.is_(False))
        if participant_id:
            query = query.filter(LearningSession.participant_id == participant_id)
        return query.order_by(LearningSession.started_at.desc(), LearningSession.id.desc()).all()

    def list_active_grants(self, participant_id: str, shabbaton_id: int) -> List[LearningSession]:
        """Live learning rows materialized from an attendance confirmation."""
        return self.db.query(LearningSession).filter(
            LearningSession.participant_id == participant_id,
            LearningSession.shabbaton_id == shabbaton_id,
            LearningSession.source == LearningSource.SHABBATON,
            LearningSession.deleted.is_(False)
        ).all()
