from sqlalchemy.orm import Session
from app.models.shabbaton import Shabbaton, Attendance, AttendanceStatus
from typing import List, Optional


class ShabbatonRepository:
    def __init__(self, db: Session):
        self.db = db

    def add(self, shabbaton: Shabbaton) -> Shabbaton:
        self.db.add(shabbaton)
        self.db.flush()
        return shabbaton

    def get(self, shabbaton_id: int) -> Optional[Shabbaton]:
        return self.db.query(Shabbaton).filter(Shabbaton.id == shabbaton_id).first()

    def list_all(self) -> List[Shabbaton]:
        return self.db.query(Shabbaton).order_by(Shabbaton.date.asc()).all()


class AttendanceRepository:
    def __init__(self, db: Session):
        self.db = db

    def add(self, attendance: Attendance) -> Attendance:
        self.db.add(attendance)
        self.db.flush()
        return attendance

    def get(self, attendance_id: int) -> Optional[Attendance]:
        return self.db.query(Attendance).filter(Attendance.id == attendance_id).first()

    def get_for_participant(self, participant_id: str, shabbaton_id: int) -> Optional[Attendance]:
        return self.db.query(Attendance).filter(
            Attendance.participant_id == participant_id,
            Attendance.shabbaton_id == shabbaton_id
        ).first()

    def list(self, participant_id: Optional[str] = None, shabbaton_id: Optional[int] = None) -> List[Attendance]:
        query = self.db.query(Attendance)
        if participant_id:
            query = query.filter(Attendance.participant_id == participant_id)
        if shabbaton_id:
            query = query.filter(Attendance.shabbaton_id == shabbaton_id)
        return query.order_by(Attendance.created_at.asc(), Attendance.id.asc()).all()

    def count_confirmed(self, shabbaton_id: int) -> int:
        return self.db.query(Attendance).filter(
            Attendance.shabbaton_id == shabbaton_id,
            Attendance.status == AttendanceStatus.CONFIRMED
        ).count()
