from datetime import date
from sqlalchemy.orm import Session, joinedload
from app.models.rsvp import UWSRsvp
from typing import List, Optional


class RsvpRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, participant_id: str, week_date: date) -> Optional[UWSRsvp]:
        return self.db.query(UWSRsvp).filter(
            UWSRsvp.participant_id == participant_id,
            UWSRsvp.week_date == week_date
        ).first()

    def get_by_id(self, rsvp_id: int) -> Optional[UWSRsvp]:
        return self.db.query(UWSRsvp).filter(UWSRsvp.id == rsvp_id).first()

    def add(self, rsvp: UWSRsvp) -> UWSRsvp:
        self.db.add(rsvp)
        self.db.flush()
        return rsvp

    def delete(self, rsvp: UWSRsvp) -> None:
        self.db.delete(rsvp)
        self.db.flush()

    def list(self, week_date: Optional[date] = None) -> List[UWSRsvp]:
        """RSVPs newest first, with the participant loaded for display."""
        query = self.db.query(UWSRsvp).options(joinedload(UWSRsvp.participant))
        if week_date:
            query = query.filter(UWSRsvp.week_date == week_date)
        return query.order_by(UWSRsvp.rsvp_at.desc(), UWSRsvp.id.desc()).all()
