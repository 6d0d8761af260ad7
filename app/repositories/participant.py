from sqlalchemy.orm import Session
from app.models.participant import Participant, ParticipantStatus
from typing import List, Optional


class ParticipantRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, participant_id: str) -> Optional[Participant]:
        return self.db.query(Participant).filter(Participant.id == participant_id).first()

    def add(self, participant: Participant) -> Participant:
        self.db.add(participant)
        self.db.flush()
        return participant

    def list_active(self) -> List[Participant]:
        return self.db.query(Participant).filter(
            Participant.status == ParticipantStatus.ACTIVE
        ).order_by(Participant.created_at.asc(), Participant.id.asc()).all()

    def list_all(self) -> List[Participant]:
        return self.db.query(Participant).order_by(Participant.created_at.asc(), Participant.id.asc()).all()
