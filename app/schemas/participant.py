from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from app.models.participant import ParticipantRole, ParticipantStatus


class ParticipantSync(BaseModel):
    """Profile details sent by the client after signing in with the auth provider."""
    preferred_name: Optional[str] = None


class ParticipantResponse(BaseModel):
    id: str
    email: str
    role: ParticipantRole
    preferred_name: str
    status: ParticipantStatus
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ParticipantStatusUpdate(BaseModel):
    status: ParticipantStatus


class ParticipantNotesUpdate(BaseModel):
    notes: Optional[str] = None
