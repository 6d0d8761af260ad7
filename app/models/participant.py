from sqlalchemy import Column, String, Text, DateTime, Enum as SQLEnum, text
from sqlalchemy.orm import relationship
from app.db.base import Base
import enum


class ParticipantRole(str, enum.Enum):
    """Participant role claim."""
    PARTICIPANT = "participant"
    ADMIN = "admin"


class ParticipantStatus(str, enum.Enum):
    """Participant account status."""
    ACTIVE = "active"
    DISABLED = "disabled"


class Participant(Base):
    """Program participant; the id is the opaque subject issued by the auth provider."""
    __tablename__ = "participant"

    id = Column(String(64), primary_key=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    role = Column(SQLEnum(ParticipantRole, native_enum=False, values_callable=lambda obj: [e.value for e in obj]), default=ParticipantRole.PARTICIPANT, nullable=False)
    preferred_name = Column(String(100), nullable=False, default="")
    status = Column(SQLEnum(ParticipantStatus, native_enum=False, values_callable=lambda obj: [e.value for e in obj]), default=ParticipantStatus.ACTIVE, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))

    # Relationships
    month_logs = relationship("MonthLog", back_populates="participant")
    rsvps = relationship("UWSRsvp", back_populates="participant")

    @property
    def is_admin(self) -> bool:
        return self.role == ParticipantRole.ADMIN
