from sqlalchemy import Column, String, ForeignKey, DateTime, Date, Boolean, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from app.db.base import Base


class UWSRsvp(Base):
    """Weekly UWS meal RSVP for one Saturday."""
    __tablename__ = "uws_rsvp"

    id = Column(Integer, primary_key=True, autoincrement=True)
    participant_id = Column(String(64), ForeignKey("participant.id"), nullable=False, index=True)
    week_date = Column(Date, nullable=False, index=True)  # the Saturday, midnight-normalised
    attending = Column(Boolean, nullable=False)
    rsvp_at = Column(DateTime, nullable=False)

    # Relationships
    participant = relationship("Participant", back_populates="rsvps")

    __table_args__ = (
        UniqueConstraint("participant_id", "week_date", name="uq_uws_rsvp_participant_week"),
    )
