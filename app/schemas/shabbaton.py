from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import date, datetime
from app.models.shabbaton import AttendanceStatus
from app.schemas.ledger import to_naive_utc


class ShabbatonCreate(BaseModel):
    """Schema for creating a Shabbaton."""
    title: str = Field(..., min_length=1)
    date: datetime
    meals: int = Field(3, ge=0, description="Meals granted on confirmed attendance")
    minutes: int = Field(180, ge=1, le=360, description="Learning minutes granted on confirmed attendance")

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value: datetime) -> datetime:
        return to_naive_utc(value)


class ShabbatonResponse(BaseModel):
    id: int
    title: str
    date: datetime
    default_meals: int
    default_minutes: int
    attendance_count: int

    class Config:
        from_attributes = True


class AttendanceRequest(BaseModel):
    shabbaton_id: int


class AttendanceResponse(BaseModel):
    id: int
    participant_id: str
    shabbaton_id: int
    applied_year: int
    applied_month: int
    granted_meals: int
    granted_minutes: int
    status: AttendanceStatus
    marked_by: Optional[str] = None
    marked_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RsvpSet(BaseModel):
    """Participant RSVP for the upcoming Saturday (or a given one)."""
    attending: bool
    week_date: Optional[date] = None


class RsvpCreate(BaseModel):
    """Admin-entered RSVP."""
    participant_id: str
    week_date: date
    attending: bool


class RsvpResponse(BaseModel):
    id: int
    participant_id: str
    week_date: date
    attending: bool
    rsvp_at: datetime
    preferred_name: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_rsvp(cls, obj):
        """Flatten the joined participant onto the RSVP."""
        participant = obj.participant
        return cls(
            id=obj.id,
            participant_id=obj.participant_id,
            week_date=obj.week_date,
            attending=obj.attending,
            rsvp_at=obj.rsvp_at,
            preferred_name=participant.preferred_name if participant else None,
            email=participant.email if participant else None,
        )
