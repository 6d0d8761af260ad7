from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import date, datetime, timezone
from app.models.activity import MealType, MealSource, LearningSource
from app.models.month_log import PaymentStatus


def to_naive_utc(value: datetime) -> datetime:
    """Store timestamps as naive UTC like the rest of the schema."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class MonthLogResponse(BaseModel):
    """Monthly compliance rollup."""
    participant_id: str
    year: int
    month: int
    meals_required: int
    minutes_required: int
    meals_earned: int
    minutes_earned: int
    is_complete: bool
    completed_at: Optional[datetime] = None
    computed_payment_date: date
    payment_status: PaymentStatus
    payment_marked_at: Optional[datetime] = None
    payment_marked_by: Optional[str] = None

    class Config:
        from_attributes = True


class DashboardResponse(BaseModel):
    """Current month, previous month and make-up eligibility."""
    current: MonthLogResponse
    previous: Optional[MonthLogResponse] = None
    can_make_up: bool


class MealLogCreate(BaseModel):
    """Self-reported meal."""
    occurred_at: datetime = Field(..., description="When the meal happened")
    type: MealType = Field(MealType.OTHER, description="UWS or Other")
    notes: Optional[str] = None
    apply_as_make_up: bool = Field(False, description="Credit to the previous, incomplete month")

    @field_validator("occurred_at")
    @classmethod
    def normalize_occurred_at(cls, value: datetime) -> datetime:
        return to_naive_utc(value)


class LearningSessionCreate(BaseModel):
    """Self-reported learning session."""
    started_at: datetime
    minutes: int = Field(60, ge=1, le=360, description="Session length in minutes (1-360)")
    source: LearningSource = Field(LearningSource.SELF, description="Self or Hevruta")
    notes: Optional[str] = None
    apply_as_make_up: bool = False

    @field_validator("started_at")
    @classmethod
    def normalize_started_at(cls, value: datetime) -> datetime:
        return to_naive_utc(value)


class ManualMealEntry(BaseModel):
    """Admin meal entry; counts toward the month it occurred in."""
    occurred_at: datetime
    type: MealType = MealType.OTHER
    notes: Optional[str] = None

    @field_validator("occurred_at")
    @classmethod
    def normalize_occurred_at(cls, value: datetime) -> datetime:
        return to_naive_utc(value)


class ManualLearningEntry(BaseModel):
    """Admin learning entry; counts toward the month it started in."""
    started_at: datetime
    minutes: int = Field(60, ge=1, le=360)
    notes: Optional[str] = None

    @field_validator("started_at")
    @classmethod
    def normalize_started_at(cls, value: datetime) -> datetime:
        return to_naive_utc(value)


class SoftDeleteRequest(BaseModel):
    reason: str = Field(..., min_length=1, description="Why the entry is being removed")


class MealLogResponse(BaseModel):
    id: int
    participant_id: str
    occurred_at: datetime
    applied_year: int
    applied_month: int
    type: MealType
    notes: Optional[str] = None
    source: MealSource
    shabbaton_id: Optional[int] = None
    created_by: str
    deleted: bool
    deleted_reason: Optional[str] = None

    class Config:
        from_attributes = True


class LearningSessionResponse(BaseModel):
    id: int
    participant_id: str
    started_at: datetime
    minutes: int
    applied_year: int
    applied_month: int
    source: LearningSource
    notes: Optional[str] = None
    shabbaton_id: Optional[int] = None
    created_by: str
    deleted: bool
    deleted_reason: Optional[str] = None

    class Config:
        from_attributes = True


class ActivityResponse(BaseModel):
    """Recent meals and learning sessions for one participant."""
    meals: List[MealLogResponse]
    learning_sessions: List[LearningSessionResponse]


class PaymentMark(BaseModel):
    paid: bool = Field(..., description="True marks Paid; False re-derives Due / Not due")
