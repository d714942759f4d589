from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

Frequency = Literal["daily", "weekly", "monthly"]
EndType = Literal["never", "after_occurrences", "on_date"]


def _strip_time(value):
    """Reduce datetimes to their calendar date so matching never depends on time of day."""
    if isinstance(value, datetime):
        return value.date()
    return value


class RecurrencePatternDraft(BaseModel):
    """Pattern as submitted from a form. Nothing is required; see validate_recurrence_pattern."""

    frequency: Optional[Frequency] = None
    interval: Optional[int] = None
    weekdays: Optional[list[int]] = None
    month_day: Optional[int] = None
    end_type: Optional[EndType] = None
    occurrences: Optional[int] = None
    end_date: Optional[date] = None

    @field_validator("end_date", mode="before")
    @classmethod
    def end_date_as_date(cls, v):
        return _strip_time(v)


class RecurrencePattern(BaseModel):
    model_config = {"frozen": True, "from_attributes": True}

    frequency: Frequency
    interval: int = Field(ge=1)
    weekdays: Optional[list[int]] = None  # 0=Sunday .. 6=Saturday, weekly only
    month_day: Optional[int] = Field(None, ge=1, le=31)  # monthly only
    end_type: EndType = "never"
    occurrences: Optional[int] = Field(None, ge=1)  # after_occurrences only
    end_date: Optional[date] = None  # on_date only

    @field_validator("end_date", mode="before")
    @classmethod
    def end_date_as_date(cls, v):
        return _strip_time(v)

    @field_validator("weekdays")
    @classmethod
    def check_weekdays(cls, v: Optional[list[int]]) -> Optional[list[int]]:
        if v is None:
            return v
        if any(day < 0 or day > 6 for day in v):
            raise ValueError("Weekdays must be between 0 (Sunday) and 6 (Saturday)")
        return v


class RecurrencePatternRecord(RecurrencePattern):
    """A stored pattern. Ownership metadata plays no part in generation."""

    id: str
    schedule_id: str
    created_at: datetime
    updated_at: datetime


class RecurrenceException(BaseModel):
    model_config = {"frozen": True, "from_attributes": True}

    original_date: date
    new_date: Optional[date] = None
    is_cancelled: bool = False

    @field_validator("original_date", "new_date", mode="before")
    @classmethod
    def dates_as_date(cls, v):
        return _strip_time(v)


# ── API payloads ──────────────────────────────────────────────────────────────


class OccurrencePreviewRequest(BaseModel):
    pattern: RecurrencePattern
    start_date: date
    end_date: Optional[date] = None
    max_occurrences: Optional[int] = Field(None, ge=0)
    exceptions: list[RecurrenceException] = []


class OccurrencePreviewRead(BaseModel):
    dates: list[date]
    count: int


class NextOccurrenceRequest(BaseModel):
    pattern: RecurrencePattern
    after: Optional[date] = None


class NextOccurrenceRead(BaseModel):
    next_date: Optional[date] = None


class PatternValidationRead(BaseModel):
    valid: bool
    errors: list[str]
