from fastapi import APIRouter, HTTPException, status

from lawncadence.schemas.recurrence import (
    NextOccurrenceRead,
    NextOccurrenceRequest,
    OccurrencePreviewRead,
    OccurrencePreviewRequest,
    PatternValidationRead,
    RecurrencePattern,
    RecurrencePatternDraft,
)
from lawncadence.services.recurrence import (
    get_next_occurrence,
    preview_schedule,
    validate_recurrence_pattern,
)

router = APIRouter(prefix="/recurrence", tags=["recurrence"])


# ── Helpers ────────────────────────────────────────────────────────────────────


def _require_valid(pattern: RecurrencePattern) -> None:
    errors = validate_recurrence_pattern(pattern)
    if errors:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid recurrence pattern: {', '.join(errors)}",
        )


# ── Endpoints ──────────────────────────────────────────────────────────────────


@router.post("/validate", response_model=PatternValidationRead)
async def validate_pattern(data: RecurrencePatternDraft):
    errors = validate_recurrence_pattern(data)
    return PatternValidationRead(valid=not errors, errors=errors)


@router.post("/occurrences", response_model=OccurrencePreviewRead)
async def preview_occurrences(data: OccurrencePreviewRequest):
    _require_valid(data.pattern)
    dates = preview_schedule(
        data.pattern,
        data.exceptions,
        start_date=data.start_date,
        end_date=data.end_date,
        max_occurrences=data.max_occurrences,
    )
    return OccurrencePreviewRead(dates=dates, count=len(dates))


@router.post("/next", response_model=NextOccurrenceRead)
async def next_occurrence(data: NextOccurrenceRequest):
    _require_valid(data.pattern)
    return NextOccurrenceRead(next_date=get_next_occurrence(data.pattern, data.after))
