"""
Recurrence engine.

Expands a RecurrencePattern into the calendar dates a treatment falls on, then
applies per-date exceptions (cancel or move one occurrence).

All functions are pure and synchronous. Generation is total: a pattern that
lacks its frequency-specific field yields no dates instead of raising. Call
validate_recurrence_pattern first when an explicit error is wanted.
"""
import calendar
import logging
from datetime import MAXYEAR, date, datetime, timedelta
from typing import Any, Iterable, Mapping, Optional

from lawncadence.schemas.recurrence import (
    RecurrenceException,
    RecurrencePattern,
    RecurrencePatternDraft,
)

logger = logging.getLogger(__name__)

# Ceiling applied when neither the pattern nor the caller bounds generation.
# Callers that need more occurrences must pass end_date or max_occurrences.
OCCURRENCE_SAFETY_LIMIT = 100


# ── Date helpers ──────────────────────────────────────────────────────────────


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def _weekday_index(d: date) -> int:
    """0=Sunday .. 6=Saturday."""
    return d.isoweekday() % 7


def _shift_month(year: int, month: int, months: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1


def _advance(cursor: date, step: timedelta) -> Optional[date]:
    """cursor + step, or None when that would pass date.max."""
    if date.max - cursor < step:
        return None
    return cursor + step


def _last_day(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def _month_slot(year: int, month: int, day: int) -> Optional[date]:
    """The given day in the given month, or None when the month is too short."""
    if day > calendar.monthrange(year, month)[1]:
        return None
    return date(year, month, day)


def _can_match(pattern: RecurrencePattern) -> bool:
    if not pattern.interval or pattern.interval < 1:
        return False
    if pattern.frequency == "daily":
        return True
    if pattern.frequency == "weekly":
        return any(0 <= day <= 6 for day in pattern.weekdays or ())
    if pattern.frequency == "monthly":
        return bool(pattern.month_day) and 1 <= pattern.month_day <= 31
    return False


# ── Generation ────────────────────────────────────────────────────────────────


def generate_occurrences(
    pattern: RecurrencePattern,
    start_date: date | datetime,
    end_date: Optional[date | datetime] = None,
    max_occurrences: Optional[int] = None,
) -> list[date]:
    """
    Return the ordered occurrence dates of `pattern` from `start_date` (inclusive).

    Generation stops on the first bound that applies, in this order:
    the pattern's occurrence count, the pattern's end date, the caller's
    end_date, the caller's max_occurrences, OCCURRENCE_SAFETY_LIMIT.

    Weekly patterns walk day by day and keep the days listed in `weekdays`;
    `interval` does not skip weeks. Monthly patterns visit `month_day` in
    each month and skip months too short to contain it (no clamping).

    Generation also stops at the end of the representable calendar
    (date.max), returning what was collected so far.
    """
    start = _as_date(start_date)
    window_end = _as_date(end_date) if end_date is not None else None

    if not _can_match(pattern):
        logger.warning(
            "generate_occurrences: %s pattern can never match (weekdays=%s, month_day=%s)",
            pattern.frequency, pattern.weekdays, pattern.month_day,
        )
        return []

    dates: list[date] = []

    def should_continue(cursor: date) -> bool:
        if pattern.end_type == "after_occurrences" and pattern.occurrences:
            return len(dates) < pattern.occurrences
        if pattern.end_type == "on_date" and pattern.end_date:
            return cursor <= pattern.end_date
        if window_end is not None:
            return cursor <= window_end
        if max_occurrences is not None:
            return len(dates) < max_occurrences
        return len(dates) < OCCURRENCE_SAFETY_LIMIT

    if pattern.frequency == "daily":
        cursor: Optional[date] = start
        step = timedelta(days=pattern.interval)
        while cursor is not None and should_continue(cursor):
            dates.append(cursor)
            cursor = _advance(cursor, step)

    elif pattern.frequency == "weekly":
        weekdays = set(pattern.weekdays)
        cursor = start
        while cursor is not None and should_continue(cursor):
            if _weekday_index(cursor) in weekdays:
                dates.append(cursor)
            cursor = _advance(cursor, timedelta(days=1))

    else:
        year, month = start.year, start.month
        if start.day > pattern.month_day:
            # This month's slot is already behind the start date
            year, month = _shift_month(year, month, 1)
        while year <= MAXYEAR:
            slot = _month_slot(year, month, pattern.month_day)
            if not should_continue(slot or _last_day(year, month)):
                break
            if slot is not None:
                dates.append(slot)
                year, month = _shift_month(year, month, pattern.interval)
            else:
                year, month = _shift_month(year, month, 1)

    logger.debug(
        "generate_occurrences: %s/%d from %s -> %d dates",
        pattern.frequency, pattern.interval, start, len(dates),
    )
    return dates


def apply_exceptions(
    dates: Iterable[date], exceptions: Iterable[RecurrenceException]
) -> list[date]:
    """
    Cancel or move individual occurrences.

    Matching is by calendar date. A moved date keeps its position in the
    sequence even when the new date sorts elsewhere. When several exceptions
    share an original date, the first one wins.
    """
    overrides: dict[date, RecurrenceException] = {}
    for exception in exceptions:
        overrides.setdefault(_as_date(exception.original_date), exception)

    result: list[date] = []
    for occurrence in dates:
        override = overrides.get(_as_date(occurrence))
        if override is None:
            result.append(occurrence)
        elif override.is_cancelled:
            continue
        else:
            result.append(override.new_date or occurrence)
    return result


def get_next_occurrence(
    pattern: RecurrencePattern, after: Optional[date | datetime] = None
) -> Optional[date]:
    """First occurrence on or after `after` (default: today), or None."""
    found = generate_occurrences(
        pattern,
        start_date=after if after is not None else date.today(),
        max_occurrences=1,
    )
    return found[0] if found else None


def preview_schedule(
    pattern: RecurrencePattern,
    exceptions: Iterable[RecurrenceException],
    start_date: date | datetime,
    end_date: Optional[date | datetime] = None,
    max_occurrences: Optional[int] = None,
) -> list[date]:
    """Generated occurrences with exceptions applied, as a calendar shows them."""
    dates = generate_occurrences(
        pattern, start_date, end_date=end_date, max_occurrences=max_occurrences
    )
    return apply_exceptions(dates, exceptions)


# ── Validation ────────────────────────────────────────────────────────────────


def validate_recurrence_pattern(
    pattern: RecurrencePatternDraft | RecurrencePattern | Mapping[str, Any],
) -> list[str]:
    """
    Return every problem with a (possibly partial) pattern; empty when valid.

    Checks accumulate rather than stopping at the first failure. The input is
    never modified.
    """
    if isinstance(pattern, Mapping):
        get = pattern.get
    else:
        def get(name: str) -> Any:
            return getattr(pattern, name, None)

    frequency = get("frequency")
    interval = get("interval")
    end_type = get("end_type")
    occurrences = get("occurrences")
    errors: list[str] = []

    if not frequency:
        errors.append("Frequency is required")

    if not interval or interval < 1:
        errors.append("Interval must be at least 1")

    if frequency == "weekly" and not get("weekdays"):
        errors.append("Weekly recurrence requires at least one weekday")

    if frequency == "monthly" and not get("month_day"):
        errors.append("Monthly recurrence requires a day of month")

    if end_type == "after_occurrences" and (not occurrences or occurrences < 1):
        errors.append("Number of occurrences must be at least 1")

    if end_type == "on_date" and not get("end_date"):
        errors.append("End date is required for on_date end type")

    return errors
