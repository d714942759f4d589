#!/usr/bin/env python3
"""
Print the occurrence dates a recurrence pattern produces.

Usage:
    python scripts/preview_schedule.py daily --interval 3 --start 2026-04-01 --count 5
    python scripts/preview_schedule.py weekly --weekdays 1 3 --start 2026-04-05 --until 2026-04-30
    python scripts/preview_schedule.py monthly --month-day 31 --start 2026-01-01 --count 6
    python scripts/preview_schedule.py weekly --weekdays 6 --start 2026-04-04 --count 4 --skip 2026-04-11
"""
import argparse
import sys
from datetime import date

from lawncadence.core.config import settings
from lawncadence.core.log import configure_logging
from lawncadence.schemas.recurrence import (
    RecurrenceException,
    RecurrencePattern,
    RecurrencePatternDraft,
)
from lawncadence.services.recurrence import preview_schedule, validate_recurrence_pattern

parser = argparse.ArgumentParser(description="Recurring treatment preview")
parser.add_argument("frequency", choices=["daily", "weekly", "monthly"])
parser.add_argument("--interval", type=int, default=1)
parser.add_argument("--weekdays", type=int, nargs="+", help="0=Sunday .. 6=Saturday")
parser.add_argument("--month-day", type=int)
parser.add_argument("--start", type=date.fromisoformat, default=date.today())
parser.add_argument("--until", type=date.fromisoformat, help="Stop after this date")
parser.add_argument("--count", type=int, help="Stop after this many occurrences")
parser.add_argument("--skip", type=date.fromisoformat, nargs="*", default=[], help="Cancel these dates")


def main() -> int:
    args = parser.parse_args()
    configure_logging(settings.LOG_LEVEL)

    draft = RecurrencePatternDraft(
        frequency=args.frequency,
        interval=args.interval,
        weekdays=args.weekdays,
        month_day=args.month_day,
        end_type="never",
    )
    errors = validate_recurrence_pattern(draft)
    if errors:
        for error in errors:
            print(f"error: {error}", file=sys.stderr)
        return 2

    pattern = RecurrencePattern.model_validate(draft.model_dump(exclude_none=True))
    exceptions = [RecurrenceException(original_date=d, is_cancelled=True) for d in args.skip]
    dates = preview_schedule(
        pattern, exceptions, start_date=args.start, end_date=args.until, max_occurrences=args.count
    )
    for d in dates:
        print(f"{d.isoformat()}  {d.strftime('%A')}")
    print(f"\n{len(dates)} occurrence(s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
