"""Hours and value derivation for time entries.

Clock times are ``HH:MM`` strings on a 24-hour clock. Hours are exact
``Decimal`` values (minutes / 60); rounding to two places happens only in
:func:`compute_totals`, which produces the figures persisted on an entry.
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from .errors import InvalidTimeError, ValidationError
from .models import EntryTotals

CLOCK_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")
CENTS = Decimal("0.01")
MINUTES_PER_HOUR = Decimal(60)


def parse_clock(value: str) -> int:
    """Return minutes since midnight for an ``HH:MM`` string."""
    if not isinstance(value, str):
        raise InvalidTimeError(value)
    match = CLOCK_PATTERN.match(value.strip())
    if not match:
        raise InvalidTimeError(value)
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise InvalidTimeError(value)
    return hours * 60 + minutes


def format_clock(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def work_minutes(
    start: str,
    end: str,
    break_start: Optional[str] = None,
    break_end: Optional[str] = None,
) -> int:
    start_min = parse_clock(start)
    end_min = parse_clock(end)
    if end_min < start_min:
        raise ValidationError(f"End time {end} is earlier than start time {start}")

    total = end_min - start_min
    if break_start is None and break_end is None:
        return total
    if break_start is None or break_end is None:
        raise ValidationError("Break requires both a start and an end time")

    pause_start = parse_clock(break_start)
    pause_end = parse_clock(break_end)
    if pause_end <= pause_start:
        raise ValidationError(f"Break end {break_end} must be later than break start {break_start}")
    if pause_start < start_min or pause_end > end_min:
        raise ValidationError("Break must fall within the working interval")
    return total - (pause_end - pause_start)


def calculate_hours(
    start: str,
    end: str,
    break_start: Optional[str] = None,
    break_end: Optional[str] = None,
) -> Decimal:
    return Decimal(work_minutes(start, end, break_start, break_end)) / MINUTES_PER_HOUR


def calculate_value(hours: Decimal, rate: Decimal) -> Decimal:
    rate = Decimal(rate)
    if rate < 0:
        raise ValidationError("Hourly rate must not be negative")
    return Decimal(hours) * rate


def money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def quantize_hours(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_totals(
    start: str,
    end: str,
    break_start: Optional[str],
    break_end: Optional[str],
    rate: Decimal,
) -> EntryTotals:
    hours = calculate_hours(start, end, break_start, break_end)
    value = calculate_value(hours, rate)
    return EntryTotals(hours=quantize_hours(hours), value=money(value))
