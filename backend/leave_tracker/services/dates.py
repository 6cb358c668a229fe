"""Calendar arithmetic for service duration and working-day counts."""

from __future__ import annotations

from datetime import date

from leave_tracker.exceptions import InvalidRangeError

# date.weekday(): Monday is 0, Saturday is 5.
_FIRST_WEEKEND_DAY = 5


def months_between(from_date: date, to_date: date) -> int:
    """Return whole calendar months elapsed from ``from_date`` to ``to_date``.

    A partial final month is truncated: when the day-of-month of ``to_date``
    is earlier than that of ``from_date`` one more month is subtracted.
    Results before ``from_date`` clamp to 0.
    """
    months = (to_date.year - from_date.year) * 12 + (to_date.month - from_date.month)
    if to_date.day < from_date.day:
        months -= 1
    return max(0, months)


def is_working_day(day: date) -> bool:
    """Monday through Friday."""
    return day.weekday() < _FIRST_WEEKEND_DAY


def working_days_inclusive(start: date, end: date) -> int:
    """Count Monday-Friday days in the inclusive range ``[start, end]``.

    Raises:
        InvalidRangeError: if ``start`` is after ``end``.
    """
    if start > end:
        raise InvalidRangeError(f"start date {start.isoformat()} is after end date {end.isoformat()}")

    full_weeks, extra_days = divmod((end - start).days + 1, 7)
    # The leftover days start on the same weekday as ``start``.
    first_weekday = start.weekday()
    extra = sum(1 for offset in range(extra_days) if (first_weekday + offset) % 7 < _FIRST_WEEKEND_DAY)
    return full_weeks * 5 + extra


def year_end(on_date: date) -> date:
    """Return December 31 of ``on_date``'s year."""
    return date(on_date.year, 12, 31)


def is_casual_leave_expiring(today: date, alert_days: int = 30) -> bool:
    """True when unused CASUAL leave is about to lapse at the end of the year.

    Days left count today itself, so December 31 always has one day left.
    """
    return (year_end(today) - today).days + 1 <= alert_days
