"""Time utility helpers.

Weeks run Sunday through Saturday. Every weekday decision is made in an
explicit reference timezone that callers pass in.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta, tzinfo

from app.utils.errors import ValidationError

SATURDAY = 5
WEEK = timedelta(days=7)

DateLike = datetime | date | str


def now_utc() -> datetime:
    """Return current timezone-aware UTC datetime."""
    return datetime.now(tz=UTC)


def to_local_date(value: DateLike | None, tz: tzinfo) -> date:
    """Return the calendar date of ``value`` as seen in ``tz``.

    Aware datetimes are converted to ``tz``. Naive datetimes and plain dates
    are taken to already be local to ``tz``. Strings are parsed as ISO 8601;
    a date-only string is a calendar date, not UTC midnight.

    Raises:
        ValidationError: the value is missing or is not a date.
    """
    if value is None:
        raise ValidationError("Attendance date is required")

    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValidationError("Attendance date is required")
        try:
            value = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError as exc:
            raise ValidationError(f"Invalid attendance date: {text!r}") from exc

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(tz).date()
    if isinstance(value, date):
        return value

    raise ValidationError(f"Unsupported attendance date type: {type(value).__name__}")


def local_midnight(day: date, tz: tzinfo) -> datetime:
    """Return 00:00 of ``day`` in ``tz``."""
    return datetime.combine(day, time.min, tzinfo=tz)


def is_saturday(day: date) -> bool:
    """Return True when ``day`` is a Saturday."""
    return day.weekday() == SATURDAY


def week_start_sunday(day: date) -> date:
    """Return the Sunday that opens the week containing ``day``."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def saturday_of_week(day: date, tz: tzinfo) -> datetime:
    """Return Saturday 00:00 (in ``tz``) of the week containing ``day``."""
    return local_midnight(week_start_sunday(day) + timedelta(days=6), tz)


def current_saturday(tz: tzinfo, now: datetime | None = None) -> datetime:
    """Return Saturday 00:00 of the current week in ``tz``."""
    moment = now or now_utc()
    return saturday_of_week(to_local_date(moment, tz), tz)


def weeks_between(later: datetime, earlier: datetime) -> int:
    """Whole weeks from ``earlier`` to ``later``, rounded to the nearest week."""
    return round((later - earlier) / WEEK)


def recent_saturdays(tz: tzinfo, count: int, now: datetime | None = None) -> list[datetime]:
    """Return the last ``count`` Saturdays up to this week's, oldest first."""
    latest = current_saturday(tz, now)
    return [
        local_midnight(latest.date() - timedelta(weeks=offset), tz)
        for offset in range(count - 1, -1, -1)
    ]


def as_aware(value: datetime | str | None, tz: tzinfo) -> datetime | None:
    """Coerce a stored timestamp into an aware datetime in ``tz``."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=tz)
    return value.astimezone(tz)
