"""Time helper tests."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta

import pytest
from conftest import BOGOTA

from app.utils.errors import ValidationError
from app.utils.time import (
    current_saturday,
    is_saturday,
    recent_saturdays,
    saturday_of_week,
    to_local_date,
    week_start_sunday,
    weeks_between,
)


def test_to_local_date_converts_aware_datetimes() -> None:
    """Sunday 02:00 UTC is still Saturday evening in Bogota."""
    moment = datetime(2024, 3, 3, 2, 0, tzinfo=UTC)
    assert to_local_date(moment, BOGOTA) == date(2024, 3, 2)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2024-03-02", date(2024, 3, 2)),
        ("2024-03-02T23:30:00", date(2024, 3, 2)),
        ("2024-03-03T01:00:00Z", date(2024, 3, 2)),
        (" 2024-03-02T10:00:00-05:00 ", date(2024, 3, 2)),
        (date(2024, 3, 2), date(2024, 3, 2)),
        (datetime(2024, 3, 2, 8, 0), date(2024, 3, 2)),
    ],
)
def test_to_local_date_accepts_date_like_values(value, expected: date) -> None:
    """Strings, dates and naive datetimes resolve to the local calendar day."""
    assert to_local_date(value, BOGOTA) == expected


@pytest.mark.parametrize("value", [None, "", "   ", "not-a-date", "2024-02-30", 20240302, True])
def test_to_local_date_rejects_invalid_values(value) -> None:
    """Missing or malformed dates fail fast."""
    with pytest.raises(ValidationError):
        to_local_date(value, BOGOTA)


def test_week_start_is_sunday() -> None:
    """Weeks open on Sunday, so Saturday closes them."""
    assert week_start_sunday(date(2024, 3, 2)) == date(2024, 2, 25)
    assert week_start_sunday(date(2024, 3, 3)) == date(2024, 3, 3)
    assert week_start_sunday(date(2024, 3, 6)) == date(2024, 3, 3)


def test_saturday_of_week_is_local_midnight() -> None:
    """Normalized Saturdays sit at 00:00 in the reference timezone."""
    saturday = saturday_of_week(date(2024, 3, 5), BOGOTA)
    assert saturday == datetime(2024, 3, 9, tzinfo=BOGOTA)
    assert saturday.utcoffset() == timedelta(hours=-5)
    assert is_saturday(saturday.date())


def test_weeks_between_rounds_to_whole_weeks() -> None:
    """Gaps are measured in whole weeks."""
    first = datetime(2024, 3, 2, tzinfo=BOGOTA)
    assert weeks_between(first + timedelta(weeks=2), first) == 2
    assert weeks_between(first, first) == 0
    assert weeks_between(first - timedelta(weeks=1), first) == -1


def test_current_saturday_and_recent_timeline() -> None:
    """The timeline ends on this week's Saturday, oldest first."""
    now = datetime(2024, 5, 1, 15, 0, tzinfo=UTC)
    assert current_saturday(BOGOTA, now) == datetime(2024, 5, 4, tzinfo=BOGOTA)

    saturdays = recent_saturdays(BOGOTA, 3, now)
    assert [s.date() for s in saturdays] == [
        date(2024, 4, 20),
        date(2024, 4, 27),
        date(2024, 5, 4),
    ]
