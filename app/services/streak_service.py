"""Saturday attendance streak engine.

A streak counts consecutive weeks in which a member attended on Saturday.
One missed Saturday is tolerated; two in a row break the streak. Reaching
the milestone length grants a one-time reward per season.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, tzinfo
from typing import Any

from app.config import settings
from app.schemas.streak import (
    StreakOutcome,
    StreakRecord,
    StreakSummary,
    StreakUpdateResult,
    StreakWeek,
)
from app.services.streak_repository import StreakStore
from app.utils.errors import PersistenceError
from app.utils.locks import KeyedLock
from app.utils.time import (
    DateLike,
    current_saturday,
    is_saturday,
    now_utc,
    recent_saturdays,
    saturday_of_week,
    to_local_date,
    weeks_between,
)

logger = logging.getLogger(__name__)

MILESTONE_WEEKS = 4
RESET_AFTER_WEEKS = 3
UNCHANGED_OUTCOMES = frozenset({StreakOutcome.ALREADY_COUNTED, StreakOutcome.OUT_OF_ORDER})

_streak_locks = KeyedLock()


def advance_streak(
    record: StreakRecord,
    saturday: datetime,
    now: datetime,
    milestone_weeks: int = MILESTONE_WEEKS,
    reset_after_weeks: int = RESET_AFTER_WEEKS,
) -> StreakUpdateResult:
    """Apply one qualifying Saturday to ``record`` without touching storage.

    Returns the input record itself for the two no-op outcomes, otherwise an
    updated copy.
    """
    last = record.last_counted_saturday
    if last is None:
        outcome = StreakOutcome.STARTED
        current = 1
    elif last == saturday:
        return StreakUpdateResult(record=record, outcome=StreakOutcome.ALREADY_COUNTED)
    else:
        gap = weeks_between(saturday, last)
        if gap <= 0:
            return StreakUpdateResult(record=record, outcome=StreakOutcome.OUT_OF_ORDER)
        if gap >= reset_after_weeks:
            outcome = StreakOutcome.RESET
            current = 1
        else:
            outcome = StreakOutcome.CONTINUED
            current = record.current_streak_weeks + 1

    changes: dict = {
        "current_streak_weeks": current,
        "best_streak_weeks": max(record.best_streak_weeks, current),
        "last_counted_saturday": saturday,
    }
    award = current >= milestone_weeks and not record.milestone_awarded
    if award:
        changes["milestone_awarded"] = True
        changes["milestone_awarded_at"] = now

    return StreakUpdateResult(
        record=record.model_copy(update=changes),
        award_milestone=award,
        outcome=outcome,
    )


def effective_current_weeks(
    record: StreakRecord | None,
    this_saturday: datetime,
    reset_after_weeks: int = RESET_AFTER_WEEKS,
) -> int:
    """Stored streak length, or 0 once enough Saturdays have passed unattended."""
    if record is None:
        return 0
    last = record.last_counted_saturday
    if last is not None and weeks_between(this_saturday, last) >= reset_after_weeks:
        return 0
    return record.current_streak_weeks


class StreakService:
    """Keep per-season streak records in step with Saturday attendance."""

    def __init__(
        self,
        store: StreakStore,
        tz: tzinfo | None = None,
        clock: Callable[[], datetime] = now_utc,
        milestone_weeks: int | None = None,
        reset_after_weeks: int | None = None,
        locks: KeyedLock | None = None,
    ) -> None:
        self.store = store
        self.tz = tz or settings.streak_zone
        self.clock = clock
        if milestone_weeks is None:
            milestone_weeks = settings.streak_milestone_weeks
        if reset_after_weeks is None:
            reset_after_weeks = settings.streak_reset_after_weeks
        self.milestone_weeks = milestone_weeks
        self.reset_after_weeks = reset_after_weeks
        self.locks = locks or _streak_locks

    @staticmethod
    def _guarded(operation: str, member_id: str, season_id: str, call: Callable[[], Any]) -> Any:
        """Run a store call, wrapping any failure in PersistenceError."""
        try:
            return call()
        except PersistenceError:
            raise
        except Exception as exc:
            raise PersistenceError(operation, member_id, season_id) from exc

    def update_streak_on_attendance(
        self,
        member_id: str,
        season_id: str,
        attendance_date: DateLike | None,
    ) -> StreakUpdateResult | None:
        """Count an attendance toward the weekly streak.

        Returns None when the attendance is not on a Saturday in the
        reference timezone; such attendances never touch storage.

        Raises:
            ValidationError: ``attendance_date`` is missing or not a date.
            PersistenceError: the record could not be read or saved.
        """
        day = to_local_date(attendance_date, self.tz)
        if not is_saturday(day):
            logger.debug("Attendance on %s is not a Saturday, streak untouched", day)
            return None

        saturday = saturday_of_week(day, self.tz)
        with self.locks.hold((member_id, season_id)):
            record = self._guarded(
                "get_or_create",
                member_id,
                season_id,
                lambda: self.store.get_or_create(member_id, season_id),
            )
            result = advance_streak(
                record,
                saturday,
                now=self.clock(),
                milestone_weeks=self.milestone_weeks,
                reset_after_weeks=self.reset_after_weeks,
            )
            if result.outcome in UNCHANGED_OUTCOMES:
                logger.debug(
                    "Streak %s/%s unchanged for %s (%s)",
                    member_id, season_id, day, result.outcome.value,
                )
                return result

            saved = self._guarded(
                "save",
                member_id,
                season_id,
                lambda: self.store.save(result.record),
            )

        if result.outcome is StreakOutcome.RESET:
            logger.info("Streak reset for member %s in season %s", member_id, season_id)
        if result.award_milestone:
            logger.info(
                "Milestone reached for member %s in season %s at %s weeks",
                member_id, season_id, saved.current_streak_weeks,
            )
        return result.model_copy(update={"record": saved})

    def summary(
        self,
        member_id: str,
        season_id: str,
        now: datetime | None = None,
    ) -> StreakSummary:
        """Return the streak view with a timeline of recent Saturdays."""
        moment = now or self.clock()
        record = self._guarded(
            "find",
            member_id,
            season_id,
            lambda: self.store.find(member_id, season_id),
        )
        saturdays = recent_saturdays(self.tz, settings.streak_timeline_weeks, moment)
        attended = self._guarded(
            "attended_dates",
            member_id,
            season_id,
            lambda: self.store.attended_dates(member_id, [s.date() for s in saturdays]),
        )

        weeks = [
            StreakWeek(
                week_start=saturday.date() - timedelta(days=6),
                saturday=saturday.date(),
                attended=saturday.date() in attended,
            )
            for saturday in saturdays
        ]
        last = record.last_counted_saturday if record else None
        return StreakSummary(
            member_id=member_id,
            season_id=season_id,
            current_weeks=effective_current_weeks(
                record, current_saturday(self.tz, moment), self.reset_after_weeks
            ),
            best_weeks=record.best_streak_weeks if record else 0,
            milestone_awarded=bool(record and record.milestone_awarded),
            milestone_awarded_at=record.milestone_awarded_at if record else None,
            last_counted_saturday=last.date() if last else None,
            weeks=weeks,
        )
