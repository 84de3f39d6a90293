"""Streak persistence backed by the Supabase ``streaks`` table."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, tzinfo
from typing import Any, Protocol

import httpx

from app.config import settings
from app.schemas.streak import StreakRecord
from app.services.common import SupabaseService
from app.utils.errors import InvalidInputError, PersistenceError
from app.utils.time import as_aware
from supabase import Client

STREAKS_TABLE = "streaks"
ATTENDANCES_TABLE = "attendances"
STREAK_KEY = "member_id,season_id"


class StreakStore(Protocol):
    """Storage operations the streak engine and its readers depend on."""

    def get_or_create(self, member_id: str, season_id: str) -> StreakRecord: ...

    def save(self, record: StreakRecord) -> StreakRecord: ...

    def find(self, member_id: str, season_id: str) -> StreakRecord | None: ...

    def attended_dates(self, member_id: str, days: Iterable[date]) -> set[date]: ...


class SupabaseStreakRepository:
    """Read and write streak rows, one per (member, season)."""

    def __init__(self, client: Client, tz: tzinfo | None = None) -> None:
        self.db = SupabaseService(client)
        self.tz = tz or settings.streak_zone

    def _to_record(self, row: dict[str, Any]) -> StreakRecord:
        return StreakRecord(
            member_id=str(row["member_id"]),
            season_id=str(row["season_id"]),
            current_streak_weeks=int(row.get("current_streak_weeks") or 0),
            best_streak_weeks=int(row.get("best_streak_weeks") or 0),
            last_counted_saturday=as_aware(row.get("last_counted_saturday"), self.tz),
            milestone_awarded=bool(row.get("milestone_awarded")),
            milestone_awarded_at=as_aware(row.get("milestone_awarded_at"), self.tz),
            created_at=as_aware(row.get("created_at"), self.tz),
            updated_at=as_aware(row.get("updated_at"), self.tz),
        )

    @staticmethod
    def _to_row(record: StreakRecord) -> dict[str, Any]:
        return {
            "member_id": record.member_id,
            "season_id": record.season_id,
            "current_streak_weeks": record.current_streak_weeks,
            "best_streak_weeks": record.best_streak_weeks,
            "last_counted_saturday": (
                record.last_counted_saturday.isoformat()
                if record.last_counted_saturday
                else None
            ),
            "milestone_awarded": record.milestone_awarded,
            "milestone_awarded_at": (
                record.milestone_awarded_at.isoformat() if record.milestone_awarded_at else None
            ),
        }

    def _select(self, member_id: str, season_id: str) -> list[dict[str, Any]]:
        return self.db.select_many(
            STREAKS_TABLE,
            filters={"member_id": member_id, "season_id": season_id},
            limit=1,
        )

    def find(self, member_id: str, season_id: str) -> StreakRecord | None:
        """Return the stored streak or None."""
        try:
            rows = self._select(member_id, season_id)
        except (InvalidInputError, httpx.HTTPError) as exc:
            raise PersistenceError("find", member_id, season_id) from exc
        return self._to_record(rows[0]) if rows else None

    def get_or_create(self, member_id: str, season_id: str) -> StreakRecord:
        """Return the streak row, inserting a zeroed one when absent."""
        try:
            rows = self._select(member_id, season_id)
            if rows:
                return self._to_record(rows[0])

            # A concurrent insert for the same key is ignored and re-read.
            self.db.upsert(
                STREAKS_TABLE,
                self._to_row(StreakRecord(member_id=member_id, season_id=season_id)),
                on_conflict=STREAK_KEY,
                ignore_duplicates=True,
            )
            rows = self._select(member_id, season_id)
        except (InvalidInputError, httpx.HTTPError) as exc:
            raise PersistenceError("get_or_create", member_id, season_id) from exc

        if not rows:
            raise PersistenceError(
                "get_or_create", member_id, season_id, reason="Streak row was not created"
            )
        return self._to_record(rows[0])

    def save(self, record: StreakRecord) -> StreakRecord:
        """Upsert the full record on its (member, season) key."""
        try:
            rows = self.db.upsert(STREAKS_TABLE, self._to_row(record), on_conflict=STREAK_KEY)
        except (InvalidInputError, httpx.HTTPError) as exc:
            raise PersistenceError("save", record.member_id, record.season_id) from exc
        return self._to_record(rows[0]) if rows else record

    def attended_dates(self, member_id: str, days: Iterable[date]) -> set[date]:
        """Return which of ``days`` have an attendance row for the member."""
        wanted = [day.isoformat() for day in days]
        if not wanted:
            return set()
        try:
            rows = self.db.execute(
                self.db.client.table(ATTENDANCES_TABLE)
                .select("attendance_date")
                .eq("member_id", member_id)
                .in_("attendance_date", wanted),
                default=[],
            )
        except (InvalidInputError, httpx.HTTPError) as exc:
            raise PersistenceError("attended_dates", member_id, "*") from exc
        return {date.fromisoformat(str(row["attendance_date"])[:10]) for row in rows}
