"""Rebuild one member's season streak from a list of attendance dates."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Sequence
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Replay attendance dates through the Saturday streak rules.",
    )
    parser.add_argument("member_id", help="Member identifier.")
    parser.add_argument("season_id", help="Season identifier.")
    parser.add_argument(
        "dates",
        nargs="+",
        help="Attendance dates or timestamps (ISO 8601), in any order.",
    )
    parser.add_argument(
        "--save",
        action="store_true",
        help=(
            "Merge the rebuilt record into the streaks table (no bonus is granted). "
            "Refused when the replay ends before the stored last Saturday."
        ),
    )
    return parser.parse_args(argv)


def rebuild(member_id: str, season_id: str, dates: Sequence[str]):
    """Return the record produced by replaying ``dates`` oldest first."""
    from app.config import settings
    from app.schemas.streak import StreakRecord
    from app.services.streak_service import advance_streak
    from app.utils.time import is_saturday, now_utc, saturday_of_week, to_local_date

    tz = settings.streak_zone
    record = StreakRecord(member_id=member_id, season_id=season_id)
    days = sorted({to_local_date(value, tz) for value in dates})
    for day in days:
        if not is_saturday(day):
            continue
        result = advance_streak(
            record,
            saturday_of_week(day, tz),
            now=now_utc(),
            milestone_weeks=settings.streak_milestone_weeks,
            reset_after_weeks=settings.streak_reset_after_weeks,
        )
        record = result.record
    return record


def merge_with_stored(existing, rebuilt):
    """Combine a replayed record with the stored one, or None if it would go back in time.

    The stored best length and any paid milestone are never lowered.
    """
    if existing is None:
        return rebuilt
    stored_last = existing.last_counted_saturday
    if stored_last is not None and (
        rebuilt.last_counted_saturday is None or rebuilt.last_counted_saturday < stored_last
    ):
        return None

    changes = {
        "best_streak_weeks": max(existing.best_streak_weeks, rebuilt.best_streak_weeks),
        "created_at": existing.created_at,
    }
    if existing.milestone_awarded:
        changes["milestone_awarded"] = True
        changes["milestone_awarded_at"] = existing.milestone_awarded_at
    return rebuilt.model_copy(update=changes)


def save_rebuilt(store, record, locks=None):
    """Merge and save ``record`` under the streak lock.

    Returns ``(stored_record, saved)``; nothing is written when the replay
    ends before the stored last Saturday.
    """
    from app.services.streak_service import _streak_locks

    locks = locks or _streak_locks
    with locks.hold(record.key):
        existing = store.find(record.member_id, record.season_id)
        merged = merge_with_stored(existing, record)
        if merged is None:
            return existing, False
        return store.save(merged), True


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point."""
    args = parse_args(argv)
    record = rebuild(args.member_id, args.season_id, args.dates)

    if args.save:
        from app.services.streak_repository import SupabaseStreakRepository
        from app.utils.supabase_client import get_service_client

        repository = SupabaseStreakRepository(get_service_client())
        record, saved = save_rebuilt(repository, record)
        if not saved:
            raise SystemExit(
                "Replay ends before the stored last counted Saturday "
                f"({record.last_counted_saturday.date()}); streak left unchanged."
            )

    print(json.dumps(record.model_dump(mode="json"), indent=2))


if __name__ == "__main__":
    main()
