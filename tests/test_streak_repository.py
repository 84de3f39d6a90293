"""Supabase streak repository mapping tests."""

from __future__ import annotations

from datetime import date, datetime

import httpx
import pytest
from conftest import BOGOTA

from app.schemas.streak import StreakRecord
from app.services.streak_repository import SupabaseStreakRepository
from app.utils.errors import InvalidInputError, PersistenceError

ROW = {
    "member_id": "member-1",
    "season_id": "season-1",
    "current_streak_weeks": 2,
    "best_streak_weeks": 5,
    "last_counted_saturday": "2024-03-02T05:00:00+00:00",
    "milestone_awarded": True,
    "milestone_awarded_at": "2024-02-10T14:00:00Z",
    "created_at": "2024-01-06T12:00:00Z",
    "updated_at": None,
}


@pytest.fixture
def repository() -> SupabaseStreakRepository:
    """Repository whose client is never reached in these tests."""
    return SupabaseStreakRepository(client=None, tz=BOGOTA)  # type: ignore[arg-type]


def test_rows_map_to_records_in_reference_timezone(repository, monkeypatch) -> None:
    """Stored timestamps come back as aware datetimes in the streak timezone."""
    monkeypatch.setattr(repository.db, "select_many", lambda *args, **kwargs: [ROW])

    record = repository.find("member-1", "season-1")

    assert record.current_streak_weeks == 2
    assert record.best_streak_weeks == 5
    assert record.last_counted_saturday == datetime(2024, 3, 2, tzinfo=BOGOTA)
    assert record.last_counted_saturday.date() == date(2024, 3, 2)
    assert record.milestone_awarded is True
    assert record.updated_at is None


def test_get_or_create_inserts_zeroed_row_when_missing(repository, monkeypatch) -> None:
    """A missing row is upserted with duplicates ignored, then re-read."""
    reads = [[], [{"member_id": "member-1", "season_id": "season-1"}]]
    upserts: list[tuple[dict, str, bool]] = []

    def fake_upsert(table, payload, on_conflict, ignore_duplicates=False):
        upserts.append((payload, on_conflict, ignore_duplicates))
        return []

    monkeypatch.setattr(repository.db, "select_many", lambda *args, **kwargs: reads.pop(0))
    monkeypatch.setattr(repository.db, "upsert", fake_upsert)

    record = repository.get_or_create("member-1", "season-1")

    assert record.current_streak_weeks == 0
    assert record.last_counted_saturday is None
    payload, on_conflict, ignore_duplicates = upserts[0]
    assert payload["current_streak_weeks"] == 0
    assert payload["milestone_awarded"] is False
    assert on_conflict == "member_id,season_id"
    assert ignore_duplicates is True


def test_save_serializes_saturday_as_iso(repository, monkeypatch) -> None:
    """Saved rows carry the normalized Saturday with its offset."""
    captured: dict = {}

    def fake_upsert(table, payload, on_conflict, ignore_duplicates=False):
        captured.update(payload)
        return [payload]

    monkeypatch.setattr(repository.db, "upsert", fake_upsert)
    record = StreakRecord(
        member_id="member-1",
        season_id="season-1",
        current_streak_weeks=1,
        best_streak_weeks=1,
        last_counted_saturday=datetime(2024, 3, 2, tzinfo=BOGOTA),
    )

    saved = repository.save(record)

    assert captured["last_counted_saturday"] == "2024-03-02T00:00:00-05:00"
    assert captured["milestone_awarded_at"] is None
    assert saved.last_counted_saturday == record.last_counted_saturday


@pytest.mark.parametrize(
    "error",
    [InvalidInputError("duplicate key value"), httpx.ConnectError("connection refused")],
)
def test_storage_errors_become_persistence_errors(repository, monkeypatch, error) -> None:
    """API and transport failures are wrapped with the failing operation."""

    def boom(*args, **kwargs):
        raise error

    monkeypatch.setattr(repository.db, "upsert", boom)

    with pytest.raises(PersistenceError) as excinfo:
        repository.save(StreakRecord(member_id="member-1", season_id="season-1"))

    assert excinfo.value.operation == "save"
    assert excinfo.value.__cause__ is error
