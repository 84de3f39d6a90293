"""Pytest fixtures for backend tests."""

from __future__ import annotations

import os
import threading
import time
from collections.abc import Iterable
from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient


def _set_default_env() -> None:
    os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
    os.environ.setdefault("SUPABASE_SERVICE_KEY", "service-key")


_set_default_env()

from app.schemas.streak import StreakRecord  # noqa: E402

BOGOTA = ZoneInfo("America/Bogota")
FIXED_NOW = datetime(2024, 5, 1, 15, 0, tzinfo=UTC)


class InMemoryStreakStore:
    """Dict-backed stand-in for the Supabase streak repository."""

    def __init__(self, read_delay: float = 0.0) -> None:
        self.records: dict[tuple[str, str], StreakRecord] = {}
        self.attendances: dict[str, set[date]] = {}
        self.read_delay = read_delay
        self.fail_on: set[str] = set()
        self.calls: list[str] = []
        self.saves = 0
        self._lock = threading.Lock()

    def _enter(self, operation: str) -> None:
        with self._lock:
            self.calls.append(operation)
        if operation in self.fail_on:
            raise RuntimeError(f"{operation} unavailable")

    def get_or_create(self, member_id: str, season_id: str) -> StreakRecord:
        self._enter("get_or_create")
        if self.read_delay:
            time.sleep(self.read_delay)
        with self._lock:
            record = self.records.setdefault(
                (member_id, season_id),
                StreakRecord(member_id=member_id, season_id=season_id),
            )
            return record.model_copy()

    def save(self, record: StreakRecord) -> StreakRecord:
        self._enter("save")
        with self._lock:
            self.saves += 1
            stored = record.model_copy(update={"updated_at": FIXED_NOW})
            self.records[record.key] = stored
            return stored.model_copy()

    def find(self, member_id: str, season_id: str) -> StreakRecord | None:
        self._enter("find")
        record = self.records.get((member_id, season_id))
        return record.model_copy() if record else None

    def attended_dates(self, member_id: str, days: Iterable[date]) -> set[date]:
        self._enter("attended_dates")
        return self.attendances.get(member_id, set()).intersection(days)


@pytest.fixture
def store() -> InMemoryStreakStore:
    """Empty in-memory streak store."""
    return InMemoryStreakStore()


@pytest.fixture
def streak_service(store: InMemoryStreakStore):
    """Streak service pinned to Bogota time and a fixed clock."""
    from app.services.streak_service import StreakService

    return StreakService(store, tz=BOGOTA, clock=lambda: FIXED_NOW)


@pytest.fixture(scope="session")
def client() -> TestClient:
    """Create a FastAPI test client."""
    from app.main import app

    return TestClient(app)
