"""Shared Supabase data access helpers."""

from __future__ import annotations

import logging
import time
from typing import Any

from postgrest import APIError

from app.config import settings
from app.utils.errors import InvalidInputError
from supabase import Client

logger = logging.getLogger(__name__)


class SupabaseService:
    """Thin helper wrapper around a Supabase client."""

    def __init__(self, client: Client) -> None:
        self.client = client

    def execute(self, query, default: Any = None) -> Any:
        """Execute a Supabase query and normalize API errors."""
        started = time.perf_counter()
        try:
            response = query.execute()
            elapsed_ms = (time.perf_counter() - started) * 1000
            threshold_ms = settings.slow_query_log_threshold_ms
            if threshold_ms > 0 and elapsed_ms >= threshold_ms:
                logger.warning("Slow Supabase query %.1fms", elapsed_ms)
            data = response.data
            return default if data is None and default is not None else data
        except APIError as exc:
            message = getattr(exc, "message", "Database request failed")
            raise InvalidInputError(str(message)) from exc

    def select_many(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        columns: str = "*",
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Select many rows from a table with optional filters and ordering."""
        query = self.client.table(table).select(columns)
        if filters:
            for key, value in filters.items():
                query = query.eq(key, value)
        if order_by:
            query = query.order(order_by, desc=descending)
        if limit:
            query = query.limit(limit)
        return self.execute(query, default=[])

    def insert_one(self, table: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Insert one row and return the created object."""
        rows = self.execute(self.client.table(table).insert(payload), default=[])
        if not rows:
            raise InvalidInputError(f"Failed to insert into {table}")
        return rows[0]

    def upsert(
        self,
        table: str,
        payload: dict[str, Any],
        on_conflict: str,
        ignore_duplicates: bool = False,
    ) -> list[dict[str, Any]]:
        """Insert or update one row keyed by the ``on_conflict`` columns."""
        return self.execute(
            self.client.table(table).upsert(
                payload,
                on_conflict=on_conflict,
                ignore_duplicates=ignore_duplicates,
            ),
            default=[],
        )
