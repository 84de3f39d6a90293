"""Milestone reward transactions."""

from __future__ import annotations

from typing import Any

from app.config import settings
from app.services.common import SupabaseService
from supabase import Client

POINTS_TABLE = "points_transactions"
MILESTONE_DESCRIPTION = "Violet Flame - {weeks} consecutive Saturdays"


class RewardService:
    """Record bonus points granted by the streak milestone."""

    def __init__(self, client: Client) -> None:
        self.db = SupabaseService(client)

    def grant_milestone_bonus(
        self,
        member_id: str,
        season_id: str,
        points: int | None = None,
    ) -> dict[str, Any]:
        """Insert the one-time Violet Flame bonus transaction."""
        return self.db.insert_one(
            POINTS_TABLE,
            {
                "member_id": member_id,
                "season_id": season_id,
                "points": settings.milestone_bonus_points if points is None else points,
                "type": "BONUS",
                "description": MILESTONE_DESCRIPTION.format(
                    weeks=settings.streak_milestone_weeks
                ),
            },
        )
