"""FastAPI dependency injection helpers."""

from __future__ import annotations

from fastapi import Depends

from app.services.attendance_service import AttendanceStreakService
from app.services.reward_service import RewardService
from app.services.streak_repository import SupabaseStreakRepository
from app.services.streak_service import StreakService
from app.utils.supabase_client import get_service_client
from supabase import Client


def get_db_client() -> Client:
    """Return the Supabase client used by backend services."""
    return get_service_client()


def get_streak_service(client: Client = Depends(get_db_client)) -> StreakService:
    """Build a streak service over the Supabase repository."""
    return StreakService(SupabaseStreakRepository(client))


def get_attendance_streak_service(
    client: Client = Depends(get_db_client),
    streaks: StreakService = Depends(get_streak_service),
) -> AttendanceStreakService:
    """Build the post-attendance hook with reward payouts."""
    return AttendanceStreakService(streaks, RewardService(client))
