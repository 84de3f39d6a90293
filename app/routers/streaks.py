"""Streak endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.dependencies import get_attendance_streak_service, get_streak_service
from app.schemas.streak import AttendanceStreakRequest
from app.services.attendance_service import AttendanceStreakService
from app.services.streak_service import StreakService

router = APIRouter()


@router.get("")
def get_streak(
    season_id: str,
    member_id: str,
    service: StreakService = Depends(get_streak_service),
) -> dict:
    """Return the member's streak summary for the season."""
    summary = service.summary(member_id=member_id, season_id=season_id)
    return {"streak": summary.model_dump(mode="json")}


@router.post("/attendances")
def record_streak_attendance(
    season_id: str,
    member_id: str,
    payload: AttendanceStreakRequest,
    service: AttendanceStreakService = Depends(get_attendance_streak_service),
) -> dict:
    """Feed one saved attendance into the streak engine."""
    result = service.process(member_id, season_id, payload.attended_at)
    if result is None:
        return {"streak": None, "award_milestone": False, "outcome": None}
    return {
        "streak": result.record.model_dump(mode="json"),
        "award_milestone": result.award_milestone,
        "outcome": result.outcome.value,
    }
