"""Streak schemas."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field


class StreakOutcome(str, Enum):
    """How one qualifying attendance moved the streak."""

    STARTED = "started"
    CONTINUED = "continued"
    RESET = "reset"
    ALREADY_COUNTED = "already_counted"
    OUT_OF_ORDER = "out_of_order"


class StreakRecord(BaseModel):
    """Weekly attendance streak for one member in one season."""

    member_id: str
    season_id: str
    current_streak_weeks: int = Field(default=0, ge=0)
    best_streak_weeks: int = Field(default=0, ge=0)
    last_counted_saturday: datetime | None = None
    milestone_awarded: bool = False
    milestone_awarded_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def key(self) -> tuple[str, str]:
        return self.member_id, self.season_id


class StreakUpdateResult(BaseModel):
    """Engine result for a Saturday attendance."""

    record: StreakRecord
    award_milestone: bool = False
    outcome: StreakOutcome


class StreakWeek(BaseModel):
    """One Saturday in the streak timeline."""

    week_start: date
    saturday: date
    attended: bool


class StreakSummary(BaseModel):
    """Read-side view of a member's streak for a season."""

    member_id: str
    season_id: str
    current_weeks: int
    best_weeks: int
    milestone_awarded: bool
    milestone_awarded_at: datetime | None = None
    last_counted_saturday: date | None = None
    weeks: list[StreakWeek] = Field(default_factory=list)


class AttendanceStreakRequest(BaseModel):
    """Request body for feeding an attendance into the streak engine."""

    attended_at: str = Field(..., min_length=1)
