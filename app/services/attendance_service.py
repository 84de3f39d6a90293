"""Post-attendance streak and reward processing."""

from __future__ import annotations

import logging

import httpx

from app.schemas.streak import StreakUpdateResult
from app.services.reward_service import RewardService
from app.services.streak_service import StreakService
from app.utils.errors import AppError
from app.utils.time import DateLike

logger = logging.getLogger(__name__)


class AttendanceStreakService:
    """Run the streak engine for a saved attendance and pay out milestones."""

    def __init__(self, streaks: StreakService, rewards: RewardService) -> None:
        self.streaks = streaks
        self.rewards = rewards

    def process(
        self,
        member_id: str,
        season_id: str,
        attended_at: DateLike,
    ) -> StreakUpdateResult | None:
        """Update the streak and grant the bonus when the milestone fires.

        Engine errors propagate. A failed bonus insert is logged only: the
        milestone is already stored, so the bonus must be granted by hand.
        """
        result = self.streaks.update_streak_on_attendance(member_id, season_id, attended_at)
        if result is None or not result.award_milestone:
            return result

        try:
            self.rewards.grant_milestone_bonus(member_id, season_id)
        except (AppError, httpx.HTTPError):
            logger.exception(
                "Milestone bonus failed for member %s in season %s", member_id, season_id
            )
        return result
