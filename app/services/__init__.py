"""Service package exports with lazy loading."""

from __future__ import annotations

from importlib import import_module
from typing import Any

_EXPORTS = {
    "AttendanceStreakService": "app.services.attendance_service",
    "RewardService": "app.services.reward_service",
    "StreakService": "app.services.streak_service",
    "SupabaseService": "app.services.common",
    "SupabaseStreakRepository": "app.services.streak_repository",
}

__all__ = sorted(_EXPORTS.keys())


def __getattr__(name: str) -> Any:
    if name not in _EXPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module = import_module(_EXPORTS[name])
    return getattr(module, name)
