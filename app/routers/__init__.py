"""API router package."""

from app.routers import streaks

__all__ = ["streaks"]
