"""Custom exception hierarchy for the streak API."""

from __future__ import annotations


class AppError(Exception):
    """Base application error with a stable machine-readable code."""

    def __init__(self, message: str, code: str, status_code: int = 400) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> dict[str, str]:
        """Serialize the error in the API standard shape."""
        return {"error": self.message, "code": self.code}


class InvalidInputError(AppError):
    """Raised for request payload or parameter validation issues."""

    def __init__(self, reason: str) -> None:
        super().__init__(message=reason, code="INVALID_INPUT", status_code=422)


class ValidationError(AppError):
    """Raised when an attendance date is missing or not a calendar date."""

    def __init__(self, reason: str) -> None:
        super().__init__(message=reason, code="VALIDATION_ERROR", status_code=422)


class PersistenceError(AppError):
    """Raised when the streak store cannot be read or written.

    Carries the key and the failing operation so callers can log or retry
    with context. The underlying storage exception is chained as ``__cause__``.
    """

    def __init__(
        self,
        operation: str,
        member_id: str,
        season_id: str,
        reason: str = "Streak storage request failed",
    ) -> None:
        self.operation = operation
        self.member_id = member_id
        self.season_id = season_id
        super().__init__(
            message=f"{reason} ({operation} member={member_id} season={season_id})",
            code="PERSISTENCE_ERROR",
            status_code=503,
        )
