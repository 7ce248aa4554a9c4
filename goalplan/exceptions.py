"""Service errors. Each maps to one HTTP status in goalplan.main."""

from __future__ import annotations

from datetime import datetime


class GoalPlanError(Exception):
    """Base class for service errors."""


class GoalNotFoundError(GoalPlanError):
    def __init__(self, goal_id: str):
        super().__init__(f"Savings goal not found: {goal_id}")
        self.goal_id = goal_id


class QuotaExceededError(GoalPlanError):
    def __init__(self, kind: str, limit: int):
        super().__init__(f"Daily guest limit reached for {kind} ({limit} per day)")
        self.kind = kind
        self.limit = limit


class AccountExistsError(GoalPlanError):
    pass


class InvalidCredentialsError(GoalPlanError):
    def __init__(self, remaining_attempts: int | None = None):
        message = "Invalid credentials"
        if remaining_attempts is not None:
            message = f"Invalid credentials. {remaining_attempts} attempts remaining."
        super().__init__(message)
        self.remaining_attempts = remaining_attempts


class AccountLockedError(GoalPlanError):
    def __init__(self, locked_until: datetime):
        super().__init__(
            f"Account temporarily locked due to too many failed attempts (until {locked_until.isoformat()})"
        )
        self.locked_until = locked_until


class InvalidTokenError(GoalPlanError):
    pass


class MemberDirectoryUnavailableError(GoalPlanError):
    """Directory credentials are not configured."""


class MemberDirectoryError(GoalPlanError):
    """Directory answered with an error or could not be reached."""


class MemberNotFoundError(GoalPlanError):
    pass


STATUS_CODES: dict[type[GoalPlanError], int] = {
    GoalNotFoundError: 404,
    QuotaExceededError: 429,
    AccountExistsError: 409,
    InvalidCredentialsError: 401,
    AccountLockedError: 423,
    InvalidTokenError: 401,
    MemberDirectoryUnavailableError: 503,
    MemberDirectoryError: 502,
    MemberNotFoundError: 404,
}


def status_code_for(exc: GoalPlanError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return 400
