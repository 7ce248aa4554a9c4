"""Savings goal and projection contracts — Pydantic v2 models."""

from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, computed_field, field_validator


class GoalType(str, Enum):
    education = "education"
    emergency = "emergency"
    home = "home"
    vacation = "vacation"
    car = "car"
    retirement = "retirement"
    investment = "investment"
    other = "other"


# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------


class GoalCreate(BaseModel):
    name: str = Field(min_length=1)
    goal_type: GoalType
    target_amount: float = Field(gt=0)
    current_savings: float = Field(default=0.0, ge=0)
    target_date: date
    monthly_capacity: float | None = Field(default=None, gt=0)


class GoalUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    goal_type: GoalType | None = None
    target_amount: float | None = Field(default=None, gt=0)
    current_savings: float | None = Field(default=None, ge=0)
    target_date: date | None = None
    monthly_capacity: float | None = Field(default=None, gt=0)

    @field_validator("name", "goal_type", "target_amount", "current_savings", "target_date")
    @classmethod
    def _not_null(cls, value):
        # Omit a field to leave it unchanged; only monthly_capacity can be cleared.
        if value is None:
            raise ValueError("may not be null")
        return value


class SavingsGoal(BaseModel):
    id: str
    owner_id: str
    name: str
    goal_type: GoalType
    target_amount: float
    current_savings: float = 0.0
    target_date: date
    monthly_capacity: float | None = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @computed_field  # type: ignore[prop-decorator]
    @property
    def status(self) -> str:
        return "active" if self.is_active else "inactive"


# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------


class CalculationRequest(BaseModel):
    target_amount: float = Field(gt=0)
    current_savings: float = Field(default=0.0, ge=0)
    target_date: date
    monthly_capacity: float | None = Field(default=None, gt=0)


class Scenario(BaseModel):
    monthly_amount: float
    months_saved: int


class ScenarioSet(BaseModel):
    plus50: Scenario
    plus100: Scenario


class Projection(BaseModel):
    """Savings plan for one goal snapshot — always constructible."""

    monthly_required: float  # rounded to whole currency units
    monthly_required_exact: float
    months_remaining: int
    amount_needed: float
    progress_percent: float  # clamped 0–100
    progress_percent_raw: float
    is_feasible: bool
    scenarios: ScenarioSet


class ScenarioOutcome(BaseModel):
    delta: float
    monthly_amount: float
    reachable: bool
    months_to_goal: int | None = None
    months_saved: int | None = None
    months_difference: float | None = None  # signed; positive = earlier
    finish_date: date | None = None


MAX_WHAT_IF_DELTAS = 20


class WhatIfRequest(CalculationRequest):
    deltas: list[float] = Field(default_factory=list, max_length=MAX_WHAT_IF_DELTAS)
    preset: str | None = None


class WhatIfResponse(BaseModel):
    projection: Projection
    outcomes: list[ScenarioOutcome] = Field(default_factory=list)


class RealityCheck(BaseModel):
    feasibility: str  # "Realistic" | "Moderately Hard" | "Very Challenging"
    success_rate: int
    daily_amount: float
    weekly_amount: float
    hourly_amount: float
    catch_up_monthly: float | None = None
    catch_up_extra: float | None = None
    spending_equivalents: dict[str, int] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Guest quota
# ---------------------------------------------------------------------------


class QuotaStatus(BaseModel):
    is_guest: bool
    goals_created: int = 0
    goals_limit: int | None = None
    reports_downloaded: int = 0
    reports_limit: int | None = None
    resets_on: date | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def goals_remaining(self) -> int | None:
        if self.goals_limit is None:
            return None
        return max(0, self.goals_limit - self.goals_created)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def reports_remaining(self) -> int | None:
        if self.reports_limit is None:
            return None
        return max(0, self.reports_limit - self.reports_downloaded)


# ---------------------------------------------------------------------------
# Plan report
# ---------------------------------------------------------------------------


class ReportRow(BaseModel):
    scenario: str
    monthly_amount: float
    months: int
    impact: str


class PlanReport(BaseModel):
    goal_id: str
    goal_name: str
    goal_type: GoalType
    owner_name: str
    generated_on: date
    target_amount: float
    current_savings: float
    target_date: date
    goal_status: str
    monthly_required: float
    months_remaining: int
    progress_percent: float
    monthly_capacity: float | None = None
    is_on_track: bool
    shortfall: float
    daily_amount: float
    weekly_amount: float
    tradeoffs: dict[str, int] = Field(default_factory=dict)
    rows: list[ReportRow] = Field(default_factory=list)
    tips: list[str] = Field(default_factory=list)
