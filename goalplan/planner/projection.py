"""Pure stateless projection functions — arithmetic only, never raises.

Every consumer (API, plan report, scenario explorer) takes its month
conventions from the constants below:

- DAYS_PER_MONTH_APPROX (30) counts months remaining and finish dates.
- DAYS_PER_MONTH_AVERAGE (30.44) converts monthly amounts to daily ones.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta

from goalplan.planner.models import (
    Projection,
    RealityCheck,
    Scenario,
    ScenarioOutcome,
    ScenarioSet,
)

DAYS_PER_MONTH_APPROX = 30
DAYS_PER_MONTH_AVERAGE = 30.44
WEEKS_PER_MONTH = 4.33
WORK_HOURS_PER_WEEK = 40

BUILTIN_SCENARIO_DELTAS = (50.0, 100.0)


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def round_currency(amount: float) -> float:
    """Round half up to a whole currency unit (Python's round() is half-even)."""
    return float(math.floor(amount + 0.5))


def months_remaining(target_date: date | datetime, today: date | datetime | None = None) -> int:
    """30-day months until `target_date`, rounded up and never below 1."""
    today = _as_date(today) if today is not None else date.today()
    days = (_as_date(target_date) - today).days
    return max(1, math.ceil(days / DAYS_PER_MONTH_APPROX))


def amount_needed(target_amount: float, current_savings: float) -> float:
    return max(0.0, target_amount - current_savings)


def progress_percent(current_savings: float, target_amount: float) -> float:
    """Raw progress percentage (unclamped). 0 when target is not positive."""
    if target_amount <= 0:
        return 0.0
    return current_savings / target_amount * 100.0


def months_to_goal(needed: float, monthly_amount: float) -> int | None:
    """Whole months to cover `needed` at `monthly_amount`. None if unreachable."""
    if monthly_amount <= 0:
        return None
    return math.ceil(needed / monthly_amount)


def _builtin_scenario(needed: float, monthly_exact: float, months: int, delta: float) -> Scenario:
    new_monthly = monthly_exact + delta
    return Scenario(
        monthly_amount=new_monthly,
        months_saved=max(0, months - math.ceil(needed / new_monthly)),
    )


def compute_projection(
    target_amount: float,
    current_savings: float,
    target_date: date | datetime,
    monthly_capacity: float | None = None,
    *,
    today: date | datetime | None = None,
) -> Projection:
    """Monthly plan, progress and feasibility for one goal snapshot.

    Degenerate input is clamped, never rejected: a past target date counts
    as one month, a non-positive target gives 0% progress, and savings above
    the target need nothing more.
    """
    current_savings = max(0.0, current_savings)
    months = months_remaining(target_date, today)
    needed = amount_needed(target_amount, current_savings)
    monthly_exact = needed / months
    raw_progress = progress_percent(current_savings, target_amount)
    feasible = monthly_capacity is None or monthly_exact <= monthly_capacity

    plus50, plus100 = (
        _builtin_scenario(needed, monthly_exact, months, delta) for delta in BUILTIN_SCENARIO_DELTAS
    )

    return Projection(
        monthly_required=round_currency(monthly_exact),
        monthly_required_exact=monthly_exact,
        months_remaining=months,
        amount_needed=needed,
        progress_percent=round(min(100.0, max(0.0, raw_progress)), 2),
        progress_percent_raw=raw_progress,
        is_feasible=feasible,
        scenarios=ScenarioSet(plus50=plus50, plus100=plus100),
    )


# ---------------------------------------------------------------------------
# What-if explorer
# ---------------------------------------------------------------------------


def projected_finish_date(
    needed: float,
    monthly_required: float,
    delta: float = 0.0,
    today: date | datetime | None = None,
) -> date | None:
    """Date the goal completes when contributing `monthly_required + delta`.

    Uses the same 30-day month as months_remaining. None when the adjusted
    contribution is not positive.
    """
    today = _as_date(today) if today is not None else date.today()
    months = months_to_goal(needed, monthly_required + delta)
    if months is None:
        return None
    return today + timedelta(days=months * DAYS_PER_MONTH_APPROX)


def adjust_scenario(
    projection: Projection,
    delta: float,
    *,
    today: date | datetime | None = None,
) -> ScenarioOutcome:
    """Effect of contributing `delta` more (or less, if negative) per month."""
    monthly_amount = projection.monthly_required_exact + delta
    needed = projection.amount_needed
    months = months_to_goal(needed, monthly_amount)
    if months is None:
        return ScenarioOutcome(delta=delta, monthly_amount=monthly_amount, reachable=False)

    return ScenarioOutcome(
        delta=delta,
        monthly_amount=monthly_amount,
        reachable=True,
        months_to_goal=months,
        months_saved=max(0, projection.months_remaining - months),
        months_difference=projection.months_remaining - needed / monthly_amount,
        finish_date=projected_finish_date(needed, projection.monthly_required_exact, delta, today),
    )


# ---------------------------------------------------------------------------
# Reality check helpers
# ---------------------------------------------------------------------------


def daily_equivalent(monthly_amount: float) -> float:
    return monthly_amount / DAYS_PER_MONTH_AVERAGE


def weekly_equivalent(monthly_amount: float) -> float:
    return monthly_amount / WEEKS_PER_MONTH


def hourly_equivalent(monthly_amount: float) -> float:
    return monthly_amount / (WORK_HOURS_PER_WEEK * WEEKS_PER_MONTH)


def feasibility_label(monthly_required: float) -> str:
    """Qualitative difficulty: >500 very challenging, >300 moderately hard."""
    if monthly_required > 500:
        return "Very Challenging"
    if monthly_required > 300:
        return "Moderately Hard"
    return "Realistic"


def success_rate(monthly_required: float) -> int:
    """Canned success percentage by monthly amount."""
    if monthly_required > 400:
        return 45
    if monthly_required > 300:
        return 65
    if monthly_required > 200:
        return 80
    return 85


def catch_up_monthly(needed: float, months: int) -> float | None:
    """Monthly amount needed after missing one month. None if only one month is left."""
    if months <= 1:
        return None
    return needed / (months - 1)


SPENDING_PRICES: dict[str, float] = {
    "coffee_visits": 5.50,
    "pizza_deliveries": 25.0,
    "movie_tickets": 15.0,
    "subscriptions": 80.0,
}


def spending_equivalents(monthly_amount: float) -> dict[str, int]:
    """How many of each everyday purchase the monthly amount replaces."""
    return {name: int(round_currency(monthly_amount / price)) for name, price in SPENDING_PRICES.items()}


def reality_check(projection: Projection) -> RealityCheck:
    # Display-level figures: derived from the rounded monthly amount.
    monthly = projection.monthly_required
    catch_up = catch_up_monthly(projection.amount_needed, projection.months_remaining)
    return RealityCheck(
        feasibility=feasibility_label(monthly),
        success_rate=success_rate(monthly),
        daily_amount=daily_equivalent(monthly),
        weekly_amount=weekly_equivalent(monthly),
        hourly_amount=hourly_equivalent(monthly),
        catch_up_monthly=catch_up,
        catch_up_extra=catch_up - monthly if catch_up is not None else None,
        spending_equivalents=spending_equivalents(monthly),
    )
