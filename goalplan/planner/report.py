"""Plan report builder and CSV exports.

The report reuses compute_projection and the projection module's month
constants, so exported numbers always match the API.
"""

from __future__ import annotations

import csv
import io
from datetime import date

from goalplan.planner import projection as proj
from goalplan.planner.goal_types import get_goal_type
from goalplan.planner.models import PlanReport, ReportRow, SavingsGoal

COFFEE_PRICE = 5.50
LUNCH_PRICE = 15.0
STREAMING_PRICE = 15.99

GOALS_CSV_HEADER = [
    "Goal Name",
    "Goal Type",
    "Target Amount",
    "Current Savings",
    "Target Date",
    "Monthly Capacity",
    "Progress (%)",
    "Status",
    "Created Date",
]


def _impact(months_saved: int) -> str:
    return f"Saves {months_saved} months" if months_saved > 0 else "No change"


def build_plan_report(
    goal: SavingsGoal,
    owner_name: str,
    today: date,
    default_capacity: float | None = None,
) -> PlanReport:
    """Assemble the printable plan for one goal.

    A goal without its own monthly capacity is judged against
    `default_capacity` (None keeps it always on track).
    """
    capacity = goal.monthly_capacity if goal.monthly_capacity is not None else default_capacity
    p = proj.compute_projection(
        goal.target_amount,
        goal.current_savings,
        goal.target_date,
        capacity,
        today=today,
    )

    rows = [
        ReportRow(
            scenario="Current Plan",
            monthly_amount=p.monthly_required,
            months=p.months_remaining,
            impact="Feasible" if p.is_feasible else "Over capacity",
        )
    ]
    for label, scenario in (("+$50/month", p.scenarios.plus50), ("+$100/month", p.scenarios.plus100)):
        rows.append(
            ReportRow(
                scenario=label,
                monthly_amount=scenario.monthly_amount,
                months=proj.months_to_goal(p.amount_needed, scenario.monthly_amount) or 0,
                impact=_impact(scenario.months_saved),
            )
        )

    weekly = proj.weekly_equivalent(p.monthly_required)
    shortfall = max(0.0, p.monthly_required - capacity) if capacity is not None else 0.0

    return PlanReport(
        goal_id=goal.id,
        goal_name=goal.name,
        goal_type=goal.goal_type,
        owner_name=owner_name,
        generated_on=today,
        target_amount=goal.target_amount,
        current_savings=goal.current_savings,
        target_date=goal.target_date,
        goal_status=goal.status,
        monthly_required=p.monthly_required,
        months_remaining=p.months_remaining,
        progress_percent=p.progress_percent,
        monthly_capacity=capacity,
        is_on_track=p.is_feasible,
        shortfall=shortfall,
        daily_amount=proj.daily_equivalent(p.monthly_required),
        weekly_amount=weekly,
        tradeoffs={
            "coffees_per_week": int(proj.round_currency(weekly / COFFEE_PRICE)),
            "lunches_per_week": int(proj.round_currency(weekly / LUNCH_PRICE)),
            "streaming_services_per_month": int(proj.round_currency(p.monthly_required / STREAMING_PRICE)),
        },
        rows=rows,
        tips=list(get_goal_type(goal.goal_type).tips),
    )


def _money(amount: float) -> str:
    return f"{proj.round_currency(amount):.0f}"


def render_report_csv(report: PlanReport) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(["Metric", "Value"])
    writer.writerows(
        [
            ["Goal", report.goal_name],
            ["Goal Type", report.goal_type.value],
            ["Owner", report.owner_name],
            ["Generated", report.generated_on.isoformat()],
            ["Target Amount", _money(report.target_amount)],
            ["Current Savings", _money(report.current_savings)],
            ["Target Date", report.target_date.isoformat()],
            ["Monthly Required", _money(report.monthly_required)],
            ["Months Remaining", report.months_remaining],
            ["Progress (%)", f"{report.progress_percent:.1f}"],
            ["Daily", _money(report.daily_amount)],
            ["Weekly", _money(report.weekly_amount)],
            ["Status", "On Track" if report.is_on_track else "Adjustment Needed"],
            ["Shortfall", _money(report.shortfall)],
        ]
    )
    writer.writerow([])
    writer.writerow(["Scenario", "Monthly Contribution", "Months to Goal", "Impact"])
    for row in report.rows:
        writer.writerow([row.scenario, _money(row.monthly_amount), row.months, row.impact])
    return buf.getvalue()


def goal_export_status(goal: SavingsGoal, progress: int, today: date) -> str:
    if progress >= 100:
        return "Complete"
    if goal.target_date < today:
        return "Overdue"
    return "Active"


def render_goals_csv(goals: list[SavingsGoal], today: date) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(GOALS_CSV_HEADER)
    for goal in goals:
        progress = int(proj.round_currency(proj.progress_percent(goal.current_savings, goal.target_amount)))
        writer.writerow(
            [
                goal.name,
                goal.goal_type.value,
                goal.target_amount,
                goal.current_savings,
                goal.target_date.isoformat(),
                goal.monthly_capacity or 0,
                progress,
                goal_export_status(goal, progress, today),
                goal.created_at.date().isoformat(),
            ]
        )
    return buf.getvalue()
