"""Tests for the plan report and CSV exports."""

from datetime import date

import pytest

from goalplan.planner.goal_types import get_goal_type
from goalplan.planner.models import GoalType
from goalplan.planner.report import (
    GOALS_CSV_HEADER,
    build_plan_report,
    goal_export_status,
    render_goals_csv,
    render_report_csv,
)
from tests.conftest import TODAY, make_goal


class TestBuildPlanReport:
    def test_rows_against_default_capacity(self):
        report = build_plan_report(make_goal(), "Sam", TODAY, default_capacity=300)
        assert [(r.scenario, r.monthly_amount, r.months, r.impact) for r in report.rows] == [
            ("Current Plan", 1000, 12, "Over capacity"),
            ("+$50/month", 1050, 12, "No change"),
            ("+$100/month", 1100, 11, "Saves 1 months"),
        ]
        assert report.is_on_track is False
        assert report.monthly_capacity == 300
        assert report.shortfall == 700

    def test_goal_capacity_wins_over_default(self):
        report = build_plan_report(make_goal(monthly_capacity=1500), "Sam", TODAY, default_capacity=300)
        assert report.monthly_capacity == 1500
        assert report.is_on_track is True
        assert report.shortfall == 0
        assert report.rows[0].impact == "Feasible"

    def test_no_capacity_at_all(self):
        report = build_plan_report(make_goal(), "Sam", TODAY)
        assert report.monthly_capacity is None
        assert report.is_on_track is True
        assert report.shortfall == 0

    def test_equivalents_and_tradeoffs(self):
        report = build_plan_report(make_goal(), "Sam", TODAY)
        assert report.daily_amount == pytest.approx(1000 / 30.44)
        assert report.weekly_amount == pytest.approx(1000 / 4.33)
        assert report.tradeoffs == {
            "coffees_per_week": 42,
            "lunches_per_week": 15,
            "streaming_services_per_month": 63,
        }

    def test_header_fields(self):
        goal = make_goal(goal_type=GoalType.home, current_savings=3000)
        report = build_plan_report(goal, "Sam", TODAY)
        assert report.owner_name == "Sam"
        assert report.generated_on == TODAY
        assert report.goal_status == "active"
        assert report.progress_percent == 25
        assert report.tips == list(get_goal_type(GoalType.home).tips)


class TestRenderReportCsv:
    def test_layout(self):
        text = render_report_csv(build_plan_report(make_goal(), "Sam", TODAY, default_capacity=300))
        lines = text.splitlines()
        assert lines[0] == "Metric,Value"
        assert "Monthly Required,1000" in lines
        assert "Months Remaining,12" in lines
        assert "Status,Adjustment Needed" in lines
        assert "Shortfall,700" in lines
        blank = lines.index("")
        assert lines[blank + 1] == "Scenario,Monthly Contribution,Months to Goal,Impact"
        assert lines[blank + 2] == "Current Plan,1000,12,Over capacity"
        assert lines[-1] == "+$100/month,1100,11,Saves 1 months"


class TestGoalExportStatus:
    def test_complete(self):
        assert goal_export_status(make_goal(), 100, TODAY) == "Complete"

    def test_overdue(self):
        assert goal_export_status(make_goal(target_date=date(2026, 1, 1)), 40, TODAY) == "Overdue"

    def test_active(self):
        assert goal_export_status(make_goal(), 40, TODAY) == "Active"


class TestRenderGoalsCsv:
    def test_header_only(self):
        assert render_goals_csv([], TODAY) == ",".join(GOALS_CSV_HEADER) + "\n"

    def test_rows(self):
        goals = [
            make_goal(),
            make_goal(goal_id="g2", name="Done", current_savings=12000, monthly_capacity=250),
            make_goal(goal_id="g3", name="Late", target_date=date(2026, 1, 1)),
        ]
        lines = render_goals_csv(goals, TODAY).splitlines()
        assert lines[1] == "Emergency fund,emergency,12000.0,0.0,2027-02-24,0,0,Active,2026-02-15"
        assert lines[2] == "Done,emergency,12000.0,12000.0,2027-02-24,250.0,100,Complete,2026-02-15"
        assert lines[3].endswith(",Overdue,2026-02-15")
