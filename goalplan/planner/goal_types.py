"""Static goal type catalog — display labels and saving tips, no DB.

Goal type never changes the projection; it only picks the label and tips
shown next to a plan.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from goalplan.planner.models import GoalType


@dataclass(frozen=True, slots=True)
class GoalTypeInfo:
    goal_type: GoalType
    label: str
    tips: tuple[str, ...] = field(default_factory=tuple)


GOAL_TYPES: dict[GoalType, GoalTypeInfo] = {
    GoalType.education: GoalTypeInfo(
        goal_type=GoalType.education,
        label="Education",
        tips=(
            "Investing in education typically provides excellent long-term returns on investment.",
            "Look into tax-advantaged education savings accounts like 529 plans.",
        ),
    ),
    GoalType.emergency: GoalTypeInfo(
        goal_type=GoalType.emergency,
        label="Emergency Fund",
        tips=(
            "Aim for 3-6 months of expenses in your emergency fund for financial security.",
            "Keep emergency funds in easily accessible, high-yield savings accounts.",
        ),
    ),
    GoalType.home: GoalTypeInfo(
        goal_type=GoalType.home,
        label="Home",
        tips=(
            "Traditional down payments range from 10-20% of the home purchase price.",
            "Remember to budget for closing costs, inspections, and moving expenses.",
        ),
    ),
    GoalType.vacation: GoalTypeInfo(
        goal_type=GoalType.vacation,
        label="Vacation",
        tips=(
            "Break down your vacation into categories: transport, accommodation, food, activities.",
            "Consider using travel reward credit cards to maximize your vacation budget.",
        ),
    ),
    GoalType.car: GoalTypeInfo(
        goal_type=GoalType.car,
        label="Car",
        tips=(
            "Consider insurance, maintenance, fuel, and depreciation in your budget.",
            "Used cars can offer better value, but factor in potential repair costs.",
        ),
    ),
    GoalType.retirement: GoalTypeInfo(
        goal_type=GoalType.retirement,
        label="Retirement",
        tips=(
            "The power of compound interest makes early retirement saving incredibly valuable.",
            "Always contribute enough to get your full employer 401(k) match.",
        ),
    ),
    GoalType.investment: GoalTypeInfo(
        goal_type=GoalType.investment,
        label="Investment",
        tips=(
            "Spread your investments across different asset classes to reduce risk.",
            "Invest the same amount regularly to reduce the impact of market volatility.",
        ),
    ),
    GoalType.other: GoalTypeInfo(
        goal_type=GoalType.other,
        label="Other",
        tips=(
            "Allocate 50% for needs, 30% for wants, and 20% for savings and debt repayment.",
            "Set up automatic transfers to make saving effortless and consistent.",
        ),
    ),
}


def get_goal_type(goal_type: GoalType | str) -> GoalTypeInfo:
    """Catalog entry for `goal_type`; unknown names fall back to `other`."""
    try:
        key = GoalType(goal_type)
    except ValueError:
        key = GoalType.other
    return GOAL_TYPES[key]


def list_goal_types() -> list[GoalTypeInfo]:
    return list(GOAL_TYPES.values())
