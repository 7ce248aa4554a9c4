"""Planner HTTP routers — calculator, saved goals, guest quota."""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Response

from goalplan.accounts.store import AccountStore
from goalplan.auth import Caller, get_caller, verify_api_key
from goalplan.config import settings
from goalplan.dependencies import (
    get_account_store,
    get_goal_store,
    get_quota_tracker,
    get_today,
)
from goalplan.exceptions import GoalNotFoundError
from goalplan.planner import projection as proj
from goalplan.planner import report
from goalplan.planner.goal_types import list_goal_types
from goalplan.planner.models import (
    CalculationRequest,
    GoalCreate,
    GoalUpdate,
    PlanReport,
    Projection,
    QuotaStatus,
    RealityCheck,
    SavingsGoal,
    WhatIfRequest,
    WhatIfResponse,
)
from goalplan.planner.presets import get_preset, list_presets
from goalplan.planner.quota import GOALS, REPORTS, GuestQuotaTracker
from goalplan.planner.store import GoalStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/planner", tags=["planner"], dependencies=[Depends(verify_api_key)])
goals_router = APIRouter(prefix="/goals", tags=["goals"], dependencies=[Depends(verify_api_key)])
guest_router = APIRouter(prefix="/guest", tags=["guest"], dependencies=[Depends(verify_api_key)])


def _project(req: CalculationRequest, today: date) -> Projection:
    return proj.compute_projection(
        req.target_amount,
        req.current_savings,
        req.target_date,
        req.monthly_capacity,
        today=today,
    )


# ---------------------------------------------------------------------------
# /planner
# ---------------------------------------------------------------------------


@router.post("/calculate", response_model=Projection)
async def calculate(
    req: CalculationRequest,
    today: date = Depends(get_today),
) -> Projection:
    return _project(req, today)


@router.post("/what-if", response_model=WhatIfResponse)
async def what_if(
    req: WhatIfRequest,
    today: date = Depends(get_today),
) -> WhatIfResponse:
    deltas = list(req.deltas)
    if req.preset is not None:
        preset = get_preset(req.preset)
        if preset is None:
            raise HTTPException(status_code=404, detail=f"Unknown preset: {req.preset}")
        deltas.extend(preset.deltas)
    if not deltas:
        deltas = list(proj.BUILTIN_SCENARIO_DELTAS)

    projection = _project(req, today)
    return WhatIfResponse(
        projection=projection,
        outcomes=[proj.adjust_scenario(projection, d, today=today) for d in deltas],
    )


@router.post("/reality-check", response_model=RealityCheck)
async def reality_check(
    req: CalculationRequest,
    today: date = Depends(get_today),
) -> RealityCheck:
    return proj.reality_check(_project(req, today))


@router.get("/goal-types")
async def goal_types() -> list[dict]:
    return [{"id": t.goal_type.value, "label": t.label, "tips": list(t.tips)} for t in list_goal_types()]


@router.get("/presets")
async def presets() -> list[dict]:
    return [
        {"id": p.id, "label": p.label, "description": p.description, "deltas": list(p.deltas)}
        for p in list_presets()
    ]


# ---------------------------------------------------------------------------
# /goals
# ---------------------------------------------------------------------------


async def _owned_goal(store: GoalStore, caller: Caller, goal_id: str) -> SavingsGoal:
    goal = await store.get(goal_id)
    if goal is None or goal.owner_id != caller.owner_id or not goal.is_active:
        raise GoalNotFoundError(goal_id)
    return goal


async def _owner_name(accounts: AccountStore, caller: Caller) -> str:
    if caller.is_guest:
        return "Guest"
    account = await accounts.get(caller.owner_id)
    return account.display_name if account is not None else "Member"


@goals_router.get("", response_model=list[SavingsGoal])
async def list_goals(
    caller: Caller = Depends(get_caller),
    store: GoalStore = Depends(get_goal_store),
) -> list[SavingsGoal]:
    return await store.list_active(caller.owner_id)


@goals_router.post("", response_model=SavingsGoal, status_code=201)
async def create_goal(
    data: GoalCreate,
    caller: Caller = Depends(get_caller),
    store: GoalStore = Depends(get_goal_store),
    quota: GuestQuotaTracker = Depends(get_quota_tracker),
    today: date = Depends(get_today),
) -> SavingsGoal:
    if caller.is_guest:
        quota.consume(caller.owner_id, GOALS, today)
    goal = await store.create(caller.owner_id, data)
    logger.info("Created goal %s for %s", goal.id, caller.owner_id)
    return goal


# Declared before /{goal_id} so "export.csv" is not taken for a goal id.
@goals_router.get("/export.csv")
async def export_goals_csv(
    caller: Caller = Depends(get_caller),
    store: GoalStore = Depends(get_goal_store),
    today: date = Depends(get_today),
) -> Response:
    goals = await store.list_active(caller.owner_id)
    return Response(
        content=report.render_goals_csv(goals, today),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="savings-goals.csv"'},
    )


@goals_router.get("/{goal_id}", response_model=SavingsGoal)
async def get_goal(
    goal_id: str,
    caller: Caller = Depends(get_caller),
    store: GoalStore = Depends(get_goal_store),
) -> SavingsGoal:
    return await _owned_goal(store, caller, goal_id)


@goals_router.patch("/{goal_id}", response_model=SavingsGoal)
async def update_goal(
    goal_id: str,
    data: GoalUpdate,
    caller: Caller = Depends(get_caller),
    store: GoalStore = Depends(get_goal_store),
) -> SavingsGoal:
    await _owned_goal(store, caller, goal_id)
    updated = await store.update(goal_id, data)
    if updated is None:
        raise GoalNotFoundError(goal_id)
    return updated


@goals_router.delete("/{goal_id}", status_code=204)
async def delete_goal(
    goal_id: str,
    caller: Caller = Depends(get_caller),
    store: GoalStore = Depends(get_goal_store),
) -> Response:
    await _owned_goal(store, caller, goal_id)
    await store.soft_delete(goal_id)
    logger.info("Deactivated goal %s", goal_id)
    return Response(status_code=204)


@goals_router.get("/{goal_id}/projection", response_model=Projection)
async def goal_projection(
    goal_id: str,
    caller: Caller = Depends(get_caller),
    store: GoalStore = Depends(get_goal_store),
    today: date = Depends(get_today),
) -> Projection:
    goal = await _owned_goal(store, caller, goal_id)
    return proj.compute_projection(
        goal.target_amount,
        goal.current_savings,
        goal.target_date,
        goal.monthly_capacity,
        today=today,
    )


async def _report_for(
    goal_id: str,
    caller: Caller,
    store: GoalStore,
    accounts: AccountStore,
    quota: GuestQuotaTracker,
    today: date,
) -> PlanReport:
    goal = await _owned_goal(store, caller, goal_id)
    if caller.is_guest:
        quota.consume(caller.owner_id, REPORTS, today)
    return report.build_plan_report(
        goal,
        await _owner_name(accounts, caller),
        today,
        default_capacity=settings.report_default_monthly_capacity,
    )


@goals_router.get("/{goal_id}/report", response_model=PlanReport)
async def goal_report(
    goal_id: str,
    caller: Caller = Depends(get_caller),
    store: GoalStore = Depends(get_goal_store),
    accounts: AccountStore = Depends(get_account_store),
    quota: GuestQuotaTracker = Depends(get_quota_tracker),
    today: date = Depends(get_today),
) -> PlanReport:
    return await _report_for(goal_id, caller, store, accounts, quota, today)


@goals_router.get("/{goal_id}/report.csv")
async def goal_report_csv(
    goal_id: str,
    caller: Caller = Depends(get_caller),
    store: GoalStore = Depends(get_goal_store),
    accounts: AccountStore = Depends(get_account_store),
    quota: GuestQuotaTracker = Depends(get_quota_tracker),
    today: date = Depends(get_today),
) -> Response:
    plan = await _report_for(goal_id, caller, store, accounts, quota, today)
    return Response(
        content=report.render_report_csv(plan),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="savings-plan-{goal_id}.csv"'},
    )


# ---------------------------------------------------------------------------
# /guest
# ---------------------------------------------------------------------------


@guest_router.get("/quota", response_model=QuotaStatus)
async def guest_quota(
    caller: Caller = Depends(get_caller),
    quota: GuestQuotaTracker = Depends(get_quota_tracker),
    today: date = Depends(get_today),
) -> QuotaStatus:
    if not caller.is_guest:
        return QuotaStatus(is_guest=False)
    return quota.status(caller.owner_id, today)
