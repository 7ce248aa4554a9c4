"""Request-scoped dependencies resolved from application state."""

from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

from fastapi import Depends, HTTPException, Request

from goalplan.accounts.models import Account
from goalplan.accounts.service import AccountService
from goalplan.accounts.store import AccountStore
from goalplan.auth import Caller, get_caller
from goalplan.config import settings
from goalplan.members.client import MemberDirectoryClient
from goalplan.members.sync import MemberSyncService
from goalplan.planner.quota import GuestQuotaTracker
from goalplan.planner.store import GoalStore


def get_today() -> date:
    """Current date in the configured timezone."""
    return datetime.now(ZoneInfo(settings.default_tz)).date()


def get_goal_store(request: Request) -> GoalStore:
    return request.app.state.goal_store


def get_account_store(request: Request) -> AccountStore:
    return request.app.state.account_store


def get_quota_tracker(request: Request) -> GuestQuotaTracker:
    return request.app.state.quota_tracker


def get_account_service(accounts: AccountStore = Depends(get_account_store)) -> AccountService:
    return AccountService(
        accounts,
        max_failed_attempts=settings.login_max_failed_attempts,
        lockout_minutes=settings.login_lockout_minutes,
    )


def get_member_client() -> MemberDirectoryClient:
    return MemberDirectoryClient()


def get_member_sync(
    client: MemberDirectoryClient = Depends(get_member_client),
    accounts: AccountStore = Depends(get_account_store),
    goals: GoalStore = Depends(get_goal_store),
) -> MemberSyncService:
    return MemberSyncService(client, accounts, goals)


async def get_current_account(
    caller: Caller = Depends(get_caller),
    accounts: AccountStore = Depends(get_account_store),
) -> Account:
    if caller.is_guest:
        raise HTTPException(status_code=401, detail="Sign in required")
    account = await accounts.get(caller.owner_id)
    if account is None:
        raise HTTPException(status_code=401, detail="Account no longer exists")
    return account
