"""Two-way sync between an account and its member-directory record.

Field mapping (app -> directory):
    active goals        -> custom_fields.savings_goals
    sync time           -> custom_fields.last_app_sync
    account id          -> custom_fields.app_user_id

Field mapping (directory -> app):
    profile.first_name + profile.last_name -> full_name
    profile.phone                          -> phone
    custom_fields.membership_level         -> membership_tier (default "free")

Directory goals that are not already ours are imported as new goals named
"<name> (from website)".
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any

from pydantic import BaseModel, ValidationError

from goalplan.accounts.models import Account
from goalplan.accounts.store import AccountStore
from goalplan.exceptions import MemberDirectoryUnavailableError, MemberNotFoundError
from goalplan.members.client import MemberDirectoryClient
from goalplan.planner.models import GoalCreate, GoalType, SavingsGoal
from goalplan.planner.store import GoalStore

logger = logging.getLogger(__name__)

IMPORTED_SUFFIX = " (from website)"


class SyncResult(BaseModel):
    member_id: str
    pushed_goals: int
    imported_goals: int


def goal_to_member_goal(goal: SavingsGoal) -> dict[str, Any]:
    return {
        "id": goal.id,
        "name": goal.name,
        "goal_type": goal.goal_type.value,
        "target_amount": goal.target_amount,
        "current_savings": goal.current_savings,
        "target_date": goal.target_date.isoformat(),
        "monthly_capacity": goal.monthly_capacity,
        "status": goal.status,
        "created_at": goal.created_at.isoformat(),
        "updated_at": goal.updated_at.isoformat(),
    }


def goals_to_member_fields(account: Account, goals: list[SavingsGoal], now: datetime) -> dict[str, Any]:
    return {
        "custom_fields": {
            "savings_goals": [goal_to_member_goal(g) for g in goals],
            "last_app_sync": now.isoformat(),
            "app_user_id": account.id,
        }
    }


def account_to_new_member(account: Account) -> dict[str, Any]:
    first, _, last = (account.full_name or "").partition(" ")
    return {
        "login_email": account.email,
        "profile": {"first_name": first, "last_name": last, "phone": account.phone},
        "custom_fields": {"app_user_id": account.id},
    }


def member_to_account_updates(member: dict[str, Any]) -> dict[str, Any]:
    profile = member.get("profile") or {}
    custom = member.get("custom_fields") or {}
    updates: dict[str, Any] = {
        "membership_tier": custom.get("membership_level") or "free",
    }
    full_name = f"{profile.get('first_name') or ''} {profile.get('last_name') or ''}".strip()
    if full_name:
        updates["full_name"] = full_name
    if profile.get("phone"):
        updates["phone"] = profile["phone"]
    return updates


def _parse_goal_type(value: Any) -> GoalType:
    try:
        return GoalType(value)
    except ValueError:
        return GoalType.emergency


def _parse_date(value: Any, today: date) -> date:
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            pass
    return today


def member_goal_to_create(item: dict[str, Any], today: date) -> GoalCreate | None:
    """Build the import for one directory goal, or None when it cannot be imported."""
    if not item.get("id") or not item.get("name"):
        return None
    target = item.get("target_amount") or 0
    if not isinstance(target, (int, float)) or target <= 0:
        return None
    capacity = item.get("monthly_capacity")
    if not isinstance(capacity, (int, float)):
        capacity = None
    current = item.get("current_savings")
    if not isinstance(current, (int, float)):
        current = 0.0
    try:
        return GoalCreate(
            name=f"{item['name']}{IMPORTED_SUFFIX}",
            goal_type=_parse_goal_type(item.get("goal_type")),
            target_amount=target,
            current_savings=max(0.0, current),
            target_date=_parse_date(item.get("target_date"), today),
            monthly_capacity=capacity if capacity and capacity > 0 else None,
        )
    except ValidationError:
        return None


class MemberSyncService:
    def __init__(self, client: MemberDirectoryClient, accounts: AccountStore, goals: GoalStore) -> None:
        self.client = client
        self.accounts = accounts
        self.goals = goals

    async def _link(self, account: Account) -> dict[str, Any]:
        if account.member_id:
            member = await self.client.get_member_by_id(account.member_id)
            if member is not None:
                return member
            logger.warning("Linked member %s for account %s is gone; relinking", account.member_id, account.id)

        if not account.email:
            raise MemberNotFoundError("Account has no email to match a directory member")

        member = await self.client.get_member_by_email(account.email)
        if member is None:
            member = await self.client.create_member(account_to_new_member(account))
            logger.info("Created directory member %s for account %s", member["id"], account.id)
        return member

    async def sync_account(
        self,
        account: Account,
        now: datetime | None = None,
        today: date | None = None,
    ) -> tuple[Account, SyncResult]:
        if not self.client.is_configured:
            raise MemberDirectoryUnavailableError("Member directory is not configured")

        now = now or datetime.now(timezone.utc)
        today = today or now.date()

        member = await self._link(account)
        member_id = str(member["id"])

        goals = await self.goals.list_active(account.id)
        await self.client.update_member(member_id, goals_to_member_fields(account, goals, now))

        own_ids = {g.id for g in goals}
        names = {g.name for g in goals}
        imported = 0
        for item in (member.get("custom_fields") or {}).get("savings_goals") or []:
            if item.get("id") in own_ids:
                continue
            data = member_goal_to_create(item, today)
            if data is None or data.name in names:
                continue
            await self.goals.create(account.id, data)
            names.add(data.name)
            imported += 1

        account = account.model_copy(
            update={
                **member_to_account_updates(member),
                "member_id": member_id,
                "last_member_sync_at": now,
                "updated_at": now,
            }
        )
        await self.accounts.save(account)
        logger.info(
            "Synced account %s with member %s (pushed=%d imported=%d)",
            account.id,
            member_id,
            len(goals),
            imported,
        )
        return account, SyncResult(member_id=member_id, pushed_goals=len(goals), imported_goals=imported)
