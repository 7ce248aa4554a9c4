"""Goal storage — one interface, two adapters picked at application start.

MemoryGoalStore keeps goals in a dict owned by the store instance.
SqlGoalStore reads and writes the savings_goals table with raw SQL.
Both soft-delete: a deleted goal stays stored with is_active = false.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Any, Protocol

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from goalplan.planner.models import GoalCreate, GoalUpdate, SavingsGoal


def _now() -> datetime:
    return datetime.now(timezone.utc)


class GoalStore(Protocol):
    async def get(self, goal_id: str) -> SavingsGoal | None: ...

    async def list_active(self, owner_id: str) -> list[SavingsGoal]: ...

    async def create(self, owner_id: str, data: GoalCreate) -> SavingsGoal: ...

    async def update(self, goal_id: str, data: GoalUpdate) -> SavingsGoal | None: ...

    async def soft_delete(self, goal_id: str) -> bool: ...


# ---------------------------------------------------------------------------
# In-memory adapter
# ---------------------------------------------------------------------------


class MemoryGoalStore:
    def __init__(self) -> None:
        self._goals: dict[str, SavingsGoal] = {}

    async def get(self, goal_id: str) -> SavingsGoal | None:
        return self._goals.get(goal_id)

    async def list_active(self, owner_id: str) -> list[SavingsGoal]:
        goals = [g for g in self._goals.values() if g.owner_id == owner_id and g.is_active]
        return sorted(goals, key=lambda g: g.created_at)

    async def create(self, owner_id: str, data: GoalCreate) -> SavingsGoal:
        now = _now()
        goal = SavingsGoal(
            id=str(uuid.uuid4()),
            owner_id=owner_id,
            created_at=now,
            updated_at=now,
            is_active=True,
            **data.model_dump(),
        )
        self._goals[goal.id] = goal
        return goal

    async def update(self, goal_id: str, data: GoalUpdate) -> SavingsGoal | None:
        existing = self._goals.get(goal_id)
        if existing is None:
            return None
        changes = data.model_dump(exclude_unset=True)
        updated = SavingsGoal.model_validate({**existing.model_dump(), **changes, "updated_at": _now()})
        self._goals[goal_id] = updated
        return updated

    async def soft_delete(self, goal_id: str) -> bool:
        existing = self._goals.get(goal_id)
        if existing is None:
            return False
        self._goals[goal_id] = existing.model_copy(update={"is_active": False, "updated_at": _now()})
        return True


# ---------------------------------------------------------------------------
# SQL adapter
# ---------------------------------------------------------------------------

_COLUMNS = (
    "id, owner_id, name, goal_type, target_amount, current_savings, "
    "target_date, monthly_capacity, is_active, created_at, updated_at"
)


def _row_to_goal(row: dict[str, Any]) -> SavingsGoal:
    # Drivers without native DATE support hand back ISO strings.
    if isinstance(row.get("target_date"), str):
        row["target_date"] = date.fromisoformat(row["target_date"][:10])
    if row.get("current_savings") is None:
        row["current_savings"] = 0.0
    return SavingsGoal.model_validate(row)


class SqlGoalStore:
    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = sessions

    async def _fetch_one(self, session: AsyncSession, goal_id: str) -> SavingsGoal | None:
        result = await session.execute(
            text(f"SELECT {_COLUMNS} FROM savings_goals WHERE id = :id"),
            {"id": goal_id},
        )
        row = result.fetchone()
        if row is None:
            return None
        return _row_to_goal(dict(zip(result.keys(), row)))

    async def get(self, goal_id: str) -> SavingsGoal | None:
        async with self._sessions() as session:
            return await self._fetch_one(session, goal_id)

    async def list_active(self, owner_id: str) -> list[SavingsGoal]:
        async with self._sessions() as session:
            result = await session.execute(
                text(
                    f"SELECT {_COLUMNS} FROM savings_goals "
                    "WHERE owner_id = :owner_id AND is_active = :active "
                    "ORDER BY created_at"
                ),
                {"owner_id": owner_id, "active": True},
            )
            columns = result.keys()
            return [_row_to_goal(dict(zip(columns, r))) for r in result.fetchall()]

    async def create(self, owner_id: str, data: GoalCreate) -> SavingsGoal:
        now = _now()
        goal = SavingsGoal(
            id=str(uuid.uuid4()),
            owner_id=owner_id,
            created_at=now,
            updated_at=now,
            is_active=True,
            **data.model_dump(),
        )
        params = goal.model_dump(exclude={"status"})
        params["goal_type"] = goal.goal_type.value
        async with self._sessions() as session:
            await session.execute(
                text(
                    f"INSERT INTO savings_goals ({_COLUMNS}) VALUES ("
                    ":id, :owner_id, :name, :goal_type, :target_amount, :current_savings, "
                    ":target_date, :monthly_capacity, :is_active, :created_at, :updated_at)"
                ),
                params,
            )
            await session.commit()
        return goal

    async def update(self, goal_id: str, data: GoalUpdate) -> SavingsGoal | None:
        changes = data.model_dump(exclude_unset=True)
        if "goal_type" in changes and changes["goal_type"] is not None:
            changes["goal_type"] = changes["goal_type"].value
        changes["updated_at"] = _now()

        assignments = ", ".join(f"{column} = :{column}" for column in changes)
        async with self._sessions() as session:
            result = await session.execute(
                text(f"UPDATE savings_goals SET {assignments} WHERE id = :id"),
                {**changes, "id": goal_id},
            )
            if result.rowcount == 0:
                return None
            await session.commit()
            return await self._fetch_one(session, goal_id)

    async def soft_delete(self, goal_id: str) -> bool:
        async with self._sessions() as session:
            result = await session.execute(
                text("UPDATE savings_goals SET is_active = :active, updated_at = :now WHERE id = :id"),
                {"active": False, "now": _now(), "id": goal_id},
            )
            await session.commit()
            return result.rowcount > 0
