"""Shared fixtures for the test suite."""

from __future__ import annotations

import json
from datetime import date, datetime, timezone
from typing import Any

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from goalplan.dependencies import get_member_client, get_today
from goalplan.main import app, configure_state
from goalplan.members.client import MemberDirectoryClient
from goalplan.planner.models import GoalType, SavingsGoal

TODAY = date(2026, 3, 1)


# ---------------------------------------------------------------------------
# Fake member directory (served through httpx.MockTransport)
# ---------------------------------------------------------------------------


class FakeDirectory:
    """In-memory member directory speaking the directory's JSON API."""

    def __init__(self) -> None:
        self.members: dict[str, dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []
        self.fail_with: int | None = None

    def add(self, member: dict[str, Any]) -> dict[str, Any]:
        self.members[member["id"]] = member
        return member

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, json={"message": "boom"})

        parts = request.url.path.rstrip("/").split("/")
        member_id = parts[4] if len(parts) > 4 else None

        if request.method == "GET" and member_id is None:
            email = request.url.params.get("email", "").lower()
            found = [m for m in self.members.values() if (m.get("login_email") or "").lower() == email]
            return httpx.Response(200, json={"members": found})

        if request.method == "POST":
            body = json.loads(request.content)["member"]
            new_id = f"m-{len(self.members) + 1}"
            member = self.add({"id": new_id, **body})
            return httpx.Response(201, json={"member": member})

        member = self.members.get(member_id or "")
        if member is None:
            return httpx.Response(404, json={"message": "not found"})

        if request.method == "PATCH":
            body = json.loads(request.content)["member"]
            for key, value in body.items():
                if isinstance(value, dict):
                    member.setdefault(key, {}).update(value)
                else:
                    member[key] = value
        return httpx.Response(200, json={"member": member})


@pytest.fixture()
def directory() -> FakeDirectory:
    return FakeDirectory()


@pytest.fixture()
def member_client(directory) -> MemberDirectoryClient:
    return MemberDirectoryClient(
        base_url="https://directory.test",
        api_key="dir-key",
        site_id="site-1",
        transport=httpx.MockTransport(directory.handler),
    )


# ---------------------------------------------------------------------------
# App fixtures (fresh memory stores per test, fixed "today")
# ---------------------------------------------------------------------------


@pytest.fixture()
def app_state(member_client):
    """Fresh in-memory stores and quota tracker; ASGITransport skips lifespan."""
    configure_state(app, "memory")
    app.dependency_overrides[get_today] = lambda: TODAY
    app.dependency_overrides[get_member_client] = lambda: member_client
    yield app.state
    app.dependency_overrides.clear()


@pytest.fixture()
async def client(app_state):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


GUEST = {"X-Guest-Id": "guest_0123456789abcdef"}
OTHER_GUEST = {"X-Guest-Id": "guest_fedcba9876543210"}


def goal_payload(**overrides: Any) -> dict[str, Any]:
    """JSON body for POST /goals."""
    payload: dict[str, Any] = {
        "name": "Emergency fund",
        "goal_type": "emergency",
        "target_amount": 12000,
        "current_savings": 0,
        "target_date": "2027-02-24",  # TODAY + 360 days
    }
    payload.update(overrides)
    return payload


def make_goal(
    goal_id: str = "g1",
    owner_id: str = "owner-1",
    target_amount: float = 12000.0,
    current_savings: float = 0.0,
    target_date: date = date(2027, 2, 24),
    monthly_capacity: float | None = None,
    goal_type: GoalType = GoalType.emergency,
    name: str = "Emergency fund",
    is_active: bool = True,
) -> SavingsGoal:
    """Helper to build a SavingsGoal without going through a store."""
    ts = datetime(2026, 2, 15, 12, 0, tzinfo=timezone.utc)
    return SavingsGoal(
        id=goal_id,
        owner_id=owner_id,
        name=name,
        goal_type=goal_type,
        target_amount=target_amount,
        current_savings=current_savings,
        target_date=target_date,
        monthly_capacity=monthly_capacity,
        is_active=is_active,
        created_at=ts,
        updated_at=ts,
    )
