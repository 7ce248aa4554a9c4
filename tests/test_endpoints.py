"""Endpoint tests — FastAPI app via httpx ASGITransport."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from goalplan.config import settings
from goalplan.planner.models import MAX_WHAT_IF_DELTAS
from tests.conftest import GUEST, OTHER_GUEST, goal_payload

CALC = {"target_amount": 12000, "current_savings": 0, "target_date": "2027-02-24"}
REGISTER = {
    "username": "sam",
    "password": "s3cret-pass",
    "email": "sam@example.com",
    "full_name": "Sam Lee",
}


async def _member_headers(client) -> dict[str, str]:
    resp = await client.post("/accounts/register", json=REGISTER)
    assert resp.status_code == 201
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


async def _create_goal(client, headers, **overrides) -> dict:
    resp = await client.post("/goals", json=goal_payload(**overrides), headers=headers)
    assert resp.status_code == 201
    return resp.json()


class TestRoot:
    @pytest.mark.asyncio
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    @pytest.mark.asyncio
    async def test_index(self, client):
        body = (await client.get("/")).json()
        assert body["planner"]["calculate"] == "/planner/calculate"


class TestApiKey:
    @pytest.mark.asyncio
    async def test_required_when_configured(self, client):
        with patch.object(settings, "service_api_key", "secret"):
            assert (await client.post("/planner/calculate", json=CALC)).status_code == 401
            resp = await client.post("/planner/calculate", json=CALC, headers={"X-API-Key": "secret"})
            assert resp.status_code == 200

    @pytest.mark.asyncio
    async def test_health_stays_open(self, client):
        with patch.object(settings, "service_api_key", "secret"):
            assert (await client.get("/health")).status_code == 200


class TestPlannerEndpoints:
    @pytest.mark.asyncio
    async def test_calculate(self, client):
        resp = await client.post("/planner/calculate", json=CALC)
        assert resp.status_code == 200
        body = resp.json()
        assert body["months_remaining"] == 12
        assert body["monthly_required"] == 1000
        assert body["is_feasible"] is True
        assert body["scenarios"]["plus100"]["months_saved"] == 1

    @pytest.mark.asyncio
    async def test_calculate_with_capacity(self, client):
        payload = {"target_amount": 5000, "target_date": "2026-05-30", "monthly_capacity": 100}
        body = (await client.post("/planner/calculate", json=payload)).json()
        assert body["months_remaining"] == 3
        assert body["monthly_required"] == 1667
        assert body["is_feasible"] is False

    @pytest.mark.asyncio
    async def test_calculate_rejects_zero_target(self, client):
        resp = await client.post("/planner/calculate", json={**CALC, "target_amount": 0})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_what_if_deltas(self, client):
        resp = await client.post("/planner/what-if", json={**CALC, "deltas": [200, -1000]})
        assert resp.status_code == 200
        outcomes = resp.json()["outcomes"]
        assert outcomes[0]["months_to_goal"] == 10
        assert outcomes[0]["finish_date"] == "2026-12-26"
        assert outcomes[1]["reachable"] is False
        assert outcomes[1]["finish_date"] is None

    @pytest.mark.asyncio
    async def test_what_if_preset(self, client):
        resp = await client.post("/planner/what-if", json={**CALC, "preset": "precision"})
        assert [o["delta"] for o in resp.json()["outcomes"]] == [25, -25, 50]

    @pytest.mark.asyncio
    async def test_what_if_defaults_to_builtin(self, client):
        resp = await client.post("/planner/what-if", json=CALC)
        assert [o["delta"] for o in resp.json()["outcomes"]] == [50, 100]

    @pytest.mark.asyncio
    async def test_what_if_unknown_preset(self, client):
        resp = await client.post("/planner/what-if", json={**CALC, "preset": "nope"})
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_what_if_too_many_deltas(self, client):
        resp = await client.post("/planner/what-if", json={**CALC, "deltas": [10] * (MAX_WHAT_IF_DELTAS + 1)})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_reality_check(self, client):
        body = (await client.post("/planner/reality-check", json=CALC)).json()
        assert body["feasibility"] == "Very Challenging"
        assert body["success_rate"] == 45

    @pytest.mark.asyncio
    async def test_goal_types(self, client):
        data = (await client.get("/planner/goal-types")).json()
        assert len(data) == 8
        assert {"id", "label", "tips"} <= set(data[0])

    @pytest.mark.asyncio
    async def test_presets(self, client):
        data = (await client.get("/planner/presets")).json()
        assert {p["id"] for p in data} == {"boost", "precision"}


class TestGuestIdentity:
    @pytest.mark.asyncio
    async def test_generated_when_missing(self, client):
        resp = await client.get("/goals")
        assert resp.headers["X-Guest-Id"].startswith("guest_")

    @pytest.mark.asyncio
    async def test_echoed(self, client):
        resp = await client.get("/goals", headers=GUEST)
        assert resp.headers["X-Guest-Id"] == GUEST["X-Guest-Id"]

    @pytest.mark.asyncio
    async def test_malformed_id_replaced(self, client):
        resp = await client.get("/goals", headers={"X-Guest-Id": "a1"})
        assert resp.headers["X-Guest-Id"] != "a1"


class TestGoalEndpoints:
    @pytest.mark.asyncio
    async def test_create_and_list(self, client):
        goal = await _create_goal(client, GUEST)
        assert goal["status"] == "active"
        assert goal["owner_id"] == GUEST["X-Guest-Id"]
        listed = (await client.get("/goals", headers=GUEST)).json()
        assert [g["id"] for g in listed] == [goal["id"]]

    @pytest.mark.asyncio
    async def test_create_validation(self, client):
        resp = await client.post("/goals", json=goal_payload(target_amount=0), headers=GUEST)
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_other_owner_gets_404(self, client):
        goal = await _create_goal(client, GUEST)
        assert (await client.get(f"/goals/{goal['id']}", headers=OTHER_GUEST)).status_code == 404
        assert (await client.get("/goals", headers=OTHER_GUEST)).json() == []

    @pytest.mark.asyncio
    async def test_update(self, client):
        goal = await _create_goal(client, GUEST)
        resp = await client.patch(f"/goals/{goal['id']}", json={"current_savings": 6000}, headers=GUEST)
        assert resp.status_code == 200
        assert resp.json()["current_savings"] == 6000
        assert resp.json()["name"] == "Emergency fund"

    @pytest.mark.asyncio
    async def test_update_rejects_null_required_fields(self, client):
        goal = await _create_goal(client, GUEST)
        resp = await client.patch(
            f"/goals/{goal['id']}", json={"target_amount": None, "name": None}, headers=GUEST
        )
        assert resp.status_code == 422
        stored = (await client.get(f"/goals/{goal['id']}", headers=GUEST)).json()
        assert stored["target_amount"] == 12000
        assert stored["name"] == "Emergency fund"
        projection = await client.get(f"/goals/{goal['id']}/projection", headers=GUEST)
        assert projection.status_code == 200
        assert projection.json()["monthly_required"] == 1000

    @pytest.mark.asyncio
    async def test_update_clears_capacity(self, client):
        goal = await _create_goal(client, GUEST, monthly_capacity=900)
        resp = await client.patch(f"/goals/{goal['id']}", json={"monthly_capacity": None}, headers=GUEST)
        assert resp.status_code == 200
        assert resp.json()["monthly_capacity"] is None
        projection = (await client.get(f"/goals/{goal['id']}/projection", headers=GUEST)).json()
        assert projection["is_feasible"] is True

    @pytest.mark.asyncio
    async def test_soft_delete(self, client, app_state):
        goal = await _create_goal(client, GUEST)
        resp = await client.delete(f"/goals/{goal['id']}", headers=GUEST)
        assert resp.status_code == 204
        assert (await client.get(f"/goals/{goal['id']}", headers=GUEST)).status_code == 404
        assert (await client.get("/goals", headers=GUEST)).json() == []
        stored = await app_state.goal_store.get(goal["id"])
        assert stored.is_active is False

    @pytest.mark.asyncio
    async def test_unknown_goal(self, client):
        resp = await client.get("/goals/does-not-exist", headers=GUEST)
        assert resp.status_code == 404
        assert "does-not-exist" in resp.json()["detail"]

    @pytest.mark.asyncio
    async def test_projection(self, client):
        goal = await _create_goal(client, GUEST, monthly_capacity=900)
        body = (await client.get(f"/goals/{goal['id']}/projection", headers=GUEST)).json()
        assert body["monthly_required"] == 1000
        assert body["is_feasible"] is False

    @pytest.mark.asyncio
    async def test_export_csv(self, client):
        await _create_goal(client, GUEST)
        resp = await client.get("/goals/export.csv", headers=GUEST)
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        lines = resp.text.splitlines()
        assert lines[0].startswith("Goal Name,Goal Type")
        assert lines[1].startswith("Emergency fund,emergency,12000.0")


class TestGuestQuota:
    @pytest.mark.asyncio
    async def test_goal_limit(self, client):
        for i in range(settings.guest_daily_goal_limit):
            await _create_goal(client, GUEST, name=f"Goal {i}")
        resp = await client.post("/goals", json=goal_payload(), headers=GUEST)
        assert resp.status_code == 429
        # Another guest is unaffected
        assert (await client.post("/goals", json=goal_payload(), headers=OTHER_GUEST)).status_code == 201

    @pytest.mark.asyncio
    async def test_status(self, client):
        await _create_goal(client, GUEST)
        body = (await client.get("/guest/quota", headers=GUEST)).json()
        assert body["is_guest"] is True
        assert body["goals_created"] == 1
        assert body["goals_remaining"] == settings.guest_daily_goal_limit - 1
        assert body["resets_on"] == "2026-03-02"

    @pytest.mark.asyncio
    async def test_report_limit(self, client):
        goal = await _create_goal(client, GUEST)
        first = await client.get(f"/goals/{goal['id']}/report", headers=GUEST)
        assert first.status_code == 200
        assert first.json()["owner_name"] == "Guest"
        assert first.json()["monthly_capacity"] == settings.report_default_monthly_capacity
        second = await client.get(f"/goals/{goal['id']}/report.csv", headers=GUEST)
        assert second.status_code == 429

    @pytest.mark.asyncio
    async def test_report_csv(self, client):
        goal = await _create_goal(client, GUEST)
        resp = await client.get(f"/goals/{goal['id']}/report.csv", headers=GUEST)
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert resp.text.startswith("Metric,Value")

    @pytest.mark.asyncio
    async def test_missing_goal_does_not_use_quota(self, client):
        await client.get("/goals/nope/report", headers=GUEST)
        body = (await client.get("/guest/quota", headers=GUEST)).json()
        assert body["reports_downloaded"] == 0


class TestAccountEndpoints:
    @pytest.mark.asyncio
    async def test_register_returns_token(self, client):
        resp = await client.post("/accounts/register", json=REGISTER)
        assert resp.status_code == 201
        body = resp.json()
        assert body["token_type"] == "bearer"
        assert body["account"]["username"] == "sam"
        assert "password_hash" not in body["account"]

    @pytest.mark.asyncio
    async def test_register_duplicate(self, client):
        await client.post("/accounts/register", json=REGISTER)
        resp = await client.post("/accounts/register", json={**REGISTER, "email": "x@example.com"})
        assert resp.status_code == 409

    @pytest.mark.asyncio
    async def test_register_validation(self, client):
        resp = await client.post("/accounts/register", json={**REGISTER, "password": "short"})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_login(self, client):
        await client.post("/accounts/register", json=REGISTER)
        resp = await client.post("/accounts/login", json={"identifier": "sam@example.com", "password": "s3cret-pass"})
        assert resp.status_code == 200
        assert resp.json()["account"]["last_login_at"] is not None

    @pytest.mark.asyncio
    async def test_login_wrong_password_then_lock(self, client):
        await client.post("/accounts/register", json=REGISTER)
        bad = {"identifier": "sam", "password": "wrong-pass"}
        for remaining in range(settings.login_max_failed_attempts - 1, 0, -1):
            resp = await client.post("/accounts/login", json=bad)
            assert resp.status_code == 401
            assert f"{remaining} attempts remaining" in resp.json()["detail"]
        assert (await client.post("/accounts/login", json=bad)).status_code == 423
        good = {"identifier": "sam", "password": "s3cret-pass"}
        assert (await client.post("/accounts/login", json=good)).status_code == 423

    @pytest.mark.asyncio
    async def test_me(self, client):
        headers = await _member_headers(client)
        resp = await client.get("/accounts/me", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["full_name"] == "Sam Lee"

    @pytest.mark.asyncio
    async def test_me_requires_member(self, client):
        assert (await client.get("/accounts/me", headers=GUEST)).status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_token(self, client):
        resp = await client.get("/goals", headers={"Authorization": "Bearer garbage"})
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_members_are_not_quota_limited(self, client):
        headers = await _member_headers(client)
        for i in range(settings.guest_daily_goal_limit + 1):
            await _create_goal(client, headers, name=f"Goal {i}")
        goal = (await client.get("/goals", headers=headers)).json()[0]
        for _ in range(settings.guest_daily_report_limit + 1):
            resp = await client.get(f"/goals/{goal['id']}/report", headers=headers)
            assert resp.status_code == 200
        assert resp.json()["owner_name"] == "Sam Lee"
        quota = (await client.get("/guest/quota", headers=headers)).json()
        assert quota["is_guest"] is False
        assert quota["goals_limit"] is None

    @pytest.mark.asyncio
    async def test_sync(self, client, directory):
        directory.add(
            {
                "id": "m-1",
                "login_email": "sam@example.com",
                "profile": {"first_name": "Samantha", "last_name": "Lee"},
                "custom_fields": {
                    "membership_level": "gold",
                    "savings_goals": [{"id": "w1", "name": "Bike", "target_amount": 800}],
                },
            }
        )
        headers = await _member_headers(client)
        await _create_goal(client, headers)
        resp = await client.post("/accounts/me/sync", headers=headers)
        assert resp.status_code == 200
        assert resp.json() == {"member_id": "m-1", "pushed_goals": 1, "imported_goals": 1}
        me = (await client.get("/accounts/me", headers=headers)).json()
        assert me["membership_tier"] == "gold"
        assert me["full_name"] == "Samantha Lee"
        names = {g["name"] for g in (await client.get("/goals", headers=headers)).json()}
        assert names == {"Emergency fund", "Bike (from website)"}

    @pytest.mark.asyncio
    async def test_sync_directory_down(self, client, directory):
        headers = await _member_headers(client)
        directory.fail_with = 503
        resp = await client.post("/accounts/me/sync", headers=headers)
        assert resp.status_code == 502
