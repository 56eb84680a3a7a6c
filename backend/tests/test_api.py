from __future__ import annotations
from datetime import timedelta
import pytest

from habitboard.services.leaderboard import utc_today


async def _register(ac, user_id, name="Test User", **extra):
    return await ac.post("/auth/register", json={"id": user_id, "name": name, **extra})


async def _approved(ac, admin_headers, user_id, name=None):
    await _register(ac, user_id, name or f"user{user_id}")
    r = await ac.post(f"/admin/users/{user_id}/approve", headers=admin_headers)
    assert r.status_code == 200


async def _submit(ac, user_id, completed, days_ago=0, **extra):
    day = utc_today() - timedelta(days=days_ago)
    return await ac.post("/tasks/submit", json={
        "user_id": user_id,
        "tasks": {str(i): True for i in range(1, completed + 1)},
        "date": day.isoformat(),
        **extra,
    })


@pytest.mark.asyncio
async def test_register_and_access_check(client):
    r = await _register(client, 101, "Ayla", username="ayla")
    assert r.status_code == 201
    assert r.json()["status"] == "pending"

    # second registration refreshes the profile, status untouched
    r = await _register(client, 101, "Ayla K")
    assert r.status_code == 200
    assert r.json()["name"] == "Ayla K"

    check = (await client.get("/auth/check/101")).json()
    assert check == {"exists": True, "status": "pending", "can_access": False}
    assert (await client.get("/auth/check/999")).json()["exists"] is False


@pytest.mark.asyncio
async def test_admin_requires_token(client):
    await _register(client, 102)
    assert (await client.post("/admin/users/102/approve")).status_code == 401
    r = await client.post("/admin/users/102/approve", headers={"Authorization": "Bearer nope"})
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_admin_status_changes(client, admin_headers):
    await _register(client, 103)
    r = await client.post("/admin/users/103/approve", headers=admin_headers)
    assert r.json()["status"] == "approved"
    assert r.json()["approved_at"] is not None

    r = await client.patch("/admin/users/103/status", json={"status": "suspended"}, headers=admin_headers)
    assert r.json()["status"] == "suspended"

    r = await client.post("/admin/users/103/reject", headers=admin_headers)
    assert r.json()["status"] == "rejected"

    assert (await client.post("/admin/users/404/approve", headers=admin_headers)).status_code == 404

    listed = (await client.get("/admin/users", params={"status": "rejected"}, headers=admin_headers)).json()
    assert [u["id"] for u in listed] == [103]


@pytest.mark.asyncio
async def test_admin_dashboard(client, admin_headers):
    await _approved(client, admin_headers, 104)
    await _register(client, 105)
    await _submit(client, 104, 3)

    data = (await client.get("/admin/dashboard", headers=admin_headers)).json()
    assert data["users"] == {"total": 2, "approved": 1, "pending": 1}
    assert data["today_submissions"] == 1


@pytest.mark.asyncio
async def test_submit_requires_approval(client):
    await _register(client, 106)
    r = await _submit(client, 106, 5)
    assert r.status_code == 403
    assert (await _submit(client, 9999, 5)).status_code == 404


@pytest.mark.asyncio
async def test_submit_rejects_out_of_range_values(client, admin_headers):
    await _approved(client, admin_headers, 107)
    r = await _submit(client, 107, 3, pages_read=5000)
    assert r.status_code == 400
    r = await client.post("/tasks/submit", json={"user_id": 107, "tasks": {"11": True}})
    assert r.status_code == 400
    r = await client.post("/tasks/submit", json={"user_id": 107, "task_inputs": {"5": -40}})
    assert r.status_code == 400
    r = await client.post(
        "/tasks/submit",
        content='{"user_id": 107, "tasks": {"1": true}, "distance_km": NaN}',
        headers={"Content-Type": "application/json"},
    )
    assert r.status_code == 400
    assert (await client.get("/tasks/daily/107")).json()["is_submitted"] is False


@pytest.mark.asyncio
async def test_submission_flow_and_leaderboard(client, admin_headers):
    await _approved(client, admin_headers, 1, "Alpha")
    await _approved(client, admin_headers, 2, "Beta")

    first = await _submit(client, 1, 3, days_ago=1, pages_read=30)
    assert first.status_code == 200
    assert first.json()["achievement_unlocked"]["id"] == "first_day"

    r = await _submit(client, 1, 10, days_ago=0, distance_km=5.5)
    assert r.json()["total_points"] == 10
    assert r.json()["achievement_unlocked"]["id"] == "perfect_day"

    await _submit(client, 2, 4, days_ago=0)

    board = (await client.get("/leaderboard")).json()
    assert board["total_participants"] == 2
    top = board["entries"][0]
    assert (top["user_id"], top["score"], top["rank"], top["days_count"]) == (1, 13, 1, 2)
    assert board["entries"][1]["rank"] == 2

    daily = (await client.get("/leaderboard", params={"period": "daily"})).json()
    assert [(e["user_id"], e["score"]) for e in daily["entries"]] == [(1, 10), (2, 4)]

    reading = (await client.get("/leaderboard", params={"type": "reading"})).json()
    assert reading["entries"][0]["score"] == 30

    paged = (await client.get("/leaderboard", params={"limit": 1, "offset": 1})).json()
    assert [(e["user_id"], e["rank"]) for e in paged["entries"]] == [(2, 2)]


@pytest.mark.asyncio
async def test_resubmission_overwrites(client, admin_headers):
    await _approved(client, admin_headers, 3)
    await _submit(client, 3, 10)
    r = await _submit(client, 3, 2)
    assert r.json()["total_points"] == 2

    board = (await client.get("/leaderboard")).json()
    assert board["entries"][0]["score"] == 2
    assert board["entries"][0]["days_count"] == 1

    daily = (await client.get("/tasks/daily/3")).json()
    assert daily["is_submitted"] is True
    assert daily["completed_count"] == 2


@pytest.mark.asyncio
async def test_leaderboard_position(client, admin_headers):
    for user_id, completed in ((11, 9), (12, 6), (13, 3)):
        await _approved(client, admin_headers, user_id)
        await _submit(client, user_id, completed)
    await _approved(client, admin_headers, 14)

    data = (await client.get("/leaderboard/position/12")).json()
    assert data["user_position"]["rank"] == 2
    assert data["user_position"]["percentile"] == 67
    assert [(n["rank"], n["is_current_user"]) for n in data["surrounding_users"]] == [
        (1, False), (2, True), (3, False),
    ]
    assert data["total_participants"] == 3

    missing = (await client.get("/leaderboard/position/14")).json()
    assert missing["user_position"] is None
    assert missing["total_participants"] == 3
    assert missing["message"]


@pytest.mark.asyncio
async def test_invalid_queries_return_400(client):
    assert (await client.get("/leaderboard", params={"period": "yearly"})).status_code == 400
    assert (await client.get("/leaderboard", params={"type": "speed"})).status_code == 400
    assert (await client.get("/leaderboard", params={"limit": 0})).status_code == 400
    # validated before the user is looked up
    assert (await client.get("/leaderboard/position/12345", params={"type": "speed"})).status_code == 400
    assert (await client.get("/leaderboard/stats", params={"period": "hourly"})).status_code == 400
    assert (await client.get("/leaderboard/achievements", params={"limit": 5000})).status_code == 400


@pytest.mark.asyncio
async def test_leaderboard_stats_and_top_performers(client, admin_headers):
    for user_id, completed in ((21, 10), (22, 5)):
        await _approved(client, admin_headers, user_id)
        await _submit(client, user_id, completed)

    stats = (await client.get("/leaderboard/stats")).json()["statistics"]
    assert stats["total_participants"] == 2
    assert stats["average"] == 7.5
    assert stats["median"] == 5
    assert stats["most_active_score"] == 10
    assert stats["completion_distribution"]["0-10"] == 2

    reading_today = (await client.get("/leaderboard/stats", params={"period": "daily", "type": "reading"})).json()
    assert reading_today["statistics"]["total_participants"] == 2

    top = (await client.get("/leaderboard/top-performers", params={"limit": 1})).json()
    assert top["categories"] == ["overall", "reading", "distance"]
    assert top["top_performers"]["overall"][0]["user_id"] == 21


@pytest.mark.asyncio
async def test_achievement_endpoints(client, admin_headers):
    await _approved(client, admin_headers, 31)
    await _submit(client, 31, 10, pages_read=150)
    await _approved(client, admin_headers, 32)
    await _submit(client, 32, 1)

    mine = (await client.get("/user/achievements/31")).json()
    assert [a["id"] for a in mine["achievements"]] == ["bookworm"]
    assert mine["achievement_score"] == 25

    board = (await client.get("/leaderboard/achievements")).json()
    assert board["total_participants"] == 2
    assert board["achievement_leaderboard"][0]["user_id"] == 31
    assert board["achievement_leaderboard"][0]["top_achievements"][0]["id"] == "bookworm"


@pytest.mark.asyncio
async def test_task_endpoints(client, admin_headers):
    templates = (await client.get("/tasks/templates")).json()
    assert templates["total_tasks"] == 10

    await _approved(client, admin_headers, 41)
    await _submit(client, 41, 4, days_ago=1)
    await _submit(client, 41, 6, days_ago=0)

    streak = (await client.get("/tasks/streak/41")).json()
    assert streak["current_streak"] == 2
    assert streak["longest_streak"] == 2

    summary = (await client.get("/tasks/summary/41", params={"period": "week"})).json()
    assert summary["total_days"] == 2
    assert summary["total_points"] == 10
    assert summary["task_breakdown"]["task_5"] == {"completed": 1, "total": 2}

    assert (await client.get("/tasks/summary/41", params={"period": "decade"})).status_code == 422

    empty = (await client.get("/tasks/daily/41", params={"date": "2001-01-01"})).json()
    assert empty["is_submitted"] is False


@pytest.mark.asyncio
async def test_user_endpoints_and_account_deletion(client, admin_headers):
    await _approved(client, admin_headers, 51)
    await _submit(client, 51, 7, pages_read=20)
    await _register(client, 52)

    stats = (await client.get("/user/statistics/51")).json()
    assert stats["today"]["completed"] == 7
    assert stats["all_time"]["total_points"] == 7

    profile = (await client.get("/user/profile/51")).json()
    assert profile["status"] == "active"
    assert profile["statistics"]["total_pages"] == 20
    pending = (await client.get("/user/profile/52")).json()
    assert pending["status"] == "inactive"
    assert pending["statistics"] is None

    activity = (await client.get("/user/activity/51")).json()
    assert activity["total"] == 1
    assert activity["items"][0]["completed_count"] == 7

    assert (await client.get("/user/statistics/52")).status_code == 403
    assert (await client.get("/user/statistics/0")).status_code == 400

    r = await client.request("DELETE", "/user/account/51", json={"confirm": "yes"})
    assert r.status_code == 400
    r = await client.request("DELETE", "/user/account/51", json={"confirm": "DELETE_MY_ACCOUNT"})
    assert r.status_code == 200
    assert (await client.get("/auth/check/51")).json()["exists"] is False
    assert (await client.get("/leaderboard")).json()["total_participants"] == 0


@pytest.mark.asyncio
async def test_only_approved_users_are_ranked(client, admin_headers):
    await _approved(client, admin_headers, 61)
    await _approved(client, admin_headers, 62)
    await _submit(client, 61, 5)
    await _submit(client, 62, 8)

    r = await client.patch("/admin/users/62/status", json={"status": "suspended"}, headers=admin_headers)
    assert r.status_code == 200

    board = (await client.get("/leaderboard")).json()
    assert [e["user_id"] for e in board["entries"]] == [61]
    assert board["total_participants"] == 1
