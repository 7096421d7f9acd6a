from datetime import date, timedelta

import pytest
from httpx import ASGITransport, AsyncClient

from app.main import app


def _client():
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
async def test_settings_update_and_phase():
    start = date.today() + timedelta(days=10)
    async with _client() as client:
        saved = (await client.get("/api/v1/project/settings")).json()["data"]
        updated = await client.put("/api/v1/project/settings", json={
            "project_start_date": start.isoformat(),
            "project_end_date": (start + timedelta(days=9)).isoformat(),
        })
        phase = await client.get("/api/v1/project/phase")
        await client.put("/api/v1/project/settings", json={
            "project_start_date": saved["project_start_date"],
            "project_end_date": saved["project_end_date"],
        })

    assert updated.status_code == 200
    assert updated.json()["data"]["total_days"] == 10
    data = phase.json()["data"]
    assert data["phase"] == "planning"
    assert data["days_until_start"] == 10
    assert data["total_days"] == 10


@pytest.mark.asyncio
async def test_settings_reject_end_before_start():
    async with _client() as client:
        response = await client.put("/api/v1/project/settings", json={
            "project_start_date": "2026-03-10", "project_end_date": "2026-03-01"})

    assert response.status_code == 422
    assert response.json()["status"] == "error"


@pytest.mark.asyncio
async def test_estimate_end_date():
    async with _client() as client:
        response = await client.get("/api/v1/project/estimate", params={"start_date": "2026-01-05"})

    data = response.json()["data"]
    assert data["start_date"] == "2026-01-05"
    methods = [e["method"] for e in data["estimates"]]
    assert methods[:3] == ["Vehicle Count", "Task Complexity", "Team Performance"]
    assert "Conservative" in methods and "Optimistic" in methods
    assert data["recommended"]["method"] == "Recommended (Median)"
    assert data["recommended"]["estimated_end_date"] > "2026-01-05"


@pytest.mark.asyncio
async def test_project_stats():
    async with _client() as client:
        response = await client.get("/api/v1/project/stats")

    data = response.json()["data"]
    assert data["total_vehicles"] >= 24
    assert data["team_size"] >= 6
    assert {"Bahir Dar", "Kombolcha", "Addis Ababa"} <= set(data["locations"])
    assert 0 <= data["vehicle_progress"] <= 100


@pytest.mark.asyncio
async def test_reset_returns_everything_to_pending():
    async with _client() as client:
        task = await client.post("/api/v1/tasks", json={
            "name": "Reset me", "vehicle_ids": ["V013"], "assignees": ["Dawit Mekonnen"]})
        task_id = task.json()["data"]["id"]
        await client.patch(f"/api/v1/tasks/{task_id}/status", json={"status": "Completed"})
        await client.post("/api/v1/comments", json={"task_id": task_id, "text": "done", "author": "Dawit"})
        await client.patch("/api/v1/vehicles/V013/status", json={"status": "Completed"})

        reset = await client.post("/api/v1/project/reset")
        vehicle = await client.get("/api/v1/vehicles/V013")
        after = await client.get(f"/api/v1/tasks/{task_id}")
        comments = await client.get("/api/v1/comments", params={"task_id": task_id})

    counts = reset.json()["data"]
    assert counts["vehicles_reset"] >= 24
    assert counts["comments_deleted"] >= 1
    assert vehicle.json()["data"]["status"] == "Pending"
    assert after.json()["data"]["status"] == "Pending"
    assert after.json()["data"]["completion_percentage"] == 0
    assert comments.json()["data"] == []
