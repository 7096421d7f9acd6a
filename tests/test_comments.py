import pytest
from httpx import ASGITransport, AsyncClient

from app.main import app


def _client():
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


async def _task_id(client):
    response = await client.post("/api/v1/tasks", json={
        "name": "Commented task", "vehicle_ids": ["V012"], "assignees": ["Tigist Bekele"]})
    return response.json()["data"]["id"]


@pytest.mark.asyncio
async def test_comment_lifecycle():
    async with _client() as client:
        task_id = await _task_id(client)
        first = await client.post("/api/v1/comments",
                                  json={"task_id": task_id, "text": "Wiring checked", "author": "Martha"})
        second = await client.post("/api/v1/comments",
                                   json={"task_id": task_id, "text": "Sensor calibrated", "author": "Dawit"})
        comment_id = first.json()["data"]["id"]
        edited = await client.patch(f"/api/v1/comments/{comment_id}", json={"text": "Wiring rechecked"})
        listed = await client.get("/api/v1/comments", params={"task_id": task_id})
        deleted = await client.delete(f"/api/v1/comments/{comment_id}")
        after = await client.get("/api/v1/comments", params={"task_id": task_id})

    assert first.status_code == 201
    assert second.status_code == 201
    assert edited.json()["data"]["text"] == "Wiring rechecked"
    assert {c["text"] for c in listed.json()["data"]} == {"Wiring rechecked", "Sensor calibrated"}
    assert deleted.status_code == 200
    assert [c["text"] for c in after.json()["data"]] == ["Sensor calibrated"]


@pytest.mark.asyncio
async def test_comment_on_missing_task():
    async with _client() as client:
        response = await client.post("/api/v1/comments",
                                     json={"task_id": "no-such-task", "text": "hi", "author": "Martha"})

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_comment_requires_text():
    async with _client() as client:
        task_id = await _task_id(client)
        response = await client.post("/api/v1/comments", json={"task_id": task_id, "text": "", "author": "Martha"})

    assert response.status_code == 422
