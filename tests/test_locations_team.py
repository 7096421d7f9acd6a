import pytest
from httpx import ASGITransport, AsyncClient

from app.main import app


def _client():
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
async def test_location_stats_come_from_vehicles():
    async with _client() as client:
        response = await client.get("/api/v1/locations/stats")

    stats = {s["name"]: s for s in response.json()["data"]}
    assert stats["Kombolcha"]["vehicles"] == 6
    assert stats["Kombolcha"]["fuel_sensors"] == 7
    assert stats["Kombolcha"]["days"] == [10, 11, 12]
    assert stats["Addis Ababa"]["gps_devices"] == 3


@pytest.mark.asyncio
async def test_sync_overwrites_stored_counts():
    async with _client() as client:
        await client.patch("/api/v1/locations/Kombolcha", json={"vehicles": 99})
        synced = await client.post("/api/v1/locations/sync")
        location = await client.get("/api/v1/locations/Kombolcha")

    assert any(loc["name"] == "Kombolcha" for loc in synced.json()["data"])
    assert location.json()["data"]["vehicles"] == 6


@pytest.mark.asyncio
async def test_location_crud():
    async with _client() as client:
        created = await client.post("/api/v1/locations", json={"name": "Mekelle", "contact_person": "Abebe"})
        duplicate = await client.post("/api/v1/locations", json={"name": "Mekelle"})
        updated = await client.patch("/api/v1/locations/Mekelle", json={"contact_phone": "+251-91-000-0000"})
        deleted = await client.delete("/api/v1/locations/Mekelle")
        missing = await client.get("/api/v1/locations/Mekelle")

    assert created.status_code == 201
    assert created.json()["data"]["vehicles"] == 0
    assert duplicate.status_code == 409
    assert updated.json()["data"]["contact_phone"] == "+251-91-000-0000"
    assert deleted.status_code == 200
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_location_rejects_negative_counts():
    async with _client() as client:
        response = await client.post("/api/v1/locations", json={"name": "Jimma", "vehicles": -1})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_team_member_workload_and_metrics():
    member = {"id": "TM101", "name": "Yonas Abebe", "role": "GPS Technician"}
    async with _client() as client:
        created = await client.post("/api/v1/team-members", json=member)
        first = await client.post("/api/v1/tasks", json={
            "name": "Workload one", "vehicle_ids": ["V014"], "assignees": ["Yonas Abebe"],
            "estimated_duration": 60})
        await client.post("/api/v1/tasks", json={
            "name": "Workload two", "vehicle_ids": ["V014"], "assignees": ["Yonas Abebe"],
            "estimated_duration": 30})
        await client.patch(f"/api/v1/tasks/{first.json()['data']['id']}/status", json={"status": "Completed"})

        workload = await client.get("/api/v1/team-members/TM101/workload")
        metrics = await client.post("/api/v1/team-members/TM101/metrics")
        stats = await client.get("/api/v1/team-members/stats")
        await client.delete("/api/v1/team-members/TM101")

    assert created.status_code == 201
    load = workload.json()["data"]
    assert load["total"] == 2
    assert load["completed"] == 1
    assert load["completion_rate"] == 50
    assert len(load["tasks"]) == 2

    data = metrics.json()["data"]
    assert data["completion_rate"] == 50
    assert data["average_task_time"] == 45
    assert data["quality_score"] == 60

    by_id = {m["id"]: m for m in stats.json()["data"]}
    assert by_id["TM101"]["task_stats"]["total"] == 2


@pytest.mark.asyncio
async def test_team_member_duplicates_and_updates():
    async with _client() as client:
        same_id = await client.post("/api/v1/team-members",
                                    json={"id": "TM001", "name": "Someone Else", "role": "Tech"})
        same_name = await client.post("/api/v1/team-members",
                                      json={"id": "TM102", "name": "Tigist Bekele", "role": "Tech"})
        updated = await client.patch("/api/v1/team-members/TM006", json={"quality_score": 92})
        bad = await client.patch("/api/v1/team-members/TM006", json={"quality_score": 120})
        missing = await client.get("/api/v1/team-members/TM999")

    assert same_id.status_code == 409
    assert same_name.status_code == 409
    assert updated.json()["data"]["quality_score"] == 92
    assert bad.status_code == 422
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_location_update_rejects_null_counts():
    async with _client() as client:
        null_count = await client.patch("/api/v1/locations/Bahir Dar", json={"vehicles": None})
        cleared_contact = await client.patch("/api/v1/locations/Bahir Dar", json={"contact_phone": None})

    assert null_count.status_code == 422
    assert cleared_contact.status_code == 200
    assert cleared_contact.json()["data"]["contact_phone"] is None


@pytest.mark.asyncio
async def test_team_member_rename_and_nulls():
    async with _client() as client:
        await client.post("/api/v1/team-members", json={"id": "TM103", "name": "Kebede Alemu", "role": "Tech"})
        taken = await client.patch("/api/v1/team-members/TM103", json={"name": "Tigist Bekele"})
        same = await client.patch("/api/v1/team-members/TM103", json={"name": "Kebede Alemu"})
        renamed = await client.patch("/api/v1/team-members/TM103", json={"name": "Kebede Tesfaye"})
        null_role = await client.patch("/api/v1/team-members/TM103", json={"role": None})
        await client.delete("/api/v1/team-members/TM103")

    assert taken.status_code == 409
    assert taken.json()["status"] == "error"
    assert same.status_code == 200
    assert renamed.json()["data"]["name"] == "Kebede Tesfaye"
    assert null_role.status_code == 422
