import pytest
from httpx import ASGITransport, AsyncClient

from app.main import app


def _client():
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
async def test_get_vehicles_returns_seeded_plan():
    async with _client() as client:
        response = await client.get("/api/v1/vehicles", params={"location": "Addis Ababa"})

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "success"
    assert [v["id"] for v in body["data"]] == ["V022", "V023", "V024"]


@pytest.mark.asyncio
async def test_get_vehicles_ordered_by_day_then_id():
    async with _client() as client:
        response = await client.get("/api/v1/vehicles", params={"location": "Kombolcha"})

    vehicles = response.json()["data"]
    assert [(v["day"], v["id"]) for v in vehicles] == sorted((v["day"], v["id"]) for v in vehicles)


@pytest.mark.asyncio
async def test_get_vehicles_filters():
    async with _client() as client:
        by_day = await client.get("/api/v1/vehicles", params={"day": 5})
        by_search = await client.get("/api/v1/vehicles", params={"search": "ud truck"})
        await client.patch("/api/v1/vehicles/V015/status", json={"status": "Completed"})
        by_status = await client.get("/api/v1/vehicles", params={"status": "Completed", "location": "Bahir Dar"})

    assert [v["id"] for v in by_day.json()["data"]] == ["V009", "V010"]
    assert [v["id"] for v in by_search.json()["data"]] == ["V010", "V021"]
    assert "V015" in {v["id"] for v in by_status.json()["data"]}
    assert all(v["status"] == "Completed" for v in by_status.json()["data"])


@pytest.mark.asyncio
async def test_get_vehicle_item_format():
    async with _client() as client:
        response = await client.get("/api/v1/vehicles/V010")

    vehicle = response.json()["data"]
    assert vehicle["type"] == "UD truck CV86BLLDL"
    assert vehicle["fuel_sensors"] == 2
    assert vehicle["fuel_tanks"] == 2
    assert vehicle["time_slot"] == "13:30-17:30"


@pytest.mark.asyncio
async def test_vehicle_not_found():
    async with _client() as client:
        response = await client.get("/api/v1/vehicles/V999")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_create_update_delete_vehicle():
    payload = {"id": "V101", "type": "Toyota Hilux", "location": "Kombolcha", "day": 10,
               "time_slot": "08:30-11:30", "gps_required": 1, "fuel_sensors": 1, "fuel_tanks": 2}
    async with _client() as client:
        created = await client.post("/api/v1/vehicles", json=payload)
        duplicate = await client.post("/api/v1/vehicles", json=payload)
        updated = await client.patch("/api/v1/vehicles/V101", json={"fuel_sensors": 2, "day": 11})
        status = await client.patch("/api/v1/vehicles/V101/status", json={"status": "In Progress"})
        deleted = await client.delete("/api/v1/vehicles/V101")
        missing = await client.get("/api/v1/vehicles/V101")

    assert created.status_code == 201
    assert created.json()["data"]["status"] == "Pending"
    assert duplicate.status_code == 409
    assert duplicate.json()["status"] == "error"
    assert updated.json()["data"]["day"] == 11
    assert status.json()["data"]["status"] == "In Progress"
    assert deleted.status_code == 200
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_create_vehicle_rejects_more_sensors_than_tanks():
    payload = {"id": "V102", "type": "Bus", "location": "Kombolcha", "day": 10,
               "time_slot": "08:30-11:30", "fuel_sensors": 3, "fuel_tanks": 1}
    async with _client() as client:
        response = await client.post("/api/v1/vehicles", json=payload)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_vehicle_rejects_day_outside_project():
    payload = {"id": "V103", "type": "Bus", "location": "Kombolcha", "day": 15, "time_slot": "08:30-11:30"}
    async with _client() as client:
        response = await client.post("/api/v1/vehicles", json=payload)

    assert response.status_code == 422
    body = response.json()
    assert body["status"] == "error"
    assert body["data"]["errors"] == ["Day must be between 1 and 14"]


@pytest.mark.asyncio
async def test_update_vehicle_keeps_sensor_rule():
    async with _client() as client:
        response = await client.patch("/api/v1/vehicles/V024", json={"fuel_sensors": 4})
        unchanged = await client.get("/api/v1/vehicles/V024")

    assert response.status_code == 422
    assert unchanged.json()["data"]["fuel_sensors"] == 1


@pytest.mark.asyncio
async def test_bulk_status_counts_missing_vehicles():
    async with _client() as client:
        response = await client.post("/api/v1/vehicles/bulk-status",
                                     json={"vehicle_ids": ["V023", "V998"], "status": "In Progress"})
        check = await client.get("/api/v1/vehicles/V023")

    assert response.json()["data"] == {"success": 1, "failed": 1, "errors": ["Vehicle V998 not found"]}
    assert check.json()["data"]["status"] == "In Progress"


@pytest.mark.asyncio
async def test_vehicle_stats():
    async with _client() as client:
        response = await client.get("/api/v1/vehicles/stats")

    stats = response.json()["data"]
    assert stats["total"] >= 24
    assert set(stats["by_status"]) == {"Pending", "In Progress", "Completed"}
    assert stats["by_location"]["Addis Ababa"]["total"] == 3


@pytest.mark.asyncio
async def test_update_rejects_null_for_required_fields():
    async with _client() as client:
        null_status = await client.patch("/api/v1/vehicles/V002", json={"status": None})
        null_gps = await client.patch("/api/v1/vehicles/V002", json={"gps_required": None})
        vehicle = await client.get("/api/v1/vehicles/V002")

    assert null_status.status_code == 422
    assert null_gps.status_code == 422
    assert vehicle.json()["data"]["gps_required"] == 1
