import logging

from fastapi import APIRouter, HTTPException
from sqlalchemy import select

from app.database import async_session, execute_with_retry
from app.models.location import Location
from app.models.vehicle import Vehicle
from app.schemas.location import LocationCreate, LocationResponse, LocationUpdate
from app.services.realtime import broadcaster
from app.utils.exceptions import AppException
from app.utils.response import success_response
from app.utils.timeparse import utc_now_iso

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/locations", tags=["locations"])


def _dump(location: Location) -> dict:
    return LocationResponse.model_validate(location).model_dump()


@router.get("")
async def list_locations():
    async with async_session() as session:
        result = await execute_with_retry(session, select(Location).order_by(Location.name))
        data = [_dump(loc) for loc in result.scalars().all()]
    return success_response(data=data)


@router.get("/stats")
async def get_location_stats():
    """Per-location progress computed from the vehicles table rather than
    the stored aggregate counts."""
    async with async_session() as session:
        locations = (await execute_with_retry(session, select(Location).order_by(Location.name))).scalars().all()
        vehicles = (await execute_with_retry(session, select(Vehicle))).scalars().all()

    data = []
    for loc in locations:
        own = [v for v in vehicles if v.location == loc.name]
        completed = sum(1 for v in own if v.status == "Completed")
        data.append({
            "name": loc.name,
            "vehicles": len(own),
            "completed": completed,
            "in_progress": sum(1 for v in own if v.status == "In Progress"),
            "gps_devices": sum(v.gps_required for v in own),
            "fuel_sensors": sum(v.fuel_sensors for v in own),
            "progress": round(completed / len(own) * 100) if own else 0,
            "days": sorted({v.day for v in own}),
        })
    return success_response(data=data)


@router.post("/sync")
async def sync_location_counts():
    async with async_session() as session:
        locations = (await session.execute(select(Location))).scalars().all()
        vehicles = (await session.execute(select(Vehicle))).scalars().all()
        for loc in locations:
            own = [v for v in vehicles if v.location == loc.name]
            loc.vehicles = len(own)
            loc.gps_devices = sum(v.gps_required for v in own)
            loc.fuel_sensors = sum(v.fuel_sensors for v in own)
        await session.commit()
        data = [_dump(loc) for loc in sorted(locations, key=lambda l: l.name)]

    logger.info("Synced vehicle counts for %d locations", len(data))
    await broadcaster.publish("locations", "UPDATE", [d["name"] for d in data])
    return success_response(data=data)


@router.get("/{name}")
async def get_location(name: str):
    async with async_session() as session:
        location = await session.get(Location, name)
        if not location:
            raise HTTPException(status_code=404, detail="Location not found")
        data = _dump(location)
    return success_response(data=data)


@router.post("", status_code=201)
async def create_location(payload: LocationCreate):
    async with async_session() as session:
        if await session.get(Location, payload.name):
            raise AppException(f"Location {payload.name} already exists", status_code=409)
        location = Location(**payload.model_dump(), created_at=utc_now_iso())
        session.add(location)
        await session.commit()
        await session.refresh(location)
        data = _dump(location)

    await broadcaster.publish("locations", "INSERT", [payload.name])
    return success_response(data=data)


@router.patch("/{name}")
async def update_location(name: str, payload: LocationUpdate):
    async with async_session() as session:
        location = await session.get(Location, name)
        if not location:
            raise HTTPException(status_code=404, detail="Location not found")
        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(location, field, value)
        await session.commit()
        await session.refresh(location)
        data = _dump(location)

    await broadcaster.publish("locations", "UPDATE", [name])
    return success_response(data=data)


@router.delete("/{name}")
async def delete_location(name: str):
    async with async_session() as session:
        location = await session.get(Location, name)
        if not location:
            raise HTTPException(status_code=404, detail="Location not found")
        await session.delete(location)
        await session.commit()

    await broadcaster.publish("locations", "DELETE", [name])
    return success_response(data={"name": name}, message="Location deleted")
