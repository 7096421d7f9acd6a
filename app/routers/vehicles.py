import logging
from collections import defaultdict

from fastapi import APIRouter, HTTPException
from sqlalchemy import or_, select

from app.config import settings
from app.database import async_session, execute_with_retry
from app.models.vehicle import Vehicle
from app.schemas.common import VEHICLE_STATUSES
from app.schemas.vehicle import (
    VehicleBulkStatusUpdate, VehicleCreate, VehicleResponse, VehicleStatusUpdate, VehicleUpdate,
)
from app.services.realtime import broadcaster
from app.services.validation import validate_vehicle
from app.utils.exceptions import AppException
from app.utils.response import operation_summary, success_response
from app.utils.timeparse import utc_now_iso

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


def _dump(vehicle: Vehicle) -> dict:
    return VehicleResponse.model_validate(vehicle).model_dump()


def vehicle_stats(vehicles) -> dict:
    by_location: dict[str, dict] = defaultdict(lambda: {"total": 0, "completed": 0, "gps_devices": 0,
                                                        "fuel_sensors": 0})
    for v in vehicles:
        entry = by_location[v.location]
        entry["total"] += 1
        entry["completed"] += v.status == "Completed"
        entry["gps_devices"] += v.gps_required
        entry["fuel_sensors"] += v.fuel_sensors

    total = len(vehicles)
    completed = sum(1 for v in vehicles if v.status == "Completed")
    return {
        "total": total,
        "by_status": {s: sum(1 for v in vehicles if v.status == s) for s in VEHICLE_STATUSES},
        "progress": round(completed / total * 100) if total else 0,
        "gps_devices": sum(v.gps_required for v in vehicles),
        "fuel_sensors": sum(v.fuel_sensors for v in vehicles),
        "fuel_tanks": sum(v.fuel_tanks for v in vehicles),
        "by_location": dict(by_location),
    }


@router.get("")
async def list_vehicles(location: str | None = None, status: str | None = None,
                        day: int | None = None, search: str | None = None):
    query = select(Vehicle)
    if location:
        query = query.where(Vehicle.location == location)
    if status:
        query = query.where(Vehicle.status == status)
    if day is not None:
        query = query.where(Vehicle.day == day)
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(Vehicle.id.ilike(pattern), Vehicle.type.ilike(pattern),
                                Vehicle.location.ilike(pattern)))
    query = query.order_by(Vehicle.day, Vehicle.id)

    async with async_session() as session:
        result = await execute_with_retry(session, query)
        data = [_dump(v) for v in result.scalars().all()]
    return success_response(data=data)


@router.get("/stats")
async def get_vehicle_stats():
    async with async_session() as session:
        result = await execute_with_retry(session, select(Vehicle))
        vehicles = result.scalars().all()
    return success_response(data=vehicle_stats(vehicles))


@router.post("/bulk-status")
async def bulk_update_status(payload: VehicleBulkStatusUpdate):
    success, errors = 0, []
    updated = []
    async with async_session() as session:
        for vehicle_id in payload.vehicle_ids:
            vehicle = await session.get(Vehicle, vehicle_id)
            if not vehicle:
                errors.append(f"Vehicle {vehicle_id} not found")
                continue
            vehicle.status = payload.status
            vehicle.updated_at = utc_now_iso()
            updated.append(vehicle_id)
            success += 1
        await session.commit()

    if updated:
        await broadcaster.publish("vehicles", "UPDATE", updated)
    return success_response(data=operation_summary(success, len(errors), errors))


@router.get("/{vehicle_id}")
async def get_vehicle(vehicle_id: str):
    async with async_session() as session:
        vehicle = await session.get(Vehicle, vehicle_id)
        if not vehicle:
            raise HTTPException(status_code=404, detail="Vehicle not found")
        data = _dump(vehicle)
    return success_response(data=data)


@router.post("", status_code=201)
async def create_vehicle(payload: VehicleCreate):
    errors = validate_vehicle(payload, settings.project_days)
    if errors:
        raise AppException("Invalid vehicle", status_code=422, data={"errors": errors})

    async with async_session() as session:
        if await session.get(Vehicle, payload.id):
            raise AppException(f"Vehicle {payload.id} already exists", status_code=409)

        now = utc_now_iso()
        vehicle = Vehicle(**payload.model_dump(), status="Pending", created_at=now, updated_at=now)
        session.add(vehicle)
        await session.commit()
        await session.refresh(vehicle)
        data = _dump(vehicle)

    logger.info("Created vehicle %s", payload.id)
    await broadcaster.publish("vehicles", "INSERT", [payload.id])
    return success_response(data=data)


async def _update(vehicle_id: str, changes: dict) -> dict:
    async with async_session() as session:
        vehicle = await session.get(Vehicle, vehicle_id)
        if not vehicle:
            raise HTTPException(status_code=404, detail="Vehicle not found")

        for field, value in changes.items():
            setattr(vehicle, field, value)
        errors = validate_vehicle(vehicle, settings.project_days)
        if errors:
            await session.rollback()
            raise AppException("Invalid vehicle", status_code=422, data={"errors": errors})

        vehicle.updated_at = utc_now_iso()
        await session.commit()
        await session.refresh(vehicle)
        data = _dump(vehicle)

    await broadcaster.publish("vehicles", "UPDATE", [vehicle_id])
    return data


@router.patch("/{vehicle_id}")
async def update_vehicle(vehicle_id: str, payload: VehicleUpdate):
    data = await _update(vehicle_id, payload.model_dump(exclude_unset=True))
    return success_response(data=data)


@router.patch("/{vehicle_id}/status")
async def update_vehicle_status(vehicle_id: str, payload: VehicleStatusUpdate):
    data = await _update(vehicle_id, {"status": payload.status})
    return success_response(data=data)


@router.delete("/{vehicle_id}")
async def delete_vehicle(vehicle_id: str):
    async with async_session() as session:
        vehicle = await session.get(Vehicle, vehicle_id)
        if not vehicle:
            raise HTTPException(status_code=404, detail="Vehicle not found")
        await session.delete(vehicle)
        await session.commit()

    await broadcaster.publish("vehicles", "DELETE", [vehicle_id])
    return success_response(data={"id": vehicle_id}, message="Vehicle deleted")
