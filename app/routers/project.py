import logging
from datetime import date

from fastapi import APIRouter
from sqlalchemy import delete, update

from app.config import settings
from app.database import async_session
from app.models.comment import Comment
from app.models.task import Task
from app.models.vehicle import Vehicle
from app.schemas.project import ProjectSettingsResponse, ProjectSettingsUpdate
from app.services.estimation import all_estimates, project_phase, recommended_estimate
from app.services.realtime import broadcaster
from app.services.repository import get_project_settings, load_context
from app.utils.exceptions import AppException
from app.utils.response import success_response
from app.utils.timeparse import parse_date, utc_now_iso

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/project", tags=["project"])


def _dump(project) -> dict:
    return ProjectSettingsResponse.model_validate(project).model_dump()


@router.get("/settings")
async def get_settings():
    async with async_session() as session:
        project = await get_project_settings(session)
        data = _dump(project)
    return success_response(data=data)


@router.put("/settings")
async def update_settings(payload: ProjectSettingsUpdate):
    start, end = payload.project_start_date, payload.project_end_date
    if end is not None and end < start:
        raise AppException("Project end date must not be before the start date", status_code=422)

    async with async_session() as session:
        project = await get_project_settings(session)
        project.project_start_date = start.isoformat()
        project.project_end_date = end.isoformat() if end else None
        project.total_days = (end - start).days + 1 if end else settings.project_days
        project.updated_at = utc_now_iso()
        await session.commit()
        await session.refresh(project)
        data = _dump(project)

    logger.info("Project dates set to %s - %s", data["project_start_date"], data["project_end_date"])
    await broadcaster.publish("project_settings", "UPDATE", [data["id"]])
    return success_response(data=data)


@router.post("/reset")
async def reset_project():
    """Put every vehicle and task back to Pending and drop all comments."""
    now = utc_now_iso()
    async with async_session() as session:
        vehicles = await session.execute(update(Vehicle).values(status="Pending", updated_at=now))
        tasks = await session.execute(
            update(Task).values(status="Pending", completion_percentage=0, actual_duration=None, updated_at=now)
        )
        comments = await session.execute(delete(Comment))
        await session.commit()

    data = {
        "vehicles_reset": vehicles.rowcount,
        "tasks_reset": tasks.rowcount,
        "comments_deleted": comments.rowcount,
    }
    logger.warning("Project reset: %s", data)
    await broadcaster.publish("vehicles", "UPDATE")
    await broadcaster.publish("tasks", "UPDATE")
    await broadcaster.publish("comments", "DELETE")
    return success_response(data=data, message="Project reset")


@router.get("/stats")
async def get_project_stats():
    async with async_session() as session:
        context = await load_context(session)

    vehicles, tasks = context.vehicles, context.tasks
    completed_vehicles = sum(1 for v in vehicles if v.status == "Completed")
    completed_tasks = sum(1 for t in tasks if t.status == "Completed")
    data = {
        "total_vehicles": len(vehicles),
        "completed_vehicles": completed_vehicles,
        "in_progress_vehicles": sum(1 for v in vehicles if v.status == "In Progress"),
        "total_tasks": len(tasks),
        "completed_tasks": completed_tasks,
        "blocked_tasks": sum(1 for t in tasks if t.status == "Blocked"),
        "team_size": len(context.team_members),
        "locations": sorted({v.location for v in vehicles}),
        "vehicle_progress": round(completed_vehicles / len(vehicles) * 100) if vehicles else 0,
        "task_progress": round(completed_tasks / len(tasks) * 100) if tasks else 0,
    }
    return success_response(data=data)


@router.get("/phase")
async def get_project_phase():
    async with async_session() as session:
        project = await get_project_settings(session)
        start = parse_date(project.project_start_date)
        total_days = project.total_days or settings.project_days

    data = {"project_start_date": start.isoformat(), "total_days": total_days,
            **project_phase(start, total_days)}
    return success_response(data=data)


@router.get("/estimate")
async def estimate_end_date(start_date: date | None = None):
    async with async_session() as session:
        context = await load_context(session)
        if start_date is None:
            project = await get_project_settings(session)
            start_date = parse_date(project.project_start_date)

    estimates = all_estimates(start_date, context.vehicles, context.tasks, context.team_members)
    data = {
        "start_date": start_date.isoformat(),
        "recommended": recommended_estimate(estimates).to_dict(),
        "estimates": [e.to_dict() for e in estimates],
    }
    return success_response(data=data)
