import logging
import uuid as uuid_mod
from collections import Counter

from fastapi import APIRouter, HTTPException
from sqlalchemy import delete, or_, select

from app.database import async_session, execute_with_retry
from app.models.comment import Comment
from app.models.task import Task
from app.models.vehicle import Vehicle
from app.schemas.common import PRIORITIES, TASK_STATUSES
from app.schemas.task import (
    StandardTasksRequest, TaskCreate, TaskDraft, TaskResponse, TaskStatusUpdate, TaskUpdate,
)
from app.services.planning import standard_task_plan
from app.services.realtime import broadcaster
from app.services.repository import get_project_settings, load_context
from app.services.validation import as_list, validate_task
from app.utils.exceptions import AppException
from app.utils.response import success_response
from app.utils.timeparse import parse_date, utc_now_iso

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["tasks"])


def _dump(task: Task) -> dict:
    return TaskResponse.model_validate(task).model_dump()


def new_task_row(draft, status: str, task_id: str | None = None) -> Task:
    now = utc_now_iso()
    fields = draft.model_dump(exclude={"id", "status"})
    return Task(**fields, id=task_id or str(uuid_mod.uuid4()), status=status, created_at=now, updated_at=now)


def task_stats(tasks) -> dict:
    assignees = Counter(name for t in tasks for name in as_list(t.assignees))
    total = len(tasks)
    completed = sum(1 for t in tasks if t.status == "Completed")
    return {
        "total": total,
        "by_status": {s: sum(1 for t in tasks if t.status == s) for s in TASK_STATUSES},
        "by_priority": {p: sum(1 for t in tasks if t.priority == p) for p in PRIORITIES},
        "by_assignee": dict(assignees),
        "completion_rate": round(completed / total * 100) if total else 0,
    }


@router.get("")
async def list_tasks(vehicle_id: str | None = None, assigned_to: str | None = None,
                     status: str | None = None, priority: str | None = None, search: str | None = None):
    query = select(Task)
    if status:
        query = query.where(Task.status == status)
    if priority:
        query = query.where(Task.priority == priority)
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(Task.name.ilike(pattern), Task.description.ilike(pattern)))
    query = query.order_by(Task.created_at.desc())

    async with async_session() as session:
        result = await execute_with_retry(session, query)
        tasks = result.scalars().all()

    # list columns are JSON, filtered here to stay portable across databases
    if vehicle_id:
        tasks = [t for t in tasks if vehicle_id in as_list(t.vehicle_ids)]
    if assigned_to:
        tasks = [t for t in tasks if assigned_to in as_list(t.assignees)]
    return success_response(data=[_dump(t) for t in tasks])


@router.get("/stats")
async def get_task_stats():
    async with async_session() as session:
        result = await execute_with_retry(session, select(Task))
        tasks = result.scalars().all()
    return success_response(data=task_stats(tasks))


@router.post("/validate")
async def validate_task_draft(payload: TaskDraft):
    async with async_session() as session:
        context = await load_context(session)
    result = validate_task(payload, context.vehicles, context.team_members, context.tasks)
    return success_response(data=result.to_dict())


@router.post("/standard", status_code=201)
async def create_standard_tasks(payload: StandardTasksRequest):
    async with async_session() as session:
        vehicle = await session.get(Vehicle, payload.vehicle_id)
        if not vehicle:
            raise HTTPException(status_code=404, detail="Vehicle not found")

        start_date = parse_date(payload.start_date)
        if start_date is None:
            project = await get_project_settings(session)
            start_date = parse_date(project.project_start_date)

        rows = [new_task_row(draft, "Pending") for draft in
                standard_task_plan(payload.vehicle_id, payload.assignee, start_date)]
        session.add_all(rows)
        await session.commit()
        data = [_dump(row) for row in rows]

    logger.info("Created %d standard tasks for vehicle %s", len(data), payload.vehicle_id)
    await broadcaster.publish("tasks", "INSERT", [d["id"] for d in data])
    return success_response(data=data)


@router.get("/{task_id}")
async def get_task(task_id: str):
    async with async_session() as session:
        task = await session.get(Task, task_id)
        if not task:
            raise HTTPException(status_code=404, detail="Task not found")
        data = _dump(task)
    return success_response(data=data)


@router.post("", status_code=201)
async def create_task(payload: TaskCreate):
    async with async_session() as session:
        if payload.id and await session.get(Task, payload.id):
            raise AppException(f"Task {payload.id} already exists", status_code=409)

        context = await load_context(session)
        validation = validate_task(payload, context.vehicles, context.team_members, context.tasks)
        if not validation.is_valid:
            raise AppException("Task validation failed", status_code=422, data=validation.to_dict())

        task = new_task_row(payload, payload.status, payload.id)
        session.add(task)
        await session.commit()
        await session.refresh(task)
        data = _dump(task)

    await broadcaster.publish("tasks", "INSERT", [data["id"]])
    return success_response(data=data)


@router.patch("/{task_id}")
async def update_task(task_id: str, payload: TaskUpdate):
    changes = payload.model_dump(exclude_unset=True)
    async with async_session() as session:
        task = await session.get(Task, task_id)
        if not task:
            raise HTTPException(status_code=404, detail="Task not found")

        merged = TaskDraft.model_validate(task).model_copy(update=changes)
        context = await load_context(session)
        validation = validate_task(merged, context.vehicles, context.team_members, context.tasks)
        if not validation.is_valid:
            raise AppException("Task validation failed", status_code=422, data=validation.to_dict())

        for field, value in changes.items():
            setattr(task, field, value)
        task.updated_at = utc_now_iso()
        await session.commit()
        await session.refresh(task)
        data = _dump(task)

    await broadcaster.publish("tasks", "UPDATE", [task_id])
    return success_response(data=data)


@router.patch("/{task_id}/status")
async def update_task_status(task_id: str, payload: TaskStatusUpdate):
    async with async_session() as session:
        task = await session.get(Task, task_id)
        if not task:
            raise HTTPException(status_code=404, detail="Task not found")
        task.status = payload.status
        if payload.status == "Completed":
            task.completion_percentage = 100
        task.updated_at = utc_now_iso()
        await session.commit()
        await session.refresh(task)
        data = _dump(task)

    await broadcaster.publish("tasks", "UPDATE", [task_id])
    return success_response(data=data)


@router.delete("/{task_id}")
async def delete_task(task_id: str):
    async with async_session() as session:
        task = await session.get(Task, task_id)
        if not task:
            raise HTTPException(status_code=404, detail="Task not found")
        await session.execute(delete(Comment).where(Comment.task_id == task_id))
        await session.delete(task)
        await session.commit()

    await broadcaster.publish("tasks", "DELETE", [task_id])
    return success_response(data={"id": task_id}, message="Task deleted")
