import logging

from fastapi import APIRouter, HTTPException
from sqlalchemy import select

from app.database import async_session, execute_with_retry
from app.models.task import Task
from app.models.team_member import TeamMember
from app.schemas.task import TaskResponse
from app.schemas.team_member import TeamMemberCreate, TeamMemberResponse, TeamMemberUpdate
from app.services.realtime import broadcaster
from app.services.repository import load_all
from app.services.validation import as_list
from app.utils.exceptions import AppException
from app.utils.response import success_response
from app.utils.timeparse import utc_now_iso

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/team-members", tags=["team-members"])


def _dump(member: TeamMember) -> dict:
    return TeamMemberResponse.model_validate(member).model_dump()


def task_counts(tasks) -> dict:
    total = len(tasks)
    completed = sum(1 for t in tasks if t.status == "Completed")
    return {
        "total": total,
        "completed": completed,
        "in_progress": sum(1 for t in tasks if t.status == "In Progress"),
        "pending": sum(1 for t in tasks if t.status == "Pending"),
        "blocked": sum(1 for t in tasks if t.status == "Blocked"),
        "completion_rate": round(completed / total * 100) if total else 0,
    }


def member_metrics(tasks) -> dict:
    """Completion rate, average estimated minutes and a quality score that
    adds 10 points when any duration is recorded."""
    counts = task_counts(tasks)
    average = round(sum(t.estimated_duration or 0 for t in tasks) / len(tasks)) if tasks else 0
    rate = counts["completion_rate"]
    return {
        "completion_rate": rate,
        "average_task_time": average,
        "quality_score": min(100, rate + (10 if average > 0 else 0)),
    }


def _assigned_to(tasks, name: str) -> list:
    return [t for t in tasks if name in as_list(t.assignees)]


@router.get("")
async def list_team_members():
    async with async_session() as session:
        result = await execute_with_retry(session, select(TeamMember).order_by(TeamMember.name))
        data = [_dump(m) for m in result.scalars().all()]
    return success_response(data=data)


@router.get("/stats")
async def get_team_stats():
    async with async_session() as session:
        members = (await execute_with_retry(session, select(TeamMember).order_by(TeamMember.name))).scalars().all()
        tasks = await load_all(session, Task, Task.created_at.desc())

    data = [{**_dump(m), "task_stats": task_counts(_assigned_to(tasks, m.name))} for m in members]
    return success_response(data=data)


@router.get("/{member_id}")
async def get_team_member(member_id: str):
    async with async_session() as session:
        member = await session.get(TeamMember, member_id)
        if not member:
            raise HTTPException(status_code=404, detail="Team member not found")
        data = _dump(member)
    return success_response(data=data)


@router.get("/{member_id}/workload")
async def get_workload(member_id: str):
    async with async_session() as session:
        member = await session.get(TeamMember, member_id)
        if not member:
            raise HTTPException(status_code=404, detail="Team member not found")
        tasks = _assigned_to(await load_all(session, Task, Task.created_at.desc()), member.name)

    data = {
        **task_counts(tasks),
        "tasks": [TaskResponse.model_validate(t).model_dump() for t in tasks],
    }
    return success_response(data=data)


@router.post("", status_code=201)
async def create_team_member(payload: TeamMemberCreate):
    async with async_session() as session:
        if await session.get(TeamMember, payload.id):
            raise AppException(f"Team member {payload.id} already exists", status_code=409)
        existing = await session.execute(select(TeamMember).where(TeamMember.name == payload.name))
        if existing.scalars().first():
            raise AppException(f"A team member named {payload.name} already exists", status_code=409)

        member = TeamMember(**payload.model_dump(), created_at=utc_now_iso())
        session.add(member)
        await session.commit()
        await session.refresh(member)
        data = _dump(member)

    await broadcaster.publish("team_members", "INSERT", [payload.id])
    return success_response(data=data)


@router.patch("/{member_id}")
async def update_team_member(member_id: str, payload: TeamMemberUpdate):
    async with async_session() as session:
        member = await session.get(TeamMember, member_id)
        if not member:
            raise HTTPException(status_code=404, detail="Team member not found")
        if payload.name and payload.name != member.name:
            existing = await session.execute(select(TeamMember).where(TeamMember.name == payload.name))
            if existing.scalars().first():
                raise AppException(f"A team member named {payload.name} already exists", status_code=409)
        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(member, field, value)
        await session.commit()
        await session.refresh(member)
        data = _dump(member)

    await broadcaster.publish("team_members", "UPDATE", [member_id])
    return success_response(data=data)


@router.post("/{member_id}/metrics")
async def recompute_metrics(member_id: str):
    async with async_session() as session:
        member = await session.get(TeamMember, member_id)
        if not member:
            raise HTTPException(status_code=404, detail="Team member not found")
        tasks = _assigned_to(await load_all(session, Task, Task.created_at.desc()), member.name)
        for field, value in member_metrics(tasks).items():
            setattr(member, field, value)
        await session.commit()
        await session.refresh(member)
        data = _dump(member)

    await broadcaster.publish("team_members", "UPDATE", [member_id])
    return success_response(data=data)


@router.delete("/{member_id}")
async def delete_team_member(member_id: str):
    async with async_session() as session:
        member = await session.get(TeamMember, member_id)
        if not member:
            raise HTTPException(status_code=404, detail="Team member not found")
        await session.delete(member)
        await session.commit()

    await broadcaster.publish("team_members", "DELETE", [member_id])
    return success_response(data={"id": member_id}, message="Team member deleted")
