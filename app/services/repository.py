"""Read helpers shared by routers that need whole tables as context."""
from dataclasses import dataclass
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import execute_with_retry
from app.models.project_settings import DEFAULT_SETTINGS_ID, ProjectSettings
from app.models.task import Task
from app.models.team_member import TeamMember
from app.models.vehicle import Vehicle
from app.utils.timeparse import utc_now_iso


async def load_all(session: AsyncSession, model, *order_by) -> list:
    query = select(model)
    if order_by:
        query = query.order_by(*order_by)
    result = await execute_with_retry(session, query)
    return list(result.scalars().all())


@dataclass
class PlanningContext:
    vehicles: list
    team_members: list
    tasks: list


async def load_context(session: AsyncSession) -> PlanningContext:
    return PlanningContext(
        vehicles=await load_all(session, Vehicle, Vehicle.day, Vehicle.id),
        team_members=await load_all(session, TeamMember, TeamMember.name),
        tasks=await load_all(session, Task, Task.created_at),
    )


async def get_project_settings(session: AsyncSession) -> ProjectSettings:
    """The settings singleton, created with today as start date when missing."""
    project = await session.get(ProjectSettings, DEFAULT_SETTINGS_ID)
    if project is None:
        now = utc_now_iso()
        project = ProjectSettings(
            id=DEFAULT_SETTINGS_ID,
            project_start_date=date.today().isoformat(),
            total_days=settings.project_days,
            created_at=now,
            updated_at=now,
        )
        session.add(project)
        await session.commit()
        await session.refresh(project)
    return project
