import logging
import uuid as uuid_mod

from fastapi import APIRouter

from app.config import settings
from app.database import async_session
from app.models.task import Task
from app.schemas.planning import CommitRequest, ConflictCheckRequest, ScheduleRequest, StepValidationRequest
from app.schemas.task import TaskDraft, TaskResponse
from app.services.conflicts import detect_conflicts, resolve_conflicts
from app.services.integrity import run_integrity_checks
from app.services.planning import (
    assign_team, list_templates, plan_metrics, schedule_tasks, template_tasks, validate_wizard_step,
)
from app.services.realtime import broadcaster
from app.services.repository import load_context
from app.services.validation import validate_task
from app.utils.exceptions import AppException
from app.utils.response import success_response
from app.utils.timeparse import utc_now_iso

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/planning", tags=["planning"])


@router.get("/templates")
async def get_templates():
    return success_response(data=list_templates())


@router.post("/validate-step")
async def validate_step(payload: StepValidationRequest):
    result = validate_wizard_step(payload.state, payload.step)
    return success_response(data=result.to_dict())


@router.post("/schedule")
async def build_schedule(payload: ScheduleRequest):
    """Expand the wizard state into scheduled, assigned draft tasks without
    saving them."""
    state = payload.state
    for step in (1, 2, 3):
        result = validate_wizard_step(state, step)
        if not result.is_valid:
            raise AppException(f"Planning step {step} is incomplete", status_code=422, data=result.to_dict())

    drafts = template_tasks(state.template_id) + list(state.custom_tasks)

    async with async_session() as session:
        context = await load_context(session)

    # ids are assigned up front so conflict resolution can address each draft
    drafts = [d.model_copy(update={"id": d.id or str(uuid_mod.uuid4()),
                                   "vehicle_ids": d.vehicle_ids or list(state.selected_vehicles)})
              for d in drafts]
    drafts = assign_team(drafts, context.team_members, state.assignment_strategy, context.tasks)
    planned = schedule_tasks(drafts, state.scheduling_mode, state.start_datetime,
                             state.working_hours, state.selected_vehicles)

    report = detect_conflicts(planned)
    if state.conflict_resolution == "adjust" and report.conflicts:
        planned = resolve_conflicts(planned, report.conflicts, context.team_members)
        report = detect_conflicts(planned)

    data = {
        "tasks": [t.model_dump() for t in planned],
        "metrics": plan_metrics(state, planned, context.team_members),
        "conflicts": report.to_dict(),
    }
    return success_response(data=data)


async def _tasks_to_check(payload: ConflictCheckRequest) -> tuple[list[TaskDraft], list]:
    async with async_session() as session:
        context = await load_context(session)
    tasks = payload.tasks or [TaskDraft.model_validate(t) for t in context.tasks]
    return tasks, context.team_members


@router.post("/conflicts")
async def check_conflicts(payload: ConflictCheckRequest):
    tasks, _ = await _tasks_to_check(payload)
    return success_response(data=detect_conflicts(tasks).to_dict())


@router.post("/resolve")
async def resolve(payload: ConflictCheckRequest):
    tasks, team_members = await _tasks_to_check(payload)
    before = detect_conflicts(tasks)
    resolved = resolve_conflicts(tasks, before.conflicts, team_members)
    after = detect_conflicts(resolved)
    data = {
        "tasks": [t.model_dump() for t in resolved],
        "resolved_count": len(before.conflicts) - len(after.conflicts),
        "remaining": after.to_dict(),
    }
    return success_response(data=data)


@router.post("/commit", status_code=201)
async def commit_plan(payload: CommitRequest):
    """Insert planned tasks as Scheduled. Nothing is saved when any task is
    invalid or the plan has critical conflicts with stored tasks."""
    async with async_session() as session:
        context = await load_context(session)

        stored = [TaskDraft.model_validate(t) for t in context.tasks]
        stored_ids = {t.id for t in stored}
        draft_ids = [d.id for d in payload.tasks if d.id]
        taken = sorted({i for i in draft_ids if i in stored_ids or draft_ids.count(i) > 1})
        if taken:
            raise AppException(f"Duplicate task ids: {', '.join(taken)}", status_code=409,
                               data={"task_ids": taken})

        report = detect_conflicts(stored + list(payload.tasks))
        # problems that only involve stored tasks do not block a new plan
        blocking = [c for c in report.conflicts
                    if c.severity == "critical" and c.conflicting_tasks[0] not in stored_ids]
        if blocking:
            raise AppException("Plan has critical conflicts", status_code=409, data=report.to_dict())

        errors = {}
        for index, draft in enumerate(payload.tasks):
            result = validate_task(draft, context.vehicles, context.team_members,
                                   context.tasks + list(payload.tasks))
            if not result.is_valid:
                errors[str(index)] = result.to_dict()
        if errors:
            raise AppException("Planned tasks failed validation", status_code=422, data=errors)

        now = utc_now_iso()
        rows = []
        for draft in payload.tasks:
            fields = draft.model_dump(exclude={"id", "status"})
            rows.append(Task(**fields, id=draft.id or str(uuid_mod.uuid4()), status="Scheduled",
                             created_at=now, updated_at=now))
        session.add_all(rows)
        await session.commit()
        data = [TaskResponse.model_validate(r).model_dump() for r in rows]

    logger.info("Committed %d planned tasks", len(data))
    await broadcaster.publish("tasks", "INSERT", [d["id"] for d in data])
    return success_response(data={"tasks": data, "conflicts": report.to_dict()})


@router.get("/integrity")
async def check_integrity():
    async with async_session() as session:
        context = await load_context(session)
    report = run_integrity_checks(context.tasks, context.vehicles, context.team_members, settings.project_days)
    return success_response(data=report)
