import io
import logging
import uuid as uuid_mod
from datetime import date
from typing import Callable

import pandas as pd
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError

from app.database import async_session
from app.models.comment import Comment
from app.models.task import Task
from app.routers.tasks import new_task_row
from app.schemas.bulk import (
    MAX_IMPORT_RECORDS, BulkAssign, BulkPriority, BulkSchedule, BulkSelection, BulkStatus, TaskImport,
)
from app.schemas.task import TaskCreate, TaskDraft, TaskResponse
from app.services.realtime import broadcaster
from app.services.repository import load_context
from app.services.validation import validate_task
from app.utils.exceptions import AppException
from app.utils.response import operation_summary, success_response
from app.utils.timeparse import utc_now_iso

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks/bulk", tags=["bulk"])

SCHEDULE_FIELDS = {"time_range", "date_range", "start_time", "end_time", "start_date", "end_date"}
# CSV cells holding several values separate them with ";"
LIST_COLUMNS = ("vehicle_ids", "assignees", "tags", "dependencies", "blocked_by")


async def _apply_each(task_ids: list[str], apply: Callable, event: str | None = "UPDATE",
                      on_commit: Callable[[str], None] | None = None) -> dict:
    """Run ``apply(session, task)`` for every id, committing each task on its
    own so one failure leaves the others in place.

    ``apply`` returns an error message to reject a task, or None. ``on_commit``
    is called with the id of each task whose change was committed. Pass
    ``event=None`` to skip the change notice.
    """
    success, errors, touched = 0, [], []
    async with async_session() as session:
        for task_id in task_ids:
            task = await session.get(Task, task_id)
            if not task:
                errors.append(f"Task {task_id} not found")
                continue
            try:
                problem = await apply(session, task)
                if problem:
                    errors.append(f"Task {task_id}: {problem}")
                    await session.rollback()
                    continue
                await session.commit()
            except SQLAlchemyError as e:
                logger.warning("Bulk operation failed for task %s: %s", task_id, e)
                await session.rollback()
                errors.append(f"Task {task_id}: {e}")
                continue
            success += 1
            touched.append(task_id)
            if on_commit:
                on_commit(task_id)

    if touched and event:
        await broadcaster.publish("tasks", event, touched)
    return operation_summary(success, len(errors), errors)


def _set_fields(**fields) -> Callable:
    async def apply(session, task):
        for name, value in fields.items():
            setattr(task, name, value)
        task.updated_at = utc_now_iso()
    return apply


@router.post("/status")
async def bulk_set_status(payload: BulkStatus):
    fields = {"status": payload.status}
    if payload.status == "Completed":
        fields["completion_percentage"] = 100
    summary = await _apply_each(payload.task_ids, _set_fields(**fields))
    return success_response(data=summary)


@router.post("/assign")
async def bulk_assign(payload: BulkAssign):
    summary = await _apply_each(payload.task_ids, _set_fields(assignees=list(payload.assignees)))
    return success_response(data=summary)


@router.post("/priority")
async def bulk_set_priority(payload: BulkPriority):
    summary = await _apply_each(payload.task_ids, _set_fields(priority=payload.priority))
    return success_response(data=summary)


@router.post("/schedule")
async def bulk_schedule(payload: BulkSchedule):
    changes = payload.model_dump(exclude={"task_ids"}, exclude_none=True)

    async def apply(session, task):
        merged = TaskDraft.model_validate(task).model_copy(update=changes)
        problems = [e.message for e in validate_task(merged).errors if e.field in SCHEDULE_FIELDS]
        if problems:
            return "; ".join(problems)
        for name, value in changes.items():
            setattr(task, name, value)
        task.updated_at = utc_now_iso()

    summary = await _apply_each(payload.task_ids, apply)
    return success_response(data=summary)


@router.post("/delete")
async def bulk_delete(payload: BulkSelection):
    async def apply(session, task):
        await session.execute(delete(Comment).where(Comment.task_id == task.id))
        await session.delete(task)

    summary = await _apply_each(payload.task_ids, apply, event="DELETE")
    return success_response(data=summary)


@router.post("/clone")
async def bulk_clone(payload: BulkSelection):
    pending: dict[str, str] = {}
    clones: list[str] = []

    async def apply(session, task):
        now = utc_now_iso()
        fields = TaskDraft.model_validate(task).model_dump(exclude={"id", "name", "status"})
        copy = Task(**fields, id=str(uuid_mod.uuid4()), name=f"{task.name} (Copy)",
                    status="Pending", created_at=now, updated_at=now)
        session.add(copy)
        pending[task.id] = copy.id

    summary = await _apply_each(payload.task_ids, apply, event=None,
                                on_commit=lambda task_id: clones.append(pending[task_id]))
    if clones:
        await broadcaster.publish("tasks", "INSERT", clones)
    summary["created_ids"] = clones
    return success_response(data=summary)


@router.post("/export")
async def bulk_export(payload: BulkSelection):
    exported, errors = [], []
    async with async_session() as session:
        for task_id in payload.task_ids:
            task = await session.get(Task, task_id)
            if not task:
                errors.append(f"Task {task_id} not found")
                continue
            exported.append(TaskResponse.model_validate(task).model_dump())

    filename = f"tasks_export_{date.today().isoformat()}.json"
    body = {
        "exported_at": utc_now_iso(),
        "tasks": exported,
        **operation_summary(len(exported), len(errors), errors),
    }
    return JSONResponse(content=body, headers={"Content-Disposition": f'attachment; filename="{filename}"'})


def _describe(error: ValidationError) -> str:
    return "; ".join(f"{'.'.join(str(p) for p in e['loc']) or 'record'}: {e['msg']}" for e in error.errors())


async def _import_records(records: list[dict]) -> dict:
    """Validate every record and insert the valid ones as new tasks.

    Records may depend on tasks that are stored or that appear earlier in the
    same import. Invalid records are reported by row number and skipped.
    """
    drafts, errors = [], []
    async with async_session() as session:
        context = await load_context(session)
        known = list(context.tasks)
        seen = {t.id for t in known}

        for row, record in enumerate(records, start=1):
            try:
                draft = TaskCreate.model_validate(record)
            except ValidationError as e:
                errors.append(f"Row {row}: {_describe(e)}")
                continue
            if draft.id and draft.id in seen:
                errors.append(f"Row {row}: task {draft.id} already exists")
                continue
            result = validate_task(draft, context.vehicles, context.team_members, known)
            if not result.is_valid:
                errors.append(f"Row {row}: " + "; ".join(issue.message for issue in result.errors))
                continue

            draft = draft.model_copy(update={"id": draft.id or str(uuid_mod.uuid4())})
            seen.add(draft.id)
            known.append(draft)
            drafts.append(draft)

        created = []
        if drafts:
            session.add_all(new_task_row(d, d.status, d.id) for d in drafts)
            try:
                await session.commit()
                created = [d.id for d in drafts]
            except SQLAlchemyError as e:
                logger.warning("Task import failed: %s", e)
                await session.rollback()
                errors.append(f"Import failed: {e}")

    failed = len(records) - len(created)
    logger.info("Imported %d of %d task records", len(created), len(records))
    if created:
        await broadcaster.publish("tasks", "INSERT", created)
    return {**operation_summary(len(created), failed, errors), "created_ids": created}


def parse_task_csv(text: str) -> list[dict]:
    """Rows of a CSV export as task records; empty cells are left out."""
    if not text.strip():
        return []
    df = pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False, skipinitialspace=True)
    df.columns = [str(c).strip() for c in df.columns]

    records = []
    for row in df.to_dict(orient="records"):
        record = {}
        for column, value in row.items():
            value = value.strip()
            if not column or not value:
                continue
            if column in LIST_COLUMNS:
                record[column] = [v.strip() for v in value.split(";") if v.strip()]
            else:
                record[column] = value
        records.append(record)
    return records


@router.post("/import", status_code=201)
async def bulk_import(payload: TaskImport):
    summary = await _import_records(payload.records)
    return success_response(data=summary)


@router.post("/import/csv", status_code=201)
async def bulk_import_csv(request: Request):
    try:
        records = parse_task_csv((await request.body()).decode("utf-8-sig"))
    except (UnicodeDecodeError, pd.errors.ParserError) as e:
        raise AppException(f"Unreadable CSV: {e}", status_code=422)
    if not records:
        raise AppException("CSV must have a header row and at least one data row", status_code=422)
    if len(records) > MAX_IMPORT_RECORDS:
        raise AppException(f"Maximum {MAX_IMPORT_RECORDS} records allowed per import", status_code=422)
    summary = await _import_records(records)
    return success_response(data=summary)
