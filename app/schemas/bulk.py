from typing import Any

from pydantic import BaseModel, Field, field_validator

from app.schemas.common import Priority, TaskStatus


class BulkSelection(BaseModel):
    task_ids: list[str] = Field(min_length=1)


class BulkStatus(BulkSelection):
    status: TaskStatus


class BulkAssign(BulkSelection):
    assignees: list[str] = Field(min_length=1)

    @field_validator("assignees", mode="before")
    @classmethod
    def single_or_many(cls, value):
        return [value] if isinstance(value, str) else value


class BulkPriority(BulkSelection):
    priority: Priority


class BulkSchedule(BulkSelection):
    start_date: str | None = None
    end_date: str | None = None
    start_time: str | None = None
    end_time: str | None = None


MAX_IMPORT_RECORDS = 1000


class TaskImport(BaseModel):
    records: list[dict[str, Any]] = Field(min_length=1, max_length=MAX_IMPORT_RECORDS)
