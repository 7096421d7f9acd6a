from pydantic import BaseModel, Field, field_validator

from app.schemas.common import PartialUpdate, Priority, TaskStatus


def _as_list(value):
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value else []
    return value


class TaskBase(BaseModel):
    name: str
    description: str | None = None
    vehicle_ids: list[str] = Field(default_factory=list)
    assignees: list[str] = Field(default_factory=list)
    priority: Priority = "Medium"
    estimated_duration: int | None = None
    actual_duration: int | None = None
    start_time: str | None = None
    end_time: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    duration_days: int | None = None
    notes: str | None = None
    tags: list[str] = Field(default_factory=list)
    dependencies: list[str] = Field(default_factory=list)
    blocked_by: list[str] = Field(default_factory=list)
    completion_percentage: int | None = None

    # a single vehicle id or assignee name is accepted as well as a list
    @field_validator("vehicle_ids", "assignees", mode="before")
    @classmethod
    def single_or_many(cls, value):
        return _as_list(value)


class TaskCreate(TaskBase):
    id: str | None = None
    status: TaskStatus = "Pending"


class TaskDraft(TaskBase):
    """A task that may not exist yet: used by validation and planning."""

    id: str | None = None
    name: str = ""
    status: TaskStatus | None = None

    model_config = {"from_attributes": True}


class TaskUpdate(PartialUpdate):
    not_nullable = ("name", "vehicle_ids", "assignees", "status", "priority", "tags", "dependencies", "blocked_by")

    name: str | None = None
    description: str | None = None
    vehicle_ids: list[str] | None = None
    assignees: list[str] | None = None
    status: TaskStatus | None = None
    priority: Priority | None = None
    estimated_duration: int | None = None
    actual_duration: int | None = None
    start_time: str | None = None
    end_time: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    duration_days: int | None = None
    notes: str | None = None
    tags: list[str] | None = None
    dependencies: list[str] | None = None
    blocked_by: list[str] | None = None
    completion_percentage: int | None = None

    @field_validator("vehicle_ids", "assignees", mode="before")
    @classmethod
    def single_or_many(cls, value):
        if value is None:
            return None
        return _as_list(value)


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class StandardTasksRequest(BaseModel):
    vehicle_id: str
    assignee: str
    start_date: str | None = None


class TaskResponse(TaskBase):
    id: str
    status: str
    created_at: str | None = None
    updated_at: str | None = None

    model_config = {"from_attributes": True}
