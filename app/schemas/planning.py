from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from app.schemas.task import TaskDraft


class WorkingHours(BaseModel):
    start: str = "08:00"
    end: str = "17:00"
    work_days: list[int] = Field(default_factory=lambda: [1, 2, 3, 4, 5])  # 0 = Sunday


class WizardState(BaseModel):
    selected_vehicles: list[str] = Field(default_factory=list)
    template_id: str | None = None
    custom_tasks: list[TaskDraft] = Field(default_factory=list)
    scheduling_mode: Literal["sequential", "parallel", "custom"] = "sequential"
    start_datetime: datetime | None = None
    working_hours: WorkingHours = Field(default_factory=WorkingHours)
    assignment_strategy: Literal["auto", "manual", "load-balance"] = "auto"
    conflict_resolution: Literal["skip", "adjust", "ask"] = "adjust"


class StepValidationRequest(BaseModel):
    state: WizardState
    step: int = Field(ge=1, le=5)


class ConflictCheckRequest(BaseModel):
    # empty = check the tasks already stored
    tasks: list[TaskDraft] = Field(default_factory=list)


class ScheduleRequest(BaseModel):
    state: WizardState


class CommitRequest(BaseModel):
    tasks: list[TaskDraft] = Field(min_length=1)
