from pydantic import BaseModel, Field

from app.schemas.common import PartialUpdate


class TeamMemberCreate(BaseModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    role: str = Field(min_length=1)
    specializations: list[str] = Field(default_factory=list)
    completion_rate: float = Field(default=0, ge=0, le=100)
    average_task_time: float = Field(default=0, ge=0)
    quality_score: float = Field(default=0, ge=0, le=100)


class TeamMemberUpdate(PartialUpdate):
    not_nullable = ("name", "role", "specializations", "completion_rate", "average_task_time", "quality_score")

    name: str | None = None
    role: str | None = None
    specializations: list[str] | None = None
    completion_rate: float | None = Field(default=None, ge=0, le=100)
    average_task_time: float | None = Field(default=None, ge=0)
    quality_score: float | None = Field(default=None, ge=0, le=100)


class TeamMemberResponse(BaseModel):
    id: str
    name: str
    role: str
    specializations: list[str]
    completion_rate: float
    average_task_time: float
    quality_score: float
    created_at: str | None = None

    model_config = {"from_attributes": True}
