from datetime import date

from pydantic import BaseModel


class ProjectSettingsUpdate(BaseModel):
    project_start_date: date
    project_end_date: date | None = None


class ProjectSettingsResponse(BaseModel):
    id: str
    project_start_date: str
    project_end_date: str | None = None
    total_days: int | None = None
    created_at: str | None = None
    updated_at: str | None = None

    model_config = {"from_attributes": True}
