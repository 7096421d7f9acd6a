from typing import ClassVar, Literal

from pydantic import BaseModel, model_validator

VehicleStatus = Literal["Pending", "In Progress", "Completed"]
TaskStatus = Literal["Pending", "In Progress", "Completed", "Blocked", "Scheduled"]
Priority = Literal["High", "Medium", "Low"]

VEHICLE_STATUSES = ("Pending", "In Progress", "Completed")
TASK_STATUSES = ("Pending", "In Progress", "Completed", "Blocked", "Scheduled")
PRIORITIES = ("High", "Medium", "Low")


class PartialUpdate(BaseModel):
    """PATCH body: omitted fields are left alone, and the fields listed in
    ``not_nullable`` cannot be cleared with an explicit null."""

    not_nullable: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="after")
    def reject_cleared_fields(self):
        cleared = [name for name in self.not_nullable
                   if name in self.model_fields_set and getattr(self, name) is None]
        if cleared:
            raise ValueError(f"Cannot be null: {', '.join(cleared)}")
        return self
