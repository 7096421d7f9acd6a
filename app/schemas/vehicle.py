from pydantic import BaseModel, Field, model_validator

from app.schemas.common import PartialUpdate, VehicleStatus


class VehicleCreate(BaseModel):
    id: str = Field(min_length=1)
    type: str = Field(min_length=1)
    location: str = Field(min_length=1)
    day: int = Field(ge=1)
    time_slot: str = Field(min_length=1)
    gps_required: int = Field(default=1, ge=0)
    fuel_sensors: int = Field(default=1, ge=0)
    fuel_tanks: int = Field(default=1, ge=0)

    @model_validator(mode="after")
    def check_sensor_count(self):
        if self.fuel_sensors > self.fuel_tanks:
            raise ValueError("Fuel sensors cannot exceed fuel tanks")
        return self


class VehicleUpdate(PartialUpdate):
    not_nullable = ("type", "location", "day", "time_slot", "status", "gps_required", "fuel_sensors", "fuel_tanks")

    type: str | None = None
    location: str | None = None
    day: int | None = Field(default=None, ge=1)
    time_slot: str | None = None
    status: VehicleStatus | None = None
    gps_required: int | None = Field(default=None, ge=0)
    fuel_sensors: int | None = Field(default=None, ge=0)
    fuel_tanks: int | None = Field(default=None, ge=0)


class VehicleStatusUpdate(BaseModel):
    status: VehicleStatus


class VehicleBulkStatusUpdate(BaseModel):
    vehicle_ids: list[str] = Field(min_length=1)
    status: VehicleStatus


class VehicleResponse(BaseModel):
    id: str
    type: str
    location: str
    day: int
    time_slot: str
    status: str
    gps_required: int
    fuel_sensors: int
    fuel_tanks: int
    created_at: str | None = None
    updated_at: str | None = None

    model_config = {"from_attributes": True}
