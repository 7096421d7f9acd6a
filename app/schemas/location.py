from pydantic import BaseModel, Field

from app.schemas.common import PartialUpdate


class LocationCreate(BaseModel):
    name: str = Field(min_length=1)
    contact_person: str | None = None
    contact_phone: str | None = None
    vehicles: int = Field(default=0, ge=0)
    gps_devices: int = Field(default=0, ge=0)
    fuel_sensors: int = Field(default=0, ge=0)


class LocationUpdate(PartialUpdate):
    not_nullable = ("vehicles", "gps_devices", "fuel_sensors")

    contact_person: str | None = None
    contact_phone: str | None = None
    vehicles: int | None = Field(default=None, ge=0)
    gps_devices: int | None = Field(default=None, ge=0)
    fuel_sensors: int | None = Field(default=None, ge=0)


class LocationResponse(BaseModel):
    name: str
    contact_person: str | None = None
    contact_phone: str | None = None
    vehicles: int
    gps_devices: int
    fuel_sensors: int
    created_at: str | None = None

    model_config = {"from_attributes": True}
