from sqlalchemy import Column, String, Integer

from app.database import Base


class Location(Base):
    __tablename__ = "locations"

    name = Column(String, primary_key=True)
    contact_person = Column(String, nullable=True)
    contact_phone = Column(String, nullable=True)
    vehicles = Column(Integer, nullable=False, default=0)
    gps_devices = Column(Integer, nullable=False, default=0)
    fuel_sensors = Column(Integer, nullable=False, default=0)
    created_at = Column(String, nullable=True)
