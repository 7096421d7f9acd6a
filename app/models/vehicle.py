from sqlalchemy import Column, String, Integer

from app.database import Base


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(String, primary_key=True)
    type = Column(String, nullable=False)
    location = Column(String, nullable=False)
    day = Column(Integer, nullable=False)
    time_slot = Column(String, nullable=False)
    status = Column(String, nullable=False, default="Pending")
    gps_required = Column(Integer, nullable=False, default=0)
    fuel_sensors = Column(Integer, nullable=False, default=0)
    fuel_tanks = Column(Integer, nullable=False, default=0)
    created_at = Column(String, nullable=True)
    updated_at = Column(String, nullable=True)
