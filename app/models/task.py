from sqlalchemy import Column, String, Integer, JSON

from app.database import Base


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    vehicle_ids = Column(JSON, nullable=False, default=list)
    assignees = Column(JSON, nullable=False, default=list)
    status = Column(String, nullable=False, default="Pending")
    priority = Column(String, nullable=False, default="Medium")
    estimated_duration = Column(Integer, nullable=True)  # minutes
    actual_duration = Column(Integer, nullable=True)
    start_time = Column(String, nullable=True)  # HH:MM
    end_time = Column(String, nullable=True)
    start_date = Column(String, nullable=True)  # YYYY-MM-DD
    end_date = Column(String, nullable=True)
    duration_days = Column(Integer, nullable=True)
    notes = Column(String, nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    dependencies = Column(JSON, nullable=False, default=list)
    blocked_by = Column(JSON, nullable=False, default=list)
    completion_percentage = Column(Integer, nullable=True)
    created_at = Column(String, nullable=True)
    updated_at = Column(String, nullable=True)
