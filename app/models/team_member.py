from sqlalchemy import Column, String, Float, JSON

from app.database import Base


class TeamMember(Base):
    __tablename__ = "team_members"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False, unique=True)
    role = Column(String, nullable=False)
    specializations = Column(JSON, nullable=False, default=list)
    completion_rate = Column(Float, nullable=False, default=0)
    average_task_time = Column(Float, nullable=False, default=0)
    quality_score = Column(Float, nullable=False, default=0)
    created_at = Column(String, nullable=True)
