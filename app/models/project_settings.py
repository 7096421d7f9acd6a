from sqlalchemy import Column, String, Integer

from app.database import Base

DEFAULT_SETTINGS_ID = "default"


class ProjectSettings(Base):
    __tablename__ = "project_settings"

    id = Column(String, primary_key=True, default=DEFAULT_SETTINGS_ID)
    project_start_date = Column(String, nullable=False)
    project_end_date = Column(String, nullable=True)
    total_days = Column(Integer, nullable=True)
    created_at = Column(String, nullable=True)
    updated_at = Column(String, nullable=True)
