from sqlalchemy import Column, String, ForeignKey

from app.database import Base


class Comment(Base):
    __tablename__ = "comments"

    id = Column(String, primary_key=True)
    task_id = Column(String, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False)
    text = Column(String, nullable=False)
    author = Column(String, nullable=False)
    created_at = Column(String, nullable=False)
