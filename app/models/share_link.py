from sqlalchemy import Column, String, Integer

from app.database import Base


class ShareLink(Base):
    __tablename__ = "share_links"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    page_url = Column(String, nullable=False)
    token = Column(String, nullable=False, unique=True)
    expires_at = Column(String, nullable=True)  # None = never expires
    is_active = Column(Integer, nullable=False, default=1)
    access_count = Column(Integer, nullable=False, default=0)
    created_at = Column(String, nullable=False)
