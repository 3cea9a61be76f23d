from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class Video(BaseModel, Base):
    __tablename__ = "videos"

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    video_file_url = Column(String(1024), nullable=False)
    video_file_public_id = Column(String(255), nullable=True)
    thumbnail_url = Column(String(1024), nullable=False)
    thumbnail_public_id = Column(String(255), nullable=True)
    duration = Column(Float, nullable=False, default=0)  # seconds
    views = Column(Integer, nullable=False, default=0)
    is_published = Column(Boolean, nullable=False, default=True)

    owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    owner = relationship("User")

    __table_args__ = (
        CheckConstraint("views >= 0", name="ck_videos_views_nonnegative"),
        CheckConstraint("duration >= 0", name="ck_videos_duration_nonnegative"),
        Index("ix_videos_title", "title"),
    )
