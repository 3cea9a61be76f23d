"""
WatchHistory: one row per (user, video). Re-watching bumps updated_at, which
is what the history listing orders by.
"""
from sqlalchemy import Column, String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class WatchHistory(BaseModel, Base):
    __tablename__ = "watch_history"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    video_id = Column(String(36), ForeignKey("videos.id", ondelete="CASCADE"), nullable=False)

    video = relationship("Video")

    __table_args__ = (
        UniqueConstraint("user_id", "video_id", name="uq_watch_history_user_video"),
    )
