from sqlalchemy import Column, String, Text, ForeignKey, Table
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base

# Association table; CASCADE so join rows clean up when either side is deleted
playlist_videos = Table(
    "playlist_videos",
    Base.metadata,
    Column("playlist_id", String(36), ForeignKey("playlists.id", ondelete="CASCADE"), primary_key=True),
    Column("video_id", String(36), ForeignKey("videos.id", ondelete="CASCADE"), primary_key=True),
)


class Playlist(BaseModel, Base):
    __tablename__ = "playlists"

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    owner = relationship("User")
    videos = relationship("Video", secondary=playlist_videos)
