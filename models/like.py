"""
Like model: one row per (user, target); exactly one of video_id, comment_id,
tweet_id is set. The single-target rule is enforced where likes are created.
"""
from sqlalchemy import Column, String, ForeignKey, UniqueConstraint

from models.base_model import BaseModel, Base


class Like(BaseModel, Base):
    __tablename__ = "likes"

    liked_by_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    video_id = Column(String(36), ForeignKey("videos.id", ondelete="CASCADE"), nullable=True, index=True)
    comment_id = Column(String(36), ForeignKey("comments.id", ondelete="CASCADE"), nullable=True, index=True)
    tweet_id = Column(String(36), ForeignKey("tweets.id", ondelete="CASCADE"), nullable=True, index=True)

    __table_args__ = (
        UniqueConstraint("liked_by_id", "video_id", name="uq_likes_user_video"),
        UniqueConstraint("liked_by_id", "comment_id", name="uq_likes_user_comment"),
        UniqueConstraint("liked_by_id", "tweet_id", name="uq_likes_user_tweet"),
    )
