"""
Channel dashboard: aggregate stats and the channel's published videos.
Like totals count likes given by the channel; the *_received totals count
likes on the channel's own videos, comments and tweets.
"""
from __future__ import annotations

from flask import Blueprint, jsonify, abort
from sqlalchemy import func, select

from models import storage
from models.comment import Comment
from models.like import Like
from models.subscription import Subscription
from models.tweet import Tweet
from models.user import User
from models.video import Video
from models.schemas.video import VideoOutSchema
from api.utils.pagination import paginate, parse_pagination

bp = Blueprint("dashboard", __name__)

videos_out_schema = VideoOutSchema(many=True)


def _count(session, column, *criteria) -> int:
    return session.query(func.count(column)).filter(*criteria).scalar() or 0


@bp.get("/<username>/stats")
def channel_stats(username: str):
    """
    Stats of a channel
    ---
    tags:
      - Dashboard
    parameters:
      - in: path
        name: username
        type: string
        required: true
    responses:
      200:
        description: OK
        schema:
          type: object
          properties:
            total_views: { type: integer }
            total_videos: { type: integer }
            total_subscribers: { type: integer }
            total_tweets: { type: integer }
            total_comments: { type: integer }
            total_video_likes: { type: integer }
            total_comment_likes: { type: integer }
            total_tweet_likes: { type: integer }
            total_video_likes_received: { type: integer }
            total_comment_likes_received: { type: integer }
            total_tweet_likes_received: { type: integer }
      404:
        description: Channel not found
    """
    session = storage.get_session()
    channel = session.query(User).filter(User.username == username.strip().lower()).first()
    if not channel:
        abort(404, description="Channel not found")
    cid = channel.id

    total_videos, total_views = (
        session.query(func.count(Video.id), func.coalesce(func.sum(Video.views), 0))
        .filter(Video.owner_id == cid, Video.is_published.is_(True))
        .one()
    )

    stats = {
        "total_views": int(total_views),
        "total_videos": total_videos,
        "total_subscribers": _count(session, Subscription.id, Subscription.channel_id == cid),
        "total_tweets": _count(session, Tweet.id, Tweet.owner_id == cid),
        "total_comments": _count(session, Comment.id, Comment.owner_id == cid),
        # likes handed out by the channel
        "total_video_likes": _count(session, Like.id, Like.liked_by_id == cid, Like.video_id.isnot(None)),
        "total_comment_likes": _count(session, Like.id, Like.liked_by_id == cid, Like.comment_id.isnot(None)),
        "total_tweet_likes": _count(session, Like.id, Like.liked_by_id == cid, Like.tweet_id.isnot(None)),
        # likes on the channel's own content
        "total_video_likes_received": _count(
            session, Like.id,
            Like.video_id.in_(select(Video.id).where(Video.owner_id == cid)),
        ),
        "total_comment_likes_received": _count(
            session, Like.id,
            Like.comment_id.in_(select(Comment.id).where(Comment.owner_id == cid)),
        ),
        "total_tweet_likes_received": _count(
            session, Like.id,
            Like.tweet_id.in_(select(Tweet.id).where(Tweet.owner_id == cid)),
        ),
    }
    return jsonify({"data": stats})


@bp.get("/<channel_id>/videos")
def channel_videos(channel_id: str):
    if not storage.get(User, channel_id):
        abort(404, description="Channel not found")
    session = storage.get_session()
    page, limit = parse_pagination()
    query = (
        session.query(Video)
        .filter(Video.owner_id == channel_id, Video.is_published.is_(True))
        .order_by(Video.created_at.desc(), Video.id)
    )
    rows, meta = paginate(query, page, limit)
    return jsonify({"data": videos_out_schema.dump(rows), "meta": meta})
