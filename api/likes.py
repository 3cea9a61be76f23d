"""
Likes blueprint. Each endpoint toggles: a second call removes the like.
"""
from __future__ import annotations

from flask import Blueprint, jsonify, abort

from models import storage
from models.comment import Comment
from models.like import Like
from models.tweet import Tweet
from models.video import Video
from models.schemas.video import VideoOutSchema
from api.utils.pagination import paginate, parse_pagination
from api.videos import get_visible_video_or_404, visible_to
from utils.decorators import jwt_required

bp = Blueprint("likes", __name__)

videos_out_schema = VideoOutSchema(many=True)

# target name -> (model, column on Like)
TARGETS = {
    "video": (Video, Like.video_id),
    "comment": (Comment, Like.comment_id),
    "tweet": (Tweet, Like.tweet_id),
}


def toggle_like(user_id: str, target: str, target_id: str):
    model, column = TARGETS[target]
    if model is Video:
        get_visible_video_or_404(target_id, user_id)
    elif not storage.get(model, target_id):
        abort(404, description=f"{target.capitalize()} not found")

    session = storage.get_session()
    existing = (
        session.query(Like)
        .filter(Like.liked_by_id == user_id, column == target_id)
        .first()
    )
    if existing:
        storage.delete(existing)
        storage.save()
        return "removed"

    storage.new(Like(liked_by_id=user_id, **{column.key: target_id}))
    storage.save()
    return "added"


def _toggle_response(ctx, target: str, target_id: str):
    action = toggle_like(ctx.user_id, target, target_id)
    return jsonify({"data": {"action": action, f"{target}_id": target_id}, "message": f"Like {action}"}), 200


@bp.post("/videos/<video_id>")
@jwt_required()
def toggle_video_like(video_id: str, ctx):
    """
    Like or unlike a video
    ---
    tags:
      - Likes
    security:
      - Bearer: []
    parameters:
      - in: path
        name: video_id
        type: string
        required: true
    responses:
      200: { description: "action is 'added' or 'removed'" }
      404: { description: Video not found }
    """
    return _toggle_response(ctx, "video", video_id)


@bp.post("/comments/<comment_id>")
@jwt_required()
def toggle_comment_like(comment_id: str, ctx):
    return _toggle_response(ctx, "comment", comment_id)


@bp.post("/tweets/<tweet_id>")
@jwt_required()
def toggle_tweet_like(tweet_id: str, ctx):
    return _toggle_response(ctx, "tweet", tweet_id)


@bp.get("/videos")
@jwt_required()
def liked_videos(ctx):
    """
    Videos liked by the current user
    ---
    tags:
      - Likes
    security:
      - Bearer: []
    responses:
      200: { description: OK }
    """
    session = storage.get_session()
    page, limit = parse_pagination()
    query = (
        session.query(Video)
        .join(Like, Like.video_id == Video.id)
        .filter(Like.liked_by_id == ctx.user_id, visible_to(ctx.user_id))
        .order_by(Like.created_at.desc(), Video.id)
    )
    rows, meta = paginate(query, page, limit)
    return jsonify({"data": videos_out_schema.dump(rows), "meta": meta})
