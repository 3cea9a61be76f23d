from __future__ import annotations

from flask import Blueprint, request, jsonify, abort
from sqlalchemy import func

from models import storage
from models.subscription import Subscription
from models.user import User
from models.video import Video
from models.watch_history import WatchHistory
from models.schemas.user import (
    ChannelProfileOutSchema,
    ImageUpdateSchema,
    UserOutSchema,
    UserUpdateSchema,
)
from models.schemas.video import VideoOutSchema
from api.utils.pagination import paginate, parse_pagination
from api.videos import visible_to
from utils.decorators import get_auth_service, jwt_required

bp = Blueprint("users", __name__)

user_out_schema = UserOutSchema()
user_update_schema = UserUpdateSchema()
image_update_schema = ImageUpdateSchema()
channel_profile_schema = ChannelProfileOutSchema()
videos_out_schema = VideoOutSchema(many=True)


@bp.get("/users/me")
@jwt_required()
def me(ctx):
    """
    Get current user info
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    return jsonify({"data": ctx.user}), 200


@bp.patch("/users/me")
@jwt_required()
def update_me(ctx):
    """
    Update full_name and/or email of the current user
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            full_name: { type: string }
            email: { type: string }
    responses:
      200: { description: Updated }
      409: { description: Email already registered }
      422: { description: Validation error }
    """
    payload = request.get_json(silent=True) or {}
    data = user_update_schema.load(payload)
    user = get_auth_service().update_details(ctx.user_id, **data)
    return jsonify({"data": user_out_schema.dump(user)}), 200


def _update_image(ctx, kind: str):
    payload = request.get_json(silent=True) or {}
    data = image_update_schema.load(payload)
    user = get_auth_service().update_image(ctx.user_id, kind, data["url"], data.get("public_id"))
    return jsonify({"data": user_out_schema.dump(user)}), 200


@bp.patch("/users/me/avatar")
@jwt_required()
def update_avatar(ctx):
    """
    Point the avatar at a new asset reference
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            url: { type: string }
            public_id: { type: string }
    responses:
      200: { description: Updated }
    """
    return _update_image(ctx, "avatar")


@bp.patch("/users/me/cover-image")
@jwt_required()
def update_cover_image(ctx):
    return _update_image(ctx, "cover_image")


@bp.get("/users/me/history")
@jwt_required()
def watch_history(ctx):
    """
    Videos watched by the current user, most recent first
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - in: query
        name: page
        type: integer
        default: 1
      - in: query
        name: limit
        type: integer
        default: 10
    responses:
      200: { description: OK }
    """
    session = storage.get_session()
    page, limit = parse_pagination()
    query = (
        session.query(WatchHistory)
        .join(Video, Video.id == WatchHistory.video_id)
        .filter(WatchHistory.user_id == ctx.user_id, visible_to(ctx.user_id))
        .order_by(WatchHistory.updated_at.desc())
    )
    rows, meta = paginate(query, page, limit)
    return jsonify({"data": videos_out_schema.dump([r.video for r in rows]), "meta": meta})


@bp.get("/channels/<username>")
@jwt_required()
def channel_profile(username: str, ctx):
    """
    Channel profile with subscriber counts
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - in: path
        name: username
        type: string
        required: true
    responses:
      200: { description: OK }
      404: { description: Channel does not exist }
    """
    session = storage.get_session()
    channel = session.query(User).filter(User.username == username.strip().lower()).first()
    if not channel:
        abort(404, description="Channel does not exist")

    subscribers_count = (
        session.query(func.count(Subscription.id))
        .filter(Subscription.channel_id == channel.id)
        .scalar()
    )
    subscribed_to_count = (
        session.query(func.count(Subscription.id))
        .filter(Subscription.subscriber_id == channel.id)
        .scalar()
    )
    is_subscribed = (
        session.query(Subscription.id)
        .filter(Subscription.channel_id == channel.id, Subscription.subscriber_id == ctx.user_id)
        .first()
        is not None
    )

    profile = {
        "id": channel.id,
        "username": channel.username,
        "email": channel.email,
        "full_name": channel.full_name,
        "avatar_url": channel.avatar_url,
        "cover_image_url": channel.cover_image_url,
        "subscribers_count": subscribers_count,
        "channels_subscribed_to_count": subscribed_to_count,
        "is_subscribed": is_subscribed,
    }
    return jsonify({"data": channel_profile_schema.dump(profile)}), 200
