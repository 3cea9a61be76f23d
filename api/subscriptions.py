"""
Subscriptions blueprint:
- POST /subscriptions/channels/<channel_id>              toggle
- GET  /subscriptions/channels/<channel_id>/subscribers  who follows a channel
- GET  /subscriptions/users/<subscriber_id>/channels     what a user follows
"""
from __future__ import annotations

from flask import Blueprint, jsonify, abort

from models import storage
from models.subscription import Subscription
from models.user import User
from models.schemas.common import OwnerOutSchema
from api.utils.pagination import paginate, parse_pagination
from utils.decorators import jwt_required

bp = Blueprint("subscriptions", __name__)

profiles_out_schema = OwnerOutSchema(many=True)


def get_user_or_404(user_id: str, what: str = "Channel") -> User:
    user = storage.get(User, user_id)
    if not user:
        abort(404, description=f"{what} not found")
    return user


@bp.post("/channels/<channel_id>")
@jwt_required()
def toggle_subscription(channel_id: str, ctx):
    """
    Subscribe to / unsubscribe from a channel
    ---
    tags:
      - Subscriptions
    security:
      - Bearer: []
    parameters:
      - in: path
        name: channel_id
        type: string
        required: true
    responses:
      200: { description: "subscribed is true or false after the toggle" }
      400: { description: Cannot subscribe to yourself }
      404: { description: Channel not found }
    """
    get_user_or_404(channel_id)
    if channel_id == ctx.user_id:
        abort(400, description="You cannot subscribe to your own channel")

    session = storage.get_session()
    existing = (
        session.query(Subscription)
        .filter(Subscription.subscriber_id == ctx.user_id, Subscription.channel_id == channel_id)
        .first()
    )
    if existing:
        storage.delete(existing)
        storage.save()
        return jsonify({"data": {"channel_id": channel_id, "subscribed": False}, "message": "Subscription deleted"})

    storage.new(Subscription(subscriber_id=ctx.user_id, channel_id=channel_id))
    storage.save()
    return jsonify({"data": {"channel_id": channel_id, "subscribed": True}, "message": "Subscription created"})


@bp.get("/channels/<channel_id>/subscribers")
def channel_subscribers(channel_id: str):
    get_user_or_404(channel_id)
    session = storage.get_session()
    page, limit = parse_pagination(default_limit=20)
    query = (
        session.query(User)
        .join(Subscription, Subscription.subscriber_id == User.id)
        .filter(Subscription.channel_id == channel_id)
        .order_by(User.username.asc())
    )
    rows, meta = paginate(query, page, limit)
    return jsonify({"data": profiles_out_schema.dump(rows), "meta": meta})


@bp.get("/users/<subscriber_id>/channels")
def subscribed_channels(subscriber_id: str):
    get_user_or_404(subscriber_id, what="User")
    session = storage.get_session()
    page, limit = parse_pagination(default_limit=20)
    query = (
        session.query(User)
        .join(Subscription, Subscription.channel_id == User.id)
        .filter(Subscription.subscriber_id == subscriber_id)
        .order_by(User.username.asc())
    )
    rows, meta = paginate(query, page, limit)
    return jsonify({"data": profiles_out_schema.dump(rows), "meta": meta})
