from __future__ import annotations

from datetime import datetime, timezone

from flask import Blueprint, request, jsonify, abort
from sqlalchemy import or_, func

from models import storage
from models.video import Video
from models.watch_history import WatchHistory
from models.schemas.video import VideoCreateSchema, VideoUpdateSchema, VideoOutSchema
from api.utils.pagination import paginate, parse_pagination, parse_sort
from utils.decorators import jwt_optional, jwt_required
from utils.ownership import ensure_owner, is_owner

bp = Blueprint("videos", __name__)

# Schemas
video_create_schema = VideoCreateSchema()
video_update_schema = VideoUpdateSchema()
video_out_schema = VideoOutSchema()
videos_out_schema = VideoOutSchema(many=True)

# Sorting allowlist: API field -> SQLAlchemy column
SORT_COLUMNS = {
    "created_at": Video.created_at,
    "views": Video.views,
    "duration": Video.duration,
    "title": Video.title,
}

MAX_QUERY_LENGTH = 100


def get_video_or_404(video_id: str) -> Video:
    video = storage.get(Video, video_id)
    if not video:
        abort(404, description="Video not found")
    return video


def visible_to(viewer_id: str | None):
    """Filter criterion: published videos, plus the viewer's own drafts."""
    if viewer_id is None:
        return Video.is_published.is_(True)
    return or_(Video.is_published.is_(True), Video.owner_id == viewer_id)


def get_visible_video_or_404(video_id: str, viewer_id: str | None) -> Video:
    """Like get_video_or_404, but drafts are 404 to everyone except their owner."""
    video = get_video_or_404(video_id)
    if not video.is_published and not is_owner(video, viewer_id):
        abort(404, description="Video not found")
    return video


def record_view(video: Video, user_id: str | None) -> None:
    """Count a view; authenticated viewers also get a watch-history entry."""
    session = storage.get_session()
    session.query(Video).filter(Video.id == video.id).update(
        {Video.views: Video.views + 1}, synchronize_session=False
    )
    if user_id:
        entry = (
            session.query(WatchHistory)
            .filter(WatchHistory.user_id == user_id, WatchHistory.video_id == video.id)
            .first()
        )
        now = datetime.now(timezone.utc)
        if entry:
            entry.updated_at = now
        else:
            storage.new(WatchHistory(user_id=user_id, video_id=video.id, created_at=now, updated_at=now))
    storage.save()
    session.refresh(video)


@bp.get("/videos")
def list_videos():
    """
    List published videos with pagination, sorting and search
    ---
    tags:
      - Videos
    parameters:
      - in: query
        name: page
        type: integer
        default: 1
      - in: query
        name: limit
        type: integer
        default: 10
      - in: query
        name: q
        type: string
        description: "Case-insensitive substring search on title and description"
      - in: query
        name: owner_id
        type: string
      - in: query
        name: sort
        type: string
        description: "Comma-separated fields; prefix with '-' for desc. Allowed: created_at, views, duration, title"
        default: "-created_at"
    responses:
      200:
        description: List of videos
    """
    session = storage.get_session()
    page, limit = parse_pagination()
    order_by = parse_sort(SORT_COLUMNS, default="-created_at")

    query = session.query(Video).filter(Video.is_published.is_(True))

    q = request.args.get("q")
    if q:
        qnorm = f"%{q.strip()[:MAX_QUERY_LENGTH].lower()}%"
        query = query.filter(
            or_(func.lower(Video.title).like(qnorm), func.lower(Video.description).like(qnorm))
        )
    owner_id = request.args.get("owner_id")
    if owner_id:
        query = query.filter(Video.owner_id == owner_id)

    rows, meta = paginate(query.order_by(*order_by), page, limit)
    meta["sort"] = request.args.get("sort", "-created_at")
    return jsonify({"data": videos_out_schema.dump(rows), "meta": meta})


@bp.post("/videos")
@jwt_required()
def publish_video(ctx):
    """
    Publish a video. Files live on the asset host; send their URLs.
    ---
    tags:
      - Videos
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            title: { type: string, maxLength: 255 }
            description: { type: string }
            video_file_url: { type: string }
            video_file_public_id: { type: string }
            thumbnail_url: { type: string }
            thumbnail_public_id: { type: string }
            duration: { type: number, minimum: 0 }
            is_published: { type: boolean, default: true }
    responses:
      201:
        description: Created
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = video_create_schema.load(payload)

    video = Video(owner_id=ctx.user_id, views=0, **data)
    storage.new(video)
    storage.save()
    return jsonify({"data": video_out_schema.dump(video)}), 201


@bp.get("/videos/<video_id>")
@jwt_optional()
def get_video(video_id: str, ctx):
    """
    Get a single video by id; counts a view
    ---
    tags:
      - Videos
    parameters:
      - in: path
        name: video_id
        type: string
        required: true
    responses:
      200:
        description: Video found
      404:
        description: Not found
    """
    viewer_id = ctx.user_id if ctx else None
    video = get_visible_video_or_404(video_id, viewer_id)
    record_view(video, viewer_id)
    return jsonify({"data": video_out_schema.dump(video)})


@bp.patch("/videos/<video_id>")
@jwt_required()
def update_video(video_id: str, ctx):
    """
    Update title, description or thumbnail (owner only)
    ---
    tags:
      - Videos
    security:
      - Bearer: []
    parameters:
      - in: path
        name: video_id
        type: string
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
    responses:
      200:
        description: Updated
      403:
        description: Not the owner
      404:
        description: Not found
    """
    video = get_video_or_404(video_id)
    ensure_owner(video, ctx.user_id, "You can't update this video, only owners allowed to update")

    payload = request.get_json(silent=True) or {}
    data = video_update_schema.load(payload)
    for key, value in data.items():
        setattr(video, key, value)
    storage.new(video)
    storage.save()
    return jsonify({"data": video_out_schema.dump(video)})


@bp.delete("/videos/<video_id>")
@jwt_required()
def delete_video(video_id: str, ctx):
    """
    Delete a video (owner only)
    ---
    tags:
      - Videos
    security:
      - Bearer: []
    parameters:
      - in: path
        name: video_id
        type: string
        required: true
    responses:
      204:
        description: Deleted
      403:
        description: Not the owner
    """
    video = get_video_or_404(video_id)
    ensure_owner(video, ctx.user_id, "You are not authorized to delete this video")
    storage.delete(video)
    storage.save()
    return ("", 204)


@bp.patch("/videos/<video_id>/publish")
@jwt_required()
def toggle_publish(video_id: str, ctx):
    video = get_video_or_404(video_id)
    ensure_owner(video, ctx.user_id, "You can't change the publish status of this video")
    video.is_published = not video.is_published
    storage.new(video)
    storage.save()
    return jsonify({"data": {"id": video.id, "is_published": video.is_published}})
