from __future__ import annotations

from flask import Blueprint, request, jsonify, abort

from models import storage
from models.comment import Comment
from models.schemas.comment import CommentSchema, CommentOutSchema
from api.utils.pagination import paginate, parse_pagination
from api.videos import get_visible_video_or_404
from utils.decorators import jwt_optional, jwt_required
from utils.ownership import ensure_owner

bp = Blueprint("comments", __name__)

comment_schema = CommentSchema()
comment_out_schema = CommentOutSchema()
comments_out_schema = CommentOutSchema(many=True)


def get_comment_or_404(comment_id: str) -> Comment:
    comment = storage.get(Comment, comment_id)
    if not comment:
        abort(404, description="Comment not found")
    return comment


@bp.get("/videos/<video_id>/comments")
@jwt_optional()
def list_comments(video_id: str, ctx):
    """
    List comments of a video, newest first
    ---
    tags:
      - Comments
    parameters:
      - in: path
        name: video_id
        type: string
        required: true
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
      404: { description: Video not found }
    """
    session = storage.get_session()
    get_visible_video_or_404(video_id, ctx.user_id if ctx else None)
    page, limit = parse_pagination()
    query = (
        session.query(Comment)
        .filter(Comment.video_id == video_id)
        .order_by(Comment.created_at.desc(), Comment.id)
    )
    rows, meta = paginate(query, page, limit)
    return jsonify({"data": comments_out_schema.dump(rows), "meta": meta})


@bp.post("/videos/<video_id>/comments")
@jwt_required()
def add_comment(video_id: str, ctx):
    """
    Comment on a video
    ---
    tags:
      - Comments
    security:
      - Bearer: []
    parameters:
      - in: path
        name: video_id
        type: string
        required: true
      - in: body
        name: body
        schema:
          type: object
          properties:
            content: { type: string }
    responses:
      201: { description: Created }
      404: { description: Video not found }
    """
    get_visible_video_or_404(video_id, ctx.user_id)
    payload = request.get_json(silent=True) or {}
    data = comment_schema.load(payload)

    comment = Comment(content=data["content"], video_id=video_id, owner_id=ctx.user_id)
    storage.new(comment)
    storage.save()
    return jsonify({"data": comment_out_schema.dump(comment)}), 201


@bp.patch("/comments/<comment_id>")
@jwt_required()
def update_comment(comment_id: str, ctx):
    comment = get_comment_or_404(comment_id)
    ensure_owner(comment, ctx.user_id, "You are not authorized to update this comment")

    payload = request.get_json(silent=True) or {}
    data = comment_schema.load(payload)
    comment.content = data["content"]
    storage.new(comment)
    storage.save()
    return jsonify({"data": comment_out_schema.dump(comment)})


@bp.delete("/comments/<comment_id>")
@jwt_required()
def delete_comment(comment_id: str, ctx):
    comment = get_comment_or_404(comment_id)
    ensure_owner(comment, ctx.user_id, "You are not authorized to delete this comment")
    storage.delete(comment)
    storage.save()
    return ("", 204)
