from __future__ import annotations

from flask import Blueprint, request, jsonify, abort

from models import storage
from models.playlist import Playlist
from models.user import User
from models.schemas.playlist import PlaylistCreateSchema, PlaylistUpdateSchema, PlaylistOutSchema
from api.videos import get_visible_video_or_404
from utils.decorators import jwt_required
from utils.ownership import ensure_owner

bp = Blueprint("playlists", __name__)

playlist_create_schema = PlaylistCreateSchema()
playlist_update_schema = PlaylistUpdateSchema()
playlist_out_schema = PlaylistOutSchema()
playlists_out_schema = PlaylistOutSchema(many=True)


def get_playlist_or_404(playlist_id: str) -> Playlist:
    playlist = storage.get(Playlist, playlist_id)
    if not playlist:
        abort(404, description="Playlist not found")
    return playlist


@bp.post("/playlists")
@jwt_required()
def create_playlist(ctx):
    """
    Create a playlist
    ---
    tags:
      - Playlists
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
            name: { type: string }
            description: { type: string }
    responses:
      201: { description: Created }
      422: { description: Validation error }
    """
    payload = request.get_json(silent=True) or {}
    data = playlist_create_schema.load(payload)
    playlist = Playlist(name=data["name"], description=data["description"], owner_id=ctx.user_id)
    storage.new(playlist)
    storage.save()
    return jsonify({"data": playlist_out_schema.dump(playlist)}), 201


@bp.get("/users/<user_id>/playlists")
def list_user_playlists(user_id: str):
    """
    Playlists of a user (an empty list when there are none)
    ---
    tags:
      - Playlists
    parameters:
      - in: path
        name: user_id
        type: string
        required: true
    responses:
      200: { description: OK }
      404: { description: User not found }
    """
    if not storage.get(User, user_id):
        abort(404, description="User not found")
    session = storage.get_session()
    rows = (
        session.query(Playlist)
        .filter(Playlist.owner_id == user_id)
        .order_by(Playlist.name.asc())
        .all()
    )
    return jsonify({"data": playlists_out_schema.dump(rows)})


@bp.get("/playlists/<playlist_id>")
def get_playlist(playlist_id: str):
    return jsonify({"data": playlist_out_schema.dump(get_playlist_or_404(playlist_id))})


@bp.patch("/playlists/<playlist_id>")
@jwt_required()
def update_playlist(playlist_id: str, ctx):
    """
    Rename / re-describe a playlist (owner only)
    ---
    tags:
      - Playlists
    security:
      - Bearer: []
    parameters:
      - in: path
        name: playlist_id
        type: string
        required: true
      - in: body
        name: body
        schema:
          type: object
          properties:
            name: { type: string }
            description: { type: string }
    responses:
      200: { description: Updated }
      403: { description: Not the owner }
      404: { description: Not found }
    """
    playlist = get_playlist_or_404(playlist_id)
    ensure_owner(playlist, ctx.user_id, "You can't update this playlist")

    payload = request.get_json(silent=True) or {}
    data = playlist_update_schema.load(payload)
    for key, value in data.items():
        setattr(playlist, key, value)
    storage.new(playlist)
    storage.save()
    return jsonify({"data": playlist_out_schema.dump(playlist)})


@bp.delete("/playlists/<playlist_id>")
@jwt_required()
def delete_playlist(playlist_id: str, ctx):
    playlist = get_playlist_or_404(playlist_id)
    ensure_owner(playlist, ctx.user_id, "You can't delete this playlist")
    storage.delete(playlist)
    storage.save()
    return ("", 204)


@bp.post("/playlists/<playlist_id>/videos/<video_id>")
@jwt_required()
def add_video(playlist_id: str, video_id: str, ctx):
    """
    Add a video to a playlist (owner only); adding twice is a no-op
    ---
    tags:
      - Playlists
    security:
      - Bearer: []
    parameters:
      - in: path
        name: playlist_id
        type: string
        required: true
      - in: path
        name: video_id
        type: string
        required: true
    responses:
      200: { description: OK }
      403: { description: Not the owner }
      404: { description: Playlist or video not found }
    """
    playlist = get_playlist_or_404(playlist_id)
    ensure_owner(playlist, ctx.user_id, "You can't update this playlist")
    video = get_visible_video_or_404(video_id, ctx.user_id)

    if video not in playlist.videos:
        playlist.videos.append(video)
        storage.new(playlist)
        storage.save()
    return jsonify({"data": playlist_out_schema.dump(playlist)})


@bp.delete("/playlists/<playlist_id>/videos/<video_id>")
@jwt_required()
def remove_video(playlist_id: str, video_id: str, ctx):
    playlist = get_playlist_or_404(playlist_id)
    ensure_owner(playlist, ctx.user_id, "You can't update this playlist")

    video = next((v for v in playlist.videos if v.id == video_id), None)
    if not video:
        abort(404, description="Video not found in playlist")
    playlist.videos.remove(video)
    storage.new(playlist)
    storage.save()
    return jsonify({"data": playlist_out_schema.dump(playlist)})
