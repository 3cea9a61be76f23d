from __future__ import annotations

from flask import Blueprint, request, jsonify, abort

from models import storage
from models.tweet import Tweet
from models.user import User
from models.schemas.tweet import TweetSchema, TweetOutSchema
from api.utils.pagination import paginate, parse_pagination
from utils.decorators import jwt_required
from utils.ownership import ensure_owner

bp = Blueprint("tweets", __name__)

tweet_schema = TweetSchema()
tweet_out_schema = TweetOutSchema()
tweets_out_schema = TweetOutSchema(many=True)


def get_tweet_or_404(tweet_id: str) -> Tweet:
    tweet = storage.get(Tweet, tweet_id)
    if not tweet:
        abort(404, description="Tweet not found")
    return tweet


@bp.post("/tweets")
@jwt_required()
def create_tweet(ctx):
    """
    Post a tweet
    ---
    tags:
      - Tweets
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            content: { type: string }
    responses:
      201: { description: Created }
      422: { description: Content is missing }
    """
    payload = request.get_json(silent=True) or {}
    data = tweet_schema.load(payload)
    tweet = Tweet(content=data["content"], owner_id=ctx.user_id)
    storage.new(tweet)
    storage.save()
    return jsonify({"data": tweet_out_schema.dump(tweet)}), 201


@bp.get("/users/<user_id>/tweets")
def list_user_tweets(user_id: str):
    """
    Tweets of a user, newest first
    ---
    tags:
      - Tweets
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
    page, limit = parse_pagination()
    query = (
        session.query(Tweet)
        .filter(Tweet.owner_id == user_id)
        .order_by(Tweet.created_at.desc(), Tweet.id)
    )
    rows, meta = paginate(query, page, limit)
    return jsonify({"data": tweets_out_schema.dump(rows), "meta": meta})


@bp.patch("/tweets/<tweet_id>")
@jwt_required()
def update_tweet(tweet_id: str, ctx):
    tweet = get_tweet_or_404(tweet_id)
    ensure_owner(tweet, ctx.user_id, "You can't update this tweet")

    payload = request.get_json(silent=True) or {}
    data = tweet_schema.load(payload)
    tweet.content = data["content"]
    storage.new(tweet)
    storage.save()
    return jsonify({"data": tweet_out_schema.dump(tweet)})


@bp.delete("/tweets/<tweet_id>")
@jwt_required()
def delete_tweet(tweet_id: str, ctx):
    tweet = get_tweet_or_404(tweet_id)
    ensure_owner(tweet, ctx.user_id, "You can't delete this tweet")
    storage.delete(tweet)
    storage.save()
    return ("", 204)
