"""
Authentication blueprint:
- POST /auth/register
- POST /auth/login
- POST /auth/refresh-token
- POST /auth/logout
- POST /auth/change-password

Login and refresh answer with both tokens in the body and set them as the
accessToken / refreshToken cookie pair; logout clears the pair.
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, current_app

from models.schemas.user import (
    ChangePasswordSchema,
    UserCreateSchema,
    UserLoginSchema,
    UserOutSchema,
)
from utils.decorators import ACCESS_COOKIE, REFRESH_COOKIE, get_auth_service, jwt_required

bp = Blueprint("auth", __name__)

user_create_schema = UserCreateSchema()
user_out_schema = UserOutSchema()
user_login_schema = UserLoginSchema()
change_password_schema = ChangePasswordSchema()


def _cookie_options() -> dict:
    return {
        "httponly": True,
        "secure": current_app.config.get("COOKIE_SECURE", True),
        "samesite": current_app.config.get("COOKIE_SAMESITE", "Strict"),
    }


def set_auth_cookies(response, access_token: str, refresh_token: str):
    opts = _cookie_options()
    response.set_cookie(
        ACCESS_COOKIE, access_token,
        max_age=int(current_app.config["ACCESS_TOKEN_EXPIRES"].total_seconds()), **opts
    )
    response.set_cookie(
        REFRESH_COOKIE, refresh_token,
        max_age=int(current_app.config["REFRESH_TOKEN_EXPIRES"].total_seconds()), **opts
    )
    return response


def clear_auth_cookies(response):
    opts = _cookie_options()
    response.delete_cookie(ACCESS_COOKIE, **opts)
    response.delete_cookie(REFRESH_COOKIE, **opts)
    return response


@bp.post("/register")
def register():
    """
    Register a new user.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [username, email, password, full_name]
          properties:
            username: { type: string }
            email: { type: string }
            password: { type: string, minLength: 8 }
            full_name: { type: string }
            avatar_url: { type: string }
            cover_image_url: { type: string }
    responses:
      201:
        description: Created
      409:
        description: Username or email already registered
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = user_create_schema.load(payload)
    user = get_auth_service().register(**data)
    return jsonify({"data": user_out_schema.dump(user)}), 201


@bp.post("/login")
def login():
    """
    Login with username or email; returns access_token and refresh_token
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             username: { type: string }
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens, sets cookies)
      401:
        description: Wrong password
      404:
        description: User does not exist
    """
    payload = request.get_json(silent=True) or {}
    data = user_login_schema.load(payload)
    identifier = data.get("username") or data.get("email")

    result = get_auth_service().login(identifier, data["password"])

    response = jsonify(
        {
            "data": {
                "user": user_out_schema.dump(result.user),
                "access_token": result.access_token,
                "refresh_token": result.refresh_token,
                "token_type": "bearer",
                "expires_in": int(current_app.config["ACCESS_TOKEN_EXPIRES"].total_seconds()),
            }
        }
    )
    return set_auth_cookies(response, result.access_token, result.refresh_token), 200


@bp.post("/refresh-token")
def refresh():
    """
    Use a refresh token to obtain new access and refresh tokens (rotation).
    The token is read from the refreshToken cookie or the body: { "refresh_token": "<token>" }
    """
    payload = request.get_json(silent=True) or {}
    presented = request.cookies.get(REFRESH_COOKIE) or payload.get("refresh_token")

    pair = get_auth_service().refresh(presented)

    response = jsonify(
        {
            "data": {
                "access_token": pair.access_token,
                "refresh_token": pair.refresh_token,
                "token_type": "bearer",
                "expires_in": int(current_app.config["ACCESS_TOKEN_EXPIRES"].total_seconds()),
            }
        }
    )
    return set_auth_cookies(response, pair.access_token, pair.refresh_token), 200


@bp.post("/logout")
@jwt_required()
def logout(ctx):
    """
    Logout: revokes the stored refresh token and clears the auth cookies
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Logged out
      401:
        description: Unauthorized
    """
    get_auth_service().logout(ctx.user_id)
    response = jsonify({"data": {}, "message": "User logged out"})
    return clear_auth_cookies(response), 200


@bp.post("/change-password")
@jwt_required()
def change_password(ctx):
    """
    Change the current user's password
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             old_password: { type: string }
             new_password: { type: string, minLength: 8 }
    responses:
      200:
        description: Password changed
      401:
        description: Old password is incorrect
    """
    payload = request.get_json(silent=True) or {}
    data = change_password_schema.load(payload)
    get_auth_service().change_password(ctx.user_id, data["old_password"], data["new_password"])
    return jsonify({"data": {}, "message": "Password changed"}), 200
