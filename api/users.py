"""
Users and session tokens:
- POST /users                 register
- GET  /users                 current user with itineraries (bearer)
- POST /users/login           issue access + refresh token
- POST /users/logout          revoke a refresh token
- POST /users/refresh-token   redeem a refresh token for a new access token

Passwords are hashed with argon2 (utils.security); tokens come from the
app's TokenService (utils.tokens).
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, abort

from models import StorageError, StorageErrorKind
from models.user import User
from models.schemas.user import UserCreateSchema, UserLoginSchema, UserOutSchema, UserWithItinerariesOutSchema
from utils.decorators import jwt_required, validate_body
from utils.security import hash_password, verify_password, password_needs_rehash
from utils.tokens import RefreshTokenNotFound, RefreshTokenRejected
from utils.extensions import get_storage, get_token_service

bp = Blueprint("users", __name__)

user_create_schema = UserCreateSchema()
user_login_schema = UserLoginSchema()
user_out_schema = UserOutSchema()
user_detail_out_schema = UserWithItinerariesOutSchema()


def _refresh_token_from_body() -> str:
    payload = request.get_json(silent=True) or {}
    token = payload.get("refreshToken") if isinstance(payload, dict) else None
    if not token or not isinstance(token, str):
        abort(400, description="Refresh token not provided")
    return token


@bp.post("/users")
@validate_body(user_create_schema)
def create_user(data):
    """
    Register a new user.
    ---
    tags:
      - Users
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            fullname: { type: string, example: "Ann Lee" }
            email: { type: string }
            password: { type: string }
            role: { type: string, enum: [admin, user] }
            phone: { type: string }
    responses:
      201:
        description: Created (password never returned)
      400:
        description: Validation error or email already in use
    """
    storage = get_storage()
    if storage.find_one(User, email=data["email"]):
        abort(400, description="Email already in use")

    user = User(
        fullname=data["fullname"],
        email=data["email"],
        role=data["role"],
        phone=data["phone"],
        password_hash=hash_password(data["password"]),
    )
    storage.new(user)
    try:
        storage.save()
    except StorageError as err:
        # Lost a race with a concurrent registration
        if err.kind is StorageErrorKind.UNIQUE_VIOLATION:
            abort(400, description="Email already in use")
        raise

    return jsonify(user_out_schema.dump(user)), 201


@bp.get("/users")
@jwt_required()
def get_user(identity):
    """
    Current user with their itineraries.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Token not provided
      403:
        description: Invalid token
      404:
        description: User not found
    """
    user = get_storage().get(User, identity.user_id)
    if not user:
        abort(404, description="User not found")
    return jsonify(user_detail_out_schema.dump(user)), 200


@bp.post("/users/login")
@validate_body(user_login_schema)
def login(data):
    """
    Login: return accessToken and refreshToken
    ---
    tags:
      - Users
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      401:
        description: Invalid credentials
    """
    storage = get_storage()
    user: User = storage.find_one(User, email=data["email"])
    if not user:
        abort(401, description="Invalid credentials")
    if not verify_password(data["password"], user.password_hash):
        abort(401, description="Invalid password")

    if password_needs_rehash(user.password_hash):
        user.password_hash = hash_password(data["password"])
        storage.save()

    tokens = get_token_service()
    # A new refresh token on every login, so each device keeps its own session
    return jsonify(
        {
            "accessToken": tokens.issue_access(user.id, email=user.email),
            "refreshToken": tokens.issue_refresh(user.id),
        }
    ), 200


@bp.post("/users/logout")
def logout():
    """
    Logout: revoke a refresh token
    ---
    tags:
      - Users
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: Logout successful
      400:
        description: Refresh token not provided
    """
    token = _refresh_token_from_body()
    get_token_service().revoke(token)
    return jsonify({"message": "Logout successful"}), 200


@bp.post("/users/refresh-token")
def refresh_token():
    """
    Redeem a refresh token for a new access token
    ---
    tags:
      - Users
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: OK (returns accessToken)
      400:
        description: Refresh token not provided
      403:
        description: Refresh token not found, expired or invalid
    """
    token = _refresh_token_from_body()
    try:
        access_token = get_token_service().refresh(token)
    except RefreshTokenNotFound:
        abort(403, description="Refresh token not found")
    except RefreshTokenRejected:
        abort(403, description="Token expired or invalid")
    return jsonify({"accessToken": access_token}), 200
