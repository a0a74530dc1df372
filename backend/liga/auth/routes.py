from flask import Blueprint, request, jsonify
from flask_jwt_extended import (
    create_access_token,
    create_refresh_token,
    jwt_required,
    get_jwt_identity,
)
from liga.extensions import db, limiter
from liga.models.user import User, UserRole
from liga.schemas.user import UserSchema, DiscordLoginSchema, AdminLoginSchema
from liga.auth.decorators import login_required
from liga.services.user_service import find_or_create_discord_user

auth_bp = Blueprint("auth", __name__)
user_schema = UserSchema()
discord_login_schema = DiscordLoginSchema()
admin_login_schema = AdminLoginSchema()


def _token_response(user):
    return jsonify(
        {
            "access_token": create_access_token(identity=str(user.id)),
            "refresh_token": create_refresh_token(identity=str(user.id)),
            "user": user_schema.dump(user),
        }
    )


@auth_bp.route("/discord", methods=["POST"])
@limiter.limit("10 per minute")
def discord_login():
    """Landing point for the Discord sign-in flow.

    Receives the profile the identity provider already verified and
    exchanges it for API tokens. The OAuth code exchange happens upstream.
    """
    data = discord_login_schema.load(request.get_json() or {})
    user = find_or_create_discord_user(data)

    if not user.is_active:
        return jsonify({"error": "Account is deactivated"}), 403

    return _token_response(user), 200


@auth_bp.route("/admin", methods=["POST"])
@limiter.limit("5 per minute")
def admin_login():
    data = admin_login_schema.load(request.get_json() or {})

    user = User.query.filter_by(
        discord_username=data["username"], role=UserRole.ADMIN
    ).first()

    if not user or not user.check_password(data["password"]):
        return jsonify({"error": "Invalid administrator credentials"}), 401

    if not user.is_active:
        return jsonify({"error": "Account is deactivated"}), 403

    return _token_response(user), 200


@auth_bp.route("/refresh", methods=["POST"])
@jwt_required(refresh=True)
@limiter.limit("30 per minute")
def refresh():
    user_id = int(get_jwt_identity())
    user = db.session.get(User, user_id)

    if not user or not user.is_active:
        return jsonify({"error": "Account is deactivated"}), 403

    access_token = create_access_token(identity=str(user_id))
    return jsonify({"access_token": access_token}), 200


@auth_bp.route("/me", methods=["GET"])
@login_required
def me():
    user = db.session.get(User, int(get_jwt_identity()))
    return jsonify({"user": user_schema.dump(user)}), 200
