from functools import wraps
from flask import g, jsonify
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from liga.extensions import db
from liga.models.user import User
from liga.auth.principal import Principal


def _load_user():
    verify_jwt_in_request()
    user = db.session.get(User, int(get_jwt_identity()))
    if user is not None:
        g.current_user = user
    return user


def current_principal():
    """Principal for the user loaded by one of the decorators below."""
    return Principal.from_user(g.current_user)


def login_required(fn):
    """Any active user."""

    @wraps(fn)
    def wrapper(*args, **kwargs):
        user = _load_user()

        if not user:
            return jsonify({"error": "User not found"}), 404

        if not user.is_active:
            return jsonify({"error": "Account is deactivated"}), 403

        return fn(*args, **kwargs)

    return wrapper


def role_required(*roles):
    """Decorator to restrict access to specific roles."""

    allowed = [r.value if hasattr(r, "value") else r for r in roles]

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            user = _load_user()

            if not user:
                return jsonify({"error": "User not found"}), 404

            if not user.is_active:
                return jsonify({"error": "Account is deactivated"}), 403

            if user.role.value not in allowed:
                return jsonify({"error": "Insufficient permissions"}), 403

            return fn(*args, **kwargs)

        return wrapper

    return decorator


def admin_required(fn):
    """Decorator to restrict access to administrators only."""

    @wraps(fn)
    def wrapper(*args, **kwargs):
        user = _load_user()

        if not user or not user.is_active:
            return jsonify({"error": "Access denied"}), 403

        if user.role.value != "admin":
            return jsonify({"error": "Admin access required"}), 403

        return fn(*args, **kwargs)

    return wrapper
