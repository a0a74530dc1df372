from liga.errors import ConflictError, NotFoundError
from liga.extensions import db
from liga.models.captain_request import CaptainRequest, CaptainRequestStatus
from liga.models.user import User, UserRole


def find_or_create_discord_user(profile):
    """Look up a user by Discord id, creating a plain ``user`` on first login.

    Username and avatar are refreshed from the profile on every login.
    """
    user = User.query.filter_by(discord_id=profile["discord_id"]).first()
    if user is None:
        user = User(discord_id=profile["discord_id"], role=UserRole.USER)
        db.session.add(user)

    user.discord_username = profile["discord_username"]
    user.discord_avatar = profile.get("discord_avatar")
    db.session.commit()
    return user


def set_user_role(user_id, role):
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")

    user.role = UserRole(role)
    db.session.commit()
    return user


# ── Captain requests ─────────────────────────────────────────────────────


def request_captaincy(principal, reason=None):
    if principal.is_captain:
        raise ConflictError("You already have captain permissions")

    pending = CaptainRequest.query.filter_by(
        user_id=principal.user_id, status=CaptainRequestStatus.PENDING
    ).first()
    if pending:
        raise ConflictError("You already have a pending captain request")

    request = CaptainRequest(user_id=principal.user_id, reason=reason)
    db.session.add(request)
    db.session.commit()
    return request


def pending_captain_requests():
    return (
        CaptainRequest.query.filter_by(status=CaptainRequestStatus.PENDING)
        .order_by(CaptainRequest.created_at.desc())
        .all()
    )


def review_captain_request(request_id, approve):
    """Admin decision. Approval promotes the requester to captain."""
    request = db.session.get(CaptainRequest, request_id)
    if not request:
        raise NotFoundError("Captain request not found")

    if request.status != CaptainRequestStatus.PENDING:
        raise ConflictError("Captain request has already been reviewed")

    if approve:
        request.status = CaptainRequestStatus.APPROVED
        if request.user.role == UserRole.USER:
            request.user.role = UserRole.CAPTAIN
    else:
        request.status = CaptainRequestStatus.REJECTED

    db.session.commit()
    return request
