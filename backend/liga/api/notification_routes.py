from flask import Blueprint, request, jsonify

from liga.schemas import (
    NotificationSchema,
    InvitationSchema,
    RespondInvitationSchema,
    CaptainRequestSchema,
    CreateCaptainRequestSchema,
    ReviewCaptainRequestSchema,
)
from liga.auth.decorators import admin_required, login_required, current_principal
from liga.services.notification_service import get_notifications, unread_count, mark_as_read
from liga.services.team_service import pending_invitations, respond_to_invitation
from liga.services.user_service import (
    request_captaincy,
    pending_captain_requests,
    review_captain_request,
)

notification_bp = Blueprint("notifications", __name__)

notification_schema = NotificationSchema()
notifications_schema = NotificationSchema(many=True)
invitation_schema = InvitationSchema()
invitations_schema = InvitationSchema(many=True)
respond_invitation_schema = RespondInvitationSchema()
captain_request_schema = CaptainRequestSchema()
captain_requests_schema = CaptainRequestSchema(many=True)
create_captain_request_schema = CreateCaptainRequestSchema()
review_captain_request_schema = ReviewCaptainRequestSchema()


# ─── Notifications ────────────────────────────────────────────────────────────

@notification_bp.route("/notifications", methods=["GET"])
@login_required
def list_notifications():
    notifications = get_notifications(current_principal().user_id)
    return jsonify({"notifications": notifications_schema.dump(notifications)}), 200


@notification_bp.route("/notifications/unread-count", methods=["GET"])
@login_required
def notifications_unread_count():
    return jsonify({"count": unread_count(current_principal().user_id)}), 200


@notification_bp.route("/notifications/<int:notification_id>/read", methods=["PATCH"])
@login_required
def read_notification(notification_id):
    notification = mark_as_read(notification_id, current_principal())
    return jsonify({"notification": notification_schema.dump(notification)}), 200


# ─── Invitations ──────────────────────────────────────────────────────────────

@notification_bp.route("/invitations", methods=["GET"])
@login_required
def list_invitations():
    invitations = pending_invitations(current_principal().user_id)
    return jsonify({"invitations": invitations_schema.dump(invitations)}), 200


@notification_bp.route("/invitations/<int:invitation_id>", methods=["PATCH"])
@login_required
def answer_invitation(invitation_id):
    data = respond_invitation_schema.load(request.get_json())
    invitation = respond_to_invitation(
        invitation_id, data["status"] == "accepted", current_principal()
    )
    return jsonify({"invitation": invitation_schema.dump(invitation)}), 200


# ─── Captain requests ─────────────────────────────────────────────────────────

@notification_bp.route("/captain-requests", methods=["POST"])
@login_required
def create_captain_request():
    data = create_captain_request_schema.load(request.get_json(silent=True) or {})
    captain_request = request_captaincy(current_principal(), data.get("reason"))
    return jsonify({"captain_request": captain_request_schema.dump(captain_request)}), 201


@notification_bp.route("/captain-requests", methods=["GET"])
@admin_required
def list_captain_requests():
    requests = pending_captain_requests()
    return jsonify({"captain_requests": captain_requests_schema.dump(requests)}), 200


@notification_bp.route("/captain-requests/<int:request_id>", methods=["PATCH"])
@admin_required
def review_captain_request_route(request_id):
    data = review_captain_request_schema.load(request.get_json())
    captain_request = review_captain_request(request_id, data["status"] == "approved")
    return jsonify({"captain_request": captain_request_schema.dump(captain_request)}), 200
