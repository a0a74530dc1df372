from flask import Blueprint, request, jsonify

from liga.schemas import (
    TeamSchema,
    CreateTeamSchema,
    UpdateTeamSchema,
    InviteSchema,
    InvitationSchema,
)
from liga.auth.decorators import login_required, role_required, current_principal
from liga.services.team_service import (
    create_team,
    update_team,
    deactivate_team,
    remove_member,
    invite_user,
    teams_for_user,
)

club_bp = Blueprint("club", __name__)

team_schema = TeamSchema()
teams_schema = TeamSchema(many=True)
create_team_schema = CreateTeamSchema()
update_team_schema = UpdateTeamSchema()
invite_schema = InviteSchema()
invitation_schema = InvitationSchema()


@club_bp.route("/my-teams", methods=["GET"])
@login_required
def get_my_teams():
    teams = teams_for_user(current_principal().user_id)
    return jsonify({"teams": teams_schema.dump(teams)}), 200


@club_bp.route("/teams", methods=["POST"])
@role_required("captain", "admin")
def create_team_route():
    data = create_team_schema.load(request.get_json())
    team = create_team(data, current_principal())
    return jsonify({"team": team_schema.dump(team)}), 201


@club_bp.route("/teams/<int:team_id>", methods=["PUT"])
@role_required("captain", "admin")
def update_team_route(team_id):
    data = update_team_schema.load(request.get_json())
    team = update_team(team_id, data, current_principal())
    return jsonify({"team": team_schema.dump(team)}), 200


@club_bp.route("/teams/<int:team_id>", methods=["DELETE"])
@role_required("captain", "admin")
def deactivate_team_route(team_id):
    team = deactivate_team(team_id, current_principal())
    return jsonify({"team": team_schema.dump(team)}), 200


@club_bp.route("/teams/<int:team_id>/invite", methods=["POST"])
@role_required("captain", "admin")
def invite_member_route(team_id):
    data = invite_schema.load(request.get_json())
    invitation = invite_user(team_id, data["user_id"], current_principal())
    return jsonify({"invitation": invitation_schema.dump(invitation)}), 201


@club_bp.route("/teams/<int:team_id>/members/<int:user_id>", methods=["DELETE"])
@role_required("captain", "admin")
def remove_member_route(team_id, user_id):
    remove_member(team_id, user_id, current_principal())
    return jsonify({"message": "Member removed from team"}), 200
