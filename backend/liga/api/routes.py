from datetime import datetime

from flask import Blueprint, current_app, request, jsonify, Response
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from liga.errors import ValidationError
from liga.extensions import db
from liga.models.league import League
from liga.models.match import Match, MatchStatus
from liga.models.team import Team, TeamPlatform
from liga.models.tournament import Tournament
from liga.models.user import User
from liga.schemas import (
    LeagueSchema,
    LeagueParticipantSchema,
    CreateLeagueSchema,
    UpdateLeagueSchema,
    JoinLeagueSchema,
    StandingSchema,
    MatchSchema,
    CreateMatchSchema,
    MatchResultSchema,
    UpdateMatchSchema,
    TeamSchema,
    TournamentSchema,
    CreateTournamentSchema,
    UpdateTournamentSchema,
    JoinTournamentSchema,
    UserSchema,
    UpdateRoleSchema,
)
from liga.auth.decorators import admin_required, login_required, current_principal
from liga.services.settlement import MatchOutcome
from liga.services.standings import get_standings
from liga.services.league_service import (
    create_league,
    update_league,
    join_league,
    leagues_for_team,
)
from liga.services.match_service import create_match, transition_match, complete_match
from liga.services.team_service import get_team_or_404, get_members
from liga.services.tournament_service import (
    create_tournament,
    update_tournament,
    join_tournament,
    tournaments_for_team,
)
from liga.services.user_service import set_user_role

api_bp = Blueprint("api", __name__)

# ── Schema instances ─────────────────────────────────────────────────────────
league_schema = LeagueSchema()
leagues_schema = LeagueSchema(many=True)
participant_schema = LeagueParticipantSchema()
create_league_schema = CreateLeagueSchema()
update_league_schema = UpdateLeagueSchema()
join_league_schema = JoinLeagueSchema()
standings_schema = StandingSchema(many=True)

match_schema = MatchSchema()
matches_schema = MatchSchema(many=True)
create_match_schema = CreateMatchSchema()
match_result_schema = MatchResultSchema()
update_match_schema = UpdateMatchSchema()

team_schema = TeamSchema()
teams_schema = TeamSchema(many=True)

tournament_schema = TournamentSchema()
tournaments_schema = TournamentSchema(many=True)
create_tournament_schema = CreateTournamentSchema()
update_tournament_schema = UpdateTournamentSchema()
join_tournament_schema = JoinTournamentSchema()

user_schema = UserSchema()
users_schema = UserSchema(many=True)
update_role_schema = UpdateRoleSchema()


def _outcome_from(data):
    """Build a MatchOutcome from a request body, or None when it carries no
    result at all."""
    if data.get("winner_id") is None and not data.get("is_draw"):
        return None
    return MatchOutcome(winner_id=data.get("winner_id"), is_draw=bool(data.get("is_draw")))


def _parse_date(value, name):
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise ValidationError(
            f"Invalid {name} format. Use ISO 8601, e.g. 2026-05-01T20:00:00"
        )


# ─── Leagues ──────────────────────────────────────────────────────────────────

@api_bp.route("/leagues", methods=["GET"])
def get_leagues():
    query = League.query
    if request.args.get("include_inactive") != "true":
        query = query.filter_by(is_active=True)
    leagues = query.order_by(League.name).all()
    return jsonify({"leagues": leagues_schema.dump(leagues)}), 200


@api_bp.route("/leagues/<int:league_id>", methods=["GET"])
def get_league(league_id):
    league = db.get_or_404(League, league_id)
    return jsonify({"league": league_schema.dump(league)}), 200


@api_bp.route("/leagues", methods=["POST"])
@admin_required
def create_league_route():
    data = create_league_schema.load(request.get_json())
    league = create_league(data)
    return jsonify({"league": league_schema.dump(league)}), 201


@api_bp.route("/leagues/<int:league_id>", methods=["PUT"])
@admin_required
def update_league_route(league_id):
    data = update_league_schema.load(request.get_json())
    league = update_league(league_id, data)
    return jsonify({"league": league_schema.dump(league)}), 200


@api_bp.route("/leagues/<int:league_id>/join", methods=["POST"])
@login_required
def join_league_route(league_id):
    data = join_league_schema.load(request.get_json())
    participant, created = join_league(league_id, data["team_id"], current_principal())
    return jsonify({"participant": participant_schema.dump(participant)}), 201 if created else 200


@api_bp.route("/leagues/<int:league_id>/standings", methods=["GET"])
def get_league_standings(league_id):
    standings = get_standings(league_id)
    return jsonify({"standings": standings_schema.dump(standings)}), 200


# ─── Matches ──────────────────────────────────────────────────────────────────

@api_bp.route("/matches", methods=["GET"])
def get_matches():
    league_id = request.args.get("league_id", type=int)
    tournament_id = request.args.get("tournament_id", type=int)
    team_id = request.args.get("team_id", type=int)
    status = request.args.get("status")
    start = _parse_date(request.args.get("start"), "start")
    end = _parse_date(request.args.get("end"), "end")

    query = Match.query
    if league_id:
        query = query.filter_by(league_id=league_id)
    if tournament_id:
        query = query.filter_by(tournament_id=tournament_id)
    if team_id:
        query = query.filter(
            (Match.team1_id == team_id) | (Match.team2_id == team_id)
        )
    if status:
        try:
            query = query.filter_by(status=MatchStatus(status))
        except ValueError:
            return jsonify({"error": f"Unknown status '{status}'"}), 400
    if start:
        query = query.filter(Match.scheduled_date >= start)
    if end:
        query = query.filter(Match.scheduled_date <= end)

    # Calendar ranges read chronologically, plain listings newest first
    if start or end:
        query = query.order_by(Match.scheduled_date.asc())
    else:
        query = query.order_by(Match.scheduled_date.desc())

    return jsonify({"matches": matches_schema.dump(query.all())}), 200


@api_bp.route("/matches/upcoming", methods=["GET"])
def get_upcoming_matches():
    limit = request.args.get("limit", default=10, type=int)
    limit = max(1, min(limit, 100))
    matches = (
        Match.query.filter_by(status=MatchStatus.SCHEDULED)
        .order_by(Match.scheduled_date.asc())
        .limit(limit)
        .all()
    )
    return jsonify({"matches": matches_schema.dump(matches)}), 200


@api_bp.route("/matches/<int:match_id>", methods=["GET"])
def get_match(match_id):
    match = db.get_or_404(Match, match_id)
    return jsonify({"match": match_schema.dump(match)}), 200


@api_bp.route("/matches", methods=["POST"])
@admin_required
def create_match_route():
    data = create_match_schema.load(request.get_json())
    match = create_match(data, current_principal())
    return jsonify({"match": match_schema.dump(match)}), 201


@api_bp.route("/matches/<int:match_id>", methods=["PATCH"])
@admin_required
def update_match_route(match_id):
    data = update_match_schema.load(request.get_json())
    match = transition_match(
        match_id,
        data["status"],
        current_principal(),
        outcome=_outcome_from(data),
        scheduled_date=data.get("scheduled_date"),
    )
    return jsonify({"match": match_schema.dump(match)}), 200


@api_bp.route("/matches/<int:match_id>/complete", methods=["POST"])
@admin_required
def complete_match_route(match_id):
    data = match_result_schema.load(request.get_json())
    match = complete_match(match_id, _outcome_from(data), current_principal())
    return jsonify({"match": match_schema.dump(match)}), 200


# ─── Teams (read) ─────────────────────────────────────────────────────────────

@api_bp.route("/teams", methods=["GET"])
def get_teams():
    query = Team.query.filter_by(is_active=True)
    platform = request.args.get("platform")
    if platform:
        try:
            query = query.filter_by(platform=TeamPlatform(platform))
        except ValueError:
            return jsonify({"error": f"Unknown platform '{platform}'"}), 400
    teams = query.order_by(Team.name).all()
    return jsonify({"teams": teams_schema.dump(teams)}), 200


@api_bp.route("/teams/<int:team_id>", methods=["GET"])
def get_team(team_id):
    team = get_team_or_404(team_id)
    return jsonify({"team": team_schema.dump(team)}), 200


@api_bp.route("/teams/<int:team_id>/members", methods=["GET"])
def get_team_members(team_id):
    members = get_members(team_id)
    return jsonify({"members": users_schema.dump(members)}), 200


@api_bp.route("/teams/<int:team_id>/matches", methods=["GET"])
def get_team_matches(team_id):
    get_team_or_404(team_id)
    matches = (
        Match.query.filter((Match.team1_id == team_id) | (Match.team2_id == team_id))
        .order_by(Match.scheduled_date.desc())
        .all()
    )
    return jsonify({"matches": matches_schema.dump(matches)}), 200


@api_bp.route("/teams/<int:team_id>/leagues", methods=["GET"])
def get_team_leagues(team_id):
    get_team_or_404(team_id)
    return jsonify({"leagues": leagues_schema.dump(leagues_for_team(team_id))}), 200


@api_bp.route("/teams/<int:team_id>/tournaments", methods=["GET"])
def get_team_tournaments(team_id):
    get_team_or_404(team_id)
    tournaments = tournaments_for_team(team_id)
    return jsonify({"tournaments": tournaments_schema.dump(tournaments)}), 200


# ─── Tournaments ──────────────────────────────────────────────────────────────

@api_bp.route("/tournaments", methods=["GET"])
def get_tournaments():
    tournaments = Tournament.query.order_by(Tournament.created_at.desc(), Tournament.id.desc()).all()
    return jsonify({"tournaments": tournaments_schema.dump(tournaments)}), 200


@api_bp.route("/tournaments/<int:tournament_id>", methods=["GET"])
def get_tournament(tournament_id):
    tournament = db.get_or_404(Tournament, tournament_id)
    return jsonify({"tournament": tournament_schema.dump(tournament)}), 200


@api_bp.route("/tournaments", methods=["POST"])
@admin_required
def create_tournament_route():
    data = create_tournament_schema.load(request.get_json())
    tournament = create_tournament(data)
    return jsonify({"tournament": tournament_schema.dump(tournament)}), 201


@api_bp.route("/tournaments/<int:tournament_id>", methods=["PUT"])
@admin_required
def update_tournament_route(tournament_id):
    data = update_tournament_schema.load(request.get_json())
    tournament = update_tournament(tournament_id, data)
    return jsonify({"tournament": tournament_schema.dump(tournament)}), 200


@api_bp.route("/tournaments/<int:tournament_id>/join", methods=["POST"])
@login_required
def join_tournament_route(tournament_id):
    data = join_tournament_schema.load(request.get_json())
    join_tournament(tournament_id, data["team_id"], current_principal())
    tournament = db.session.get(Tournament, tournament_id)
    return jsonify({"tournament": tournament_schema.dump(tournament)}), 201


# ─── Users ────────────────────────────────────────────────────────────────────

@api_bp.route("/users", methods=["GET"])
@admin_required
def get_users():
    users = User.query.order_by(User.discord_username).all()
    return jsonify({"users": users_schema.dump(users)}), 200


@api_bp.route("/users/<int:user_id>/role", methods=["PUT"])
@admin_required
def update_user_role(user_id):
    data = update_role_schema.load(request.get_json())
    user = set_user_role(user_id, data["role"])
    return jsonify({"user": user_schema.dump(user)}), 200


# ─── SSE Events ──────────────────────────────────────────────────────────

@api_bp.route("/events/stream", methods=["GET"])
def event_stream():
    import queue as _queue
    from liga.events import event_bus

    # Anonymous clients get broadcasts only; a token adds personal notifications
    verify_jwt_in_request(optional=True)
    identity = get_jwt_identity()
    user_id = int(identity) if identity else None
    keepalive = current_app.config["EVENT_STREAM_KEEPALIVE"]

    def generate():
        q = event_bus.subscribe(user_id=user_id)
        try:
            while True:
                try:
                    msg = q.get(timeout=keepalive)
                    yield f"data: {msg}\n\n"
                except _queue.Empty:
                    yield ": keepalive\n\n"
        finally:
            event_bus.unsubscribe(q)

    return Response(
        generate(),
        mimetype="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
        },
    )
