from sqlalchemy.exc import IntegrityError

from liga.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from liga.extensions import db
from liga.models.team import Team
from liga.models.tournament import Tournament, TournamentParticipant, TournamentPhase


def create_tournament(data):
    if data["end_date"] < data["start_date"]:
        raise ValidationError("end_date must not be before start_date")

    tournament = Tournament(
        name=data["name"],
        description=data.get("description"),
        is_public=data.get("is_public", True),
        max_teams=data["max_teams"],
        start_date=data["start_date"],
        end_date=data["end_date"],
        current_phase=TournamentPhase.REGISTRATION,
    )
    db.session.add(tournament)
    db.session.commit()
    return tournament


def update_tournament(tournament_id, data):
    tournament = db.session.get(Tournament, tournament_id)
    if not tournament:
        raise NotFoundError("Tournament not found")

    if "max_teams" in data and data["max_teams"] < tournament.participants.count():
        raise ConflictError("max_teams cannot be lower than the number of registered teams")

    for field in ("name", "description", "is_public", "max_teams", "start_date", "end_date"):
        if field in data:
            setattr(tournament, field, data[field])
    if "current_phase" in data:
        tournament.current_phase = TournamentPhase(data["current_phase"])

    if tournament.end_date < tournament.start_date:
        db.session.rollback()
        raise ValidationError("end_date must not be before start_date")

    db.session.commit()
    return tournament


def join_tournament(tournament_id, team_id, principal):
    """Register a team while the tournament is open. The only rule is the
    team-count cap; there is no bracket."""
    tournament = db.session.get(Tournament, tournament_id)
    if not tournament:
        raise NotFoundError("Tournament not found")

    team = db.session.get(Team, team_id)
    if not team:
        raise NotFoundError("Team not found")

    if not principal.is_admin and team.captain_id != principal.user_id:
        raise AuthorizationError("Only the team captain can register the team")

    if not team.is_active:
        raise ValidationError("Team is not active")

    if tournament.current_phase != TournamentPhase.REGISTRATION:
        raise ConflictError("Tournament registration is closed")

    if tournament.participants.filter_by(team_id=team.id).first():
        raise ConflictError("Team is already registered in this tournament")

    if tournament.participants.count() >= tournament.max_teams:
        raise ConflictError("Tournament is full")

    participant = TournamentParticipant(tournament_id=tournament.id, team_id=team.id)
    db.session.add(participant)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Team is already registered in this tournament")
    return participant


def tournaments_for_team(team_id):
    return (
        Tournament.query.join(TournamentParticipant)
        .filter(TournamentParticipant.team_id == team_id)
        .order_by(Tournament.start_date.desc())
        .all()
    )
