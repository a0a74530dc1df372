import logging

from sqlalchemy.exc import IntegrityError

from liga.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from liga.extensions import db
from liga.models.league import League, LeagueParticipant
from liga.models.match import Match, MatchStatus
from liga.models.team import Team

logger = logging.getLogger(__name__)

SCORING_FIELDS = ("points_per_win", "points_per_draw", "points_per_loss")


def create_league(data):
    league = League(
        name=data["name"],
        description=data.get("description"),
        points_per_win=data.get("points_per_win", 3),
        points_per_draw=data.get("points_per_draw", 1),
        points_per_loss=data.get("points_per_loss", 0),
    )
    db.session.add(league)
    db.session.commit()
    return league


def has_settled_matches(league_id):
    return (
        Match.query.filter_by(league_id=league_id, status=MatchStatus.COMPLETED).first()
        is not None
    )


def update_league(league_id, data):
    # Same row lock settlement takes, so a policy edit never interleaves
    # with a settlement still reading the old values
    league = db.session.get(League, league_id, populate_existing=True, with_for_update=True)
    if not league:
        db.session.rollback()
        raise NotFoundError("League not found")

    changes_policy = any(
        field in data and data[field] != getattr(league, field)
        for field in SCORING_FIELDS
    )
    # Past settlements are never recomputed, so the policy freezes once used
    if changes_policy and has_settled_matches(league.id):
        db.session.rollback()
        raise ConflictError(
            "Scoring policy cannot change after matches have been settled"
        )

    for field in ("name", "description", "is_active", *SCORING_FIELDS):
        if field in data:
            setattr(league, field, data[field])

    db.session.commit()
    return league


def join_league(league_id, team_id, principal):
    """Add a team to a league table. Joining twice returns the existing row.

    Returns ``(participant, created)``.
    """
    league = db.session.get(League, league_id)
    if not league:
        raise NotFoundError("League not found")

    team = db.session.get(Team, team_id)
    if not team:
        raise NotFoundError("Team not found")

    if not principal.is_admin and team.captain_id != principal.user_id:
        raise AuthorizationError("Only the team captain can join a league")

    existing = LeagueParticipant.query.filter_by(league_id=league.id, team_id=team.id).first()
    if existing:
        return existing, False

    if not league.is_active:
        raise ValidationError("League is not active")
    if not team.is_active:
        raise ValidationError("Team is not active")

    participant = LeagueParticipant(league_id=league.id, team_id=team.id)
    db.session.add(participant)
    try:
        db.session.commit()
    except IntegrityError:
        # Lost a race with a concurrent join for the same team
        db.session.rollback()
        logger.info("Concurrent join of team %s to league %s", team_id, league_id)
        existing = LeagueParticipant.query.filter_by(league_id=league_id, team_id=team_id).first()
        if existing is None:
            raise
        return existing, False

    return participant, True


def leagues_for_team(team_id):
    return (
        League.query.join(LeagueParticipant)
        .filter(LeagueParticipant.team_id == team_id)
        .order_by(League.name)
        .all()
    )
