from datetime import datetime, timezone

from sqlalchemy import update

from liga.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from liga.events import event_bus
from liga.extensions import db
from liga.models.league import League
from liga.models.match import Match, MatchStatus
from liga.models.notification import NotificationType
from liga.models.team import Team
from liga.models.tournament import Tournament
from liga.services.notification_service import notify_teams
from liga.services.settlement import ensure_league_members, settle_match


TERMINAL_STATUSES = {MatchStatus.COMPLETED, MatchStatus.CANCELLED}

VALID_TRANSITIONS = {
    MatchStatus.SCHEDULED: {
        MatchStatus.COMPLETED,
        MatchStatus.CANCELLED,
        MatchStatus.POSTPONED,
    },
    MatchStatus.POSTPONED: {
        MatchStatus.SCHEDULED,
        MatchStatus.COMPLETED,
        MatchStatus.CANCELLED,
    },
    MatchStatus.COMPLETED: set(),
    MatchStatus.CANCELLED: set(),
}

# States a match can be completed from
_COMPLETABLE = [s for s, targets in VALID_TRANSITIONS.items() if MatchStatus.COMPLETED in targets]


def _require_admin(principal):
    if not principal.is_admin:
        raise AuthorizationError("Only administrators can manage matches")


def create_match(data, principal):
    _require_admin(principal)

    team1_id, team2_id = data["team1_id"], data["team2_id"]
    if team1_id == team2_id:
        raise ValidationError("A team cannot play against itself")

    for team_id in (team1_id, team2_id):
        if not db.session.get(Team, team_id):
            raise NotFoundError(f"Team {team_id} not found")

    if data.get("league_id") and not db.session.get(League, data["league_id"]):
        raise NotFoundError("League not found")

    if data.get("tournament_id") and not db.session.get(Tournament, data["tournament_id"]):
        raise NotFoundError("Tournament not found")

    match = Match(
        league_id=data.get("league_id"),
        tournament_id=data.get("tournament_id"),
        team1_id=team1_id,
        team2_id=team2_id,
        scheduled_date=data["scheduled_date"],
        status=MatchStatus.SCHEDULED,
    )
    db.session.add(match)
    db.session.commit()

    event_bus.publish("match_scheduled", {
        "match_id": match.id,
        "league_id": match.league_id,
        "tournament_id": match.tournament_id,
        "team1_id": match.team1_id,
        "team2_id": match.team2_id,
        "scheduled_date": match.scheduled_date.isoformat(),
    })
    notify_teams(
        [match.team1_id, match.team2_id],
        NotificationType.MATCH_SCHEDULED,
        "Match scheduled",
        "A new match has been scheduled for your team",
        {"match_id": match.id},
    )
    return match


def transition_match(match_id, status, principal, outcome=None, scheduled_date=None):
    """Move a match through its lifecycle.

    scheduled -> completed | cancelled | postponed
    postponed -> scheduled | completed | cancelled
    completed and cancelled are terminal.

    Completing a league match settles it against the league table in the
    same transaction.
    """
    _require_admin(principal)
    status = MatchStatus(status)

    match = db.session.get(Match, match_id)
    if not match:
        raise NotFoundError("Match not found")

    if match.status in TERMINAL_STATUSES:
        raise ConflictError(f"Match is already {match.status.value}")

    if status not in VALID_TRANSITIONS[match.status]:
        raise ValidationError(
            f"Cannot move a {match.status.value} match to {status.value}"
        )

    if status == MatchStatus.COMPLETED:
        if scheduled_date is not None:
            raise ValidationError("Completing a match cannot change its date")
        return _complete(match, outcome)

    if outcome is not None:
        raise ValidationError("Only completed matches carry a result")

    if scheduled_date is not None and status != MatchStatus.SCHEDULED:
        raise ValidationError("A new date can only be set when rescheduling")

    previous = match.status
    values = {"status": status}
    if scheduled_date is not None:
        values["scheduled_date"] = scheduled_date

    try:
        result = db.session.execute(
            update(Match)
            .where(Match.id == match.id, Match.status == previous)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ConflictError("Match was updated by another request")
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    event_bus.publish("match_updated", {
        "match_id": match.id,
        "status": status.value,
        "previous_status": previous.value,
    })
    return match


def complete_match(match_id, outcome, principal):
    return transition_match(match_id, MatchStatus.COMPLETED, principal, outcome=outcome)


def _complete(match, outcome):
    if outcome is None:
        raise ValidationError("Completing a match requires a winner or a draw")

    if outcome.winner_id is not None and outcome.winner_id not in match.team_ids:
        raise ValidationError("Winner must be one of the two teams in the match")

    try:
        league = None
        if match.league_id is not None:
            # Policy is read fresh at settlement time. The row lock orders
            # this settlement against concurrent policy edits.
            league = db.session.get(
                League, match.league_id, populate_existing=True, with_for_update=True
            )
            ensure_league_members(league.id, match.team_ids)

        # Compare-and-set on the prior status: only the request that moves
        # the match into COMPLETED gets to settle it.
        result = db.session.execute(
            update(Match)
            .where(Match.id == match.id, Match.status.in_(_COMPLETABLE))
            .values(
                status=MatchStatus.COMPLETED,
                winner_id=outcome.winner_id,
                is_draw=outcome.is_draw,
                completed_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ConflictError("Match has already been settled")

        if league is not None:
            settle_match(match, league, outcome)

        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    event_bus.publish("match_completed", {
        "match_id": match.id,
        "league_id": match.league_id,
        "team1_id": match.team1_id,
        "team2_id": match.team2_id,
        "winner_id": match.winner_id,
        "is_draw": match.is_draw,
    })
    if match.league_id is not None:
        event_bus.publish("standings_updated", {"league_id": match.league_id})

    notify_teams(
        [match.team1_id, match.team2_id],
        NotificationType.MATCH_RESULT,
        "Match result",
        "The result of your team's match has been recorded",
        {"match_id": match.id, "winner_id": match.winner_id, "is_draw": match.is_draw},
    )
    return match
