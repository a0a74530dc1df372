import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import func, select, update

from liga.errors import ValidationError
from liga.extensions import db
from liga.models.league import LeagueParticipant

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchOutcome:
    """Result of a completed match: exactly one of a winner or a draw."""

    winner_id: Optional[int] = None
    is_draw: bool = False

    def __post_init__(self):
        if self.winner_id is not None and self.is_draw:
            raise ValidationError("A match cannot have both a winner and a draw")
        if self.winner_id is None and not self.is_draw:
            raise ValidationError("A completed match needs either a winner or a draw")

    @classmethod
    def win(cls, team_id):
        return cls(winner_id=team_id)

    @classmethod
    def draw(cls):
        return cls(is_draw=True)


@dataclass(frozen=True)
class RecordDelta:
    """Increment applied to one league table row. Every settlement counts
    as one match played."""

    points: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0


def compute_deltas(team1_id, team2_id, outcome, league):
    """Map a match outcome to per-team record deltas under the league's
    scoring policy.

    Returns a dict keyed by team id, winner first for decided matches.
    """
    if outcome.is_draw:
        delta = RecordDelta(points=league.points_per_draw, draws=1)
        return {team1_id: delta, team2_id: delta}

    if outcome.winner_id not in (team1_id, team2_id):
        raise ValidationError("Winner must be one of the two teams in the match")

    loser_id = team2_id if outcome.winner_id == team1_id else team1_id
    return {
        outcome.winner_id: RecordDelta(points=league.points_per_win, wins=1),
        loser_id: RecordDelta(points=league.points_per_loss, losses=1),
    }


def ensure_league_members(league_id, team_ids):
    """Raise ValidationError unless every team has a row in the league table."""
    team_ids = set(team_ids)
    found = db.session.scalar(
        select(func.count())
        .select_from(LeagueParticipant)
        .where(
            LeagueParticipant.league_id == league_id,
            LeagueParticipant.team_id.in_(team_ids),
        )
    )
    if found != len(team_ids):
        raise ValidationError("Both teams must be members of the league to settle the match")


def _increment(league_id, team_id, delta):
    # Column arithmetic in SQL so concurrent settlements for the same team
    # serialize on the row instead of overwriting each other.
    result = db.session.execute(
        update(LeagueParticipant)
        .where(
            LeagueParticipant.league_id == league_id,
            LeagueParticipant.team_id == team_id,
        )
        .values(
            points=LeagueParticipant.points + delta.points,
            matches_played=LeagueParticipant.matches_played + 1,
            wins=LeagueParticipant.wins + delta.wins,
            draws=LeagueParticipant.draws + delta.draws,
            losses=LeagueParticipant.losses + delta.losses,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise ValidationError(f"Team {team_id} is not a member of league {league_id}")


def settle_match(match, league, outcome):
    """Apply a completed match's outcome to the league table.

    Runs inside the caller's transaction and never commits: the caller
    owns the status transition and commits both together, or rolls both
    back. Returns the applied deltas keyed by team id.
    """
    deltas = compute_deltas(match.team1_id, match.team2_id, outcome, league)

    for team_id, delta in deltas.items():
        _increment(league.id, team_id, delta)

    logger.info(
        "Settled match %s in league %s: %s",
        match.id,
        league.id,
        "draw" if outcome.is_draw else f"winner {outcome.winner_id}",
    )
    return deltas
