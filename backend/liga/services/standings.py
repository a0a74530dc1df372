from dataclasses import dataclass

from sqlalchemy import select

from liga.errors import NotFoundError
from liga.extensions import db
from liga.models.league import League, LeagueParticipant
from liga.models.team import Team


# Points DESC, then wins DESC, then team name and id ASC so the order is total
STANDINGS_ORDER = (
    LeagueParticipant.points.desc(),
    LeagueParticipant.wins.desc(),
    Team.name.asc(),
    Team.id.asc(),
)


@dataclass(frozen=True)
class StandingRow:
    position: int
    team: Team
    points: int
    matches_played: int
    wins: int
    draws: int
    losses: int


def get_standings(league_id):
    """Ranked league table.

    One SELECT reads the counters straight from the table, so each row is a
    consistent snapshot and a half-applied settlement is never visible.
    Positions are sequential; teams level on every key still get distinct
    places, decided by name.
    """
    if db.session.get(League, league_id) is None:
        raise NotFoundError("League not found")

    rows = db.session.execute(
        select(
            Team,
            LeagueParticipant.points,
            LeagueParticipant.matches_played,
            LeagueParticipant.wins,
            LeagueParticipant.draws,
            LeagueParticipant.losses,
        )
        .select_from(LeagueParticipant)
        .join(Team, LeagueParticipant.team_id == Team.id)
        .where(LeagueParticipant.league_id == league_id)
        .order_by(*STANDINGS_ORDER)
    ).all()

    return [
        StandingRow(
            position=position,
            team=row.Team,
            points=row.points,
            matches_played=row.matches_played,
            wins=row.wins,
            draws=row.draws,
            losses=row.losses,
        )
        for position, row in enumerate(rows, start=1)
    ]
