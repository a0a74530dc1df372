from datetime import datetime, timedelta, timezone

import click
from flask import current_app
from flask.cli import AppGroup
from liga.extensions import db
from liga.auth.principal import Principal
from liga.models.league import League
from liga.models.team import Team, TeamMember, TeamPlatform
from liga.models.user import User, UserRole
from liga.seeds.data import DEMO_LEAGUE, TEAMS, PLAYERS_PER_TEAM, DEMO_RESULTS
from liga.services.league_service import create_league, join_league
from liga.services.match_service import create_match, complete_match
from liga.services.settlement import MatchOutcome

seed_cli = AppGroup("seed", help="Seed database commands.")


def _get_or_create_admin():
    username = current_app.config["ADMIN_USERNAME"]
    password = current_app.config["ADMIN_PASSWORD"]
    if not password:
        raise click.ClickException("ADMIN_PASSWORD must be set to seed the admin user")

    user = User.query.filter_by(discord_username=username, role=UserRole.ADMIN).first()
    if user:
        return user, False

    user = User(
        discord_id=f"admin:{username}",
        discord_username=username,
        role=UserRole.ADMIN,
    )
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user, True


def _get_or_create_user(discord_id, username, role=UserRole.USER):
    user = User.query.filter_by(discord_id=discord_id).first()
    if not user:
        user = User(discord_id=discord_id, discord_username=username, role=role)
        db.session.add(user)
        db.session.flush()
    return user


@seed_cli.command("admin")
def seed_admin():
    """Seed the admin console user from ADMIN_USERNAME / ADMIN_PASSWORD."""
    user, created = _get_or_create_admin()
    if created:
        click.echo(f"Created admin user: {user.discord_username}")
    else:
        click.echo("Admin user already exists.")


@seed_cli.command("demo")
@click.option("--settle/--no-settle", default=True, help="Record demo results.")
def seed_demo(settle):
    """Seed demo teams, a league, fixtures and (optionally) results."""
    admin, _ = _get_or_create_admin()
    principal = Principal.from_user(admin)

    teams = []
    for index, (name, platform, captain_name) in enumerate(TEAMS):
        team = Team.query.filter_by(name=name).first()
        if not team:
            captain = _get_or_create_user(f"seed-captain-{index}", captain_name, UserRole.CAPTAIN)
            team = Team(name=name, platform=TeamPlatform(platform), captain_id=captain.id)
            db.session.add(team)
            db.session.flush()
            db.session.add(TeamMember(team_id=team.id, user_id=captain.id))
            for n in range(1, PLAYERS_PER_TEAM):
                player = _get_or_create_user(
                    f"seed-player-{index}-{n}", f"{captain_name}_p{n}"
                )
                db.session.add(TeamMember(team_id=team.id, user_id=player.id))
        teams.append(team)
    db.session.commit()
    click.echo(f"Seeded {len(teams)} teams.")

    league = League.query.filter_by(name=DEMO_LEAGUE["name"]).first()
    if league:
        click.echo("Demo league already exists; skipping fixtures.")
        return

    league = create_league(DEMO_LEAGUE)
    for team in teams:
        join_league(league.id, team.id, principal)

    kickoff = datetime.now(timezone.utc).replace(tzinfo=None, minute=0, second=0, microsecond=0)
    for offset, (i, j, winner) in enumerate(DEMO_RESULTS):
        match = create_match(
            {
                "league_id": league.id,
                "team1_id": teams[i].id,
                "team2_id": teams[j].id,
                "scheduled_date": kickoff + timedelta(days=offset - len(DEMO_RESULTS)),
            },
            principal,
        )
        if settle:
            outcome = MatchOutcome.draw() if winner is None else MatchOutcome.win(teams[winner].id)
            complete_match(match.id, outcome, principal)

    click.echo(f"Created league '{league.name}' with {len(DEMO_RESULTS)} matches.")
