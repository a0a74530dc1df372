import os
import pytest

os.environ["FLASK_ENV"] = "testing"

from datetime import datetime

from liga import create_app
from liga.auth.principal import Principal
from liga.events import event_bus
from liga.extensions import db as _db
from liga.models.user import UserRole
from liga.services.league_service import join_league
from liga.services.match_service import create_match

from factories import make_league, make_team, make_user


@pytest.fixture(scope="session")
def app():
    app = create_app("testing")
    yield app


@pytest.fixture(autouse=True)
def tables(app):
    """Create all tables before each test, drop after."""
    with app.app_context():
        _db.create_all()
        yield
        _db.session.remove()
        _db.drop_all()
    event_bus.clear()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_user():
    return make_user("testadmin", UserRole.ADMIN, password="Admin@2026")


@pytest.fixture
def admin(admin_user):
    return Principal.from_user(admin_user)


@pytest.fixture
def admin_headers(client, admin_user):
    resp = client.post(
        "/api/auth/admin",
        json={"username": "testadmin", "password": "Admin@2026"},
    )
    token = resp.get_json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def captain_user():
    return make_user("captain", UserRole.CAPTAIN)


@pytest.fixture
def captain_headers(client, captain_user):
    resp = client.post(
        "/api/auth/discord",
        json={"discord_id": captain_user.discord_id, "discord_username": "captain"},
    )
    token = resp.get_json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def player_user():
    return make_user("player")


@pytest.fixture
def player_headers(client, player_user):
    resp = client.post(
        "/api/auth/discord",
        json={"discord_id": player_user.discord_id, "discord_username": "player"},
    )
    token = resp.get_json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def league_setup(admin):
    """League with policy 3/1/0 and four member teams A, B, C, D."""
    league = make_league()
    teams = {}
    for name in ("A", "B", "C", "D"):
        captain = make_user(f"cap-{name}", UserRole.CAPTAIN)
        teams[name] = make_team(f"Team {name}", captain)
        join_league(league.id, teams[name].id, admin)
    return league, teams


@pytest.fixture
def schedule(admin):
    """Schedule a match between two teams, optionally inside a league."""

    def _schedule(team1, team2, league=None, when=datetime(2026, 5, 1, 20, 0)):
        return create_match(
            {
                "team1_id": team1.id,
                "team2_id": team2.id,
                "league_id": league.id if league else None,
                "scheduled_date": when,
            },
            admin,
        )

    return _schedule
