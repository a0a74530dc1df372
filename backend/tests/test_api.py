from liga.extensions import db
from liga.models.match import Match, MatchStatus
from liga.models.team import TeamMember, TeamPlatform
from liga.models.user import UserRole
from liga.services.match_service import complete_match
from liga.services.settlement import MatchOutcome

from factories import make_league, make_team, make_user, record


def test_health_check(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "healthy"


def test_unknown_route_returns_json(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert "error" in resp.get_json()


# ── Leagues ──────────────────────────────────────────────────────────────────


def test_create_league_requires_admin(client, captain_headers):
    resp = client.post(
        "/api/leagues", headers=captain_headers, json={"name": "Liga Sur"}
    )
    assert resp.status_code == 403


def test_create_league_success(client, admin_headers):
    resp = client.post(
        "/api/leagues",
        headers=admin_headers,
        json={"name": "Liga Sur", "points_per_win": 2},
    )
    assert resp.status_code == 201
    league = resp.get_json()["league"]
    assert league["name"] == "Liga Sur"
    assert league["points_per_win"] == 2
    assert league["points_per_draw"] == 1


def test_create_league_rejects_negative_points(client, admin_headers):
    resp = client.post(
        "/api/leagues",
        headers=admin_headers,
        json={"name": "Liga Rara", "points_per_loss": -1},
    )
    assert resp.status_code == 400


def test_list_leagues_hides_inactive(client):
    make_league("Activa")
    inactive = make_league("Cerrada")
    inactive.is_active = False
    db.session.commit()

    names = [lg["name"] for lg in client.get("/api/leagues").get_json()["leagues"]]
    assert names == ["Activa"]

    resp = client.get("/api/leagues?include_inactive=true")
    assert len(resp.get_json()["leagues"]) == 2


def test_get_league_not_found(client):
    resp = client.get("/api/leagues/9999")
    assert resp.status_code == 404


def test_captain_joins_league(client, captain_user, captain_headers):
    league = make_league()
    team = make_team("Captain FC", captain_user)

    resp = client.post(
        f"/api/leagues/{league.id}/join",
        headers=captain_headers,
        json={"team_id": team.id},
    )
    assert resp.status_code == 201
    assert resp.get_json()["participant"]["points"] == 0

    again = client.post(
        f"/api/leagues/{league.id}/join",
        headers=captain_headers,
        json={"team_id": team.id},
    )
    assert again.status_code == 200


def test_join_league_for_other_team_forbidden(client, captain_headers):
    league = make_league()
    team = make_team("Someone Else", make_user("else-cap", UserRole.CAPTAIN))

    resp = client.post(
        f"/api/leagues/{league.id}/join",
        headers=captain_headers,
        json={"team_id": team.id},
    )
    assert resp.status_code == 403


def test_policy_update_conflict_after_settlement(
    client, admin, admin_headers, league_setup, schedule
):
    league, teams = league_setup
    match = schedule(teams["A"], teams["B"], league)
    complete_match(match.id, MatchOutcome.draw(), admin)

    resp = client.put(
        f"/api/leagues/{league.id}",
        headers=admin_headers,
        json={"points_per_draw": 2},
    )
    assert resp.status_code == 409
    assert "error" in resp.get_json()


# ── Matches and settlement over HTTP ─────────────────────────────────────────


def _create_match(client, headers, team1, team2, league=None, when="2026-05-01T20:00:00"):
    payload = {"team1_id": team1.id, "team2_id": team2.id, "scheduled_date": when}
    if league is not None:
        payload["league_id"] = league.id
    return client.post("/api/matches", headers=headers, json=payload)


def test_create_match_via_api(client, admin_headers, league_setup):
    league, teams = league_setup
    resp = _create_match(client, admin_headers, teams["A"], teams["B"], league)

    assert resp.status_code == 201
    match = resp.get_json()["match"]
    assert match["status"] == "scheduled"
    assert match["team1"]["name"] == "Team A"
    assert match["league"]["id"] == league.id


def test_create_match_same_team_rejected(client, admin_headers, league_setup):
    league, teams = league_setup
    resp = _create_match(client, admin_headers, teams["A"], teams["A"], league)
    assert resp.status_code == 400


def test_create_match_requires_admin(client, captain_headers, league_setup):
    league, teams = league_setup
    resp = _create_match(client, captain_headers, teams["A"], teams["B"], league)
    assert resp.status_code == 403


def test_complete_match_and_read_standings(client, admin_headers, league_setup):
    league, teams = league_setup
    match_id = _create_match(
        client, admin_headers, teams["A"], teams["B"], league
    ).get_json()["match"]["id"]

    resp = client.post(
        f"/api/matches/{match_id}/complete",
        headers=admin_headers,
        json={"winner_id": teams["A"].id},
    )
    assert resp.status_code == 200
    body = resp.get_json()["match"]
    assert body["status"] == "completed"
    assert body["winner"]["id"] == teams["A"].id

    standings = client.get(f"/api/leagues/{league.id}/standings").get_json()["standings"]
    assert standings[0]["position"] == 1
    assert standings[0]["team"]["name"] == "Team A"
    assert standings[0]["points"] == 3
    assert standings[0]["wins"] == 1

    loser = next(s for s in standings if s["team"]["id"] == teams["B"].id)
    assert loser["losses"] == 1
    assert loser["points"] == 0


def test_complete_match_twice_conflicts(client, admin_headers, league_setup):
    league, teams = league_setup
    match_id = _create_match(
        client, admin_headers, teams["A"], teams["B"], league
    ).get_json()["match"]["id"]

    first = client.post(
        f"/api/matches/{match_id}/complete", headers=admin_headers, json={"is_draw": True}
    )
    second = client.post(
        f"/api/matches/{match_id}/complete", headers=admin_headers, json={"is_draw": True}
    )

    assert first.status_code == 200
    assert second.status_code == 409
    assert record(league, teams["A"])["points"] == 1


def test_complete_match_with_both_outcomes_rejected(client, admin_headers, league_setup):
    league, teams = league_setup
    match_id = _create_match(
        client, admin_headers, teams["A"], teams["B"], league
    ).get_json()["match"]["id"]

    resp = client.post(
        f"/api/matches/{match_id}/complete",
        headers=admin_headers,
        json={"winner_id": teams["A"].id, "is_draw": True},
    )
    assert resp.status_code == 400
    assert db.session.get(Match, match_id).status == MatchStatus.SCHEDULED


def test_complete_match_without_outcome_rejected(client, admin_headers, league_setup):
    league, teams = league_setup
    match_id = _create_match(
        client, admin_headers, teams["A"], teams["B"], league
    ).get_json()["match"]["id"]

    resp = client.post(
        f"/api/matches/{match_id}/complete", headers=admin_headers, json={}
    )
    assert resp.status_code == 400


def test_complete_match_non_member_rejected(client, admin_headers, league_setup):
    league, teams = league_setup
    outsider = make_team("Outsider", make_user("api-out-cap", UserRole.CAPTAIN))
    match_id = _create_match(
        client, admin_headers, teams["A"], outsider, league
    ).get_json()["match"]["id"]

    resp = client.post(
        f"/api/matches/{match_id}/complete",
        headers=admin_headers,
        json={"winner_id": outsider.id},
    )
    assert resp.status_code == 400
    assert record(league, teams["A"])["matches_played"] == 0


def test_patch_match_postpone_and_reschedule(client, admin_headers, league_setup):
    league, teams = league_setup
    match_id = _create_match(
        client, admin_headers, teams["A"], teams["B"], league
    ).get_json()["match"]["id"]

    resp = client.patch(
        f"/api/matches/{match_id}", headers=admin_headers, json={"status": "postponed"}
    )
    assert resp.status_code == 200
    assert resp.get_json()["match"]["status"] == "postponed"

    resp = client.patch(
        f"/api/matches/{match_id}",
        headers=admin_headers,
        json={"status": "scheduled", "scheduled_date": "2026-06-10T18:00:00"},
    )
    assert resp.status_code == 200
    assert resp.get_json()["match"]["scheduled_date"].startswith("2026-06-10T18:00")


def test_patch_match_complete_settles(client, admin_headers, league_setup):
    league, teams = league_setup
    match_id = _create_match(
        client, admin_headers, teams["C"], teams["D"], league
    ).get_json()["match"]["id"]

    resp = client.patch(
        f"/api/matches/{match_id}",
        headers=admin_headers,
        json={"status": "completed", "is_draw": True},
    )
    assert resp.status_code == 200
    assert record(league, teams["C"])["draws"] == 1
    assert record(league, teams["D"])["draws"] == 1


def test_patch_cancelled_match_conflicts(client, admin_headers, league_setup):
    league, teams = league_setup
    match_id = _create_match(
        client, admin_headers, teams["A"], teams["B"], league
    ).get_json()["match"]["id"]
    client.patch(
        f"/api/matches/{match_id}", headers=admin_headers, json={"status": "cancelled"}
    )

    resp = client.patch(
        f"/api/matches/{match_id}", headers=admin_headers, json={"status": "scheduled"}
    )
    assert resp.status_code == 409


def test_patch_match_unknown_status(client, admin_headers, league_setup):
    league, teams = league_setup
    match_id = _create_match(
        client, admin_headers, teams["A"], teams["B"], league
    ).get_json()["match"]["id"]

    resp = client.patch(
        f"/api/matches/{match_id}", headers=admin_headers, json={"status": "abandoned"}
    )
    assert resp.status_code == 400


def test_list_matches_filters(client, admin_headers, league_setup):
    league, teams = league_setup
    _create_match(client, admin_headers, teams["A"], teams["B"], league, "2026-05-01T20:00:00")
    _create_match(client, admin_headers, teams["C"], teams["D"], league, "2026-05-08T20:00:00")
    _create_match(client, admin_headers, teams["A"], teams["C"], None, "2026-05-15T20:00:00")

    resp = client.get(f"/api/matches?league_id={league.id}")
    assert len(resp.get_json()["matches"]) == 2

    resp = client.get(f"/api/matches?team_id={teams['A'].id}")
    assert len(resp.get_json()["matches"]) == 2

    resp = client.get("/api/matches?start=2026-05-05T00:00:00&end=2026-05-10T00:00:00")
    matches = resp.get_json()["matches"]
    assert [m["team1"]["name"] for m in matches] == ["Team C"]

    resp = client.get("/api/matches?status=bogus")
    assert resp.status_code == 400


def test_list_matches_rejects_malformed_dates(client, admin_headers, league_setup):
    league, teams = league_setup
    _create_match(client, admin_headers, teams["A"], teams["B"], league, "2026-05-01T20:00:00")
    _create_match(client, admin_headers, teams["C"], teams["D"], league, "2026-05-08T20:00:00")

    resp = client.get("/api/matches?start=2026-13-45")
    assert resp.status_code == 400
    assert "start" in resp.get_json()["error"]

    resp = client.get("/api/matches?start=2026-05-01T00:00:00&end=next-week")
    assert resp.status_code == 400
    assert "end" in resp.get_json()["error"]


def test_upcoming_matches(client, admin_headers, league_setup):
    league, teams = league_setup
    _create_match(client, admin_headers, teams["A"], teams["B"], league, "2026-05-08T20:00:00")
    _create_match(client, admin_headers, teams["C"], teams["D"], league, "2026-05-01T20:00:00")

    matches = client.get("/api/matches/upcoming?limit=1").get_json()["matches"]
    assert len(matches) == 1
    assert matches[0]["team1"]["name"] == "Team C"


def test_standings_unknown_league(client):
    resp = client.get("/api/leagues/9999/standings")
    assert resp.status_code == 404


# ── Teams ────────────────────────────────────────────────────────────────────


def test_create_team_via_club_api(client, captain_user, captain_headers):
    resp = client.post(
        "/api/club/teams",
        headers=captain_headers,
        json={"name": "Nuevos", "platform": "Steam"},
    )
    assert resp.status_code == 201
    team = resp.get_json()["team"]
    assert team["platform"] == "Steam"
    assert team["captain"]["id"] == captain_user.id

    mine = client.get("/api/club/my-teams", headers=captain_headers).get_json()["teams"]
    assert [t["name"] for t in mine] == ["Nuevos"]


def test_player_cannot_create_team(client, player_headers):
    resp = client.post(
        "/api/club/teams",
        headers=player_headers,
        json={"name": "Nope", "platform": "PC"},
    )
    assert resp.status_code == 403


def test_create_team_duplicate_name(client, captain_user, captain_headers):
    make_team("Repetido", captain_user)
    resp = client.post(
        "/api/club/teams",
        headers=captain_headers,
        json={"name": "Repetido", "platform": "PC"},
    )
    assert resp.status_code == 409


def test_create_team_invalid_platform(client, captain_headers):
    resp = client.post(
        "/api/club/teams",
        headers=captain_headers,
        json={"name": "Consola", "platform": "Dreamcast"},
    )
    assert resp.status_code == 400


def test_delete_team_soft_deactivates(client, captain_user, captain_headers):
    team = make_team("Temporal", captain_user)

    resp = client.delete(f"/api/club/teams/{team.id}", headers=captain_headers)
    assert resp.status_code == 200
    assert resp.get_json()["team"]["is_active"] is False

    names = [t["name"] for t in client.get("/api/teams").get_json()["teams"]]
    assert "Temporal" not in names
    # Still reachable directly
    assert client.get(f"/api/teams/{team.id}").status_code == 200


def test_invite_and_accept_via_api(
    client, captain_user, captain_headers, player_user, player_headers
):
    team = make_team("Invitadores", captain_user)

    resp = client.post(
        f"/api/club/teams/{team.id}/invite",
        headers=captain_headers,
        json={"user_id": player_user.id},
    )
    assert resp.status_code == 201
    invitation_id = resp.get_json()["invitation"]["id"]

    invitations = client.get("/api/invitations", headers=player_headers).get_json()["invitations"]
    assert [i["team"]["name"] for i in invitations] == ["Invitadores"]

    resp = client.patch(
        f"/api/invitations/{invitation_id}",
        headers=player_headers,
        json={"status": "accepted"},
    )
    assert resp.status_code == 200
    assert resp.get_json()["invitation"]["status"] == "accepted"
    assert TeamMember.query.filter_by(team_id=team.id, user_id=player_user.id).count() == 1

    members = client.get(f"/api/teams/{team.id}/members").get_json()["members"]
    assert {m["id"] for m in members} == {captain_user.id, player_user.id}


def test_remove_member_via_api(client, captain_user, captain_headers, player_user):
    team = make_team("Recorte", captain_user, members=[player_user])

    resp = client.delete(
        f"/api/club/teams/{team.id}/members/{player_user.id}", headers=captain_headers
    )
    assert resp.status_code == 200

    resp = client.delete(
        f"/api/club/teams/{team.id}/members/{captain_user.id}", headers=captain_headers
    )
    assert resp.status_code == 400


def test_teams_platform_filter(client):
    make_team("PC Team", make_user("pc-cap", UserRole.CAPTAIN))
    make_team("Xbox Team", make_user("xb-cap", UserRole.CAPTAIN), platform=TeamPlatform.XBOX)

    resp = client.get("/api/teams?platform=Xbox")
    assert [t["name"] for t in resp.get_json()["teams"]] == ["Xbox Team"]

    assert client.get("/api/teams?platform=Atari").status_code == 400


def test_team_leagues_and_matches(client, admin_headers, league_setup):
    league, teams = league_setup
    _create_match(client, admin_headers, teams["A"], teams["B"], league)

    leagues = client.get(f"/api/teams/{teams['A'].id}/leagues").get_json()["leagues"]
    assert [lg["id"] for lg in leagues] == [league.id]

    matches = client.get(f"/api/teams/{teams['A'].id}/matches").get_json()["matches"]
    assert len(matches) == 1


# ── Tournaments ──────────────────────────────────────────────────────────────


def _create_tournament(client, headers, max_teams=2):
    return client.post(
        "/api/tournaments",
        headers=headers,
        json={
            "name": "Copa Invierno",
            "max_teams": max_teams,
            "start_date": "2026-12-01T00:00:00",
            "end_date": "2026-12-20T00:00:00",
        },
    )


def test_create_tournament_and_join(client, admin_headers, league_setup):
    _, teams = league_setup
    resp = _create_tournament(client, admin_headers, max_teams=2)
    assert resp.status_code == 201
    tournament_id = resp.get_json()["tournament"]["id"]

    for key in ("A", "B"):
        resp = client.post(
            f"/api/tournaments/{tournament_id}/join",
            headers=admin_headers,
            json={"team_id": teams[key].id},
        )
        assert resp.status_code == 201

    assert resp.get_json()["tournament"]["team_count"] == 2

    resp = client.post(
        f"/api/tournaments/{tournament_id}/join",
        headers=admin_headers,
        json={"team_id": teams["C"].id},
    )
    assert resp.status_code == 409


def test_create_tournament_bad_dates(client, admin_headers):
    resp = client.post(
        "/api/tournaments",
        headers=admin_headers,
        json={
            "name": "Al Reves",
            "max_teams": 4,
            "start_date": "2026-12-20T00:00:00",
            "end_date": "2026-12-01T00:00:00",
        },
    )
    assert resp.status_code == 400


# ── Notifications, users and captain requests ────────────────────────────────


def test_notifications_after_match_scheduled(client, admin_headers, captain_user, captain_headers):
    mine = make_team("Avisados", captain_user)
    rival = make_team("Rivales", make_user("rival-cap", UserRole.CAPTAIN))
    _create_match(client, admin_headers, mine, rival)

    resp = client.get("/api/notifications/unread-count", headers=captain_headers)
    assert resp.get_json()["count"] == 1

    notifications = client.get("/api/notifications", headers=captain_headers).get_json()[
        "notifications"
    ]
    assert notifications[0]["type"] == "match_scheduled"

    resp = client.patch(
        f"/api/notifications/{notifications[0]['id']}/read", headers=captain_headers
    )
    assert resp.status_code == 200
    assert resp.get_json()["notification"]["is_read"] is True

    resp = client.get("/api/notifications/unread-count", headers=captain_headers)
    assert resp.get_json()["count"] == 0


def test_captain_request_flow(client, admin_headers, player_user, player_headers):
    resp = client.post(
        "/api/captain-requests", headers=player_headers, json={"reason": "Tengo equipo"}
    )
    assert resp.status_code == 201
    request_id = resp.get_json()["captain_request"]["id"]

    assert client.post("/api/captain-requests", headers=player_headers).status_code == 409

    pending = client.get("/api/captain-requests", headers=admin_headers).get_json()[
        "captain_requests"
    ]
    assert [r["id"] for r in pending] == [request_id]

    resp = client.patch(
        f"/api/captain-requests/{request_id}",
        headers=admin_headers,
        json={"status": "approved"},
    )
    assert resp.status_code == 200
    assert player_user.role == UserRole.CAPTAIN


def test_list_users_requires_admin(client, player_headers, admin_headers):
    assert client.get("/api/users", headers=player_headers).status_code == 403
    assert client.get("/api/users", headers=admin_headers).status_code == 200


def test_update_user_role(client, admin_headers, player_user):
    resp = client.put(
        f"/api/users/{player_user.id}/role",
        headers=admin_headers,
        json={"role": "captain"},
    )
    assert resp.status_code == 200
    assert resp.get_json()["user"]["role"] == "captain"
