DEMO_LEAGUE = {
    "name": "Liga Rematch - Temporada 1",
    "description": "Liga regular: 3 puntos por victoria, 1 por empate.",
    "points_per_win": 3,
    "points_per_draw": 1,
    "points_per_loss": 0,
}

# (team name, platform, captain discord username)
TEAMS = [
    ("Atletico Pixel", "PC", "pixel_cap"),
    ("Real Rematch", "Steam", "rematch_cap"),
    ("Deportivo Xbox", "Xbox", "xbox_cap"),
    ("Union Gamepass", "Gamepass", "pass_cap"),
    ("Sporting Latency", "PC", "lag_cap"),
    ("Racing Frames", "Steam", "frames_cap"),
]

PLAYERS_PER_TEAM = 4

# Results for the first demo matchdays: (team1 index, team2 index, winner index or None)
DEMO_RESULTS = [
    (0, 1, 0),
    (2, 3, None),
    (4, 5, 5),
    (0, 2, 2),
    (1, 4, None),
    (3, 5, 3),
]
