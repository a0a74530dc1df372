from liga.extensions import db
from datetime import datetime, timezone


class League(db.Model):
    __tablename__ = "leagues"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    points_per_win = db.Column(db.Integer, nullable=False, default=3)
    points_per_draw = db.Column(db.Integer, nullable=False, default=1)
    points_per_loss = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    participants = db.relationship("LeagueParticipant", backref="league", lazy="dynamic")
    matches = db.relationship("Match", backref="league", lazy="dynamic")

    __table_args__ = (
        db.CheckConstraint(
            "points_per_win >= 0 AND points_per_draw >= 0 AND points_per_loss >= 0",
            name="ck_league_points_non_negative",
        ),
    )

    def __repr__(self):
        return f"<League {self.name}>"


class LeagueParticipant(db.Model):
    """Per (league, team) accumulator. Only the settlement engine writes
    the counters, and only through additive UPDATE statements."""

    __tablename__ = "league_participants"

    id = db.Column(db.Integer, primary_key=True)
    league_id = db.Column(db.Integer, db.ForeignKey("leagues.id"), nullable=False)
    team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False)
    points = db.Column(db.Integer, nullable=False, default=0)
    matches_played = db.Column(db.Integer, nullable=False, default=0)
    wins = db.Column(db.Integer, nullable=False, default=0)
    draws = db.Column(db.Integer, nullable=False, default=0)
    losses = db.Column(db.Integer, nullable=False, default=0)
    joined_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    __table_args__ = (
        db.UniqueConstraint("league_id", "team_id", name="uq_league_participant"),
        db.CheckConstraint(
            "points >= 0 AND matches_played >= 0 AND wins >= 0 "
            "AND draws >= 0 AND losses >= 0",
            name="ck_league_participant_non_negative",
        ),
    )

    def __repr__(self):
        return f"<LeagueParticipant {self.team_id} - {self.points}pts>"
