from liga.extensions import db
from datetime import datetime, timezone
import enum


class MatchStatus(enum.Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    POSTPONED = "postponed"


class Match(db.Model):
    __tablename__ = "matches"

    id = db.Column(db.Integer, primary_key=True)
    league_id = db.Column(db.Integer, db.ForeignKey("leagues.id"), nullable=True)
    tournament_id = db.Column(
        db.Integer, db.ForeignKey("tournaments.id"), nullable=True
    )
    team1_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False)
    team2_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False)
    scheduled_date = db.Column(db.DateTime, nullable=False)
    status = db.Column(
        db.Enum(MatchStatus), nullable=False, default=MatchStatus.SCHEDULED
    )
    winner_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=True)
    is_draw = db.Column(db.Boolean, nullable=False, default=False)
    completed_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    winner = db.relationship("Team", foreign_keys=[winner_id])

    __table_args__ = (
        db.CheckConstraint("team1_id <> team2_id", name="ck_match_distinct_teams"),
        db.CheckConstraint(
            "NOT (winner_id IS NOT NULL AND is_draw)", name="ck_match_single_outcome"
        ),
    )

    @property
    def team_ids(self):
        return (self.team1_id, self.team2_id)

    def __repr__(self):
        return f"<Match {self.team1_id} vs {self.team2_id}>"
