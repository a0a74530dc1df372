from liga.extensions import db
from datetime import datetime, timezone
import enum


class TournamentPhase(enum.Enum):
    REGISTRATION = "registration"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TournamentParticipant(db.Model):
    __tablename__ = "tournament_participants"

    id = db.Column(db.Integer, primary_key=True)
    tournament_id = db.Column(
        db.Integer, db.ForeignKey("tournaments.id"), nullable=False
    )
    team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False)
    joined_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    team = db.relationship("Team")

    __table_args__ = (
        db.UniqueConstraint("tournament_id", "team_id", name="uq_tournament_participant"),
    )


class Tournament(db.Model):
    __tablename__ = "tournaments"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    is_public = db.Column(db.Boolean, default=True, nullable=False)
    max_teams = db.Column(db.Integer, nullable=False)
    current_phase = db.Column(
        db.Enum(TournamentPhase), nullable=False, default=TournamentPhase.REGISTRATION
    )
    start_date = db.Column(db.DateTime, nullable=False)
    end_date = db.Column(db.DateTime, nullable=False)
    created_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    participants = db.relationship(
        "TournamentParticipant", backref="tournament", lazy="dynamic"
    )
    matches = db.relationship("Match", backref="tournament", lazy="dynamic")

    def __repr__(self):
        return f"<Tournament {self.name}>"
