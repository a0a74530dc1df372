from liga.extensions import db
from datetime import datetime, timezone
import enum


class TeamPlatform(enum.Enum):
    PC = "PC"
    STEAM = "Steam"
    XBOX = "Xbox"
    GAMEPASS = "Gamepass"


class TeamMember(db.Model):
    __tablename__ = "team_members"

    id = db.Column(db.Integer, primary_key=True)
    team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    joined_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    user = db.relationship("User", backref=db.backref("memberships", lazy="dynamic"))

    __table_args__ = (
        db.UniqueConstraint("team_id", "user_id", name="uq_team_member"),
    )

    def __repr__(self):
        return f"<TeamMember team={self.team_id} user={self.user_id}>"


class Team(db.Model):
    __tablename__ = "teams"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, unique=True)
    description = db.Column(db.Text, nullable=True)
    platform = db.Column(db.Enum(TeamPlatform), nullable=False)
    image_url = db.Column(db.String(500), nullable=True)
    captain_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    captain = db.relationship("User", foreign_keys=[captain_id], backref="captained_teams")
    members = db.relationship(
        "TeamMember", backref="team", lazy="dynamic", cascade="all, delete-orphan"
    )
    home_matches = db.relationship(
        "Match", foreign_keys="Match.team1_id", backref="team1", lazy="dynamic"
    )
    away_matches = db.relationship(
        "Match", foreign_keys="Match.team2_id", backref="team2", lazy="dynamic"
    )
    league_entries = db.relationship("LeagueParticipant", backref="team", lazy="dynamic")

    def __repr__(self):
        return f"<Team {self.name}>"
