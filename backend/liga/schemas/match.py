from datetime import timezone

from liga.extensions import ma
from liga.models.match import Match
from marshmallow import Schema, ValidationError, fields, validate, validates_schema

STATUSES = ["scheduled", "completed", "cancelled", "postponed"]


class MatchSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Match
        load_instance = True
        include_fk = True

    status = fields.Function(lambda obj: obj.status.value if obj.status else None)
    team1 = ma.Nested("TeamSchema", only=("id", "name", "platform"), dump_only=True)
    team2 = ma.Nested("TeamSchema", only=("id", "name", "platform"), dump_only=True)
    winner = ma.Nested("TeamSchema", only=("id", "name"), dump_only=True)
    league = ma.Nested("LeagueSchema", only=("id", "name"), dump_only=True)
    tournament = ma.Nested("TournamentSchema", only=("id", "name"), dump_only=True)


class CreateMatchSchema(Schema):
    team1_id = fields.Integer(required=True)
    team2_id = fields.Integer(required=True)
    scheduled_date = fields.NaiveDateTime(required=True, timezone=timezone.utc)
    league_id = fields.Integer(load_default=None, allow_none=True)
    tournament_id = fields.Integer(load_default=None, allow_none=True)

    @validates_schema
    def validate_teams(self, data, **kwargs):
        if data["team1_id"] == data["team2_id"]:
            raise ValidationError("team2_id must differ from team1_id", "team2_id")


class MatchResultSchema(Schema):
    """Outcome fields. Whether exactly one is set is checked when the
    MatchOutcome is built, so the service sees the same rule."""

    winner_id = fields.Integer(load_default=None, allow_none=True)
    is_draw = fields.Boolean(load_default=False)


class UpdateMatchSchema(MatchResultSchema):
    status = fields.String(required=True, validate=validate.OneOf(STATUSES))
    scheduled_date = fields.NaiveDateTime(
        load_default=None, allow_none=True, timezone=timezone.utc
    )
