from datetime import timezone

from liga.extensions import ma
from liga.models.tournament import Tournament
from marshmallow import Schema, ValidationError, fields, validate, validates_schema

PHASES = ["registration", "in_progress", "completed"]


class TournamentSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Tournament
        load_instance = True

    current_phase = fields.Function(
        lambda obj: obj.current_phase.value if obj.current_phase else None
    )
    team_count = fields.Function(lambda obj: obj.participants.count(), dump_only=True)


class CreateTournamentSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=200))
    description = fields.String(load_default=None, allow_none=True)
    is_public = fields.Boolean(load_default=True)
    max_teams = fields.Integer(required=True, validate=validate.Range(min=2, max=256))
    start_date = fields.NaiveDateTime(required=True, timezone=timezone.utc)
    end_date = fields.NaiveDateTime(required=True, timezone=timezone.utc)

    @validates_schema
    def validate_dates(self, data, **kwargs):
        if data["end_date"] < data["start_date"]:
            raise ValidationError("end_date must not be before start_date", "end_date")


class UpdateTournamentSchema(Schema):
    name = fields.String(validate=validate.Length(min=1, max=200))
    description = fields.String(allow_none=True)
    is_public = fields.Boolean()
    max_teams = fields.Integer(validate=validate.Range(min=2, max=256))
    start_date = fields.NaiveDateTime(timezone=timezone.utc)
    end_date = fields.NaiveDateTime(timezone=timezone.utc)
    current_phase = fields.String(validate=validate.OneOf(PHASES))


class JoinTournamentSchema(Schema):
    team_id = fields.Integer(required=True)
