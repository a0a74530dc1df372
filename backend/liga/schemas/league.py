from liga.extensions import ma
from liga.models.league import League, LeagueParticipant
from marshmallow import Schema, fields, validate

_points = dict(validate=validate.Range(min=0, max=100))


class LeagueSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = League
        load_instance = True


class LeagueParticipantSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = LeagueParticipant
        load_instance = True
        include_fk = True

    team = ma.Nested("TeamSchema", only=("id", "name"), dump_only=True)


class CreateLeagueSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=200))
    description = fields.String(load_default=None, allow_none=True)
    points_per_win = fields.Integer(load_default=3, **_points)
    points_per_draw = fields.Integer(load_default=1, **_points)
    points_per_loss = fields.Integer(load_default=0, **_points)


class UpdateLeagueSchema(Schema):
    name = fields.String(validate=validate.Length(min=1, max=200))
    description = fields.String(allow_none=True)
    is_active = fields.Boolean()
    points_per_win = fields.Integer(**_points)
    points_per_draw = fields.Integer(**_points)
    points_per_loss = fields.Integer(**_points)


class JoinLeagueSchema(Schema):
    team_id = fields.Integer(required=True)


class StandingSchema(Schema):
    """Dumps StandingRow values from the standings projector."""

    position = fields.Integer()
    team = ma.Nested("TeamSchema", only=("id", "name", "platform", "image_url"))
    points = fields.Integer()
    matches_played = fields.Integer()
    wins = fields.Integer()
    draws = fields.Integer()
    losses = fields.Integer()
