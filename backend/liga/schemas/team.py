from liga.extensions import ma
from liga.models.team import Team
from marshmallow import Schema, fields, validate

PLATFORMS = ["PC", "Steam", "Xbox", "Gamepass"]


class TeamSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Team
        load_instance = True
        include_fk = True

    platform = fields.Function(lambda obj: obj.platform.value if obj.platform else None)
    captain = ma.Nested("UserSchema", only=("id", "discord_username", "discord_avatar"), dump_only=True)


class CreateTeamSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    platform = fields.String(required=True, validate=validate.OneOf(PLATFORMS))
    description = fields.String(load_default=None, allow_none=True)
    image_url = fields.String(load_default=None, allow_none=True, validate=validate.Length(max=500))


class UpdateTeamSchema(Schema):
    name = fields.String(validate=validate.Length(min=1, max=100))
    platform = fields.String(validate=validate.OneOf(PLATFORMS))
    description = fields.String(allow_none=True)
    image_url = fields.String(allow_none=True, validate=validate.Length(max=500))


class InviteSchema(Schema):
    user_id = fields.Integer(required=True)
