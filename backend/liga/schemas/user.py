from liga.extensions import ma
from liga.models.user import User
from marshmallow import fields, validate, Schema


class UserSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = User
        load_instance = True
        include_fk = True
        exclude = ("password_hash",)

    role = fields.Function(lambda obj: obj.role.value if obj.role else None)


class DiscordLoginSchema(Schema):
    discord_id = fields.String(required=True, validate=validate.Length(min=1, max=64))
    discord_username = fields.String(required=True, validate=validate.Length(min=1, max=100))
    discord_avatar = fields.String(
        load_default=None, allow_none=True, validate=validate.Length(max=500)
    )


class AdminLoginSchema(Schema):
    username = fields.String(required=True, validate=validate.Length(min=1))
    password = fields.String(required=True, validate=validate.Length(min=1))


class UpdateRoleSchema(Schema):
    role = fields.String(required=True, validate=validate.OneOf(["user", "captain", "admin"]))
