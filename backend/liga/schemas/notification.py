from liga.extensions import ma
from liga.models.captain_request import CaptainRequest
from liga.models.invitation import TeamInvitation
from liga.models.notification import Notification
from marshmallow import Schema, fields, validate


class NotificationSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Notification
        load_instance = True
        include_fk = True

    type = fields.Function(lambda obj: obj.type.value if obj.type else None)
    data = fields.Raw()


class InvitationSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = TeamInvitation
        load_instance = True
        include_fk = True

    status = fields.Function(lambda obj: obj.status.value if obj.status else None)
    team = ma.Nested("TeamSchema", only=("id", "name", "platform"), dump_only=True)
    invited_by = ma.Nested("UserSchema", only=("id", "discord_username"), dump_only=True)


class RespondInvitationSchema(Schema):
    status = fields.String(required=True, validate=validate.OneOf(["accepted", "rejected"]))


class CaptainRequestSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = CaptainRequest
        load_instance = True
        include_fk = True

    status = fields.Function(lambda obj: obj.status.value if obj.status else None)
    user = ma.Nested("UserSchema", only=("id", "discord_username", "discord_avatar"), dump_only=True)


class CreateCaptainRequestSchema(Schema):
    reason = fields.String(load_default=None, allow_none=True, validate=validate.Length(max=1000))


class ReviewCaptainRequestSchema(Schema):
    status = fields.String(required=True, validate=validate.OneOf(["approved", "rejected"]))
