# blogwebapp/api/notifications/schemas.py
from marshmallow import Schema, fields, validate, EXCLUDE

class NotificationSenderSchema(Schema):
    user_id = fields.Str(allow_none=True)
    first_name = fields.Str(allow_none=True)
    profile_picture = fields.Str(allow_none=True)

class NotificationResponseSchema(Schema):
    """One in-app notification."""
    notification_id = fields.Str(required=True)
    sender = fields.Nested(NotificationSenderSchema)
    type = fields.Str(required=True)
    target_id = fields.Str(required=True)
    target_summary = fields.Str(allow_none=True)
    is_read = fields.Bool(required=True)
    created_at = fields.DateTime()

class NotificationQuerySchema(Schema):
    """GET /api/notifications query string"""
    class Meta:
        unknown = EXCLUDE

    limit = fields.Int(load_default=50, validate=validate.Range(min=1, max=100))
    unread = fields.Bool(load_default=False)
