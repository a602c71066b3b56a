# blogwebapp/api/claps/schemas.py
from marshmallow import Schema, fields, validate


class ClapRequestSchema(Schema):
    """
    POST /api/posts/{post_id}/claps; the body is optional and defaults to one clap.
    Increments past the per-user cap are clamped by ClapService.
    """
    increment = fields.Int(load_default=1, strict=True, validate=validate.Range(min=1))

class ClapCountSchema(Schema):
    claps = fields.Int(required=True)
    user_claps = fields.Int(required=True)

class ClapUserSchema(Schema):
    """One entry of the "who clapped" list."""
    user_id = fields.Str(required=True)
    first_name = fields.Str(allow_none=True)
    last_name = fields.Str(allow_none=True)
    profile_picture = fields.Str(allow_none=True)
    claps = fields.Int(required=True)

class UndoClapsResponseSchema(ClapCountSchema):
    clap_users = fields.List(fields.Nested(ClapUserSchema), required=True)
