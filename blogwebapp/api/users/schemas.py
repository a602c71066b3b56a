# blogwebapp/api/users/schemas.py
from marshmallow import Schema, fields, validate

class UserPublicResponseSchema(Schema):
    """
    GET /api/users/{user_id}
    Public profile; email, role and password hash are left out.
    """
    user_id = fields.Str(required=True, dump_only=True)
    first_name = fields.Str(allow_none=True)
    last_name = fields.Str(allow_none=True)
    profile_picture = fields.Str(allow_none=True)
    bio = fields.Str()
    post_count = fields.Int(required=True)

class UserPrivateResponseSchema(Schema):
    """The logged-in user's own profile."""
    user_id = fields.Str(required=True, dump_only=True)
    email = fields.Email(required=True)
    first_name = fields.Str(allow_none=True)
    last_name = fields.Str(allow_none=True)
    profile_picture = fields.Str(allow_none=True)
    bio = fields.Str()
    role = fields.Str(required=True)
    created_at = fields.DateTime()

class ProfileUpdateSchema(Schema):
    """PUT /api/users/me"""
    first_name = fields.Str(validate=validate.Length(max=50))
    last_name = fields.Str(validate=validate.Length(max=50))
    bio = fields.Str(validate=validate.Length(max=500))
