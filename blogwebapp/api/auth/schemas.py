# blogwebapp/api/auth/schemas.py
from marshmallow import Schema, fields, validate

class RegisterSchema(Schema):
    """POST /api/auth/register"""
    email = fields.Email(required=True)
    password = fields.Str(required=True, load_only=True, validate=validate.Length(min=8, max=128))
    first_name = fields.Str(validate=validate.Length(max=50))
    last_name = fields.Str(validate=validate.Length(max=50))

class LoginSchema(Schema):
    """POST /api/auth/login"""
    email = fields.Email(required=True)
    password = fields.Str(required=True, load_only=True)

class MagicLinkRequestSchema(Schema):
    """POST /api/auth/magic-link"""
    email = fields.Email(required=True)

class LogoutRequestSchema(Schema):
    """Both tokens are revoked on logout."""
    access_token = fields.Str(required=True)
    refresh_token = fields.Str(required=True)

class AuthUserSchema(Schema):
    """User info returned next to issued tokens."""
    user_id = fields.Str(required=True)
    email = fields.Email(required=True)
    first_name = fields.Str(allow_none=True)
    last_name = fields.Str(allow_none=True)
    profile_picture = fields.Str(allow_none=True)
    role = fields.Str(required=True)

class CheckPasswordSchema(Schema):
    """POST /api/auth/check-password"""
    password = fields.Str(required=True, load_only=True)
