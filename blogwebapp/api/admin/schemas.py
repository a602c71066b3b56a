# blogwebapp/api/admin/schemas.py
from marshmallow import Schema, fields, validate

from blogwebapp.models.user import UserRole

class AdminUserSchema(Schema):
    """One row of the admin user list."""
    user_id = fields.Str(required=True)
    email = fields.Email(required=True)
    first_name = fields.Str(allow_none=True)
    last_name = fields.Str(allow_none=True)
    role = fields.Str(required=True)
    created_at = fields.DateTime()

class RoleUpdateSchema(Schema):
    """PATCH /api/admin/users/role"""
    user_id = fields.Str(required=True)
    role = fields.Str(required=True, validate=validate.OneOf([r.value for r in UserRole]))
