# blogwebapp/api/posts/schemas.py
from marshmallow import Schema, fields, validate, EXCLUDE

MAX_PAGE_SIZE = 50

# --- nested schemas shared with other packages ---
class AuthorSchema(Schema):
    """Author projection embedded in posts and comments."""
    user_id = fields.Str(required=True)
    first_name = fields.Str(allow_none=True)
    last_name = fields.Str(allow_none=True)
    profile_picture = fields.Str(allow_none=True)

# --- API request/response schemas ---

class PostCreateSchema(Schema):
    """Validates the body of POST /api/posts."""
    title = fields.Str(required=True, validate=validate.Length(min=1, max=200))
    category = fields.Str(required=True, validate=validate.Length(min=1, max=50))
    content = fields.Str(required=True, validate=validate.Length(min=1))
    image_path = fields.Str(load_default=None, allow_none=True)

class PostUpdateSchema(Schema):
    """Validates the body of PUT /api/posts/{post_id}; every field is optional."""
    title = fields.Str(validate=validate.Length(min=1, max=200))
    category = fields.Str(validate=validate.Length(min=1, max=50))
    content = fields.Str(validate=validate.Length(min=1))
    image_path = fields.Str(allow_none=True)

class PostResponseSchema(Schema):
    """Post as returned to clients. `clapped_by` stays server side."""
    post_id = fields.Str(dump_only=True)
    author = fields.Nested(AuthorSchema, required=True)
    title = fields.Str(required=True)
    category = fields.Str(required=True)
    content = fields.Str(required=True)
    image_path = fields.Str(allow_none=True)
    claps = fields.Int(required=True)
    comment_count = fields.Int(required=True)
    created_at = fields.DateTime(required=True)
    updated_at = fields.DateTime(required=True)
    user_claps = fields.Int(dump_only=True, dump_default=0)

class PageQuerySchema(Schema):
    """Query string of the paginated post lists; limits above MAX_PAGE_SIZE are capped."""
    class Meta:
        unknown = EXCLUDE

    limit = fields.Int(load_default=10, validate=validate.Range(min=1))
    cursor = fields.Str(load_default=None)
