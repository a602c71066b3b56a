# blogwebapp/api/comments/schemas.py
from marshmallow import Schema, fields, validate
from blogwebapp.api.posts.schemas import AuthorSchema # same author projection as posts

class CommentCreateSchema(Schema):
    """
    POST /api/comments
    Body of a new comment or reply.
    """
    post_id = fields.Str(required=True, validate=validate.Length(min=1))
    content = fields.Str(required=True, validate=validate.Length(min=1, max=2000, error="Comments must be 1-2000 characters."))
    parent_comment_id = fields.Str(load_default=None, allow_none=True)

class CommentResponseSchema(Schema):
    """
    A comment node; replies nest recursively.
    """
    comment_id = fields.Str(required=True)
    post_id = fields.Str(required=True)
    author = fields.Nested(AuthorSchema, required=True)
    content = fields.Str(required=True)
    parent_comment_id = fields.Str(allow_none=True)
    created_at = fields.DateTime(required=True)
    updated_at = fields.DateTime(required=True)
    replies = fields.List(fields.Nested(lambda: CommentResponseSchema()), dump_default=list)
