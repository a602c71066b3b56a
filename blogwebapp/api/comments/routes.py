# blogwebapp/api/comments/routes.py
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity, get_jwt
from marshmallow import ValidationError

from blogwebapp.api.comments.schemas import CommentCreateSchema, CommentResponseSchema
from blogwebapp.api.comments.services import CommentNotFoundError, CommentTargetNotFoundError
from blogwebapp.models.user import UserRole


comments_bp = Blueprint('comments_bp', __name__)

@comments_bp.route('/<string:post_id>', methods=['GET'])
def get_comments(post_id: str):
    """Comment tree of a post: root comments with nested replies, oldest first."""
    comment_service = current_app.services['comments']
    tree = comment_service.get_comment_tree(post_id)
    return jsonify(CommentResponseSchema(many=True).dump(tree)), 200


@comments_bp.route('', methods=['POST'])
@jwt_required()
def create_comment():
    """
    Creates a comment, or a reply when parent_comment_id is given.
    Returns the new node with 201 Created.
    """
    comment_service = current_app.services['comments']
    user_id = get_jwt_identity()
    try:
        data = CommentCreateSchema().load(request.get_json() or {})
        new_comment = comment_service.create_comment(
            data['post_id'], user_id, data['content'], data.get('parent_comment_id')
        )
        return jsonify(CommentResponseSchema().dump(new_comment)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except CommentTargetNotFoundError as e:
        return jsonify({"error_code": "RESOURCE_NOT_FOUND", "message": str(e)}), 404


@comments_bp.route('/<string:comment_id>', methods=['DELETE'])
@jwt_required()
def delete_comment(comment_id: str):
    """
    Deletes a comment together with all of its replies.
    Allowed for the comment's author and for admins.
    """
    comment_service = current_app.services['comments']
    user_id = get_jwt_identity()

    comment = comment_service.get_comment(comment_id)
    if not comment:
        return jsonify({"error_code": "NOT_FOUND", "message": "Comment not found."}), 404

    is_admin = get_jwt().get('role') == UserRole.ADMIN.value
    if comment.get('author', {}).get('user_id') != user_id and not is_admin:
        return jsonify({"error_code": "FORBIDDEN", "message": "You can only delete your own comments."}), 403

    try:
        deleted = comment_service.delete_comment(comment_id)
        return jsonify({"message": "Comment and its replies deleted", "deleted_count": deleted}), 200
    except CommentNotFoundError as e:
        return jsonify({"error_code": "NOT_FOUND", "message": str(e)}), 404
