# blogwebapp/api/posts/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity, get_jwt
from marshmallow import ValidationError

from blogwebapp.api.posts.schemas import (
    PostCreateSchema, PostUpdateSchema, PostResponseSchema, PageQuerySchema, MAX_PAGE_SIZE
)
from blogwebapp.api.posts.services import (
    PostNotFoundError, PostPermissionError, PostAuthorNotFoundError, user_claps_for
)
from blogwebapp.models.user import UserRole

posts_bp = Blueprint('posts_bp', __name__)


def _page_args():
    """(limit, cursor) from the query string; raises ValidationError for limit < 1."""
    args = PageQuerySchema().load(request.args)
    return min(args['limit'], MAX_PAGE_SIZE), args['cursor']


def _with_user_claps(post: dict, user_id) -> dict:
    return {**post, 'user_claps': user_claps_for(post, user_id)}


@posts_bp.route('', methods=['POST'])
@jwt_required()
def create_post():
    """Creates a post for the logged-in user. Returns 201 with the post."""
    post_service = current_app.services['posts']
    user_id = get_jwt_identity()
    try:
        data = PostCreateSchema().load(request.get_json() or {})
        new_post = post_service.create_post(user_id, data['title'], data['category'], data['content'], data.get('image_path'))
        return jsonify(PostResponseSchema().dump(new_post)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PostAuthorNotFoundError as e:
        return jsonify({"error_code": "USER_NOT_FOUND", "message": str(e)}), 404


@posts_bp.route('', methods=['GET'])
@jwt_required(optional=True)
def get_posts():
    """Post feed, newest first, with cursor pagination."""
    post_service = current_app.services['posts']
    user_id = get_jwt_identity()
    limit, cursor = _page_args()

    posts, next_cursor = post_service.get_posts(limit, cursor)
    return jsonify({
        "posts": PostResponseSchema(many=True).dump([_with_user_claps(p, user_id) for p in posts]),
        "next_cursor": next_cursor
    }), 200


@posts_bp.route('/user-posts', methods=['GET'])
@jwt_required()
def get_my_posts():
    """Posts written by the logged-in user."""
    post_service = current_app.services['posts']
    user_id = get_jwt_identity()
    limit, cursor = _page_args()

    posts, next_cursor = post_service.get_posts_by_user_id(user_id, limit, cursor)
    return jsonify({
        "posts": PostResponseSchema(many=True).dump(posts),
        "next_cursor": next_cursor
    }), 200


@posts_bp.route('/<string:post_id>', methods=['GET'])
@jwt_required(optional=True)
def get_post(post_id: str):
    post_service = current_app.services['posts']
    post = post_service.get_post_by_id(post_id)
    if not post:
        return jsonify({"error_code": "POST_NOT_FOUND", "message": "Post not found."}), 404
    return jsonify(PostResponseSchema().dump(_with_user_claps(post, get_jwt_identity()))), 200


@posts_bp.route('/<string:post_id>', methods=['PUT'])
@jwt_required()
def update_post(post_id: str):
    """Updates a post. Author only."""
    post_service = current_app.services['posts']
    user_id = get_jwt_identity()
    try:
        changes = PostUpdateSchema().load(request.get_json() or {})
        updated = post_service.update_post(post_id, user_id, changes)
        return jsonify({"message": "Post updated successfully", "post": PostResponseSchema().dump(updated)}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PostNotFoundError as e:
        return jsonify({"error_code": "POST_NOT_FOUND", "message": str(e)}), 404
    except PostPermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403


@posts_bp.route('/<string:post_id>', methods=['DELETE'])
@jwt_required()
def delete_post(post_id: str):
    """Deletes a post and its comments. Author or admin only."""
    post_service = current_app.services['posts']
    user_id = get_jwt_identity()
    is_admin = get_jwt().get('role') == UserRole.ADMIN.value
    try:
        post_service.delete_post(post_id, user_id, is_admin=is_admin)
        return jsonify({"message": "Post deleted successfully"}), 200
    except PostNotFoundError as e:
        return jsonify({"error_code": "POST_NOT_FOUND", "message": str(e)}), 404
    except PostPermissionError as e:
        logging.warning(f"Post delete denied (post_id: {post_id}, user_id: {user_id})")
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
