# blogwebapp/api/claps/routes.py
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from blogwebapp.api.claps.schemas import (
    ClapRequestSchema, ClapCountSchema, ClapUserSchema, UndoClapsResponseSchema
)
from blogwebapp.api.claps.services import SelfClapError, ClapLimitReachedError, NothingToUndoError
from blogwebapp.api.posts.services import PostNotFoundError

claps_bp = Blueprint('claps_bp', __name__)

POST_NOT_FOUND = {"error_code": "POST_NOT_FOUND", "message": "Post not found."}


@claps_bp.route('/<string:post_id>/claps', methods=['GET'])
@jwt_required(optional=True)
def get_claps(post_id: str):
    """Aggregate claps and, for a logged-in caller, their own count."""
    clap_service = current_app.services['claps']
    try:
        result = clap_service.get_claps(post_id, get_jwt_identity())
        return jsonify(ClapCountSchema().dump(result)), 200
    except PostNotFoundError:
        return jsonify(POST_NOT_FOUND), 404


@claps_bp.route('/<string:post_id>/claps', methods=['POST'])
@jwt_required()
def add_clap(post_id: str):
    """
    Adds claps for the caller (default 1).
    - Authors cannot clap for their own post.
    - A user gives at most 50 claps per post; extra claps are clamped.
    """
    clap_service = current_app.services['claps']
    user_id = get_jwt_identity()
    try:
        data = ClapRequestSchema().load(request.get_json(silent=True) or {})
        result = clap_service.add_clap(post_id, user_id, data['increment'])
        return jsonify(ClapCountSchema().dump(result)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PostNotFoundError:
        return jsonify(POST_NOT_FOUND), 404
    except SelfClapError as e:
        return jsonify({"error_code": "SELF_CLAP", "message": str(e)}), 400
    except ClapLimitReachedError as e:
        return jsonify({"error_code": "CLAP_LIMIT_REACHED", "message": str(e)}), 400


@claps_bp.route('/<string:post_id>/undo-claps', methods=['POST'])
@jwt_required()
def undo_claps(post_id: str):
    """Removes all of the caller's claps from the post."""
    clap_service = current_app.services['claps']
    user_id = get_jwt_identity()
    try:
        result = clap_service.undo_claps(post_id, user_id)
        return jsonify(UndoClapsResponseSchema().dump(result)), 200
    except PostNotFoundError:
        return jsonify(POST_NOT_FOUND), 404
    except NothingToUndoError as e:
        return jsonify({"error_code": "NOTHING_TO_UNDO", "message": str(e)}), 400


@claps_bp.route('/<string:post_id>/clap-users', methods=['GET'])
def get_clap_users(post_id: str):
    """Users who clapped for the post, with their counts."""
    clap_service = current_app.services['claps']
    try:
        users = clap_service.get_clap_users(post_id)
        return jsonify(ClapUserSchema(many=True).dump(users)), 200
    except PostNotFoundError:
        return jsonify(POST_NOT_FOUND), 404
