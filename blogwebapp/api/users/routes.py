# blogwebapp/api/users/routes.py
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from blogwebapp.api.users.schemas import UserPublicResponseSchema, UserPrivateResponseSchema, ProfileUpdateSchema
from blogwebapp.api.users.services import UserNotFoundError

users_bp = Blueprint('users_bp', __name__)

USER_NOT_FOUND = {"error_code": "USER_NOT_FOUND", "message": "User not found."}


@users_bp.route('/me', methods=['GET'])
@jwt_required()
def get_my_profile():
    """Profile of the logged-in user."""
    user_service = current_app.services['users']
    user_profile = user_service.get_user_profile(get_jwt_identity())
    if not user_profile:
        return jsonify(USER_NOT_FOUND), 404
    return jsonify(UserPrivateResponseSchema().dump(user_profile)), 200


@users_bp.route('/me', methods=['PUT'])
@jwt_required()
def update_my_profile():
    """Updates first_name, last_name and bio of the logged-in user."""
    user_service = current_app.services['users']
    try:
        changes = ProfileUpdateSchema().load(request.get_json() or {})
        updated_user = user_service.update_profile(get_jwt_identity(), changes)
        return jsonify(UserPrivateResponseSchema().dump(updated_user)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except UserNotFoundError:
        return jsonify(USER_NOT_FOUND), 404


@users_bp.route('/<string:user_id>', methods=['GET'])
def get_user_profile(user_id: str):
    """Public profile of any user, including post count."""
    user_service = current_app.services['users']
    user_profile = user_service.get_user_profile(user_id)
    if not user_profile:
        return jsonify(USER_NOT_FOUND), 404
    return jsonify(UserPublicResponseSchema().dump(user_profile)), 200
