# blogwebapp/api/admin/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import get_jwt_identity
from marshmallow import ValidationError

from blogwebapp.api.admin.schemas import AdminUserSchema, RoleUpdateSchema
from blogwebapp.api.users.services import UserNotFoundError
from blogwebapp.core.security import admin_required

admin_bp = Blueprint('admin_bp', __name__)


@admin_bp.route('/users', methods=['GET'])
@admin_required
def list_users():
    users = current_app.services['users'].list_users()
    return jsonify(AdminUserSchema(many=True).dump(users)), 200


@admin_bp.route('/users/role', methods=['PATCH'])
@admin_required
def update_user_role():
    """Changes a user's role. Takes effect in the role claim at the user's next login or refresh."""
    user_service = current_app.services['users']
    try:
        data = RoleUpdateSchema().load(request.get_json() or {})
        user = user_service.update_role(data['user_id'], data['role'])
        return jsonify({"message": "User role updated successfully.", "user": AdminUserSchema().dump(user)}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except UserNotFoundError as e:
        return jsonify({"error_code": "USER_NOT_FOUND", "message": str(e)}), 404


@admin_bp.route('/users/<string:user_id>', methods=['DELETE'])
@admin_required
def delete_user(user_id: str):
    if user_id == get_jwt_identity():
        return jsonify({"error_code": "FORBIDDEN", "message": "Admins cannot delete their own account."}), 403
    try:
        current_app.services['users'].delete_user(user_id)
        return jsonify({"message": "User deleted successfully."}), 200
    except UserNotFoundError as e:
        return jsonify({"error_code": "USER_NOT_FOUND", "message": str(e)}), 404


@admin_bp.route('/posts/<string:post_id>/repair-comments', methods=['POST'])
@admin_required
def repair_comments(post_id: str):
    """Removes comments left without a parent by an interrupted cascade delete."""
    deleted = current_app.services['comments'].repair_orphans(post_id)
    logging.info(f"Comment repair on {post_id} by {get_jwt_identity()}: {deleted} removed")
    return jsonify({"post_id": post_id, "deleted_count": deleted}), 200
