# blogwebapp/api/notifications/routes.py
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity

from blogwebapp.api.notifications.schemas import NotificationResponseSchema, NotificationQuerySchema
from blogwebapp.services.notification_service import NotificationNotFoundError

notifications_bp = Blueprint('notifications_bp', __name__)


@notifications_bp.route('', methods=['GET'])
@jwt_required()
def get_notifications():
    """The caller's notifications, newest first. `?unread=true` keeps unread ones only."""
    notification_service = current_app.services['notifications']
    args = NotificationQuerySchema().load(request.args)
    notifications = notification_service.get_notifications(get_jwt_identity(), args['limit'], args['unread'])
    return jsonify(NotificationResponseSchema(many=True).dump(notifications)), 200


@notifications_bp.route('/<string:notification_id>/read', methods=['PATCH'])
@jwt_required()
def mark_notification_read(notification_id: str):
    notification_service = current_app.services['notifications']
    try:
        notification = notification_service.mark_as_read(notification_id, get_jwt_identity())
        return jsonify(NotificationResponseSchema().dump(notification)), 200
    except NotificationNotFoundError as e:
        return jsonify({"error_code": "NOTIFICATION_NOT_FOUND", "message": str(e)}), 404


@notifications_bp.route('/read-all', methods=['PATCH'])
@jwt_required()
def mark_all_notifications_read():
    updated = current_app.services['notifications'].mark_all_as_read(get_jwt_identity())
    return jsonify({"message": "Notifications marked as read.", "updated_count": updated}), 200
