# placemap/api/notifications/routes.py
import logging
from flask import Blueprint, request, jsonify, Response, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from placemap.api.notifications.schemas import NotificationQuerySchema, NotificationResponseSchema

notifications_bp = Blueprint('notifications_bp', __name__)


@notifications_bp.route('', methods=['GET'])
@jwt_required()
def get_notifications():
    """현재 사용자의 알림을 최신순으로 조회합니다. (?limit=&read=all|read|unread)"""
    notification_service = current_app.services['notifications']
    user_id = get_jwt_identity()
    try:
        params = NotificationQuerySchema().load(request.args)
        notifications = notification_service.get_notifications(user_id, params['limit'], params['read'])
        return jsonify({"notifications": NotificationResponseSchema(many=True).dump(notifications)}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except Exception as e:
        logging.error(f"알림 목록 조회 중 오류 발생 (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "알림 조회 중 오류가 발생했습니다."}), 500


@notifications_bp.route('/unread-count', methods=['GET'])
@jwt_required()
def get_unread_count():
    notification_service = current_app.services['notifications']
    user_id = get_jwt_identity()
    return jsonify({"count": notification_service.count_unread(user_id)}), 200


@notifications_bp.route('/read-all', methods=['PATCH'])
@jwt_required()
def mark_all_as_read():
    """읽지 않은 알림을 모두 읽음 처리합니다."""
    notification_service = current_app.services['notifications']
    user_id = get_jwt_identity()
    updated = notification_service.mark_all_as_read(user_id)
    return jsonify({"updated": updated}), 200


@notifications_bp.route('/<string:notification_id>/read', methods=['PATCH'])
@jwt_required()
def mark_as_read(notification_id: str):
    notification_service = current_app.services['notifications']
    user_id = get_jwt_identity()
    notification = notification_service.mark_as_read(user_id, notification_id)
    if not notification:
        return jsonify({"error_code": "NOTIFICATION_NOT_FOUND", "message": "알림을 찾을 수 없습니다."}), 404
    return jsonify(NotificationResponseSchema().dump(notification)), 200


@notifications_bp.route('/<string:notification_id>', methods=['DELETE'])
@jwt_required()
def delete_notification(notification_id: str):
    notification_service = current_app.services['notifications']
    user_id = get_jwt_identity()
    if not notification_service.delete_notification(user_id, notification_id):
        return jsonify({"error_code": "NOTIFICATION_NOT_FOUND", "message": "알림을 찾을 수 없습니다."}), 404
    return Response(status=204)
