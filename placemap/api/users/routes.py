# placemap/api/users/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from placemap.api.users.schemas import UserResponseSchema, PushTokenSchema

users_bp = Blueprint('users_bp', __name__)


@users_bp.route('/me', methods=['GET'])
@jwt_required()
def get_me():
    """현재 로그인된 사용자의 정보를 조회합니다."""
    user_service = current_app.services['users']
    user_id = get_jwt_identity()
    user = user_service.get_user(user_id)
    if not user:
        return jsonify({"error_code": "USER_NOT_FOUND", "message": "사용자를 찾을 수 없습니다."}), 404
    return jsonify(UserResponseSchema().dump(user)), 200


@users_bp.route('/me/push-token', methods=['POST'])
@jwt_required()
def register_push_token():
    """
    클라이언트의 푸시 토큰을 등록/업데이트합니다.
    알림 생성/읽음 이벤트는 이 토큰으로 전달됩니다.
    """
    user_service = current_app.services['users']
    user_id = get_jwt_identity()
    try:
        data = PushTokenSchema().load(request.get_json(silent=True) or {})
        user_service.update_push_token(user_id, data['token'])
        return jsonify({"message": "푸시 토큰이 성공적으로 업데이트되었습니다."}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "USER_NOT_FOUND", "message": str(e)}), 404
    except Exception as e:
        logging.error(f"푸시 토큰 업데이트 중 오류 발생: {e}", exc_info=True)
        return jsonify({"error_code": "UPDATE_FAILED", "message": "푸시 토큰 업데이트 중 서버 오류가 발생했습니다."}), 500
