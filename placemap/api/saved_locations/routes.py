# placemap/api/saved_locations/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from placemap.api.saved_locations.schemas import SavedLocationCreateSchema, SavedLocationResponseSchema
from placemap.api.saved_locations.services import AlreadySavedError

saved_locations_bp = Blueprint('saved_locations_bp', __name__)


def _listing(locations):
    return {"saved_locations": SavedLocationResponseSchema(many=True).dump(locations)}


@saved_locations_bp.route('', methods=['GET'])
@jwt_required()
def get_saved_locations():
    """현재 사용자가 저장한 장소 목록을 최근 저장순으로 조회합니다."""
    service = current_app.services['saved_locations']
    user_id = get_jwt_identity()
    try:
        return jsonify(_listing(service.get_saved_locations(user_id))), 200
    except Exception as e:
        logging.error(f"저장 장소 목록 조회 중 오류 발생 (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "저장한 장소 목록 조회 중 오류가 발생했습니다."}), 500


@saved_locations_bp.route('', methods=['POST'])
@jwt_required()
def add_saved_location():
    service = current_app.services['saved_locations']
    user_id = get_jwt_identity()
    try:
        data = SavedLocationCreateSchema().load(request.get_json(silent=True) or {})
        return jsonify(_listing(service.add_saved_location(user_id, data))), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except AlreadySavedError as e:
        return jsonify({"error_code": "ALREADY_SAVED", "message": str(e)}), 409


@saved_locations_bp.route('/<string:location_id>', methods=['DELETE'])
@jwt_required()
def remove_saved_location(location_id: str):
    """저장하지 않은 장소를 삭제해도 200 과 현재 목록을 돌려줍니다."""
    service = current_app.services['saved_locations']
    user_id = get_jwt_identity()
    return jsonify(_listing(service.remove_saved_location(user_id, location_id))), 200
