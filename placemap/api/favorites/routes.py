# placemap/api/favorites/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import Schema, fields, ValidationError

from placemap.api.favorites.services import AlreadyFavoritedError

favorites_bp = Blueprint('favorites_bp', __name__)


class FavoriteCreateSchema(Schema):
    """POST /api/v1/users/favorites"""
    post_id = fields.Str(required=True, error_messages={"required": "post_id는 필수 항목입니다."})


@favorites_bp.route('', methods=['GET'])
@jwt_required()
def get_favorites():
    """현재 사용자의 즐겨찾기 게시글 ID 목록을 조회합니다."""
    favorite_service = current_app.services['favorites']
    user_id = get_jwt_identity()
    try:
        return jsonify({"favorites": favorite_service.get_favorite_post_ids(user_id)}), 200
    except Exception as e:
        logging.error(f"즐겨찾기 목록 조회 중 오류 발생 (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "즐겨찾기 목록 조회 중 오류가 발생했습니다."}), 500


@favorites_bp.route('', methods=['POST'])
@jwt_required()
def add_favorite():
    favorite_service = current_app.services['favorites']
    user_id = get_jwt_identity()
    try:
        data = FavoriteCreateSchema().load(request.get_json(silent=True) or {})
        favorite_service.add_favorite(user_id, data['post_id'])
        return jsonify({"post_id": data['post_id'], "favorited": True}), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except AlreadyFavoritedError as e:
        return jsonify({"error_code": "ALREADY_FAVORITED", "message": str(e)}), 409
    except ValueError as e:
        return jsonify({"error_code": "POST_NOT_FOUND", "message": str(e)}), 404


@favorites_bp.route('/<string:post_id>', methods=['DELETE'])
@jwt_required()
def remove_favorite(post_id: str):
    favorite_service = current_app.services['favorites']
    user_id = get_jwt_identity()
    try:
        favorite_service.remove_favorite(user_id, post_id)
        return jsonify({"post_id": post_id, "favorited": False}), 200
    except ValueError as e:
        return jsonify({"error_code": "NOT_FAVORITED", "message": str(e)}), 404
