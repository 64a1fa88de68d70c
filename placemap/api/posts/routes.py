# placemap/api/posts/routes.py
import logging
from flask import Blueprint, request, jsonify, Response, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from placemap.api.posts.schemas import (
    PostCreateSchema, PostUpdateSchema, PostResponseSchema,
    RatingCreateSchema, CommentCreateSchema, CommentResponseSchema
)

posts_bp = Blueprint('posts_bp', __name__)


@posts_bp.route('', methods=['POST'])
@jwt_required()
def create_post():
    """
    새로운 게시글을 생성합니다.
    - 요청 본문은 PostCreateSchema 에 따라 유효성을 검사합니다.
    - 성공 시, 생성된 게시글 정보를 201 Created 상태 코드와 함께 반환합니다.
    """
    post_service = current_app.services['posts']
    user_id = get_jwt_identity()
    try:
        data = PostCreateSchema().load(request.get_json(silent=True) or {})
        new_post = post_service.create_post(user_id, data)
        return jsonify(PostResponseSchema().dump(new_post)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "RESOURCE_NOT_FOUND", "message": str(e)}), 404
    except Exception as e:
        logging.error(f"게시글 생성 중 오류 발생: {e}", exc_info=True)
        return jsonify({"error_code": "POST_CREATION_FAILED", "message": "게시글 생성 중 오류가 발생했습니다."}), 500


@posts_bp.route('', methods=['GET'])
def get_posts():
    """게시글 목록을 최신순으로 조회합니다. (비로그인 사용자도 허용)"""
    post_service = current_app.services['posts']
    limit = request.args.get('limit', current_app.config['POSTS_DEFAULT_LIMIT'], type=int)
    limit = max(1, min(limit, current_app.config['POSTS_MAX_LIMIT']))
    category = request.args.get('category', None, type=str)
    query = request.args.get('q', None, type=str)
    try:
        posts = post_service.get_posts(limit, category=category, query=query)
        return jsonify({
            "posts": PostResponseSchema(many=True).dump(posts),
            "count": len(posts)
        }), 200
    except Exception as e:
        logging.error(f"게시글 목록 조회 중 오류 발생: {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "게시글 목록 조회 중 오류가 발생했습니다."}), 500


@posts_bp.route('/<string:post_id>', methods=['GET'])
def get_post(post_id: str):
    """특정 게시글의 상세 정보를 조회합니다."""
    post_service = current_app.services['posts']
    post = post_service.get_post_by_id(post_id)
    if not post:
        return jsonify({"error_code": "POST_NOT_FOUND", "message": "게시글을 찾을 수 없습니다."}), 404
    return jsonify(PostResponseSchema().dump(post)), 200


@posts_bp.route('/<string:post_id>', methods=['PATCH'])
@jwt_required()
def update_post(post_id: str):
    """특정 게시글의 내용을 수정합니다. (작성자 본인만 가능)"""
    post_service = current_app.services['posts']
    user_id = get_jwt_identity()
    try:
        data = PostUpdateSchema().load(request.get_json(silent=True) or {})
        updated_post = post_service.update_post(post_id, user_id, data)
        return jsonify(PostResponseSchema().dump(updated_post)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except ValueError as e:
        return jsonify({"error_code": "POST_NOT_FOUND", "message": str(e)}), 404


@posts_bp.route('/<string:post_id>', methods=['DELETE'])
@jwt_required()
def delete_post(post_id: str):
    """특정 게시글을 삭제합니다. (작성자 본인만 가능)"""
    post_service = current_app.services['posts']
    user_id = get_jwt_identity()
    try:
        post_service.delete_post(post_id, user_id)
        return Response(status=204)
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except ValueError as e:
        return jsonify({"error_code": "POST_NOT_FOUND", "message": str(e)}), 404


@posts_bp.route('/<string:post_id>/like', methods=['POST'])
@jwt_required()
def toggle_post_like(post_id: str):
    """게시글의 좋아요를 누르거나 취소합니다."""
    post_service = current_app.services['posts']
    user_id = get_jwt_identity()
    try:
        result = post_service.toggle_like(user_id, post_id)
        return jsonify(result), 200
    except ValueError as e:
        return jsonify({"error_code": "POST_NOT_FOUND", "message": str(e)}), 404


@posts_bp.route('/<string:post_id>/ratings', methods=['POST'])
@jwt_required()
def rate_post(post_id: str):
    """게시글에 평점(1~5)을 남기거나 수정합니다."""
    post_service = current_app.services['posts']
    user_id = get_jwt_identity()
    try:
        data = RatingCreateSchema().load(request.get_json(silent=True) or {})
        result = post_service.rate_post(user_id, post_id, data['rating'])
        return jsonify(result), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "POST_NOT_FOUND", "message": str(e)}), 404


@posts_bp.route('/<string:post_id>/comments', methods=['POST'])
@jwt_required()
def create_comment(post_id: str):
    """
    특정 게시글에 새로운 댓글을 작성합니다.
    - 댓글 생성 후 게시글 작성자에게 알림이 생성됩니다.
    """
    post_service = current_app.services['posts']
    user_id = get_jwt_identity()
    try:
        data = CommentCreateSchema().load(request.get_json(silent=True) or {})
        new_comment = post_service.add_comment(post_id, user_id, data['content'])
        return jsonify(CommentResponseSchema().dump(new_comment)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "RESOURCE_NOT_FOUND", "message": str(e)}), 404


@posts_bp.route('/<string:post_id>/comments', methods=['GET'])
def get_comments(post_id: str):
    post_service = current_app.services['posts']
    limit = request.args.get('limit', 50, type=int)
    comments = post_service.get_comments(post_id, limit)
    return jsonify({"comments": CommentResponseSchema(many=True).dump(comments)}), 200
