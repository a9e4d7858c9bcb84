# help_exchange/api/posts/routes.py
import logging
from flask import Blueprint, request, jsonify, Response, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from help_exchange.api.posts.schemas import (
    PostCreateSchema, AchievementCreateSchema, PostResponseSchema,
    LikeToggleResponseSchema, FilterSuggestionsSchema
)

posts_bp = Blueprint('posts_bp', __name__)

def _filters_from_args():
    """?location=...&tags=a,b (또는 tags를 여러 번) 형태의 필터 파라미터를 읽습니다."""
    location_filter = request.args.get('location') or None
    tag_filters = []
    for raw in request.args.getlist('tags'):
        tag_filters.extend(t.strip() for t in raw.split(',') if t.strip())
    return location_filter, tag_filters or None

@posts_bp.route('', methods=['GET'])
def list_posts():
    """
    종류별 게시물 목록을 최신순으로 조회합니다.
    - type: helpNeeded | helpOffered | achievement (필수)
    - location, tags: 선택 필터
    """
    post_service = current_app.services['posts']
    post_type = request.args.get('type')
    if not post_type:
        return jsonify({"error_code": "VALIDATION_ERROR", "message": "type 파라미터가 필요합니다."}), 400

    location_filter, tag_filters = _filters_from_args()
    try:
        posts = post_service.list_posts(post_type, location_filter, tag_filters)
        return jsonify({"posts": PostResponseSchema(many=True).dump(posts)}), 200
    except ValueError as e:
        return jsonify({"error_code": "VALIDATION_ERROR", "message": str(e)}), 400

@posts_bp.route('/completed', methods=['GET'])
def list_completed_posts():
    post_service = current_app.services['posts']
    location_filter, tag_filters = _filters_from_args()
    posts = post_service.list_completed(location_filter, tag_filters)
    return jsonify({"posts": PostResponseSchema(many=True).dump(posts)}), 200

@posts_bp.route('/suggestions', methods=['GET'])
def get_filter_suggestions():
    """필터 입력창에 보여줄 위치/태그 후보"""
    post_service = current_app.services['posts']
    return jsonify(FilterSuggestionsSchema().dump(post_service.filter_suggestions())), 200

@posts_bp.route('/mine', methods=['GET'])
@jwt_required(optional=True)
def list_my_posts():
    """로그인한 사용자의 게시물 목록. 비로그인 상태면 빈 목록을 반환합니다."""
    post_service = current_app.services['posts']
    posts = post_service.list_by_user(get_jwt_identity())
    return jsonify({"posts": PostResponseSchema(many=True).dump(posts)}), 200

@posts_bp.route('/<string:post_id>', methods=['GET'])
def get_post(post_id: str):
    """단일 게시물 조회. 없으면 404 대신 post: null을 반환합니다."""
    post_service = current_app.services['posts']
    post = post_service.get_post_by_id(post_id)
    return jsonify({"post": PostResponseSchema().dump(post) if post else None}), 200

@posts_bp.route('', methods=['POST'])
@jwt_required()
def create_post():
    """
    새로운 게시물을 생성합니다.
    성과 게시물은 original_post_id로 기존 요청/제공 게시물을 참조해야 합니다.
    """
    post_service = current_app.services['posts']
    user_id = get_jwt_identity()
    try:
        data = PostCreateSchema().load(request.get_json() or {})
        new_post = post_service.create_post(
            author_id=user_id,
            title=data['title'],
            description=data['description'],
            location=data['location'],
            contact_info=data['contact_info'],
            post_type=data['type'],
            tags=data['tags'],
            images=data['images'],
            original_post_id=data.get('original_post_id')
        )
        return jsonify(PostResponseSchema().dump(new_post)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "INVALID_ORIGINAL_POST", "message": str(e)}), 400
    except Exception as e:
        logging.error(f"게시물 생성 중 오류 발생 (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "POST_CREATION_FAILED", "message": "게시물 생성 중 오류가 발생했습니다."}), 500

@posts_bp.route('/achievements', methods=['POST'])
@jwt_required()
def create_achievement():
    """원본 게시물을 완료 처리하고 성과 게시물을 생성합니다."""
    post_service = current_app.services['posts']
    user_id = get_jwt_identity()
    try:
        data = AchievementCreateSchema().load(request.get_json() or {})
        new_post = post_service.create_achievement(author_id=user_id, **data)
        return jsonify(PostResponseSchema().dump(new_post)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "ORIGINAL_POST_NOT_FOUND", "message": str(e)}), 404

@posts_bp.route('/<string:post_id>', methods=['DELETE'])
@jwt_required()
def delete_post(post_id: str):
    """게시물을 삭제합니다. (작성자 본인만 가능)"""
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
    """게시물의 좋아요를 누르거나 취소합니다."""
    post_service = current_app.services['posts']
    user_id = get_jwt_identity()
    try:
        is_liked, like_count = post_service.toggle_post_like(user_id, post_id)
        return jsonify(LikeToggleResponseSchema().dump({"is_liked": is_liked, "like_count": like_count})), 200
    except ValueError as e:
        return jsonify({"error_code": "POST_NOT_FOUND", "message": str(e)}), 404

@posts_bp.route('/<string:post_id>/complete', methods=['POST'])
@jwt_required()
def mark_post_completed(post_id: str):
    post_service = current_app.services['posts']
    try:
        post_service.mark_completed(post_id, get_jwt_identity())
        return jsonify({"message": "게시물이 완료 처리되었습니다."}), 200
    except ValueError as e:
        return jsonify({"error_code": "POST_NOT_FOUND", "message": str(e)}), 404
