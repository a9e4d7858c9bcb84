# help_exchange/api/replies/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from help_exchange.api.replies.schemas import ReplyCreateSchema, ReplyResponseSchema

replies_bp = Blueprint('replies_bp', __name__)

@replies_bp.route('/<string:post_id>/replies', methods=['POST'])
@jwt_required()
def create_reply(post_id: str):
    """
    특정 게시물에 새로운 댓글을 작성합니다.
    - 성공 시, 생성된 댓글 정보를 201 Created 상태 코드와 함께 반환합니다.
    """
    reply_service = current_app.services['replies']
    user_id = get_jwt_identity()
    try:
        data = ReplyCreateSchema().load(request.get_json() or {})
        new_reply = reply_service.create_reply(post_id, user_id, data['text'])
        return jsonify(ReplyResponseSchema().dump(new_reply)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "RESOURCE_NOT_FOUND", "message": str(e)}), 404
    except Exception as e:
        logging.error(f"댓글 생성 중 오류 발생 (post_id: {post_id}): {e}", exc_info=True)
        return jsonify({"error_code": "REPLY_CREATION_FAILED", "message": "댓글 생성 중 오류가 발생했습니다."}), 500

@replies_bp.route('/<string:post_id>/replies', methods=['GET'])
def get_replies(post_id: str):
    """특정 게시물의 댓글 목록을 작성 순서대로 조회합니다."""
    reply_service = current_app.services['replies']
    replies = reply_service.list_replies(post_id)
    return jsonify({"replies": ReplyResponseSchema(many=True).dump(replies)}), 200
