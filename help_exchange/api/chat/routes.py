# help_exchange/api/chat/routes.py
import logging
from dataclasses import asdict
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from help_exchange.api.chat.schemas import (
    ChatReplyRequestSchema, ConversationRequestSchema, DraftSubmitRequestSchema,
    ApiKeyVerifySchema, NoticeSchema
)
from help_exchange.chat import ChatSession, Conversation, Draft, Intent, Message
from help_exchange.chat.conversation import Role
from help_exchange.core.client_settings import ClientSettings, is_valid_api_key_format

chat_bp = Blueprint('chat_bp', __name__)

# 사용자가 자신의 완성 API 키를 보낼 때 사용하는 헤더
API_KEY_HEADER = 'X-Completion-Api-Key'

def _client_settings() -> ClientSettings:
    """요청 헤더의 키를 우선 사용하고, 없으면 서버 기본 키를 사용합니다."""
    api_key = (request.headers.get(API_KEY_HEADER) or '').strip() or current_app.config.get('OPENAI_API_KEY')
    return ClientSettings(api_key=api_key)

def _conversation_from(data: dict) -> Conversation:
    conversation = Conversation(intent=Intent(data['intent']), language=data['language'])
    for item in data['messages']:
        role = Role(item['role'])
        conversation.messages.append(Message(role, item['text']))
        if role == Role.USER:
            conversation.note_language_sample(item['text'])
    return conversation

def _post_submitter(user_id: str):
    """초안 payload를 받아 게시물을 만들고 ID를 돌려주는 함수"""
    post_service = current_app.services['posts']

    def submit(payload: dict) -> str:
        new_post = post_service.create_post(
            author_id=user_id,
            title=payload['title'],
            description=payload['description'],
            location=payload['location'],
            contact_info=payload['contact_info'],
            post_type=payload['type'],
            tags=payload['tags'],
            images=payload['images']
        )
        return new_post['post_id']
    return submit

def _dump_notices(session: ChatSession):
    return NoticeSchema(many=True).dump([n.to_dict() for n in session.drain_notices()])

@chat_bp.route('/reply', methods=['POST'])
@jwt_required()
def reply():
    """
    대화의 다음 답변을 생성합니다.
    실패는 HTTP 오류가 아니라 notices로 전달되고, 클라이언트는 다시 시도할 수 있습니다.
    """
    try:
        data = ChatReplyRequestSchema().load(request.get_json() or {})
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    session = ChatSession(current_app.services['completion'], _client_settings(), _conversation_from(data))
    if data['message']:
        answer = session.send_message(data['message'])
    else:
        answer = session.select_intent(session.conversation.intent, data['intent_message'])

    return jsonify({
        "reply": answer,
        "messages": [m.to_dict() for m in session.conversation.messages],
        "notices": _dump_notices(session)
    }), 200

@chat_bp.route('/extract', methods=['POST'])
@jwt_required()
def extract():
    """대화 내용에서 게시물 초안을 추출합니다. 추출에 실패해도 빈 초안을 돌려줍니다."""
    try:
        data = ConversationRequestSchema().load(request.get_json() or {})
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    session = ChatSession(current_app.services['completion'], _client_settings(), _conversation_from(data))
    draft = session.review_post()
    notices = _dump_notices(session)
    extracted = draft is not None and not any(n['code'] == 'EXTRACTION_FAILED' for n in notices)

    return jsonify({
        "draft": asdict(draft) if draft else None,
        "extracted": extracted,
        "notices": notices
    }), 200

@chat_bp.route('/submit', methods=['POST'])
@jwt_required()
def submit():
    """검토가 끝난 초안을 게시물로 등록합니다."""
    user_id = get_jwt_identity()
    try:
        data = DraftSubmitRequestSchema().load(request.get_json() or {})
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    draft = Draft(**data['draft'])
    session = ChatSession(current_app.services['completion'], _client_settings(), submit_post=_post_submitter(user_id))
    post_id = session.submit_draft(draft)
    notices = _dump_notices(session)

    if post_id:
        return jsonify({"post_id": post_id, "notices": notices}), 201
    if draft.missing_fields():
        return jsonify({
            "error_code": "MISSING_REQUIRED_FIELDS",
            "missing_fields": draft.missing_fields(),
            "notices": notices
        }), 400

    logging.error(f"초안 제출 실패 (user_id: {user_id})")
    return jsonify({"error_code": "SUBMIT_FAILED", "message": "게시물 제출에 실패했습니다.", "notices": notices}), 500

@chat_bp.route('/api-key/verify', methods=['POST'])
@jwt_required()
def verify_api_key():
    """형식 검사 후 짧은 요청으로 키가 실제로 동작하는지 확인합니다."""
    try:
        data = ApiKeyVerifySchema().load(request.get_json() or {})
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    api_key = data['api_key'].strip()
    if not is_valid_api_key_format(api_key):
        return jsonify({"valid": False}), 200
    return jsonify({"valid": current_app.services['completion'].verify_api_key(api_key)}), 200
