# help_exchange/api/chat/schemas.py
from marshmallow import Schema, fields, validate

from help_exchange.chat.conversation import Intent, Role
from help_exchange.models.post import PostType

class MessageSchema(Schema):
    role = fields.Str(required=True, validate=validate.OneOf([r.value for r in Role]))
    text = fields.Str(required=True)

class ConversationRequestSchema(Schema):
    """클라이언트가 들고 있는 대화 상태. 서버는 대화를 저장하지 않습니다."""
    intent = fields.Str(required=True, validate=validate.OneOf([i.value for i in Intent]))
    language = fields.Str(load_default="en")
    messages = fields.List(fields.Nested(MessageSchema), load_default=list)

class ChatReplyRequestSchema(ConversationRequestSchema):
    """
    POST /api/chat/reply
    message가 없으면 의도 선택 직후의 첫 질문을 요청하는 것으로 봅니다.
    """
    message = fields.Str(load_default=None, allow_none=True, validate=validate.Length(min=1, max=4000))
    intent_message = fields.Str(load_default=None, allow_none=True)

class DraftSchema(Schema):
    """검토 화면의 초안. 제출 시 필수 항목은 세션에서 확인합니다."""
    type = fields.Str(required=True, validate=validate.OneOf([PostType.HELP_NEEDED.value, PostType.HELP_OFFERED.value]))
    title = fields.Str(load_default="")
    description = fields.Str(load_default="")
    location = fields.Str(load_default="")
    contact_info = fields.Str(load_default="")
    tags = fields.List(fields.Str(), load_default=list)
    images = fields.List(fields.Str(), load_default=list)

class DraftSubmitRequestSchema(Schema):
    draft = fields.Nested(DraftSchema, required=True)

class ApiKeyVerifySchema(Schema):
    api_key = fields.Str(required=True)

class NoticeSchema(Schema):
    level = fields.Str()
    code = fields.Str()
    message = fields.Str()
