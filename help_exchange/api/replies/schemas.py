# help_exchange/api/replies/schemas.py
from marshmallow import Schema, fields, validate, pre_load

class ReplyCreateSchema(Schema):
    """
    POST /api/posts/{post_id}/replies
    댓글 생성을 요청할 때의 데이터 형식을 정의하고 유효성을 검사합니다.
    앞뒤 공백을 제거한 값으로 길이를 검사하므로 공백뿐인 댓글은 거부됩니다.
    """
    text = fields.Str(required=True, validate=validate.Length(min=1, max=1000, error="댓글은 1~1000자 사이여야 합니다."))

    @pre_load
    def strip_text(self, data, **kwargs):
        if isinstance(data, dict) and isinstance(data.get('text'), str):
            data = {**data, 'text': data['text'].strip()}
        return data

class ReplyResponseSchema(Schema):
    """댓글 정보 응답을 위한 최종 JSON 형식을 정의합니다."""
    reply_id = fields.Str(required=True)
    post_id = fields.Str(required=True)
    user_id = fields.Str(required=True)
    username = fields.Str(required=True)
    user_avatar = fields.Str(allow_none=True)
    text = fields.Str(required=True)
    created_at = fields.DateTime(required=True)
