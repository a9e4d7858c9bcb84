# help_exchange/api/posts/schemas.py
from marshmallow import Schema, fields, validate, validates_schema, ValidationError

from help_exchange.models.post import PostType, POST_TYPES

# --- API 요청 스키마 ---

class PostCreateSchema(Schema):
    """POST /api/posts 요청 본문의 유효성을 검사합니다."""
    title = fields.Str(required=True, validate=validate.Length(min=1, max=200))
    description = fields.Str(required=True, validate=validate.Length(min=1, max=5000))
    location = fields.Str(required=True, validate=validate.Length(min=1, max=200))
    contact_info = fields.Str(required=True, validate=validate.Length(min=1, max=200))
    type = fields.Str(required=True, validate=validate.OneOf(POST_TYPES))
    tags = fields.List(fields.Str(validate=validate.Length(min=1, max=50)), load_default=list)
    images = fields.List(fields.Str(), load_default=list)
    original_post_id = fields.Str(load_default=None, allow_none=True)

    @validates_schema
    def validate_original_post(self, data, **kwargs):
        is_achievement = data.get('type') == PostType.ACHIEVEMENT.value
        if is_achievement and not data.get('original_post_id'):
            raise ValidationError("성과 게시물에는 원본 게시물 ID가 필요합니다.", field_name='original_post_id')
        if not is_achievement and data.get('original_post_id'):
            raise ValidationError("원본 게시물 참조는 성과 게시물에만 사용할 수 있습니다.", field_name='original_post_id')

class AchievementCreateSchema(Schema):
    """POST /api/posts/achievements 요청 본문. 위치는 원본 게시물에서 가져옵니다."""
    original_post_id = fields.Str(required=True)
    title = fields.Str(required=True, validate=validate.Length(min=1, max=200))
    description = fields.Str(required=True, validate=validate.Length(min=1, max=5000))
    contact_info = fields.Str(load_default=None, allow_none=True)
    tags = fields.List(fields.Str(validate=validate.Length(min=1, max=50)), load_default=list)
    images = fields.List(fields.Str(), load_default=list)

# --- API 응답 스키마 ---

class PostResponseSchema(Schema):
    """게시물 정보 응답을 위한 최종 JSON 형식을 정의합니다."""
    post_id = fields.Str(required=True)
    user_id = fields.Str(required=True)
    username = fields.Str(required=True)
    user_avatar = fields.Str(allow_none=True)
    title = fields.Str(required=True)
    description = fields.Str(required=True)
    location = fields.Str(required=True)
    contact_info = fields.Str(required=True)
    type = fields.Str(required=True)
    tags = fields.List(fields.Str(), required=True)
    images = fields.List(fields.Str(), required=True)
    is_completed = fields.Bool(required=True)
    liked_by_users = fields.List(fields.Str(), required=True)
    original_post_id = fields.Str(allow_none=True)
    created_at = fields.DateTime(required=True)

    like_count = fields.Method("get_like_count", dump_only=True)

    def get_like_count(self, obj):
        return len(obj.get('liked_by_users') or [])

class LikeToggleResponseSchema(Schema):
    is_liked = fields.Bool(required=True)
    like_count = fields.Int(required=True)

class FilterSuggestionsSchema(Schema):
    locations = fields.List(fields.Str(), required=True)
    tags = fields.List(fields.Str(), required=True)
