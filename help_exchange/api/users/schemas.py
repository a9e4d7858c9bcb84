# help_exchange/api/users/schemas.py
from marshmallow import Schema, fields, validate, validates_schema, ValidationError, RAISE

from help_exchange.models.user import THEMES

class PreferencesSchema(Schema):
    language = fields.Str(allow_none=True)
    theme = fields.Str(allow_none=True)
    notifications_enabled = fields.Bool(allow_none=True)
    profile_visible = fields.Bool(allow_none=True)

class UserPublicResponseSchema(Schema):
    """
    GET /api/users/{user_id}
    다른 사용자의 프로필 정보를 응답할 때 사용하는 스키마.
    email, password_hash 같은 민감한 정보는 제외합니다.
    """
    user_id = fields.Str(required=True, dump_only=True)
    name = fields.Str(required=True)
    image = fields.Str(allow_none=True)
    bio = fields.Str(allow_none=True)
    location = fields.Str(allow_none=True)
    preferences = fields.Nested(PreferencesSchema)
    post_count = fields.Int(required=True)

class ProfileUpdateSchema(Schema):
    """
    PATCH /api/users/me
    프로필 항목과 환경설정 항목만 받으며, 그 외의 키는 거부합니다.
    """
    class Meta:
        unknown = RAISE

    name = fields.Str(validate=validate.Length(min=1, max=50))
    bio = fields.Str(validate=validate.Length(max=500))
    location = fields.Str(validate=validate.Length(max=200))
    language = fields.Str(validate=validate.Length(min=2, max=10))
    theme = fields.Str(validate=validate.OneOf(THEMES))
    notifications_enabled = fields.Bool()
    profile_visible = fields.Bool()

    @validates_schema
    def validate_not_empty(self, data, **kwargs):
        if not data:
            raise ValidationError("수정할 항목이 하나 이상 필요합니다.")

class ProfileImageUpdateSchema(Schema):
    """PATCH /api/users/me/profile-image"""
    file_path = fields.Str(required=True, error_messages={"required": "file_path는 필수 항목입니다."})
