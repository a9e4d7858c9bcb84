#help_exchange/api/auth/schemas.py
from marshmallow import Schema, fields, validate

class SignUpSchema(Schema):
    """이메일 회원가입 요청의 유효성을 검사하는 스키마"""
    email = fields.Email(required=True)
    password = fields.Str(required=True, load_only=True, validate=validate.Length(min=8, max=128))
    name = fields.Str(load_default=None, validate=validate.Length(max=50))

class SignInSchema(Schema):
    """이메일 로그인 요청의 유효성을 검사하는 스키마"""
    email = fields.Email(required=True)
    password = fields.Str(required=True, load_only=True)

class LogoutRequestSchema(Schema):
    """로그아웃 요청의 유효성을 검사하는 스키마"""
    access_token = fields.Str(required=True)
    refresh_token = fields.Str(required=True)

class UserInfoSchema(Schema):
    """토큰과 함께 돌려주는 본인 정보 (비밀번호 해시 제외)"""
    user_id = fields.Str(required=True)
    name = fields.Str(required=True)
    email = fields.Str(allow_none=True)
    image = fields.Str(allow_none=True)
    bio = fields.Str(allow_none=True)
    location = fields.Str(allow_none=True)
    is_anonymous = fields.Bool()
    preferences = fields.Dict()
