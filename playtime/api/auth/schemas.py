# playtime/api/auth/schemas.py
from marshmallow import Schema, fields, validate


class SignUpSchema(Schema):
    """POST /api/auth/signup 요청 본문의 유효성을 검사합니다."""
    email = fields.Email(required=True, error_messages={"invalid": "유효하지 않은 이메일 형식입니다."})
    password = fields.Str(
        required=True,
        load_only=True,
        validate=validate.Length(min=6, error="비밀번호는 6자 이상이어야 합니다."),
    )
    display_name = fields.Str(load_default=None, validate=validate.Length(max=50))


class SignInSchema(Schema):
    """POST /api/auth/login 요청 본문"""
    email = fields.Str(required=True)
    password = fields.Str(required=True, load_only=True)


class SocialLoginSchema(Schema):
    """
    소셜 로그인 요청의 유효성을 검사하는 스키마.
    - id_token: 브라우저 팝업 로그인으로 받은 Firebase ID 토큰
    - auth_code: Google OAuth 2.0 인증 코드
    둘 중 하나는 반드시 있어야 합니다.
    """
    provider = fields.Str(
        load_default='google',
        validate=validate.OneOf(['google']),
        metadata={"description": "소셜 로그인 제공자 (e.g., google)"}
    )
    id_token = fields.Str(load_default=None)
    auth_code = fields.Str(load_default=None)


class LogoutRequestSchema(Schema):
    """로그아웃 요청의 유효성을 검사하는 스키마"""
    access_token = fields.Str(required=True)
    refresh_token = fields.Str(required=True)


class AuthUserSchema(Schema):
    uid = fields.Str(required=True)
    email = fields.Str(allow_none=True)
    display_name = fields.Str(allow_none=True)
    photo_url = fields.Str(allow_none=True)


class AuthResponseSchema(Schema):
    """로그인 성공 응답"""
    access_token = fields.Str(required=True)
    refresh_token = fields.Str(required=True)
    is_new_user = fields.Bool(required=True)
    user = fields.Nested(AuthUserSchema, required=True)
