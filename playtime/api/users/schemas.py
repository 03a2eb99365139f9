# playtime/api/users/schemas.py
from marshmallow import Schema, fields, validate


class UserProfileResponseSchema(Schema):
    """
    GET /api/users/{uid}
    사용자 프로필 응답 스키마.
    """
    uid = fields.Str(required=True)
    display_name = fields.Str(required=True)
    email = fields.Str()
    photo_url = fields.Str(allow_none=True)
    bio = fields.Str()
    created_at = fields.DateTime(allow_none=True)


class ProfileUpdateSchema(Schema):
    """PATCH /api/users/me 요청 본문. 전달된 필드만 수정합니다."""
    display_name = fields.Str(validate=validate.Length(min=1, max=50, error="이름은 1~50자 사이여야 합니다."))
    photo_url = fields.Str(allow_none=True)
    bio = fields.Str(validate=validate.Length(max=200, error="소개는 200자 이하여야 합니다."))


class UserSearchResultSchema(Schema):
    uid = fields.Str(required=True)
    display_name = fields.Str()
    email = fields.Str()
    photo_url = fields.Str(allow_none=True)


class ParticipatedPostSchema(Schema):
    """프로필 화면의 '참여한 게시글' 항목"""
    post_id = fields.Str(required=True)
    post_title = fields.Str(allow_none=True)
    type = fields.Str(required=True)  # 'author' | 'commenter'
    created_at = fields.DateTime(allow_none=True)
