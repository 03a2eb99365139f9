# playtime/api/posts/schemas.py
from marshmallow import Schema, fields, validate, validates_schema, ValidationError


class PostCreateSchema(Schema):
    """POST /api/posts 요청 본문의 유효성을 검사합니다."""
    title = fields.Str(required=True, validate=validate.Length(min=1, max=100, error="제목은 1~100자 사이여야 합니다."))
    content = fields.Str(required=True, validate=validate.Length(min=1, max=5000, error="내용은 1~5000자 사이여야 합니다."))
    movie_id = fields.Str(load_default=None)
    genre_id = fields.Str(load_default=None)

    @validates_schema
    def validate_board(self, data, **kwargs):
        # 영화 게시판과 장르 게시판 중 정확히 하나
        if bool(data.get('movie_id')) == bool(data.get('genre_id')):
            raise ValidationError("movie_id 또는 genre_id 중 하나만 지정해야 합니다.", field_name='movie_id')
        if not data['title'].strip() or not data['content'].strip():
            raise ValidationError("제목과 내용을 모두 입력해주세요.", field_name='title')


class PostResponseSchema(Schema):
    """게시글 정보 응답을 위한 최종 JSON 형식을 정의합니다."""
    id = fields.Str(dump_only=True)
    movie_id = fields.Str(allow_none=True)
    genre_id = fields.Str(allow_none=True)
    author_id = fields.Str(required=True)
    author_name = fields.Str(required=True)
    title = fields.Str(required=True)
    content = fields.Str(required=True)
    comment_count = fields.Int(required=True)
    created_at = fields.DateTime(allow_none=True)
