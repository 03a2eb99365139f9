# playtime/api/movies/schemas.py
from marshmallow import Schema, fields, validate

from playtime.services.tmdb_service import MOODS


class MovieSchema(Schema):
    """TMDB 영화 정보를 정규화한 응답 형식"""
    id = fields.Int(required=True)
    title = fields.Str(allow_none=True)
    poster_path = fields.Str(allow_none=True)
    image = fields.Str(allow_none=True)
    vote_average = fields.Float(allow_none=True)
    release_date = fields.Str(allow_none=True)
    overview = fields.Str(allow_none=True)
    original_language = fields.Str(allow_none=True)


class PopularMoviesResponseSchema(Schema):
    page = fields.Int(required=True)
    total_pages = fields.Int(required=True)
    movies = fields.List(fields.Nested(MovieSchema), required=True)


class RecommendQuerySchema(Schema):
    """GET /api/movies/recommend 쿼리 파라미터"""
    genre_id = fields.Int(required=True)
    mood = fields.Str(required=True, validate=validate.OneOf(list(MOODS.keys()), error="지원하지 않는 분위기입니다."))
    count = fields.Int(load_default=3, validate=validate.Range(min=1, max=20))
