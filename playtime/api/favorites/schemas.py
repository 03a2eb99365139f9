# playtime/api/favorites/schemas.py
from marshmallow import Schema, fields, EXCLUDE


class MovieCardSchema(Schema):
    """
    찜하기 요청 본문. 영화 카드에 표시되는 정보를 그대로 받습니다.
    (로컬 likedMovies 항목과 같은 형식)
    """
    class Meta:
        unknown = EXCLUDE

    id = fields.Int(required=True)
    title = fields.Str(required=True)
    image = fields.Str(allow_none=True, load_default=None)
    date = fields.Str(allow_none=True, load_default=None)
    rating = fields.Raw(allow_none=True, load_default=None)
    poster_path = fields.Str(allow_none=True)
    vote_average = fields.Float(allow_none=True)
    release_date = fields.Str(allow_none=True)


class FavoriteMigrateSchema(Schema):
    """POST /api/favorites/migrate: 브라우저 localStorage의 likedMovies 배열"""
    items = fields.List(fields.Nested(MovieCardSchema), required=True)


class FavoriteResponseSchema(Schema):
    movie_id = fields.Int(required=True)
    title = fields.Str(required=True)
    image = fields.Str(allow_none=True)
    date = fields.Str(allow_none=True)
    rating = fields.Str(allow_none=True)
    added_at = fields.DateTime(allow_none=True)


class MovieRankingSchema(Schema):
    """인기 찜 영화 랭킹 항목"""
    movie_id = fields.Int(required=True)
    title = fields.Str(required=True)
    poster = fields.Str(allow_none=True)
    rating = fields.Float(allow_none=True)
    release_date = fields.Str(allow_none=True)
    like_count = fields.Int(required=True)
