# playtime/models/favorite.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from playtime.utils.datetime_utils import DateTimeUtils
from playtime.utils.documents import DocumentMixin


@dataclass
class Favorite(DocumentMixin):
    """
    Firestore 'favorites/{uid}/movies/{movieId}' 문서 구조.
    사용자별 찜한 영화이며, (user, movieId) 당 최대 1개만 존재합니다.
    """
    movie_id: int
    title: str
    image: Optional[str] = None
    date: Optional[str] = None
    rating: Optional[str] = None
    added_at: datetime = field(default_factory=DateTimeUtils.now)


@dataclass
class MovieLikeCount(DocumentMixin):
    """
    Firestore 'movieLikeCounts/{movieId}' 문서 구조.
    영화별 전체 찜 수 (like_count >= 0, 0이 되면 문서 삭제).
    """
    movie_id: int
    title: str
    poster: Optional[str] = None
    rating: Optional[float] = None
    release_date: Optional[str] = None
    like_count: int = 0
    updated_at: datetime = field(default_factory=DateTimeUtils.now)
