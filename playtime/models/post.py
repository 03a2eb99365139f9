# playtime/models/post.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from playtime.utils.datetime_utils import DateTimeUtils
from playtime.utils.documents import DocumentMixin


@dataclass
class Post(DocumentMixin):
    """
    Firestore 'posts' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    영화 게시판(movie_id) 또는 장르 게시판(genre_id) 중 정확히 한 곳에 속합니다.
    comment_count는 댓글 작성과 별도로 증가시키는 비정규화 카운터입니다.
    """
    author_id: str
    author_name: str
    title: str
    content: str
    movie_id: Optional[str] = None
    genre_id: Optional[str] = None
    comment_count: int = 0
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    id: Optional[str] = None
