# playtime/models/comment.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Any, Optional

from playtime.utils.datetime_utils import DateTimeUtils
from playtime.utils.documents import DocumentMixin


@dataclass
class Comment(DocumentMixin):
    """
    Firestore 'comments' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    """
    post_id: str
    author_id: str
    author_name: str
    content: str
    author_photo_url: Optional[str] = None
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    reply_to: Optional[Dict[str, Any]] = None  # {'comment_id', 'author_name', 'content'}
    id: Optional[str] = None
