# playtime/models/chat.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Dict, Any

from playtime.utils.datetime_utils import DateTimeUtils
from playtime.utils.documents import DocumentMixin

EXCERPT_LENGTH = 50


def make_excerpt(text: str, length: int = EXCERPT_LENGTH) -> str:
    """답글 미리보기용 발췌문. 길이를 넘으면 '...'을 붙입니다."""
    text = text or ''
    return text[:length] + ('...' if len(text) > length else '')


@dataclass
class ChatMessage(DocumentMixin):
    """
    Firestore 'chatMessages' 컬렉션의 문서 구조 (추가 전용, 수정/삭제 없음).
    """
    user_id: str
    user_name: str
    message: str
    timestamp: datetime = field(default_factory=DateTimeUtils.now)
    reply_to: Optional[Dict[str, Any]] = None  # {'message_id', 'user_name', 'excerpt'}
    id: Optional[str] = None
