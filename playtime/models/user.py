# playtime/models/user.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from playtime.utils.datetime_utils import DateTimeUtils
from playtime.utils.documents import DocumentMixin


@dataclass
class UserProfile(DocumentMixin):
    """
    Firestore 'users/{uid}' 문서 구조를 정의하는 데이터클래스.
    최초 로그인(이메일/소셜) 시 생성되며 앱에서 하드 삭제하지 않습니다.
    """
    uid: str
    display_name: str
    email: str = ''
    photo_url: Optional[str] = None
    bio: str = ''
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    updated_at: Optional[datetime] = None


def fallback_display_name(display_name: Optional[str], email: Optional[str]) -> str:
    """displayName -> 이메일 앞부분 -> '익명' 순으로 표시 이름을 결정합니다."""
    if display_name:
        return display_name
    if email:
        return email.split('@')[0]
    return '익명'
