# playtime/models/notification.py
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from playtime.utils.datetime_utils import DateTimeUtils
from playtime.utils.documents import DocumentMixin


class NotificationType(Enum):
    """알림 유형을 정의하는 Enum 클래스"""
    COMMENT = "comment"
    REPLY = "reply"


@dataclass
class Notification(DocumentMixin):
    """
    Firestore 'notifications' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    댓글/답글 작성의 부수 효과로 생성되며, 이후에는 read 플래그만 변경됩니다.
    """
    user_id: str           # 알림을 받는 사용자 ID
    type: str              # NotificationType 값
    message: str
    post_id: str
    post_title: str
    from_user_id: str      # 알림을 유발한 사용자
    from_user_name: str
    read: bool = False
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    id: Optional[str] = None
