# playtime/services/notification_service.py
import logging
from typing import Optional, List, Dict, Any, Callable

from firebase_admin import firestore

from playtime.core.errors import NotFoundError, PermissionDeniedError, translate_store_error
from playtime.models.notification import Notification, NotificationType
from playtime.services.live_query import LiveQuery, sort_by_timestamp

NOTIFICATION_MESSAGES = {
    NotificationType.COMMENT: "{name}님이 회원님의 게시글에 댓글을 남겼습니다.",
    NotificationType.REPLY: "{name}님이 회원님의 댓글에 답글을 남겼습니다.",
}


class NotificationService:
    """
    알림 관련 비즈니스 로직을 담당하는 공용 서비스 클래스.
    """
    def __init__(self, db=None):
        self.db = db or firestore.client()
        self.notifications_ref = self.db.collection('notifications')

    def create_notification(self, recipient_id: str, sender_id: str, sender_name: str,
                            n_type: NotificationType, post_id: str, post_title: str) -> Optional[str]:
        """
        댓글/답글 알림을 생성하여 Firestore에 저장합니다.
        - 자기 자신에게 보내는 알림은 생성하지 않습니다.

        :param recipient_id: 알림을 받을 사용자 ID
        :param sender_id: 알림을 유발한 사용자 ID
        :param sender_name: 알림에 표시될 발신자 이름
        :param n_type: 알림 유형 (NotificationType Enum)
        :param post_id: 알림 대상 게시글 ID
        :param post_title: 알림에 표시될 게시글 제목
        :return: 생성된 알림 문서 ID (생성하지 않은 경우 None)
        """
        if not recipient_id or recipient_id == sender_id:
            return None  # 자기 자신에게는 알림을 생성하지 않음

        notification = Notification(
            user_id=recipient_id,
            type=n_type.value,
            message=NOTIFICATION_MESSAGES[n_type].format(name=sender_name or '누군가'),
            post_id=post_id,
            post_title=post_title or '',
            from_user_id=sender_id,
            from_user_name=sender_name,
        )
        _, doc_ref = self.notifications_ref.add(notification.to_document())
        logging.info(f"{n_type.value} 알림 생성 완료: {sender_id} -> {recipient_id}")
        return doc_ref.id

    def list_for_user(self, user_id: str) -> List[Dict[str, Any]]:
        """사용자의 알림 목록을 최신순으로 반환합니다."""
        try:
            docs = self.notifications_ref.where('userId', '==', user_id).stream()
            items = [Notification.from_document(doc.to_dict(), doc.id).to_dict() for doc in docs]
            return sort_by_timestamp(items, 'created_at', descending=True)
        except Exception as e:
            logging.error(f"알림 목록 조회 실패 (user_id: {user_id}): {e}", exc_info=True)
            raise translate_store_error(e, '알림 조회')

    def unread_count(self, user_id: str) -> int:
        docs = self.notifications_ref.where('userId', '==', user_id).where('read', '==', False).stream()
        return sum(1 for _ in docs)

    def mark_read(self, notification_id: str, user_id: str) -> Dict[str, Any]:
        """알림을 읽음 처리합니다. 수신자 본인만 변경할 수 있습니다."""
        doc_ref = self.notifications_ref.document(notification_id)
        doc = doc_ref.get()
        if not doc.exists:
            raise NotFoundError("알림을 찾을 수 없습니다.")
        data = doc.to_dict()
        if data.get('userId') != user_id:
            raise PermissionDeniedError("알림을 변경할 권한이 없습니다.")
        if not data.get('read'):
            doc_ref.update({'read': True})
            data['read'] = True
        return Notification.from_document(data, doc.id).to_dict()

    def live_for_user(self, user_id: str, on_update: Callable, on_error: Optional[Callable] = None) -> LiveQuery:
        """사용자 알림 실시간 구독 (최신순)."""
        return LiveQuery(
            self.notifications_ref.where('userId', '==', user_id),
            order_field='created_at',
            descending=True,
            transform=lambda doc_id, data: Notification.from_document(data, doc_id).to_dict(),
            on_update=on_update,
            on_error=on_error,
            action='알림 조회',
        )
