# playtime/api/chat/services.py

import logging
from datetime import datetime
from typing import Optional, Dict, Any, List, Callable

from firebase_admin import firestore

from playtime.core.errors import NotFoundError, translate_store_error
from playtime.models.chat import ChatMessage, make_excerpt
from playtime.services.live_query import LiveQuery, sort_by_timestamp

RECENT_MESSAGE_LIMIT = 100


class ChatService:
    """
    전체 실시간 채팅방 서비스. 메시지는 추가만 가능하며 수정/삭제하지 않습니다.
    """
    def __init__(self, db=None, user_service=None):
        self.db = db or firestore.client()
        self.messages_ref = self.db.collection('chatMessages')
        self.user_service = user_service

    def send_message(self, user_id: str, message: str, reply_to_message_id: Optional[str] = None) -> Dict[str, Any]:
        message = (message or '').strip()
        if not message:
            raise ValueError("메시지를 입력해주세요.")

        author = self.user_service.get_author_info(user_id)
        chat_message = ChatMessage(user_id=user_id, user_name=author['name'], message=message)

        if reply_to_message_id:
            replied = self.messages_ref.document(reply_to_message_id).get()
            if not replied.exists:
                raise NotFoundError("답장할 메시지를 찾을 수 없습니다.")
            replied_data = replied.to_dict()
            chat_message.reply_to = {
                'message_id': reply_to_message_id,
                'user_name': replied_data.get('userName'),
                'excerpt': make_excerpt(replied_data.get('message')),
            }

        try:
            _, doc_ref = self.messages_ref.add(chat_message.to_document())
        except Exception as e:
            logging.error(f"채팅 메시지 전송 실패 (user_id: {user_id}): {e}", exc_info=True)
            raise translate_store_error(e, '메시지 전송')
        chat_message.id = doc_ref.id
        return chat_message.to_dict()

    def _recent_query(self, limit: int, before: Optional[datetime] = None):
        # 필터와 정렬이 같은 단일 필드이므로 복합 인덱스가 필요 없습니다.
        query = self.messages_ref
        if before is not None:
            query = query.where('timestamp', '<', before)
        return query.order_by('timestamp', direction=firestore.Query.DESCENDING).limit(limit)

    def list_recent(self, limit: int = RECENT_MESSAGE_LIMIT, before: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """
        최근 limit개의 메시지를 시간순(오래된 것부터)으로 반환합니다.
        before가 주어지면 그 시각 이전의 메시지 중 최근 limit개를 반환합니다. (이전 대화 더 보기)
        """
        try:
            docs = self._recent_query(limit, before).stream()
            items = [ChatMessage.from_document(doc.to_dict(), doc.id).to_dict() for doc in docs]
        except Exception as e:
            logging.error(f"채팅 메시지 조회 실패: {e}", exc_info=True)
            raise translate_store_error(e, '메시지 조회')
        return sort_by_timestamp(items, 'timestamp')

    def live_messages(self, on_update: Callable, on_error: Optional[Callable] = None,
                      limit: int = RECENT_MESSAGE_LIMIT) -> LiveQuery:
        return LiveQuery(
            self._recent_query(limit),
            order_field='timestamp',
            transform=lambda doc_id, data: ChatMessage.from_document(data, doc_id).to_dict(),
            on_update=on_update,
            on_error=on_error,
            action='메시지 조회',
        )
