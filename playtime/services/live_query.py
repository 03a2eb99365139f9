# playtime/services/live_query.py
"""
실시간 목록 구독 (채팅, 게시글, 댓글, 알림).

게시글, 댓글, 알림은 등호 필터(postId == ... 등)로만 구독하고, 정렬은 클라이언트에서 수행합니다.
(복합 인덱스가 없어도 동작하도록 하기 위함)
채팅은 필터 없이 timestamp 단일 필드 정렬 + limit 쿼리를 구독합니다.

- 스냅샷이 올 때마다 문서 ID 기준으로 목록을 다시 구성하므로 중복 항목이 생기지 않습니다.
- unsubscribe() 이후 도착하는 콜백은 무시되어 해제된 뷰의 상태를 갱신하지 않습니다.
- 서로 다른 구독 사이의 순서는 보장하지 않습니다.
"""
import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from playtime.core.errors import translate_store_error
from playtime.utils.datetime_utils import DateTimeUtils

logger = logging.getLogger(__name__)


def sort_by_timestamp(items: List[Dict[str, Any]], field: str, descending: bool = False) -> List[Dict[str, Any]]:
    """
    timestamp 필드 기준으로 정렬합니다. 값이 없으면 0으로 간주하고, 동률은 문서 ID로 정렬합니다.
    """
    return sorted(
        items,
        key=lambda item: (DateTimeUtils.to_timestamp_ms(item.get(field)), item.get('id') or ''),
        reverse=descending,
    )


class LiveQuery:
    """Firestore Query.on_snapshot 래퍼."""

    def __init__(self,
                 query,
                 order_field: str,
                 on_update: Callable[[List[Dict[str, Any]]], None],
                 descending: bool = False,
                 transform: Optional[Callable[[str, Dict[str, Any]], Dict[str, Any]]] = None,
                 on_error: Optional[Callable[[str], None]] = None,
                 action: str = '목록 조회'):
        """
        :param query: 등호 필터가 적용된 Firestore 쿼리
        :param order_field: 클라이언트 정렬 기준 필드 (transform 결과 기준)
        :param on_update: 정렬된 전체 목록을 받는 콜백
        :param descending: True면 최신순 (게시글/알림), False면 시간순 (채팅/댓글)
        :param transform: (doc_id, raw_dict) -> 항목 dict 변환 함수
        :param on_error: 오류 메시지를 받는 콜백
        :param action: 오류 메시지에 사용할 작업명
        """
        self._query = query
        self._order_field = order_field
        self._on_update = on_update
        self._descending = descending
        self._transform = transform or (lambda doc_id, data: {**data, 'id': doc_id})
        self._on_error = on_error
        self._action = action
        self._items: Dict[str, Dict[str, Any]] = {}
        self._watch = None
        self._closed = False
        self._lock = threading.RLock()

    @property
    def active(self) -> bool:
        return self._watch is not None and not self._closed

    @property
    def items(self) -> List[Dict[str, Any]]:
        with self._lock:
            return sort_by_timestamp(list(self._items.values()), self._order_field, self._descending)

    def start(self) -> "LiveQuery":
        if self._closed:
            raise RuntimeError("이미 구독이 해제된 LiveQuery입니다.")
        self._watch = self._query.on_snapshot(self._handle_snapshot)
        return self

    def _handle_snapshot(self, docs, changes, read_time) -> None:
        # 구독 해제 여부 확인과 콜백 호출은 같은 잠금 안에서 수행합니다.
        with self._lock:
            if self._closed:
                return
            try:
                snapshot_items = {}
                for doc in docs:
                    snapshot_items[doc.id] = self._transform(doc.id, doc.to_dict() or {})
                self._items = snapshot_items
                items = self.items
            except Exception as e:
                logger.error(f"실시간 스냅샷 처리 실패: {e}", exc_info=True)
                if self._on_error:
                    self._on_error(translate_store_error(e, self._action).message)
                return

            self._on_update(items)

    def unsubscribe(self) -> None:
        # 진행 중인 콜백이 끝날 때까지 기다린 뒤 해제 상태로 바꿉니다.
        with self._lock:
            if self._closed:
                return
            self._closed = True
        if self._watch is not None:
            try:
                self._watch.unsubscribe()
            except Exception as e:
                logger.warning(f"실시간 구독 해제 중 오류 (무시됨): {e}")
        logger.debug("LiveQuery 구독 해제 완료")
