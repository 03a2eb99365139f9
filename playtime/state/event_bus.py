# playtime/state/event_bus.py
"""
화면 간 UI 이벤트 버스.

깊게 중첩된 컴포넌트에서 모달(프로필 편집, 로그인, 찜 목록, 알림)을 열기 위해
전역 함수를 덮어쓰는 대신 주제(topic)별 구독/발행을 사용합니다.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

OPEN_PROFILE_EDIT = 'open_profile_edit'
OPEN_AUTH = 'open_auth'
OPEN_LIKED = 'open_liked'
OPEN_NOTIFICATIONS = 'open_notifications'


@dataclass
class UiEvent:
    topic: str
    payload: Dict[str, Any] = field(default_factory=dict)


class UiEventBus:
    """
    주제별 이벤트 버스. 한 주제에 여러 구독자를 둘 수 있고,
    구독자 하나의 오류가 다른 구독자에게 전달을 막지 않습니다.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[UiEvent], None]]] = {}

    def subscribe(self, topic: str, handler: Callable[[UiEvent], None]) -> Callable[[], None]:
        """
        주제를 구독합니다.

        :return: 호출하면 구독을 해제하는 함수
        """
        handlers = self._subscribers.setdefault(topic, [])
        if handler not in handlers:
            handlers.append(handler)
            logger.debug(f"Subscribed handler to '{topic}': {getattr(handler, '__name__', handler)}")
        return lambda: self.unsubscribe(topic, handler)

    def unsubscribe(self, topic: str, handler: Callable[[UiEvent], None]) -> None:
        handlers = self._subscribers.get(topic, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, topic: str, **payload) -> int:
        """
        이벤트를 발행합니다.

        :return: 이벤트를 받은 구독자 수
        """
        event = UiEvent(topic=topic, payload=payload)
        delivered = 0
        for handler in list(self._subscribers.get(topic, [])):
            try:
                handler(event)
                delivered += 1
            except Exception as e:
                logger.error(f"UI event handler for '{topic}' failed: {e}", exc_info=True)
        if not delivered:
            logger.debug(f"No subscriber handled '{topic}'")
        return delivered

    def clear_subscribers(self) -> None:
        """모든 구독 해제 (테스트용)"""
        self._subscribers.clear()
