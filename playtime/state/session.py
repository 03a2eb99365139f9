# playtime/state/session.py
import logging
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    uid: str
    display_name: Optional[str] = None
    email: Optional[str] = None
    photo_url: Optional[str] = None


class AuthSession:
    """
    프로세스 전역 현재 사용자 상태.
    쓰기는 인증 구독(set_user) 한 곳에서만, 읽기는 어디서든 합니다.
    """

    def __init__(self):
        self._user: Optional[SessionUser] = None
        self._access_token: Optional[str] = None
        self._refresh_token: Optional[str] = None
        self._listeners: List[Callable[[Optional[SessionUser]], None]] = []
        self._lock = threading.Lock()

    @property
    def user(self) -> Optional[SessionUser]:
        return self._user

    @property
    def access_token(self) -> Optional[str]:
        return self._access_token

    @property
    def refresh_token(self) -> Optional[str]:
        return self._refresh_token

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    def set_user(self, user: Optional[SessionUser], access_token: Optional[str] = None,
                 refresh_token: Optional[str] = None) -> None:
        """로그인/로그아웃 결과를 반영하고 구독자에게 알립니다. None이면 로그아웃 상태."""
        with self._lock:
            self._user = user
            self._access_token = access_token if user else None
            self._refresh_token = refresh_token if user else None
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(user)
            except Exception as e:
                logger.error(f"Auth session listener failed: {e}", exc_info=True)

    def update_access_token(self, access_token: str) -> None:
        with self._lock:
            if self._user is not None:
                self._access_token = access_token

    def subscribe(self, listener: Callable[[Optional[SessionUser]], None]) -> Callable[[], None]:
        """
        사용자 변경을 구독합니다. 구독 즉시 현재 상태로 한 번 호출됩니다.

        :return: 구독 해제 함수
        """
        with self._lock:
            self._listeners.append(listener)
        listener(self._user)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)
        return unsubscribe
