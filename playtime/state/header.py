# playtime/state/header.py
"""
헤더 자동 숨김 상태 머신 (표시 / 숨김).

- 몰입형 화면(채팅, 게시판, 게시글): 포인터가 화면 상단 50px 안에 있을 때만 표시
- 그 외 화면: 스크롤 방향을 따름 (5px 미만 이동은 무시, 상단 50px 이내는 항상 표시)
- 드롭다운 메뉴가 열려 있으면 항상 표시
- 이벤트는 애니메이션 프레임(16ms)당 한 번만 평가하고, 프레임 안에 밀린 이벤트는 다음 프레임에 평가
"""
import re
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional

TOP_ZONE_PX = 50
SCROLL_DEADBAND_PX = 5
FRAME_MS = 16

IMMERSIVE_PATTERNS = [
    re.compile(r'^/chat/?$'),
    re.compile(r'^/live-chat/?$'),
    re.compile(r'^/movie/[^/]+/board/?$'),
    re.compile(r'^/genre/[^/]+/board/?$'),
    re.compile(r'^/post/[^/]+/?$'),
]


def is_immersive_path(path: str) -> bool:
    return any(pattern.match(path or '') for pattern in IMMERSIVE_PATTERNS)


class HeaderVisibilityPolicy(ABC):
    """페이지 종류별 헤더 표시 규칙"""

    @abstractmethod
    def on_pointer(self, y: float, visible: bool) -> bool:
        ...

    @abstractmethod
    def on_scroll(self, scroll_y: float, visible: bool) -> bool:
        ...


class PointerPolicy(HeaderVisibilityPolicy):
    """포인터 세로 위치 기준. 스크롤은 무시합니다."""

    def __init__(self, threshold: float = TOP_ZONE_PX):
        self.threshold = threshold

    def on_pointer(self, y: float, visible: bool) -> bool:
        return y < self.threshold

    def on_scroll(self, scroll_y: float, visible: bool) -> bool:
        return visible


class ScrollPolicy(HeaderVisibilityPolicy):
    """
    스크롤 방향 기준. 아래로 내리면 숨기고 위로 올리면 표시합니다.
    deadband 미만의 이동은 기준 위치를 바꾸지 않으므로 작은 떨림이 누적되어야 반영됩니다.
    기준 위치는 페이지 진입 시점의 스크롤 위치(initial_scroll_y, 기본 0)에서 시작합니다.
    """

    def __init__(self, deadband: float = SCROLL_DEADBAND_PX, top_zone: float = TOP_ZONE_PX,
                 initial_scroll_y: float = 0.0):
        self.deadband = deadband
        self.top_zone = top_zone
        self.last_scroll_y = initial_scroll_y

    def on_pointer(self, y: float, visible: bool) -> bool:
        return visible

    def on_scroll(self, scroll_y: float, visible: bool) -> bool:
        if scroll_y <= self.top_zone:
            self.last_scroll_y = scroll_y
            return True

        delta = scroll_y - self.last_scroll_y
        if abs(delta) < self.deadband:
            return visible

        self.last_scroll_y = scroll_y
        return delta < 0


class HeaderVisibilityController:
    """
    현재 경로에 맞는 정책을 골라 헤더 표시 여부를 관리합니다.
    프레임 안에 도착한 이벤트는 모아 두었다가 다음 프레임에 한 번에 평가합니다.

    :param clock: 초 단위 단조 시계 (테스트에서 주입)
    :param timer_factory: (delay, callback) -> start()/cancel()을 가진 타이머. 기본값은 threading.Timer
    :param on_change: 지연 평가로 표시 상태가 바뀌었을 때 호출되는 콜백
    """

    def __init__(self, path: str = '/', clock: Callable[[], float] = time.monotonic,
                 frame_ms: float = FRAME_MS, timer_factory: Callable = threading.Timer,
                 on_change: Optional[Callable[[bool], None]] = None):
        self._clock = clock
        self._frame_seconds = frame_ms / 1000.0
        self._timer_factory = timer_factory
        self._on_change = on_change
        self._timer = None
        self._lock = threading.RLock()
        self._last_frame_at: Optional[float] = None
        self._pending: Dict[str, float] = {}
        self._visible = True
        self._menu_open = False
        self.path = path
        self.policy: HeaderVisibilityPolicy = self._policy_for(path)

    @staticmethod
    def _policy_for(path: str) -> HeaderVisibilityPolicy:
        return PointerPolicy() if is_immersive_path(path) else ScrollPolicy()

    @property
    def visible(self) -> bool:
        return True if self._menu_open else self._visible

    @property
    def immersive(self) -> bool:
        return isinstance(self.policy, PointerPolicy)

    def navigate(self, path: str) -> None:
        """경로가 바뀌면 정책을 다시 고르고 헤더를 표시 상태로 되돌립니다."""
        with self._lock:
            self._cancel_frame()
            self.path = path
            self.policy = self._policy_for(path)
            self._pending.clear()
            self._last_frame_at = None
            self._visible = True

    def set_menu_open(self, is_open: bool) -> None:
        self._menu_open = is_open

    def handle_pointer(self, y: float) -> bool:
        with self._lock:
            self._pending['pointer'] = y
            return self._maybe_evaluate()

    def handle_scroll(self, scroll_y: float) -> bool:
        with self._lock:
            self._pending['scroll'] = scroll_y
            return self._maybe_evaluate()

    def flush(self) -> bool:
        """대기 중인 이벤트를 즉시 평가합니다."""
        with self._lock:
            self._cancel_frame()
            self._evaluate(self._clock())
            return self.visible

    def close(self) -> None:
        """화면을 떠날 때 예약된 프레임을 취소합니다."""
        with self._lock:
            self._cancel_frame()
            self._pending.clear()

    def _maybe_evaluate(self) -> bool:
        now = self._clock()
        if self._last_frame_at is None or now - self._last_frame_at >= self._frame_seconds:
            self._cancel_frame()
            self._evaluate(now)
        elif self._timer is None:
            delay = max(0.0, self._frame_seconds - (now - self._last_frame_at))
            self._timer = self._timer_factory(delay, self._on_frame)
            self._timer.start()
        return self.visible

    def _on_frame(self) -> None:
        with self._lock:
            self._timer = None
            before = self.visible
            self._evaluate(self._clock())
            after = self.visible
        if after != before and self._on_change:
            self._on_change(after)

    def _cancel_frame(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _evaluate(self, now: float) -> None:
        if not self._pending:
            return
        self._last_frame_at = now
        if 'scroll' in self._pending:
            self._visible = self.policy.on_scroll(self._pending['scroll'], self._visible)
        if 'pointer' in self._pending:
            self._visible = self.policy.on_pointer(self._pending['pointer'], self._visible)
        self._pending.clear()
