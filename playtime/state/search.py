# playtime/state/search.py
import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from playtime.core.errors import PlaytimeError

logger = logging.getLogger(__name__)

SEARCH_DEBOUNCE_SECONDS = 0.3
SEARCH_MAX_RESULTS = 20
SEARCH_FAILED_MESSAGE = '검색 중 오류가 발생했습니다.'


class DebouncedSearch:
    """
    입력이 멈춘 뒤 300ms가 지나면 검색 요청을 보냅니다.
    그 전에 입력이 바뀌면 예약된 요청을 취소하고 다시 예약합니다.
    공백뿐인 입력은 요청 없이 결과를 비우고 결과 패널을 닫습니다.

    :param fetcher: 검색어를 받아 결과 목록을 반환하는 함수 (예: PlaytimeClient.search_movies)
    :param timer_factory: (delay, callback) -> start()/cancel()을 가진 타이머. 기본값은 threading.Timer
    :param on_change: 상태가 바뀔 때마다 호출되는 콜백
    """

    def __init__(self,
                 fetcher: Callable[[str], List[Dict[str, Any]]],
                 delay: float = SEARCH_DEBOUNCE_SECONDS,
                 max_results: int = SEARCH_MAX_RESULTS,
                 timer_factory: Callable = threading.Timer,
                 on_change: Optional[Callable[["DebouncedSearch"], None]] = None):
        self._fetcher = fetcher
        self._delay = delay
        self._max_results = max_results
        self._timer_factory = timer_factory
        self._on_change = on_change
        self._timer = None
        self._lock = threading.Lock()

        self.query = ''
        self.results: List[Dict[str, Any]] = []
        self.is_open = False
        self.loading = False
        self.error: Optional[str] = None

    def set_query(self, text: str) -> None:
        with self._lock:
            self.query = text or ''
            self._cancel_pending()
            term = self.query.strip()
            if not term:
                self.results = []
                self.is_open = False
                self.loading = False
                self.error = None
            else:
                self._timer = self._timer_factory(self._delay, lambda: self._run(term))
                self._timer.start()
        if not term:
            self._notify()

    def _cancel_pending(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def cancel(self) -> None:
        """화면을 떠날 때 예약된 검색을 취소합니다."""
        with self._lock:
            self._cancel_pending()

    def _run(self, term: str) -> None:
        with self._lock:
            # 예약 이후 입력이 바뀌었다면 오래된 요청
            if self.query.strip() != term:
                return
            self._timer = None
            self.loading = True
        self._notify()

        results, error = [], None
        try:
            results = list(self._fetcher(term) or [])[:self._max_results]
        except PlaytimeError as e:
            error = e.message
        except Exception as e:
            logger.error(f"검색 실패 (query: {term}): {e}", exc_info=True)
            error = SEARCH_FAILED_MESSAGE

        with self._lock:
            if self.query.strip() != term:
                return
            self.results = results
            self.error = error
            self.is_open = True
            self.loading = False
        self._notify()

    def _notify(self) -> None:
        if self._on_change:
            self._on_change(self)
