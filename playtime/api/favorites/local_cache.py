# playtime/api/favorites/local_cache.py
import json
import logging
from typing import Any, Dict, List, MutableMapping

LOCAL_FAVORITES_KEY = 'likedMovies'


class LocalFavoritesCache:
    """
    로그인 전 찜 목록(likedMovies)을 담는 로컬 저장소.
    브라우저의 localStorage와 같은 형식(JSON 배열 문자열)으로 임의의 dict 형태 저장소에 보관합니다.
    서버에서는 Flask 세션, 테스트에서는 일반 dict를 사용합니다.
    """

    def __init__(self, storage: MutableMapping[str, Any]):
        self.storage = storage

    def load(self) -> List[Dict[str, Any]]:
        raw = self.storage.get(LOCAL_FAVORITES_KEY)
        if not raw:
            return []
        try:
            items = json.loads(raw) if isinstance(raw, str) else raw
        except (TypeError, ValueError):
            logging.warning("로컬 찜 목록 파싱 실패, 빈 목록으로 처리합니다.")
            return []
        if not isinstance(items, list):
            return []
        return [item for item in items if isinstance(item, dict) and item.get('id') is not None]

    def save(self, items: List[Dict[str, Any]]) -> None:
        self.storage[LOCAL_FAVORITES_KEY] = json.dumps(items, ensure_ascii=False)

    def contains(self, movie_id: int) -> bool:
        return any(str(item.get('id')) == str(movie_id) for item in self.load())

    def toggle(self, movie: Dict[str, Any]) -> bool:
        """로컬 목록에서 영화를 추가/제거하고 결과 찜 상태를 반환합니다."""
        items = self.load()
        remaining = [item for item in items if str(item.get('id')) != str(movie['id'])]
        if len(remaining) != len(items):
            self.save(remaining)
            return False
        self.save([movie] + items)  # 최근 찜한 영화가 앞쪽
        return True

    def is_empty(self) -> bool:
        return not self.load()

    def clear(self) -> None:
        self.storage.pop(LOCAL_FAVORITES_KEY, None)
