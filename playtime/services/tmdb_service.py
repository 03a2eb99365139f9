# playtime/services/tmdb_service.py

import logging
import random
from typing import Any, Dict, List, Optional

import requests
from flask import Flask

from playtime.core.errors import MovieApiError, NotFoundError

TMDB_MAX_PAGES = 500  # TMDB API는 최대 500페이지까지만 제공
DISCOVER_PAGES = (1, 2, 3, 4, 5)

# 장르 게시판 목록 (게시글의 genreId로 사용)
BOARD_GENRES = [
    {"id": "action", "name": "액션"},
    {"id": "comedy", "name": "코미디"},
    {"id": "drama", "name": "드라마"},
    {"id": "horror", "name": "공포"},
    {"id": "romance", "name": "로맨스"},
    {"id": "scifi", "name": "SF"},
    {"id": "thriller", "name": "스릴러"},
    {"id": "animation", "name": "애니메이션"},
    {"id": "documentary", "name": "다큐멘터리"},
    {"id": "fantasy", "name": "판타지"},
]

# 추천 모달에서 사용하는 TMDB 장르 ID
RECOMMEND_GENRES = [
    {"id": 28, "name": "액션"},
    {"id": 35, "name": "코미디"},
    {"id": 10749, "name": "로맨스"},
    {"id": 27, "name": "공포"},
    {"id": 878, "name": "SF"},
    {"id": 16, "name": "애니메이션"},
    {"id": 18, "name": "드라마"},
    {"id": 53, "name": "스릴러"},
]

# mood -> (정렬 기준, 추가 필터)
MOODS: Dict[str, Dict[str, Any]] = {
    "popular": {"name": "인기작으로", "sort_by": "popularity.desc", "filters": {}},
    "top_rated": {"name": "평점 높은 순", "sort_by": "vote_average.desc", "filters": {"vote_count.gte": 200}},
    "recent": {"name": "최신작으로", "sort_by": "release_date.desc", "filters": {"release_date.gte": "2020-01-01"}},
    "classic": {"name": "클래식 명작", "sort_by": "release_date.asc",
                "filters": {"release_date.lte": "2000-12-31", "vote_count.gte": 500}},
}

MISSING_KEY_MESSAGE = 'API 키가 설정되어 있지 않습니다.'
FETCH_FAILED_MESSAGE = '영화 데이터를 불러오는 중 오류가 발생했습니다.'


class TmdbService:
    """
    TMDB(영화 메타데이터 API) 읽기 전용 HTTP 클라이언트.
    실패 시 재시도하지 않고 화면에 표시할 오류 문자열을 담은 MovieApiError를 던집니다.
    """

    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()
        self.api_key = None
        self.base_url = None
        self.image_base = None
        self.language = None
        self.region = None
        self.timeout = 10.0

    def init_app(self, app: Flask):
        """Flask 앱 설정에서 API 키와 기본 파라미터를 읽어옵니다."""
        self.api_key = app.config.get('TMDB_API_KEY')
        self.base_url = app.config.get('TMDB_BASE_URL', 'https://api.themoviedb.org/3').rstrip('/')
        self.image_base = app.config.get('TMDB_IMAGE_BASE', 'https://image.tmdb.org/t/p/w300')
        self.language = app.config.get('TMDB_LANGUAGE', 'ko-KR')
        self.region = app.config.get('TMDB_REGION', 'KR')
        self.timeout = app.config.get('TMDB_TIMEOUT_SECONDS', 10.0)
        if not self.api_key:
            logging.warning("TmdbService: TMDB_API_KEY가 설정되지 않았습니다. 영화 API 호출은 실패합니다.")

    def _get(self, path: str, localized: bool = True, **params) -> Dict[str, Any]:
        if not self.api_key:
            raise MovieApiError(MISSING_KEY_MESSAGE, status_code=503)

        query = {"api_key": self.api_key}
        if localized:
            query["language"] = self.language
        query.update({k: v for k, v in params.items() if v is not None})

        try:
            response = self.session.get(f"{self.base_url}{path}", params=query, timeout=self.timeout)
            if response.status_code == 404:
                raise NotFoundError("영화 정보를 찾을 수 없습니다.")
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            logging.error(f"TMDB 요청 실패 ({path}): {e}", exc_info=True)
            raise MovieApiError(FETCH_FAILED_MESSAGE)
        except ValueError as e:
            logging.error(f"TMDB 응답 파싱 실패 ({path}): {e}", exc_info=True)
            raise MovieApiError(FETCH_FAILED_MESSAGE)

    def image_url(self, poster_path: Optional[str]) -> Optional[str]:
        return f"{self.image_base}{poster_path}" if poster_path else None

    def _normalize(self, movie: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "id": movie.get("id"),
            "title": movie.get("title"),
            "poster_path": movie.get("poster_path"),
            "image": self.image_url(movie.get("poster_path")),
            "vote_average": movie.get("vote_average"),
            "release_date": movie.get("release_date"),
            "overview": movie.get("overview"),
            "original_language": movie.get("original_language"),
        }

    def get_popular(self, page: int = 1) -> Dict[str, Any]:
        """인기 영화 목록 (페이지네이션)."""
        page = min(max(page, 1), TMDB_MAX_PAGES)
        data = self._get("/movie/popular", page=page)
        return {
            "page": page,
            "total_pages": min(data.get("total_pages") or 1, TMDB_MAX_PAGES),
            "movies": [self._normalize(m) for m in data.get("results") or []],
        }

    def get_movie_detail(self, movie_id: int) -> Dict[str, Any]:
        """영화 상세 정보 + 주요 출연진 5명 + 감독 + 국내 스트리밍 정보."""
        movie = self._get(f"/movie/{movie_id}")
        credits = self._get(f"/movie/{movie_id}/credits")
        providers = self._get(f"/movie/{movie_id}/watch/providers", localized=False)

        director = next((c for c in credits.get("crew") or [] if c.get("job") == "Director"), None)
        return {
            "movie": {**self._normalize(movie),
                      "backdrop_path": movie.get("backdrop_path"),
                      "runtime": movie.get("runtime"),
                      "genres": movie.get("genres") or []},
            "cast": (credits.get("cast") or [])[:5],
            "director": director,
            "watch_providers": (providers.get("results") or {}).get(self.region),
        }

    def search_movies(self, query: str, limit: int = 20) -> List[Dict[str, Any]]:
        """
        영화 제목 검색. 공백뿐인 검색어는 요청 없이 빈 목록을 반환합니다.
        결과는 최대 limit개로 잘라서 반환합니다.
        """
        term = (query or '').strip()
        if not term:
            return []
        data = self._get("/search/movie", query=term, page=1, include_adult="false")
        return [self._normalize(m) for m in (data.get("results") or [])[:limit]]

    def discover(self, genre_id: int, mood: str) -> List[Dict[str, Any]]:
        """
        장르 + 분위기 조건으로 1~5페이지를 조회하고 ID 기준으로 중복을 제거합니다.
        개별 페이지 실패는 건너뜁니다.
        """
        if mood not in MOODS:
            raise ValueError(f"'{mood}'은(는) 지원하지 않는 분위기입니다.")
        option = MOODS[mood]

        seen_ids = set()
        movies: List[Dict[str, Any]] = []
        for page in DISCOVER_PAGES:
            try:
                data = self._get("/discover/movie", with_genres=genre_id, sort_by=option["sort_by"],
                                 page=page, **option["filters"])
            except MovieApiError as e:
                if e.status_code == 503:
                    raise
                continue
            for movie in data.get("results") or []:
                if movie.get("id") not in seen_ids:
                    seen_ids.add(movie.get("id"))
                    movies.append(self._normalize(movie))
        return movies

    def recommend(self, genre_id: int, mood: str, count: int = 3, rng: Optional[random.Random] = None) -> List[Dict[str, Any]]:
        """discover 결과에서 무작위로 count개를 선택합니다."""
        pool = self.discover(genre_id, mood)
        rng = rng or random
        return rng.sample(pool, min(count, len(pool)))
