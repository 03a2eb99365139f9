# playtime/services/test_tmdb_service.py
import random

import pytest
import requests
from flask import Flask

from playtime.core.errors import MovieApiError, NotFoundError
from playtime.services.tmdb_service import TmdbService, TMDB_MAX_PAGES, MISSING_KEY_MESSAGE


class FakeResponse:
    def __init__(self, payload=None, status_code=200):
        self._payload = payload or {}
        self.status_code = status_code

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


class FakeSession:
    """경로별 응답을 돌려주는 requests.Session 대체"""

    def __init__(self, handler):
        self.handler = handler
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, dict(params or {})))
        return self.handler(url, params or {})


def _service(handler, api_key='key'):
    app = Flask(__name__)
    app.config['TMDB_API_KEY'] = api_key
    app.config['TMDB_BASE_URL'] = 'https://tmdb.test/3'
    app.config['TMDB_IMAGE_BASE'] = 'https://img.test/w300'
    session = FakeSession(handler)
    service = TmdbService(session=session)
    service.init_app(app)
    return service, session


def test_blank_search_makes_no_request():
    service, session = _service(lambda url, params: FakeResponse())
    assert service.search_movies('   ') == []
    assert session.calls == []


def test_search_truncates_and_normalizes():
    results = [{'id': i, 'title': f"m{i}", 'poster_path': '/p.jpg'} for i in range(25)]
    service, session = _service(lambda url, params: FakeResponse({'results': results}))

    movies = service.search_movies(' matrix ')
    assert len(movies) == 20
    assert movies[0]['image'] == 'https://img.test/w300/p.jpg'
    url, params = session.calls[0]
    assert url == 'https://tmdb.test/3/search/movie'
    assert params['query'] == 'matrix'
    assert params['language'] == 'ko-KR'


def test_popular_page_is_capped():
    service, session = _service(lambda url, params: FakeResponse({'results': [], 'total_pages': 40000}))
    result = service.get_popular(page=999)
    assert result['page'] == TMDB_MAX_PAGES
    assert result['total_pages'] == TMDB_MAX_PAGES
    assert session.calls[0][1]['page'] == TMDB_MAX_PAGES


def test_missing_key_raises_without_request():
    service, session = _service(lambda url, params: FakeResponse(), api_key=None)
    with pytest.raises(MovieApiError) as exc_info:
        service.get_popular()
    assert exc_info.value.message == MISSING_KEY_MESSAGE
    assert session.calls == []


def test_http_error_becomes_movie_api_error():
    service, _ = _service(lambda url, params: FakeResponse(status_code=500))
    with pytest.raises(MovieApiError) as exc_info:
        service.get_popular()
    assert exc_info.value.message == '영화 데이터를 불러오는 중 오류가 발생했습니다.'


def test_network_error_becomes_movie_api_error():
    def handler(url, params):
        raise requests.ConnectionError('offline')
    service, _ = _service(handler)
    with pytest.raises(MovieApiError):
        service.search_movies('x')


def test_missing_movie_is_not_found():
    service, _ = _service(lambda url, params: FakeResponse(status_code=404))
    with pytest.raises(NotFoundError):
        service.get_movie_detail(1)


def test_movie_detail_collects_credits_and_providers():
    def handler(url, params):
        if url.endswith('/credits'):
            cast = [{'name': f"actor{i}"} for i in range(8)]
            crew = [{'name': 'writer', 'job': 'Writer'}, {'name': '놀란', 'job': 'Director'}]
            return FakeResponse({'cast': cast, 'crew': crew})
        if url.endswith('/watch/providers'):
            assert 'language' not in params
            return FakeResponse({'results': {'KR': {'flatrate': [{'provider_name': 'Netflix'}]}}})
        return FakeResponse({'id': 27205, 'title': '인셉션', 'runtime': 148})

    service, _ = _service(handler)
    detail = service.get_movie_detail(27205)
    assert detail['movie']['title'] == '인셉션'
    assert len(detail['cast']) == 5
    assert detail['director']['name'] == '놀란'
    assert detail['watch_providers']['flatrate'][0]['provider_name'] == 'Netflix'


def test_discover_dedupes_and_skips_failed_pages():
    def handler(url, params):
        page = params['page']
        if page == 3:
            return FakeResponse(status_code=500)
        return FakeResponse({'results': [{'id': 1}, {'id': page + 10}]})

    service, session = _service(handler)
    movies = service.discover(28, 'top_rated')
    assert sorted(m['id'] for m in movies) == [1, 11, 12, 14, 15]
    assert len(session.calls) == 5
    assert session.calls[0][1]['vote_count.gte'] == 200
    assert session.calls[0][1]['with_genres'] == 28


def test_discover_rejects_unknown_mood():
    service, _ = _service(lambda url, params: FakeResponse())
    with pytest.raises(ValueError):
        service.discover(28, 'sleepy')


def test_recommend_samples_from_pool():
    service, _ = _service(lambda url, params: FakeResponse({'results': [{'id': i} for i in range(10)]}))
    picks = service.recommend(28, 'popular', count=3, rng=random.Random(0))
    assert len(picks) == 3
    assert len({m['id'] for m in picks}) == 3
